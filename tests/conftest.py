from __future__ import annotations

from typing import List

import pytest

from hybiscus_pdf.clients.hybiscus import HybiscusClient
from hybiscus_pdf.clients.retry import RequestRetryWrapper


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's real HYBISCUS_* variables out of the tests."""
    for name in ("HYBISCUS_API_KEY", "HYBISCUS_API_URL", "HYBISCUS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def retry_wrapper(sleeps) -> RequestRetryWrapper:
    return RequestRetryWrapper(sleep=sleeps.append)


@pytest.fixture
def client(retry_wrapper) -> HybiscusClient:
    return HybiscusClient(api_key="fake", retry_wrapper=retry_wrapper)


@pytest.fixture
def report_json() -> dict:
    return {
        "type": "Report",
        "options": {"report_title": "Sales", "report_byline": "Q3"},
        "config": {"colours": {"primary": "#1e293b"}},
        "components": [
            {"type": "Text", "options": {"text": "Hello"}},
        ],
    }
