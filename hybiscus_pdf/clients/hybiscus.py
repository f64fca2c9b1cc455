"""Hybiscus PDF Reports API client.

Example:
    client = HybiscusClient(api_key="your_api_key")
    queued = client.request.build_report(report_json)
    client.request.get_last_task_status().status

Without an explicit api_key the client reads HYBISCUS_API_KEY (and
HYBISCUS_API_URL, HYBISCUS_TIMEOUT) through load_config(). Explicit
arguments always win over the configuration value.
"""

import dataclasses
import logging
from typing import Dict, Optional

import requests

from ..config.config import HybiscusConfig, load_config
from .http import HttpConnection
from .request import ReportRequest
from .retry import RequestRetryWrapper

logger = logging.getLogger(__name__)


class HybiscusClient:
    """Client for the Hybiscus PDF Reports API.

    Holds the resolved configuration and lazily builds one HttpConnection and
    one ReportRequest, both reused for the lifetime of the client.

    Attributes:
        config: The resolved HybiscusConfig (arguments merged over defaults).
        api_key: The stripped API key sent as X-API-KEY.
        api_url: The base URL every endpoint path is joined to.
        timeout: Socket timeout in seconds.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        config: Optional[HybiscusConfig] = None,
        retry_wrapper: Optional[RequestRetryWrapper] = None,
    ):
        """Initialize the client.

        Args:
            api_key: API key; falls back to the configuration value.
            api_url: Base URL; falls back to the configuration value.
            timeout: Socket timeout in seconds; falls back to the
                configuration value.
            session: A requests.Session to send requests through (e.g. one
                mounted with a mock adapter in tests).
            config: Configuration value; load_config() when omitted.
            retry_wrapper: Retry policy for every endpoint call.

        Raises:
            ValueError: If no non-blank API key is available.
        """
        base = config or load_config()
        key = (api_key if api_key is not None else base.api_key) or ""
        key = key.strip()
        if not key:
            raise ValueError("No API key defined. Set HYBISCUS_API_KEY or pass api_key to HybiscusClient.")

        self.config = dataclasses.replace(
            base,
            api_key=key,
            api_url=api_url or base.api_url,
            timeout=base.timeout if timeout is None else timeout,
            session=session or base.session,
        )
        self._retry_wrapper = retry_wrapper
        self._connection: Optional[HttpConnection] = None
        self._request: Optional[ReportRequest] = None

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def api_url(self) -> str:
        return self.config.api_url

    @property
    def timeout(self) -> float:
        return self.config.timeout

    @property
    def request(self) -> ReportRequest:
        if self._request is None:
            self._request = ReportRequest(self, retry_wrapper=self._retry_wrapper)
        return self._request

    def connection(self, headers: Optional[Dict[str, str]] = None) -> HttpConnection:
        """Return the memoized connection; ``headers`` only apply on first build."""
        if self._connection is None:
            logger.debug("Building connection to %s", self.api_url)
            self._connection = HttpConnection(
                self.api_url,
                self.api_key,
                timeout=self.timeout,
                headers=headers,
                session=self.config.session,
            )
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "HybiscusClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
