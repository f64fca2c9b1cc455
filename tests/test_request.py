from __future__ import annotations

import base64

import pytest
import requests

from hybiscus_pdf.clients import errors
from hybiscus_pdf.core.response import Response

API_URL = "https://api.hybiscus.dev/api/v1"

TASK_ID = "bdc69c4d-3ba4-4a51-81c1-3c1aab358843"
QUEUED = {"task_id": TASK_ID, "status": "QUEUED"}


def test_build_report(client, requests_mock, report_json):
    m = requests_mock.post(
        f"{API_URL}/build-report",
        json=QUEUED,
        headers={"X-Remaining-Single-Page-Reports": "20", "X-Remaining-Multi-Page-Reports": "10"},
    )

    response = client.request.build_report(report_json)

    assert isinstance(response, Response)
    assert response.task_id == TASK_ID
    assert response.status == "QUEUED"
    assert m.last_request.json() == report_json
    assert m.last_request.headers["X-API-KEY"] == "fake"
    assert client.request.last_task_id == TASK_ID
    assert client.request.last_task_status == "QUEUED"
    assert client.request.remaining_single_page_reports == 20
    assert client.request.remaining_multi_page_reports == 10
    assert client.request.last_request_time_counting_against_rate_limit is not None


def test_preview_report_tracks_task(client, requests_mock, report_json):
    requests_mock.post(f"{API_URL}/preview-report", json=QUEUED)

    response = client.request.preview_report(report_json)

    assert response.task_id == TASK_ID
    assert client.request.last_task_id == TASK_ID
    assert client.request.last_task_status == "QUEUED"
    assert client.request.remaining_single_page_reports is None


def test_get_task_status(client, requests_mock):
    m = requests_mock.get(f"{API_URL}/get-task-status?task_id=1234", json={"status": "SUCCESS"})

    response = client.request.get_task_status("1234")

    assert isinstance(response, Response)
    assert response.status == "SUCCESS"
    assert m.last_request.qs == {"task_id": ["1234"]}
    # status calls never set the tracked task
    assert client.request.last_task_id is None


def test_status_of_tracked_task_updates_last_status(client, requests_mock, report_json):
    requests_mock.post(f"{API_URL}/build-report", json=QUEUED)
    requests_mock.get(f"{API_URL}/get-task-status", json={"status": "SUCCESS"})

    client.request.build_report(report_json)
    client.request.get_task_status(TASK_ID)

    assert client.request.last_task_status == "SUCCESS"


def test_status_of_other_task_leaves_last_status(client, requests_mock, report_json):
    requests_mock.post(f"{API_URL}/build-report", json=QUEUED)
    requests_mock.get(f"{API_URL}/get-task-status", json={"status": "FAILED"})

    client.request.build_report(report_json)
    response = client.request.get_task_status("another-task")

    assert response.status == "FAILED"
    assert client.request.last_task_id == TASK_ID
    assert client.request.last_task_status == "QUEUED"


def test_get_report_returns_base64(client, requests_mock):
    pdf = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\nsample"
    requests_mock.get(f"{API_URL}/get-report?task_id=1234", content=pdf, headers={"Content-Type": "application/pdf"})

    response = client.request.get_report("1234")

    assert response.status == 200
    assert base64.b64decode(response.report) == pdf


def test_get_remaining_quota(client, requests_mock):
    requests_mock.get(
        f"{API_URL}/get-remaining-quota",
        json={"remaining_single_page_reports": 95, "remaining_multi_page_reports": 100},
    )

    response = client.request.get_remaining_quota()

    assert response.remaining_single_page_reports == 95
    assert response.remaining_multi_page_reports == 100


def test_last_task_conveniences(client, requests_mock, report_json):
    requests_mock.post(f"{API_URL}/build-report", json=QUEUED)
    status = requests_mock.get(f"{API_URL}/get-task-status", json={"status": "SUCCESS"})
    report = requests_mock.get(f"{API_URL}/get-report", content=b"pdf_content")

    client.request.build_report(report_json)

    assert client.request.get_last_task_status().status == "SUCCESS"
    assert status.last_request.qs == {"task_id": [TASK_ID]}
    assert client.request.get_last_report().status == 200
    assert report.last_request.qs == {"task_id": [TASK_ID]}


@pytest.mark.parametrize("method", ["get_last_task_status", "get_last_report"])
def test_last_task_conveniences_require_a_task(client, method):
    with pytest.raises(ValueError, match="No task_id available"):
        getattr(client.request, method)()


def test_initial_state(client):
    request = client.request
    assert request.response is None
    assert request.last_task_id is None
    assert request.last_task_status is None
    assert request.last_request is None


def test_any_body_with_200_is_success(client, requests_mock):
    requests_mock.get(f"{API_URL}/get-remaining-quota", text="not json")
    assert client.request.get_remaining_quota().raw == "not json"

    requests_mock.get(f"{API_URL}/get-remaining-quota", json=[1, 2])
    assert client.request.get_remaining_quota().raw == [1, 2]

    requests_mock.get(f"{API_URL}/get-remaining-quota", content=b"")
    assert client.request.get_remaining_quota().to_dict() == {}


@pytest.mark.parametrize(
    "status, error_class",
    [
        (400, errors.BadRequestError),
        (401, errors.UnauthorizedError),
        (402, errors.PaymentRequiredError),
        (403, errors.ForbiddenError),
        (404, errors.NotFoundError),
        (422, errors.UnprocessableContentError),
        (429, errors.ApiRequestsQuotaReachedError),
        (201, errors.ApiError),
        (500, errors.ApiError),
    ],
)
def test_non_200_raises_mapped_error_without_retry(client, requests_mock, sleeps, report_json, status, error_class):
    m = requests_mock.post(f"{API_URL}/build-report", status_code=status, json={"error": "nope"})

    with pytest.raises(error_class) as excinfo:
        client.request.build_report(report_json)

    assert type(excinfo.value) is error_class
    assert excinfo.value.status_code == status
    assert excinfo.value.response.status_code == status
    assert str(excinfo.value).startswith(f"Code: {status}, response:")
    assert "nope" in excinfo.value.full_message
    assert m.call_count == 1
    assert sleeps == []
    assert client.request.last_task_id is None


def test_rate_limit_is_retried(client, requests_mock, sleeps, report_json):
    m = requests_mock.post(
        f"{API_URL}/build-report",
        [{"status_code": 503, "json": {}}, {"json": QUEUED}],
    )

    response = client.request.build_report(report_json)

    assert response.status == "QUEUED"
    assert m.call_count == 2
    assert sleeps == [1]


@pytest.mark.parametrize("exc", [requests.exceptions.ReadTimeout, requests.exceptions.ConnectionError])
def test_network_errors_are_retried(client, requests_mock, sleeps, report_json, exc):
    m = requests_mock.post(f"{API_URL}/build-report", [{"exc": exc}, {"json": QUEUED}])

    client.request.build_report(report_json)

    assert m.call_count == 2
    assert sleeps == [1]


def test_persistent_rate_limit_gives_up(client, requests_mock, sleeps):
    m = requests_mock.get(f"{API_URL}/get-remaining-quota", status_code=503)

    with pytest.raises(errors.RateLimitError):
        client.request.get_remaining_quota()

    assert m.call_count == 5
    assert sleeps == [1, 2, 4, 8]


@pytest.mark.parametrize(
    "preview_headers",
    [{}, {"X-Remaining-Single-Page-Reports": "abc", "X-Remaining-Multi-Page-Reports": "abc"}],
)
def test_missing_or_bad_quota_headers_keep_previous_counts(client, requests_mock, report_json, preview_headers):
    requests_mock.post(
        f"{API_URL}/build-report",
        json=QUEUED,
        headers={"X-Remaining-Single-Page-Reports": "20", "X-Remaining-Multi-Page-Reports": "10"},
    )
    requests_mock.post(f"{API_URL}/preview-report", json=QUEUED, headers=preview_headers)

    client.request.build_report(report_json)
    client.request.preview_report(report_json)

    assert client.request.remaining_single_page_reports == 20
    assert client.request.remaining_multi_page_reports == 10
