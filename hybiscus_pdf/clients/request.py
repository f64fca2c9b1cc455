"""Endpoint methods for the Hybiscus PDF Reports API.

Method names follow the Hybiscus endpoint names (build-report ->
build_report, get-task-status -> get_task_status, ...). A ReportRequest
remembers the task created by the last build/preview call so that
get_last_task_status() and get_last_report() can poll it without the caller
carrying the id around.
"""

import base64
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import requests

from ..core.response import Response
from .errors import HTTP_OK_CODE
from .retry import RequestRetryWrapper

if TYPE_CHECKING:
    from .hybiscus import HybiscusClient

logger = logging.getLogger(__name__)

SINGLE_PAGE_QUOTA_HEADER = "X-Remaining-Single-Page-Reports"
MULTI_PAGE_QUOTA_HEADER = "X-Remaining-Multi-Page-Reports"

NO_TASK_MESSAGE = "No task_id available. Please call build_report or preview_report first."


def _header_int(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s header: %r", name, value)
        return None


class ReportRequest:
    """Per-endpoint calls plus the last-task bookkeeping.

    Not thread-safe: the last_* attributes are plain instance state.

    Attributes:
        client: The owning HybiscusClient.
        response: The raw requests.Response of the last successful call.
        last_task_id: Task id returned by the last build/preview call.
        last_task_status: Status of that task as last observed.
        last_request: Time of the last successful call of any kind.
        last_request_time_counting_against_rate_limit: Time of the last
            build/preview call.
        remaining_single_page_reports: Quota header from the last
            build/preview call, if the server sent it.
        remaining_multi_page_reports: Same, for multi-page reports.
    """

    def __init__(self, client: "HybiscusClient", retry_wrapper: Optional[RequestRetryWrapper] = None):
        self.client = client
        self.retry_wrapper = retry_wrapper or RequestRetryWrapper(logger=logger)
        self.response: Optional[requests.Response] = None
        self.last_task_id: Optional[str] = None
        self.last_task_status: Optional[str] = None
        self.last_request: Optional[datetime] = None
        self.last_request_time_counting_against_rate_limit: Optional[datetime] = None
        self.remaining_single_page_reports: Optional[int] = None
        self.remaining_multi_page_reports: Optional[int] = None

    # POST
    def build_report(self, report_request: Mapping[str, Any]) -> Response:
        """Queue a report for rendering. Returns {task_id, status}."""
        body = self._request("build_report", method="POST", body=report_request)
        self._update_last_request_information(body)
        return Response(body)

    # POST
    def preview_report(self, report_request: Mapping[str, Any]) -> Response:
        """Queue a low-resolution preview; same response shape as build_report."""
        body = self._request("preview_report", method="POST", body=report_request)
        self._update_last_request_information(body)
        return Response(body)

    # GET
    def get_task_status(self, task_id: str) -> Response:
        body = self._request("get_task_status", params={"task_id": task_id})
        # only the tracked task's status is remembered
        if self.last_task_id is not None and str(task_id) == str(self.last_task_id):
            self.last_task_status = body.get("status")
            logger.info("Task %s is now %s", task_id, self.last_task_status)
        return Response(body)

    def get_last_task_status(self) -> Response:
        if not self.last_task_id:
            raise ValueError(NO_TASK_MESSAGE)
        return self.get_task_status(self.last_task_id)

    # GET
    def get_report(self, task_id: str) -> Response:
        """Download the rendered PDF. ``report`` holds the base64-encoded bytes."""
        content = self._request("get_report", params={"task_id": task_id}, binary=True)
        encoded = base64.b64encode(content).decode("ascii")
        return Response({"report": encoded, "status": HTTP_OK_CODE})

    def get_last_report(self) -> Response:
        if not self.last_task_id:
            raise ValueError(NO_TASK_MESSAGE)
        return self.get_report(self.last_task_id)

    # GET
    def get_remaining_quota(self) -> Response:
        return Response(self._request("get_remaining_quota"))

    def _request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
        binary: bool = False,
    ) -> Any:
        path = self.client.config.endpoint(endpoint)
        connection = self.client.connection()

        def call() -> requests.Response:
            return connection.send(method, path, params=params, json_body=body)

        self.response = self.retry_wrapper.with_retries(call)
        self.last_request = datetime.now(timezone.utc)

        # raw bytes for binary downloads, no JSON parsing
        if binary:
            return self.response.content
        return self._decode(self.response)

    @staticmethod
    def _decode(resp: requests.Response) -> Dict[str, Any]:
        if not resp.content:
            return {}
        try:
            payload = resp.json()
        except ValueError:
            logger.warning("Response is not valid JSON, returning raw text")
            return {"raw": resp.text}
        if not isinstance(payload, dict):
            return {"raw": payload}
        return payload

    def _update_last_request_information(self, body: Mapping[str, Any]) -> None:
        self.last_request_time_counting_against_rate_limit = datetime.now(timezone.utc)
        self.last_task_id = body.get("task_id")
        self.last_task_status = body.get("status")
        logger.info("Task %s queued with status %s", self.last_task_id, self.last_task_status)

        headers = self.response.headers if self.response is not None else {}
        single = _header_int(headers, SINGLE_PAGE_QUOTA_HEADER)
        multi = _header_int(headers, MULTI_PAGE_QUOTA_HEADER)
        if single is not None:
            self.remaining_single_page_reports = single
        if multi is not None:
            self.remaining_multi_page_reports = multi
