import logging
from typing import Any, Dict, Optional

import requests

from .errors import HTTP_OK_CODE, error_class_for_status

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
API_KEY_HEADER = "X-API-KEY"


class HttpConnection:
    """A requests session bound to the Hybiscus base URL and API key.

    One call to send() is exactly one HTTP request; retries are the caller's
    business.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        # per-connection headers; a shared session is never mutated
        self._headers = {API_KEY_HEADER: api_key, "Accept": "application/json"}
        self._headers.update(headers or {})

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    def _url(self, path: str) -> str:
        return self.base_url + ("" if path.startswith("/") else "/") + path

    def send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
    ) -> requests.Response:
        """Issue one request and return the response if its status is 200.

        Raises:
            ApiError: A status-specific subclass for any status other than 200.
            requests.RequestException: If a network error occurs.
        """
        url = self._url(path)
        logger.debug("Making %s request to %s", method, url)
        resp = self.session.request(
            method, url, params=params, json=json_body, headers=self._headers, timeout=self.timeout
        )
        if resp.status_code != HTTP_OK_CODE:
            logger.error("Request failed: %s %s returned %d: %s", method, url, resp.status_code, resp.text)
            error_class = error_class_for_status(resp.status_code)
            raise error_class(
                f"Code: {resp.status_code}, response: {resp.reason}",
                response=resp,
                status_code=resp.status_code,
                full_message=resp.text,
            )
        return resp

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
