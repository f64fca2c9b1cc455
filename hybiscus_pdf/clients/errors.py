"""Errors raised for non-200 responses from the Hybiscus API.

Every failed call raises a subclass of ApiError chosen by HTTP status code.
Catch ApiError for everything, or a specific subclass to handle one case.
"""

from typing import Any, Dict, Optional, Type

HTTP_OK_CODE = 200


class ApiError(Exception):
    """Base error for all Hybiscus API failures.

    Attributes:
        response: The raw requests.Response, when one was received.
        status_code: The HTTP status code of that response.
        full_message: The response body text, for diagnostics.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        response: Any = None,
        status_code: Optional[int] = None,
        full_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.response = response
        self.status_code = status_code
        self.full_message = full_message


class BadRequestError(ApiError):  # 400
    pass


class UnauthorizedError(ApiError):  # 401
    pass


class PaymentRequiredError(ApiError):  # 402
    pass


class ForbiddenError(ApiError):  # 403
    pass


class NotFoundError(ApiError):  # 404
    pass


class UnprocessableContentError(ApiError):  # 422
    pass


class ApiRequestsQuotaReachedError(ApiError):  # 429
    pass


class RateLimitError(ApiError):  # 503
    pass


HTTP_ERROR_STATUS_CODES: Dict[int, Type[ApiError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    402: PaymentRequiredError,
    403: ForbiddenError,
    404: NotFoundError,
    422: UnprocessableContentError,
    429: ApiRequestsQuotaReachedError,
    503: RateLimitError,
}


def error_class_for_status(status: int) -> Type[ApiError]:
    return HTTP_ERROR_STATUS_CODES.get(status, ApiError)
