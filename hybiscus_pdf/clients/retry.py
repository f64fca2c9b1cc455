"""Automatic retries for transient Hybiscus API failures.

Usage:
    wrapper = RequestRetryWrapper(max_attempts=3)
    body = wrapper.with_retries(lambda: connection.send("GET", "get-remaining-quota"))

Failed attempts are followed by exponential backoff (1s, 2s, 4s, ...) and a
warning on the injected logger.
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import RateLimitError

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_ERRORS: Tuple[Type[BaseException], ...] = (
    RateLimitError,
    requests.Timeout,
    requests.ConnectionError,
)


class RequestRetryWrapper:
    """Runs one operation with bounded exponential-backoff retry.

    Attributes:
        max_attempts: Total number of attempts, including the first one.
        base_delay: Delay in seconds after the first failed attempt; each
            further retry doubles it.
        logger: Logger receiving retry warnings.
        sleep: Blocking sleep function, replaceable in tests.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 1,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.logger = logger or log
        self.sleep = sleep or time.sleep

    def with_retries(self, operation: Callable[[], T]) -> T:
        """Call ``operation`` until it succeeds or the attempt budget is spent.

        Errors outside DEFAULT_RETRY_ERRORS propagate on the first attempt.
        After the last attempt the original error is re-raised unchanged.
        """
        retryer = Retrying(
            reraise=True,
            retry=retry_if_exception_type(DEFAULT_RETRY_ERRORS),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=2, min=0),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=self._log_retry_attempt,
            sleep=self.sleep,
        )
        try:
            return retryer(operation)
        except DEFAULT_RETRY_ERRORS as e:
            self.logger.warning(
                "Retries exhausted after %d attempts: %s - %s",
                retryer.statistics.get("attempt_number", self.max_attempts),
                type(e).__name__,
                e,
            )
            raise

    def _log_retry_attempt(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait_time = retry_state.next_action.sleep if retry_state.next_action else None
        self.logger.warning(
            "Retry #%d in %ss due to %s: %s",
            retry_state.attempt_number,
            wait_time,
            type(exc).__name__,
            exc,
        )
