"""Retry utilities with exponential backoff for outbound fetches."""

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)


logger = structlog.get_logger(__name__)


# Network failures, timeouts, undecodable bodies and non-2xx responses.
TRANSIENT_FETCH_ERRORS = (httpx.RequestError, httpx.HTTPStatusError)

MAX_BACKOFF_SECONDS = 30


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retry",
        attempt=retry_state.attempt_number,
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(error),
    )


def fetch_retrying(max_attempts: int = 3, base_delay: float = 1.0) -> AsyncRetrying:
    """Build a retry controller for one fetch.

    Waits base_delay, then 2 * base_delay, ... between attempts and re-raises
    the last transient error once max_attempts is reached.

    Usage:
        payload = await fetch_retrying(3, 1.0)(self._fetch, keyword)
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, max=MAX_BACKOFF_SECONDS),
        retry=retry_if_exception_type(TRANSIENT_FETCH_ERRORS),
        before_sleep=_log_retry,
        reraise=True,
    )
