from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from time import sleep
from typing import Literal, TypeVar

from relkit.core.result import Err, Ok, Result
from relkit.platform.http import HttpError
from relkit.release.errors import ClientError
from relkit.release.timeouts import RETRY_ATTEMPTS, RETRY_FACTOR, RETRY_MIN_TIMEOUT_SECONDS

T = TypeVar("T")

Classification = Literal["transient", "permanent"]

# Request timeout and rate limiting are worth another attempt; any other 4xx is not.
_TRANSIENT_CLIENT_STATUSES = frozenset({408, 429})


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How often and how patiently a remote call is retried.

    Attributes:
        max_attempts: Total invocations for transient failures (>= 1).
        min_timeout: Seconds to wait before the first retry; 0 disables waiting.
        factor: Multiplier applied to the wait after each retry.
    """

    max_attempts: int = RETRY_ATTEMPTS
    min_timeout: float = RETRY_MIN_TIMEOUT_SECONDS
    factor: float = RETRY_FACTOR

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` (1-based)."""
        return self.min_timeout * self.factor ** (attempt - 1)


def classify(error: HttpError) -> Classification:
    """401/403/404 and other client errors are permanent; 5xx and network errors are not.

    Local failures (``retryable=False``) are permanent whatever their status.
    """
    if not error.retryable:
        return "permanent"
    status = error.status
    if status == 0 or status >= 500 or status in _TRANSIENT_CLIENT_STATUSES:
        return "transient"
    return "permanent"


def to_client_error(error: HttpError) -> ClientError:
    return ClientError(status=error.status, detail=error.message)


def call_with_retry(
    operation: Callable[[], Result[T, HttpError]],
    *,
    policy: RetryPolicy = RetryPolicy(),
    on_retry: Callable[[int, HttpError], None] | None = None,
) -> Result[T, ClientError]:
    """Invoke ``operation`` until it succeeds or the failure is final.

    A permanent failure returns after exactly one invocation. A transient one
    is retried up to ``policy.max_attempts`` invocations in total; the last
    error is then returned.
    """
    attempts = max(1, policy.max_attempts)
    for attempt in range(1, attempts + 1):
        result = operation()
        if isinstance(result, Ok):
            return result

        error = result.error
        if classify(error) == "permanent" or attempt == attempts:
            return Err(to_client_error(error))

        if on_retry is not None:
            on_retry(attempt, error)
        wait = policy.delay(attempt)
        if wait > 0:
            sleep(wait)

    raise AssertionError("unreachable: retry loop always returns")
