"""
Retry Orchestration
===================
Bounded retry around one complete subset request.

The HYCOM THREDDS server is unreliable, so transient read failures are
retried after a fixed pause. Every other failure kind is final and
surfaces on the first attempt.
"""

import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from ..core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and fixed delay between attempts.

    A failure is retried when its class is marked `retryable` (only
    RemoteFetchFailure in this package) or is listed in `retry_on`.
    """
    max_attempts: int = 5
    delay_seconds: float = 1.0
    retry_on: Tuple[Type[BaseException], ...] = ()

    def should_retry(self, exc: BaseException) -> bool:
        return bool(getattr(exc, "retryable", False)) or isinstance(exc, self.retry_on)


def _record_attempts(exc: BaseException, attempts: int) -> None:
    try:
        exc.attempts = attempts
    except AttributeError:
        pass


def run_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "request",
) -> T:
    """
    Call `fn` until it succeeds or the attempt budget is spent.

    Args:
        fn: One full attempt (cache lookup + resolution + fetch)
        policy: Attempt budget, delay and extra retryable exception types
        sleep: Pause function
        label: Name used in log lines

    Returns:
        Whatever `fn` returns

    Raises:
        The last failure, with its `attempts` attribute set
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except Exception as e:
            _record_attempts(e, attempt)
            if not policy.should_retry(e) or attempt >= policy.max_attempts:
                logger.error(
                    f"{label} failed with {type(e).__name__} after {attempt} attempt(s): {e}"
                )
                raise
            logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} for {label} failed: {e}. "
                f"Retrying in {policy.delay_seconds}s..."
            )
            sleep(policy.delay_seconds)
