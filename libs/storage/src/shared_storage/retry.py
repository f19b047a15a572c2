import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    delay: float = 1.0
    multiplier: float = 2.0

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"RetryPolicy needs at least one attempt, got {self.attempts}")

    def backoff(self, attempt: int) -> float:
        # attempt is zero-based: first retry waits `delay`
        return self.delay * (self.multiplier ** attempt)


def retry_on(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy = RetryPolicy(),
    is_retryable: Callable[[Exception], bool],
    recover: Optional[Callable[[Exception], T]] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds or ``policy.attempts`` is used up.

    Errors rejected by ``is_retryable`` propagate at once without consuming the
    budget. Once the budget is exhausted ``recover`` receives the last error and
    its result is returned; without ``recover`` the last error is re-raised.
    """
    last_exc: Optional[Exception] = None
    for i in range(policy.attempts):
        try:
            return fn()
        except Exception as e:
            if not is_retryable(e):
                raise
            last_exc = e
            if i == policy.attempts - 1:
                break
            sleep_s = policy.backoff(i)
            if on_retry:
                on_retry(i + 1, e, sleep_s)
            else:
                logger.warning(f"retry #{i + 1} in {sleep_s:.2f}s due to {e!r}")
            sleep(sleep_s)
    if recover is not None:
        return recover(last_exc)
    raise last_exc


def retryable(
    *,
    policy: RetryPolicy = RetryPolicy(),
    is_retryable: Callable[[Exception], bool],
    recover: Optional[Callable[[Exception], T]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Decorator version of :func:`retry_on`."""
    def _wrap(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def _inner(*args, **kwargs) -> T:
            return retry_on(
                lambda: func(*args, **kwargs),
                policy=policy,
                is_retryable=is_retryable,
                recover=recover,
                sleep=sleep,
            )
        return _inner
    return _wrap
