"""
Polling / retry driver.

Repeatedly awaits an operation until a caller-supplied success condition
holds or the retry budget runs out.

* Attempts are strictly sequential: each retry is scheduled only after the
  previous attempt has settled, then the fixed interval elapses.
* A failure to even start the operation, an exception from the awaited
  result, and a result rejected by the success condition are all treated
  the same way.
* ``FatalTripError`` is never retried.
* Cancelling the surrounding task stops the loop; ``CancelledError`` is not
  an ``Exception`` and always propagates.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union

from journeyshare.domain.errors import (
    FatalTripError,
    RetriesExhausted,
    SuccessConditionNotMet,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sentinel for ``max_retries``: poll until the success condition is met.
RUN_FOREVER = None

Operation = Callable[[], Union[Awaitable[T], T]]
Sleep = Callable[[float], Awaitable[None]]


def _always(_: object) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy(Generic[T]):
    max_retries: Optional[int] = 0
    interval_seconds: float = 0.0
    success_condition: Callable[[T], bool] = _always

    def __post_init__(self) -> None:
        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries must be >= 0 or RUN_FOREVER")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")

    @property
    def runs_forever(self) -> bool:
        return self.max_retries is RUN_FOREVER

    async def run(self, operation: Operation, *, sleep: Sleep = asyncio.sleep) -> T:
        attempts = 0
        retries_left = self.max_retries

        while True:
            attempts += 1
            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
                if self.success_condition(result):
                    return result
                raise SuccessConditionNotMet("Success condition not met, retrying.")
            except FatalTripError:
                raise
            except Exception as exc:
                if retries_left is not None and retries_left <= 0:
                    logger.warning("Giving up after %d attempt(s): %s", attempts, exc)
                    raise RetriesExhausted(attempts, exc) from exc
                logger.debug(
                    "Attempt %d failed (%s); retrying in %.1fs",
                    attempts,
                    exc,
                    self.interval_seconds,
                )

            if retries_left is not None:
                retries_left -= 1
            await sleep(self.interval_seconds)


async def run_with_retries(
    operation: Operation,
    max_retries: Optional[int],
    interval_seconds: float,
    success_condition: Callable[[T], bool] = _always,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run *operation* under a :class:`RetryPolicy`.  Returns the accepted result."""
    policy = RetryPolicy(max_retries, interval_seconds, success_condition)
    return await policy.run(operation, sleep=sleep)
