#!/usr/bin/env python3
"""
Refresh Scheduler - recurring check at the news provider's reset boundary.

The scheduler only decides *when* to check. The supplied callback decides
whether the cache is stale and triggers the refetch.
"""

import asyncio
import inspect
import logging
from datetime import datetime, time, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import pytz

logger = logging.getLogger(__name__)

# Daily check slot (UTC): provider resets at 00:00, we look at 00:05
CHECK_SLOT_UTC = time(0, 5)

CheckCallback = Callable[[], Union[None, Awaitable[None]]]


def _default_now() -> datetime:
    return datetime.now(pytz.utc)


class RefreshScheduler:
    """
    Recurring daily timer aligned to the provider reset.

    ``arm`` starts an asyncio task that sleeps until the next check slot,
    runs the callback and re-arms itself until ``cancel`` is called.
    """

    def __init__(self,
                 check_slot: time = CHECK_SLOT_UTC,
                 now_fn: Callable[[], datetime] = _default_now,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        """
        Initialize scheduler.

        Args:
            check_slot: UTC time of day for the check
            now_fn: Clock returning the current time
            sleep: Coroutine function used to wait (injectable for tests)
        """
        self.check_slot = check_slot
        self._now = now_fn
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._callback: Optional[CheckCallback] = None
        self.fire_count = 0

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_fire_time(self, from_time: Optional[datetime] = None) -> datetime:
        """Get the next check slot strictly after ``from_time``."""
        if from_time is None:
            from_time = self._now()

        if from_time.tzinfo is None:
            from_time = pytz.utc.localize(from_time)
        else:
            from_time = from_time.astimezone(pytz.utc)

        candidate = pytz.utc.localize(datetime.combine(from_time.date(), self.check_slot))
        if candidate <= from_time:
            candidate += timedelta(days=1)
        return candidate

    def seconds_until_next_fire(self, from_time: Optional[datetime] = None) -> float:
        if from_time is None:
            from_time = self._now()
        return max(0.0, (self.next_fire_time(from_time) - from_time).total_seconds())

    def arm(self, check_callback: CheckCallback) -> bool:
        """
        Start the recurring check.

        Args:
            check_callback: Sync or async callable run at every slot

        Returns:
            True if armed now, False if already armed
        """
        if self.is_armed:
            logger.debug("Refresh scheduler already armed")
            return False

        self._callback = check_callback
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Refresh scheduler armed, next check at {self.next_fire_time().isoformat()}")
        return True

    def cancel(self) -> None:
        """Stop future firings."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Refresh scheduler cancelled")
        self._task = None

    async def _run(self) -> None:
        while True:
            delay = self.seconds_until_next_fire()
            logger.debug(f"Next refresh check in {delay:.0f}s")
            await self._sleep(delay)
            await self._fire()

    async def _fire(self) -> None:
        self.fire_count += 1
        logger.info("Provider reset boundary reached, running refresh check")
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Refresh check failed: {e}", exc_info=True)

    def get_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics for monitoring."""
        return {
            "armed": self.is_armed,
            "check_slot_utc": self.check_slot.strftime('%H:%M'),
            "next_check": self.next_fire_time().isoformat(),
            "fire_count": self.fire_count
        }
