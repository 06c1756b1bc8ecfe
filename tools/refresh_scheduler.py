"""
Refresh Scheduler
Named recurring asyncio jobs with on-demand triggering and cancellation
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Type
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


Job = Callable[[], Awaitable[object]]


@dataclass
class _Entry:
    job: Job
    interval: float
    stop_on: Tuple[Type[BaseException], ...] = ()
    wake: asyncio.Event = field(default_factory=asyncio.Event)
    task: Optional[asyncio.Task] = None
    runs: int = 0
    failures: int = 0


class RefreshScheduler:
    """
    One recurring task per key.

    A job runs immediately on start and then every ``interval`` seconds.
    ``trigger`` wakes it early (e.g. after a write); ``cancel`` stops it
    (e.g. on logout). A failed run is logged and retried on the next cycle,
    unless it raised one of the job's ``stop_on`` exceptions; those end the
    task for good (e.g. the patient no longer exists).
    """

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}

    def start(
        self,
        key: str,
        job: Job,
        interval: float,
        stop_on: Tuple[Type[BaseException], ...] = ()
    ) -> bool:
        """
        Start the job under key; returns False when it is already running
        """
        entry = self._entries.get(key)
        if entry and entry.task and not entry.task.done():
            return False

        entry = _Entry(job=job, interval=interval, stop_on=stop_on)
        entry.task = asyncio.create_task(self._loop(key, entry), name=f"refresh:{key}")
        self._entries[key] = entry
        logger.info(f"Started refresh task {key} every {interval}s")
        return True

    def trigger(self, key: str) -> bool:
        """Run the job for key now instead of waiting for the interval"""
        entry = self._entries.get(key)
        if not entry:
            return False
        entry.wake.set()
        return True

    async def cancel(self, key: str) -> bool:
        """Stop and forget the task for key"""
        entry = self._entries.pop(key, None)
        if not entry or not entry.task:
            return False

        entry.task.cancel()
        try:
            await entry.task
        except asyncio.CancelledError:
            pass
        logger.info(f"Cancelled refresh task {key}")
        return True

    async def shutdown(self) -> None:
        """Cancel every task"""
        for key in list(self._entries):
            await self.cancel(key)

    def is_running(self, key: str) -> bool:
        entry = self._entries.get(key)
        return bool(entry and entry.task and not entry.task.done())

    def keys(self) -> List[str]:
        return [key for key in self._entries if self.is_running(key)]

    def stats(self, key: str) -> Dict[str, int]:
        entry = self._entries.get(key)
        if not entry:
            return {"runs": 0, "failures": 0}
        return {"runs": entry.runs, "failures": entry.failures}

    async def _loop(self, key: str, entry: _Entry) -> None:
        while True:
            entry.wake.clear()
            try:
                await entry.job()
            except asyncio.CancelledError:
                raise
            except entry.stop_on as e:
                if self._entries.get(key) is entry:
                    del self._entries[key]
                logger.info(f"Refresh task {key} stopped: {e}")
                return
            except Exception as e:
                entry.failures += 1
                logger.warning(f"Refresh task {key} failed; retrying next cycle: {e}")
            finally:
                entry.runs += 1

            try:
                await asyncio.wait_for(entry.wake.wait(), timeout=entry.interval)
            except asyncio.TimeoutError:
                pass


# Singleton instance
refresh_scheduler = RefreshScheduler()
