"""
Tick sources for the race loop.

The race loop never sleeps or reads a clock itself; it asks a scheduler
for a repeating callback and cancels it when the race ends or is torn
down. ``ManualScheduler`` is a virtual clock for tests and headless
runs, ``AsyncioScheduler`` drives real time on an event loop.
"""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional


class ScheduledTick:
    """Handle for a repeating callback."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled


class TickScheduler:
    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTick:
        raise NotImplementedError


class _ManualJob(ScheduledTick):
    def __init__(self, interval: float, callback: Callable[[], None], start: float, seq: int) -> None:
        super().__init__(interval, callback)
        self.start = start
        self.seq = seq
        self.fires = 0

    @property
    def next_due(self) -> float:
        return self.start + (self.fires + 1) * self.interval


class ManualScheduler(TickScheduler):
    """Virtual clock: callbacks only fire when ``advance`` moves time forward."""

    def __init__(self) -> None:
        self.now = 0.0
        self._jobs: List[_ManualJob] = []
        self._seq = 0

    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTick:
        if interval <= 0:
            raise ValueError("Tick interval must be positive.")
        job = _ManualJob(interval, callback, self.now, self._seq)
        self._seq += 1
        self._jobs.append(job)
        return job

    @property
    def active_jobs(self) -> List[ScheduledTick]:
        self._jobs = [job for job in self._jobs if job.active]
        return list(self._jobs)

    def _next_job(self, until: float) -> Optional[_ManualJob]:
        due = [job for job in self.active_jobs if job.next_due <= until + 1e-9]
        if not due:
            return None
        return min(due, key=lambda job: (job.next_due, job.seq))

    def advance(self, seconds: float) -> int:
        """Moves the clock forward, firing every due callback in order. Returns fire count."""
        target = self.now + seconds
        fired = 0
        job = self._next_job(target)
        while job is not None:
            self.now = max(self.now, job.next_due)
            job.fires += 1
            job.callback()
            fired += 1
            job = self._next_job(target)
        self.now = target
        return fired

    def run_until_idle(self, max_seconds: float = 3600.0) -> int:
        """Fires callbacks until nothing is scheduled (or ``max_seconds`` of virtual time pass)."""
        limit = self.now + max_seconds
        fired = 0
        while self.active_jobs and self.now < limit:
            job = min(self.active_jobs, key=lambda j: (j.next_due, j.seq))
            if job.next_due > limit:
                break
            self.now = max(self.now, job.next_due)
            job.fires += 1
            job.callback()
            fired += 1
        return fired


class _AsyncioTick(ScheduledTick):
    def __init__(self, interval: float, callback: Callable[[], None], loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(interval, callback)
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        self._handle = self._loop.call_later(self.interval, self._fire)
        self.callback()

    def cancel(self) -> None:
        super().cancel()
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler(TickScheduler):
    """Repeating ``loop.call_later`` callbacks on the running event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTick:
        if interval <= 0:
            raise ValueError("Tick interval must be positive.")
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTick(interval, callback, loop)
