"""
Deferred status transitions of visit parts.

Visit parts are closed once their end date has passed. The scheduling
itself is a port so the service can run against an in-memory timer
registry, a durable job queue or a fake in tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Protocol

import pendulum
from pendulum import DateTime

from ..domain.models import VisitPart

logger = logging.getLogger(__name__)

Callback = Callable[[], None]
TimerFactory = Callable[[float, Callback], threading.Timer]
Clock = Callable[[], DateTime]


class SchedulerPort(Protocol):
    """Protocol describing a deferred-callback registry keyed by entity."""

    def schedule_at(self, key: str, instant: DateTime, callback: Callback) -> None:
        """Run ``callback`` at ``instant``; replaces an existing job with the same key."""

    def cancel(self, key: str) -> None:
        """Drop the job registered under ``key`` if there is one."""

    def reschedule(self, key: str, instant: DateTime, callback: Callback) -> None:
        """Cancel and schedule again."""


def _default_timer_factory(delay_seconds: float, callback: Callback) -> threading.Timer:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    return timer


class InMemoryScheduler:
    """
    Scheduler keeping ``threading.Timer`` jobs in a per-instance registry.

    Jobs do not survive a restart; call ``VisitPartCloser.schedule_and_close``
    again on startup.
    """

    def __init__(
        self,
        timer_factory: TimerFactory = _default_timer_factory,
        clock: Clock = pendulum.now,
    ):
        self._timer_factory = timer_factory
        self._clock = clock
        self._jobs: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._jobs)

    def schedule_at(self, key: str, instant: DateTime, callback: Callback) -> None:
        delay = max((instant - self._clock()).total_seconds(), 0.0)

        def run() -> None:
            with self._lock:
                if self._jobs.get(key) is timer:
                    del self._jobs[key]
            callback()

        timer = self._timer_factory(delay, run)

        with self._lock:
            previous = self._jobs.pop(key, None)
            self._jobs[key] = timer

        if previous is not None:
            previous.cancel()

        logger.debug("Scheduled job %s in %.0f seconds", key, delay)
        timer.start()

    def cancel(self, key: str) -> None:
        with self._lock:
            timer = self._jobs.pop(key, None)

        if timer is not None:
            timer.cancel()
            logger.debug("Cancelled job %s", key)

    def reschedule(self, key: str, instant: DateTime, callback: Callback) -> None:
        self.cancel(key)
        self.schedule_at(key, instant, callback)

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._jobs.values())
            self._jobs.clear()

        for timer in timers:
            timer.cancel()


class VisitPartCloser:
    """
    Closes visit parts when they end.

    ``on_close`` receives the ids of the visit parts to close and performs
    the actual status change in storage.
    """

    def __init__(
        self,
        scheduler: SchedulerPort,
        on_close: Callable[[List[int]], None],
        clock: Clock = pendulum.now,
    ):
        self._scheduler = scheduler
        self._on_close = on_close
        self._clock = clock

    @staticmethod
    def job_key(visit_part_id: int) -> str:
        return f"visit-part:{visit_part_id}"

    def schedule_and_close(self, visit_parts: Iterable[VisitPart]) -> List[int]:
        """
        Close finished visit parts now and schedule the others.

        Returns:
            Ids of the visit parts closed immediately
        """
        now = self._clock()
        active = [visit_part for visit_part in visit_parts if visit_part.is_active]

        finished = [visit_part.id for visit_part in active if visit_part.end_date <= now]
        if finished:
            logger.info("Closing %d finished visit part(s)", len(finished))
            self._on_close(finished)

        for visit_part in active:
            if visit_part.end_date > now:
                self._scheduler.schedule_at(
                    self.job_key(visit_part.id),
                    visit_part.end_date,
                    self._close_callback(visit_part.id),
                )

        return finished

    def reschedule(self, visit_parts: Iterable[VisitPart]) -> None:
        """Move the closing jobs of changed visit parts to their new end dates."""
        for visit_part in visit_parts:
            self._scheduler.reschedule(
                self.job_key(visit_part.id),
                visit_part.end_date,
                self._close_callback(visit_part.id),
            )

    def cancel(self, visit_part_ids: Iterable[int]) -> None:
        for visit_part_id in visit_part_ids:
            self._scheduler.cancel(self.job_key(visit_part_id))

    @staticmethod
    def reservation_end(visit_parts: Iterable[VisitPart]) -> DateTime | None:
        """End of a reservation: the latest end of its visit parts."""
        end_dates = [visit_part.end_date for visit_part in visit_parts]
        return max(end_dates) if end_dates else None

    def _close_callback(self, visit_part_id: int) -> Callback:
        def close() -> None:
            self._on_close([visit_part_id])

        return close
