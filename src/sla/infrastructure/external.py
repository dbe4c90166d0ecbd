"""
SLA Background Scheduling
=========================

APScheduler wrapper that runs the periodic jobs: the SLA escalation scan
(interval) and the weekly productivity score calculation (cron).

Jobs receive a `should_stop` callable and poll it between items, so
stopping the scheduler lets an in-flight run finish the item it is on.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from src.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)

StopSignal = Callable[[], bool]
JobFunc = Callable[[StopSignal], Awaitable[Any]]


class JobScheduler:
    """
    Wrapper for APScheduler for background jobs.

    Manages the lifecycle of the scheduler, its jobs, and the runs that are
    in flight when shutdown begins.
    """

    def __init__(self, misfire_grace_time: int = 60):
        self._misfire_grace_time = misfire_grace_time
        self._scheduler = AsyncIOScheduler()
        self._running = False
        self._stopping = False
        self._in_flight: Set[asyncio.Task] = set()

    def should_stop(self) -> bool:
        return self._stopping

    def _wrap(self, job_id: str, func: JobFunc) -> Callable[[], Awaitable[None]]:
        async def run() -> None:
            if self._stopping:
                return
            task = asyncio.current_task()
            self._in_flight.add(task)
            try:
                with log_latency(logger, job_id, job_id=job_id):
                    await func(self.should_stop)
            except Exception as e:
                logger.error(
                    "Scheduled job failed",
                    extra={"job_id": job_id, "error": str(e)}
                )
            finally:
                self._in_flight.discard(task)
        return run

    def add_interval_job(self, func: JobFunc, seconds: int, job_id: str, name: Optional[str] = None) -> None:
        """Run `func` every `seconds`, never overlapping itself."""
        self._scheduler.add_job(
            self._wrap(job_id, func),
            "interval",
            seconds=seconds,
            id=job_id,
            name=name or job_id,
            misfire_grace_time=self._misfire_grace_time,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info("Interval job registered", extra={"job_id": job_id, "interval_seconds": seconds})

    def add_cron_job(
        self,
        func: JobFunc,
        job_id: str,
        day_of_week: str = "*",
        hour: int = 0,
        minute: int = 0,
        name: Optional[str] = None
    ) -> None:
        """Run `func` on a cron schedule (UTC)."""
        self._scheduler.add_job(
            self._wrap(job_id, func),
            "cron",
            day_of_week=day_of_week,
            hour=hour,
            minute=minute,
            timezone="UTC",
            id=job_id,
            name=name or job_id,
            misfire_grace_time=self._misfire_grace_time,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info(
            "Cron job registered",
            extra={"job_id": job_id, "day_of_week": day_of_week, "hour": hour, "minute": minute}
        )

    @property
    def job_ids(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self._running:
            logger.warning("Job scheduler already running")
            return

        self._stopping = False
        self._scheduler.start()
        self._running = True
        logger.info("Job scheduler started", extra={"jobs": self.job_ids})

    async def stop(self, timeout: Optional[float] = 30.0) -> None:
        """
        Stop the scheduler gracefully.

        Raises the stop signal, waits for in-flight runs to return, then
        shuts the scheduler down.
        """
        if not self._running:
            return

        self._stopping = True
        pending = set(self._in_flight)
        if pending:
            logger.info("Waiting for in-flight jobs", extra={"count": len(pending)})
            _, still_running = await asyncio.wait(pending, timeout=timeout)
            if still_running:
                logger.warning(
                    "Jobs still running at shutdown timeout",
                    extra={"count": len(still_running)}
                )

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Job scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running
