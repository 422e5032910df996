# cronbot - Discord Cron Scheduler Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Cron Scheduler Module

Runs one asyncio task per registered job. Each task sleeps until the job's
trigger is next due, hands the job to the delivery callback, and repeats
until cancelled.

Triggers:
- CronTrigger: cron fields and croniter shortcuts ("0 9 * * 1-5", "@daily")
- IntervalTrigger: "@every 1h30m"
- RebootTrigger: "@reboot", fires once when registered
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

import pytz
from croniter import croniter

from analytics import track

from .errors import InvalidCronError, ValidationError
from .store import CronJobStore, ScheduledJob
from .validator import is_every_expression, parse_every_duration

logger = logging.getLogger("cronbot.cronjobs.scheduler")

DeliverCallback = Callable[[ScheduledJob], Awaitable[None]]


class Trigger:
    """Produces the delay until the next firing."""

    def next_delay(self, now: datetime) -> Optional[float]:
        """Seconds until the next firing, or None when the trigger is exhausted."""
        raise NotImplementedError


class CronTrigger(Trigger):
    def __init__(self, expression: str, tz: pytz.BaseTzInfo = pytz.UTC):
        self.expression = expression
        self.tz = tz
        self._last_fire: Optional[datetime] = None
        try:
            # Validate with croniter
            croniter(expression, datetime.now(tz))
        except (ValueError, KeyError) as e:
            raise InvalidCronError(expression, str(e)) from e

    def next_fire_time(self, now: datetime) -> datetime:
        # Never compute from before the last firing, so an early wakeup
        # can't fire the same slot twice
        start = now
        if self._last_fire is not None and self._last_fire > now:
            start = self._last_fire
        next_time = croniter(self.expression, start).get_next(datetime)
        if next_time.tzinfo is None:
            next_time = self.tz.localize(next_time)
        self._last_fire = next_time
        return next_time

    def next_delay(self, now: datetime) -> Optional[float]:
        next_time = self.next_fire_time(now)
        return max((next_time - now).total_seconds(), 0.0)


class IntervalTrigger(Trigger):
    def __init__(self, seconds: float):
        self.seconds = seconds

    def next_delay(self, now: datetime) -> Optional[float]:
        return self.seconds


class RebootTrigger(Trigger):
    def __init__(self):
        self._fired = False

    def next_delay(self, now: datetime) -> Optional[float]:
        if self._fired:
            return None
        self._fired = True
        return 0.0


class CronScheduler:
    """
    In-process scheduler for cron jobs.

    Registered triggers keep firing until cancelled with cancel() or the
    process exits. Nothing here is persisted; the job store is the source
    of truth and is replayed on startup.
    """

    def __init__(self, deliver: DeliverCallback, timezone: str = "UTC"):
        """
        Initialize the scheduler.

        Args:
            deliver: Async callback that sends a job's message
            timezone: IANA timezone cron fields are evaluated in
        """
        self.deliver = deliver
        self.tz = pytz.timezone(timezone)
        self._tasks: dict[int, asyncio.Task] = {}

    def build_trigger(self, expression: str) -> Trigger:
        """
        Build the trigger for an expression.

        Raises:
            InvalidCronError: If the expression can't drive a trigger
        """
        expr = expression.strip()
        if expr == "@reboot":
            return RebootTrigger()
        if is_every_expression(expr):
            try:
                return IntervalTrigger(parse_every_duration(expr))
            except ValidationError as e:
                raise InvalidCronError(expression, str(e)) from e
        return CronTrigger(expr, self.tz)

    def schedule(self, job: ScheduledJob, trigger: Optional[Trigger] = None) -> asyncio.Task:
        """
        Register a job so its message is sent every time its trigger fires.

        Must be called from within a running event loop. Scheduling an ID
        that is already active replaces the old trigger.

        Args:
            job: Persisted job (must have an ID)
            trigger: Pre-built trigger (built from job.cron_expression if None)

        Returns:
            The background task driving the job
        """
        if job.id is None:
            raise ValueError("Cannot schedule a job that has not been stored")

        if trigger is None:
            trigger = self.build_trigger(job.cron_expression)

        self.cancel(job.id)
        task = asyncio.create_task(self._run(job, trigger), name=f"cron-job-{job.id}")
        self._tasks[job.id] = task
        task.add_done_callback(lambda t, job_id=job.id: self._forget(job_id, t))

        logger.info(f"Scheduled cron job {job.id} ('{job.cron_expression}') -> channel {job.channel_id}")
        return task

    async def restore(self, store: CronJobStore) -> int:
        """
        Schedule every persisted job. Called once at startup.

        Jobs whose expression can't drive a trigger are logged and skipped.

        Returns:
            Number of jobs scheduled
        """
        jobs = await store.list_all()
        scheduled = 0
        for job in jobs:
            try:
                self.schedule(job)
                scheduled += 1
            except InvalidCronError as e:
                logger.warning(f"Skipping cron job {job.id}: {e}")

        logger.info(f"Restored {scheduled}/{len(jobs)} cron job(s)")
        return scheduled

    def cancel(self, job_id: int) -> bool:
        """
        Stop a job's trigger.

        Returns:
            True if an active trigger was cancelled
        """
        task = self._tasks.pop(job_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info(f"Cancelled trigger for cron job {job_id}")
        return True

    def is_scheduled(self, job_id: int) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    async def shutdown(self) -> None:
        """Cancel every trigger and wait for the tasks to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cron scheduler stopped ({len(tasks)} trigger(s) cancelled)")

    def _forget(self, job_id: int, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _run(self, job: ScheduledJob, trigger: Trigger) -> None:
        while True:
            delay = trigger.next_delay(datetime.now(self.tz))
            if delay is None:
                logger.debug(f"Trigger for cron job {job.id} exhausted")
                return
            await asyncio.sleep(delay)
            await self._fire(job)

    async def _fire(self, job: ScheduledJob) -> None:
        """Deliver one firing. Errors are logged and never stop the trigger."""
        try:
            await self.deliver(job)
            track(
                "cron_job_fired",
                "cron",
                channel_id=job.channel_id,
                guild_id=job.guild_id,
                properties={"job_id": job.id},
            )
        except Exception as e:
            logger.error(f"Failed to deliver cron job {job.id}: {e}", exc_info=True)
            track(
                "cron_delivery_error",
                "error",
                channel_id=job.channel_id,
                guild_id=job.guild_id,
                properties={
                    "job_id": job.id,
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )
