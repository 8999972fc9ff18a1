"""Timer-fire provider turning cron expressions into recurring fires."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
import inspect
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional, Union

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FireContext:
    """State bound to one timer and passed to its fire callback."""
    expression: str


FireCallback = Callable[[FireContext], Awaitable[Any]]


class TimerHandle(ABC):
    """A live recurring timer for one cron expression."""

    def __init__(self, expression: str):
        self.expression = expression
        self.destroyed = False

    def destroy(self):
        """Stop future fires. Fires already running are left to complete."""
        if self.destroyed:
            return
        self.destroyed = True
        self._stop()

    @abstractmethod
    def _stop(self):
        pass

    @property
    def next_run_time(self) -> Optional[datetime]:
        return None


class TimerProvider(ABC):
    """Creates timers firing on cron schedules."""

    @abstractmethod
    def schedule(self, expression: str, on_fire: FireCallback,
                 context: FireContext) -> TimerHandle:
        """Call ``on_fire(context)`` at every occurrence of ``expression``."""
        pass

    def shutdown(self):
        pass


class APSchedulerTimerHandle(TimerHandle):
    """Timer backed by one APScheduler job."""

    def __init__(self, expression: str, scheduler: AsyncIOScheduler, job_id: str):
        super().__init__(expression)
        self.scheduler = scheduler
        self.job_id = job_id

    def _stop(self):
        try:
            self.scheduler.remove_job(self.job_id)
        except JobLookupError:
            logger.debug(f"Job {self.job_id} for '{self.expression}' already removed")

    @property
    def next_run_time(self) -> Optional[datetime]:
        if self.destroyed:
            return None
        job = self.scheduler.get_job(self.job_id)
        # Pending jobs of a scheduler that hasn't started have no run time yet
        return getattr(job, "next_run_time", None) if job else None


class APSchedulerProvider(TimerProvider):
    """Timer provider using an in-memory APScheduler AsyncIOScheduler.

    The scheduler is started on the first ``schedule()`` call, which must
    happen while the event loop is running.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self.timezone = settings.scheduler_timezone
        if scheduler is None:
            scheduler = AsyncIOScheduler(
                jobstores={'default': MemoryJobStore()},
                executors={'default': AsyncIOExecutor()},
                job_defaults=settings.scheduler_job_defaults,
                timezone=self.timezone
            )
        self.scheduler = scheduler
        self._shut_down = False

    def schedule(self, expression: str, on_fire: FireCallback,
                 context: FireContext) -> APSchedulerTimerHandle:
        if self._shut_down:
            raise RuntimeError("Timer provider has been shut down")
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Timer scheduler started")

        trigger = CronTrigger.from_crontab(expression, timezone=self.timezone)
        job = self.scheduler.add_job(
            func=on_fire,
            trigger=trigger,
            args=[context],
            id=f"cron_{uuid.uuid4().hex}",
            name=expression
        )
        logger.debug(f"Added timer job {job.id} for '{expression}'")
        return APSchedulerTimerHandle(expression, self.scheduler, job.id)

    def shutdown(self):
        # AsyncIOScheduler may only queue its shutdown on the loop, so running
        # stays True until the next iteration
        if self._shut_down or not self.scheduler.running:
            return
        self._shut_down = True
        self.scheduler.shutdown(wait=False)
        logger.info("Timer scheduler shut down")


ProviderSource = Union[TimerProvider, Awaitable[TimerProvider], None]


async def resolve_provider(provider: ProviderSource = None) -> TimerProvider:
    """Resolve a provider given directly, as an awaitable, or None for the default."""
    if provider is None:
        return APSchedulerProvider()
    if inspect.isawaitable(provider):
        provider = await provider
    return provider
