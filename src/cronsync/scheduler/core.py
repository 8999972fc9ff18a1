"""Scheduler keeping cron timers in sync with the host configuration."""

import asyncio
import inspect
import logging
import time
from typing import Any, Dict, List, Optional, Set

from ..host import ReloadEvent
from ..log import log_response
from .timers import FireContext, ProviderSource, TimerHandle, TimerProvider, resolve_provider

logger = logging.getLogger(__name__)

# Never identical to a cron set handed out by the host
_UNSET = object()


class SchedulerError(Exception):
    """Raised when the scheduler is used in an invalid state."""


class Scheduler:
    """Runs a timer per configured cron expression, re-synced on every reload.

    Changes are detected by identity: the host must hand out a new cron
    sequence whenever its contents change and the same instance otherwise.
    """

    def __init__(self, host, provider: ProviderSource = None):
        self.host = host
        self._provider_source = provider
        self._owns_provider = provider is None
        self._provider: Optional[TimerProvider] = None
        self._provider_future: Optional["asyncio.Future[TimerProvider]"] = None

        self._previous_crons: Any = _UNSET
        self._tasks: List[TimerHandle] = []
        self._pending_logs: Set["asyncio.Task[None]"] = set()
        self._lock = asyncio.Lock()
        self._disposed = False

        self._reload_listener = self.reload
        host.add_event_listener("reload", self._reload_listener)

    @property
    def tasks(self) -> List[TimerHandle]:
        return list(self._tasks)

    async def start(self):
        """Install timers for the host's current configuration."""
        if self._disposed:
            raise SchedulerError("Scheduler has been disposed")

        plugins = self.host.get_plugins()
        if inspect.isawaitable(plugins):
            plugins = await plugins
        await self.reload(ReloadEvent(plugins))

    async def reload(self, event: ReloadEvent):
        """Replace all timers if the event carries a different cron set."""
        async with self._lock:
            if self._disposed:
                logger.debug("Scheduler disposed, ignoring reload")
                return

            crons = event.plugins.scheduler.validated_crons
            if crons is self._previous_crons:
                logger.debug("Cron triggers unchanged, ignoring reload")
                return
            self._previous_crons = crons

            self._destroy_tasks()
            if not crons:
                logger.info("No cron triggers configured")
                return

            provider = await self._get_provider()
            if self._disposed:
                return

            for expression in crons:
                self._tasks.append(provider.schedule(expression, self._fire, FireContext(expression)))

            logger.info(f"Scheduled {len(self._tasks)} cron trigger(s): {list(crons)}")

    async def _get_provider(self) -> TimerProvider:
        if self._provider is None:
            if self._provider_future is None:
                self._provider_future = asyncio.ensure_future(resolve_provider(self._provider_source))
            self._provider = await self._provider_future
        return self._provider

    async def _fire(self, context: FireContext) -> Optional["asyncio.Task[None]"]:
        """Dispatch one scheduled event and hand its completion to the log sink."""
        start = time.perf_counter()
        try:
            # Explicit trigger time unset, so the event is scheduled for now
            wait_until = self.host.dispatch_scheduled(None, context.expression)
        except Exception as e:
            logger.error(f"Failed to dispatch scheduled event for '{context.expression}': {e}", exc_info=True)
            return None

        task = asyncio.ensure_future(self._log_fire(start, context.expression, wait_until))
        self._pending_logs.add(task)
        task.add_done_callback(self._pending_logs.discard)
        return task

    async def _log_fire(self, start: float, expression: str, wait_until: Any):
        try:
            await log_response(
                self.host.log,
                start=start,
                method="SCHD",
                url=expression,
                wait_until=wait_until
            )
        except Exception as e:
            logger.error(f"Failed to log scheduled event for '{expression}': {e}", exc_info=True)

    def _destroy_tasks(self):
        if self._tasks:
            logger.info(f"Stopping {len(self._tasks)} cron trigger(s)")
        for task in self._tasks:
            task.destroy()
        self._tasks = []

    def get_status(self) -> Dict[str, Any]:
        """Get current scheduler status."""
        crons = [] if self._previous_crons is _UNSET else list(self._previous_crons or [])

        tasks = []
        for task in self._tasks:
            next_run = task.next_run_time
            tasks.append({
                "expression": task.expression,
                "next_run": next_run.isoformat() if next_run else None
            })

        return {
            "running": not self._disposed,
            "crons": crons,
            "tasks_count": len(tasks),
            "tasks": tasks
        }

    def dispose(self):
        """Stop listening for reloads and destroy all live timers."""
        self.host.remove_event_listener("reload", self._reload_listener)
        self._disposed = True
        self._destroy_tasks()

        if self._owns_provider and self._provider is not None:
            self._provider.shutdown()
            self._provider = None


async def start_scheduler(host, provider: ProviderSource = None) -> Scheduler:
    """Create a scheduler for ``host`` and install its initial timers."""
    scheduler = Scheduler(host, provider)
    await scheduler.start()
    return scheduler
