"""In-process host emitting reload events and dispatching scheduled events."""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config import settings
from ..dispatchers import BaseDispatcher, HTTPDispatcher
from .events import PluginState, ReloadEvent, SchedulerPlugin

logger = logging.getLogger(__name__)


class EventHost:
    """Host owning configuration, event listeners and the dispatcher."""

    def __init__(self, dispatcher: Optional[BaseDispatcher] = None,
                 crons: Optional[Iterable[str]] = None,
                 log: Optional[logging.Logger] = None):
        if dispatcher is None and settings.dispatch_url:
            dispatcher = HTTPDispatcher(settings.dispatch_url)

        self.dispatcher = dispatcher
        self.plugins = PluginState(scheduler=SchedulerPlugin(crons))
        self.log = log or logging.getLogger("cronsync.requests")
        self._listeners: Dict[str, List[Callable[[Any], Any]]] = defaultdict(list)

    def add_event_listener(self, event_type: str, listener: Callable[[Any], Any]):
        self._listeners[event_type].append(listener)

    def remove_event_listener(self, event_type: str, listener: Callable[[Any], Any]):
        """Remove a listener; removing one that isn't registered is a no-op."""
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    async def dispatch_event(self, event: ReloadEvent):
        """Deliver an event to its listeners one at a time, in registration order."""
        for listener in list(self._listeners.get(event.type, [])):
            result = listener(event)
            if inspect.isawaitable(result):
                await result

    def get_plugins(self) -> PluginState:
        """Return the live plugin state, not a copy.

        Events built from it read the newest crons when handled, so a late
        reload event applies the current configuration. The scheduler's
        identity check turns any repeat of an already applied set into a no-op.
        """
        return self.plugins

    async def reload(self, crons: Optional[Iterable[str]] = None):
        """Apply new cron expressions and emit a reload event.

        The event is emitted even when the expressions are unchanged, as any
        configuration reload would.
        """
        if crons is not None and self.plugins.scheduler.setup(crons):
            logger.info(f"Cron triggers updated: {list(self.plugins.scheduler.validated_crons)}")
        await self.dispatch_event(ReloadEvent(self.plugins))

    def dispatch_scheduled(self, scheduled_time: Optional[float] = None,
                           cron: Optional[str] = None) -> "asyncio.Task[Any]":
        """Start a scheduled event and return its wait-until task."""
        if self.dispatcher is None:
            raise RuntimeError("No dispatcher configured for scheduled events")
        return self.dispatcher.dispatch_scheduled(scheduled_time, cron)
