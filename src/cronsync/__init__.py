"""cronsync - cron timers kept in sync with a reloading host configuration."""

from .config import Settings, settings
from .dispatchers import BaseDispatcher, DispatchResult, HandlerDispatcher, HTTPDispatcher, ScheduledEvent
from .host import EventHost, PluginState, ReloadEvent, SchedulerPlugin
from .log import configure_logging, log_response
from .scheduler import (
    APSchedulerProvider,
    Scheduler,
    SchedulerError,
    TimerHandle,
    TimerProvider,
    start_scheduler
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "settings",
    "BaseDispatcher",
    "DispatchResult",
    "HandlerDispatcher",
    "HTTPDispatcher",
    "ScheduledEvent",
    "EventHost",
    "PluginState",
    "ReloadEvent",
    "SchedulerPlugin",
    "configure_logging",
    "log_response",
    "APSchedulerProvider",
    "Scheduler",
    "SchedulerError",
    "TimerHandle",
    "TimerProvider",
    "start_scheduler"
]
