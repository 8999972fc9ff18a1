"""Cron scheduler core functionality."""

from .core import Scheduler, SchedulerError, start_scheduler
from .timers import (
    APSchedulerProvider,
    FireContext,
    TimerHandle,
    TimerProvider,
    resolve_provider
)

__all__ = [
    "Scheduler",
    "SchedulerError",
    "start_scheduler",
    "APSchedulerProvider",
    "FireContext",
    "TimerHandle",
    "TimerProvider",
    "resolve_provider"
]
