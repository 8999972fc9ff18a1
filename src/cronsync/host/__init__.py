"""Host configuration and event system."""

from .core import EventHost
from .events import PluginState, ReloadEvent, SchedulerPlugin

__all__ = [
    "EventHost",
    "PluginState",
    "ReloadEvent",
    "SchedulerPlugin"
]
