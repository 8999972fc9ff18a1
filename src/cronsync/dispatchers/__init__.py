"""Dispatchers delivering scheduled events to application code."""

from .base import BaseDispatcher, DispatchResult, ScheduledEvent
from .handler_dispatcher import HandlerDispatcher
from .http_dispatcher import HTTPDispatcher

__all__ = [
    "BaseDispatcher",
    "DispatchResult",
    "ScheduledEvent",
    "HandlerDispatcher",
    "HTTPDispatcher"
]
