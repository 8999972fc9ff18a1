"""Base dispatcher class and scheduled event types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
import asyncio
import time
from typing import Any, Awaitable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Result of dispatching one scheduled event."""
    success: bool
    started_at: datetime
    finished_at: datetime
    duration: float  # seconds
    status: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration": self.duration,
            "status": self.status,
            "error": self.error
        }


class ScheduledEvent:
    """Event passed to a scheduled handler."""

    def __init__(self, scheduled_time: Optional[float] = None, cron: str = ""):
        # Milliseconds since the epoch, like a worker's scheduledTime
        self.scheduled_time = scheduled_time if scheduled_time is not None else time.time() * 1000
        self.cron = cron
        self._wait_until: List[Awaitable[Any]] = []

    def wait_until(self, awaitable: Awaitable[Any]):
        """Extend the event's lifetime until ``awaitable`` completes."""
        self._wait_until.append(awaitable)

    async def wait_all(self) -> List[Any]:
        return await asyncio.gather(*self._wait_until)


class BaseDispatcher(ABC):
    """Base class for scheduled event dispatchers."""

    def dispatch_scheduled(self, scheduled_time: Optional[float] = None,
                           cron: Optional[str] = None) -> "asyncio.Task[DispatchResult]":
        """Start dispatching a scheduled event without waiting for it.

        Args:
            scheduled_time: Explicit trigger time in epoch milliseconds, or None for now
            cron: Cron expression that triggered the event

        Returns:
            Task resolving to the DispatchResult once all work is done
        """
        return asyncio.ensure_future(self.execute(scheduled_time, cron))

    @abstractmethod
    async def execute(self, scheduled_time: Optional[float], cron: Optional[str]) -> DispatchResult:
        """Run the scheduled event to completion."""
        pass
