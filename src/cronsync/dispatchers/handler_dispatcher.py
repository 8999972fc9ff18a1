"""In-process scheduled handler dispatcher."""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional
import logging

from .base import BaseDispatcher, DispatchResult, ScheduledEvent

logger = logging.getLogger(__name__)


class HandlerDispatcher(BaseDispatcher):
    """Dispatcher calling an ``async def handler(event)`` in this process."""

    def __init__(self, handler: Callable[[ScheduledEvent], Awaitable[Any]]):
        self.handler = handler

    async def execute(self, scheduled_time: Optional[float], cron: Optional[str]) -> DispatchResult:
        started_at = datetime.now(timezone.utc)
        event = ScheduledEvent(scheduled_time, cron or "")

        try:
            await self.handler(event)
            await event.wait_all()
        except Exception as e:
            finished_at = datetime.now(timezone.utc)
            error_msg = f"Scheduled handler failed: {e}"
            logger.error(error_msg, exc_info=True)

            return DispatchResult(
                success=False,
                started_at=started_at,
                finished_at=finished_at,
                duration=(finished_at - started_at).total_seconds(),
                error=error_msg
            )

        finished_at = datetime.now(timezone.utc)
        return DispatchResult(
            success=True,
            started_at=started_at,
            finished_at=finished_at,
            duration=(finished_at - started_at).total_seconds()
        )
