"""HTTP scheduled event dispatcher."""

import httpx
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from ..config import settings
from .base import BaseDispatcher, DispatchResult

logger = logging.getLogger(__name__)

SCHEDULED_PATH = "/cdn-cgi/mf/scheduled"


class HTTPDispatcher(BaseDispatcher):
    """Dispatcher triggering a worker's scheduled handler over HTTP.

    Sends ``GET {base_url}/cdn-cgi/mf/scheduled?cron=...&time=...``, omitting
    ``time`` when no explicit trigger time is given so the worker uses now.
    """

    def __init__(self, base_url: str, timeout: Optional[int] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout

    async def execute(self, scheduled_time: Optional[float], cron: Optional[str]) -> DispatchResult:
        started_at = datetime.now(timezone.utc)
        url = f"{self.base_url}{SCHEDULED_PATH}"

        params: Dict[str, Any] = {}
        if cron:
            params["cron"] = cron
        if scheduled_time is not None:
            params["time"] = int(scheduled_time)

        try:
            async with httpx.AsyncClient() as client:
                logger.debug(f"Triggering scheduled event at {url} with {params}")
                response = await client.request("GET", url, params=params, timeout=self.timeout)

            finished_at = datetime.now(timezone.utc)
            success = 200 <= response.status_code < 300

            return DispatchResult(
                success=success,
                started_at=started_at,
                finished_at=finished_at,
                duration=(finished_at - started_at).total_seconds(),
                status=response.status_code,
                error=None if success else f"HTTP {response.status_code}"
            )

        except httpx.TimeoutException:
            finished_at = datetime.now(timezone.utc)
            error_msg = f"Request timeout after {self.timeout} seconds"
            logger.error(error_msg)

            return DispatchResult(
                success=False,
                started_at=started_at,
                finished_at=finished_at,
                duration=(finished_at - started_at).total_seconds(),
                error=error_msg
            )

        except Exception as e:
            finished_at = datetime.now(timezone.utc)
            error_msg = f"HTTP dispatch failed: {str(e)}"
            logger.error(error_msg)

            return DispatchResult(
                success=False,
                started_at=started_at,
                finished_at=finished_at,
                duration=(finished_at - started_at).total_seconds(),
                error=error_msg
            )
