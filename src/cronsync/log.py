"""Logging setup and the request/response log sink for scheduled events."""

import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Optional

from .config import Settings, settings as default_settings
from .dispatchers.base import DispatchResult

logger = logging.getLogger(__name__)


def configure_logging(settings: Optional[Settings] = None):
    """Configure root logging from settings."""
    settings = settings or default_settings

    handlers = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
        handlers=handlers
    )


async def log_response(
    log: logging.Logger,
    start: float,
    method: str,
    url: str,
    status: Optional[int] = None,
    wait_until: Optional[Awaitable[Any]] = None,
) -> None:
    """Log a completed request once its outstanding work has finished.

    Args:
        log: Logger to write the entry to
        start: ``time.perf_counter()`` value taken when the request started
        method: Request method, ``"SCHD"`` for scheduled events
        url: Request URL, or the cron expression for scheduled events
        status: Response status, if already known
        wait_until: Outstanding work to wait for before logging

    A failed ``wait_until`` is logged at ERROR and never re-raised.
    """
    error = None
    if wait_until is not None:
        try:
            result = await wait_until
        except Exception as e:
            error = str(e) or e.__class__.__name__
        else:
            if isinstance(result, DispatchResult):
                if status is None:
                    status = result.status
                if not result.success:
                    error = result.error or "dispatch failed"

    elapsed = (time.perf_counter() - start) * 1000
    parts = [method, url]
    if status is not None:
        parts.append(str(status))
    message = f"{' '.join(parts)} ({elapsed:.2f}ms)"

    if error:
        log.error(f"{message}: {error}")
    else:
        log.info(message)
