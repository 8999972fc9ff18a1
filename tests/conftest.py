"""Shared test fixtures."""

import pytest
from typing import List
from unittest.mock import Mock

from cronsync.host import PluginState, ReloadEvent
from cronsync.scheduler import FireContext, TimerHandle, TimerProvider


class FakeTimerHandle(TimerHandle):
    def __init__(self, provider, expression, on_fire, context):
        super().__init__(expression)
        self.provider = provider
        self.on_fire = on_fire
        self.context = context
        self.stop_count = 0

    def _stop(self):
        self.stop_count += 1
        self.provider.destroyed.append(self.expression)


class FakeTimerProvider(TimerProvider):
    """Records timers instead of running them."""

    def __init__(self, reject=()):
        self.reject = set(reject)
        self.created: List[str] = []
        self.destroyed: List[str] = []
        self.handles: List[FakeTimerHandle] = []
        self.shutdown_count = 0

    def schedule(self, expression, on_fire, context):
        if expression in self.reject:
            raise ValueError(f"Invalid cron expression: {expression}")
        handle = FakeTimerHandle(self, expression, on_fire, context)
        self.created.append(expression)
        self.handles.append(handle)
        return handle

    def live(self) -> List[FakeTimerHandle]:
        return [handle for handle in self.handles if not handle.destroyed]

    async def fire(self, expression):
        """Fire every live timer for ``expression`` and return the callback results."""
        return [await handle.on_fire(handle.context)
                for handle in self.live() if handle.expression == expression]

    def shutdown(self):
        self.shutdown_count += 1


def make_event(crons) -> ReloadEvent:
    """Reload event whose plugin hands out exactly ``crons``."""
    return ReloadEvent(PluginState(scheduler=Mock(validated_crons=crons)))


@pytest.fixture
def provider():
    return FakeTimerProvider()


@pytest.fixture
def host():
    host = Mock()
    host.log = Mock()
    return host
