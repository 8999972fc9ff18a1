"""Plugin state and reload events emitted by the host."""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple


class SchedulerPlugin:
    """Holds the validated cron expressions of the current configuration.

    ``validated_crons`` keeps returning the same tuple instance until
    ``setup()`` receives different expressions, so consumers can detect a
    change with an identity check.
    """

    def __init__(self, crons: Optional[Iterable[str]] = None):
        self._validated_crons: Tuple[str, ...] = ()
        if crons:
            self.setup(crons)

    @property
    def validated_crons(self) -> Sequence[str]:
        return self._validated_crons

    def setup(self, crons: Optional[Iterable[str]]) -> bool:
        """Store new cron expressions.

        Returns:
            True if the expressions changed and a new tuple was stored
        """
        new_crons = tuple(crons or ())
        if new_crons == self._validated_crons:
            return False
        self._validated_crons = new_crons
        return True


@dataclass
class PluginState:
    """Snapshot of the host's plugins."""
    scheduler: SchedulerPlugin = field(default_factory=SchedulerPlugin)


class ReloadEvent:
    """Emitted by the host whenever its configuration is reloaded."""

    type = "reload"

    def __init__(self, plugins: PluginState):
        self.plugins = plugins

    def __repr__(self) -> str:
        return f"ReloadEvent(crons={list(self.plugins.scheduler.validated_crons)!r})"
