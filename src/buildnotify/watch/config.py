"""
Configuration model for build watchers.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from buildnotify.cluster.models import BuildPhase
from buildnotify.notifications.config import DEFAULT_NOTIFIER_NAME

# Phases forwarded when a watcher doesn't say otherwise.
DEFAULT_PHASE_TABLE: dict[BuildPhase, bool] = {
    BuildPhase.CANCELLED: False,
    BuildPhase.COMPLETE: True,
    BuildPhase.ERROR: True,
    BuildPhase.FAILED: True,
    BuildPhase.NEW: False,
    BuildPhase.PENDING: False,
    BuildPhase.RUNNING: False,
}


class BuildsWatcherConfig(BaseModel):
    """Configuration for a single builds watcher."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    namespace: str = ""
    all_namespaces: bool = False
    notifiers: list[str] = Field(default_factory=list)
    watch_for_build_phase: dict[BuildPhase, bool] = Field(default_factory=dict)

    def set_defaults(self) -> None:
        """Fill in notifier names and missing phase entries.

        Explicit entries in the phase table are kept as they are.
        """
        if not self.notifiers:
            self.notifiers = [DEFAULT_NOTIFIER_NAME]
        for phase, enabled in DEFAULT_PHASE_TABLE.items():
            self.watch_for_build_phase.setdefault(phase, enabled)

    def describe(self) -> str:
        scope = "all namespaces" if self.all_namespaces else f"namespace {self.namespace or '<current>'}"
        phases = ", ".join(
            f"{phase.value}={'on' if enabled else 'off'}"
            for phase, enabled in sorted(self.watch_for_build_phase.items(), key=lambda kv: kv[0].value)
        )
        return f"{scope} → {self.notifiers} [{phases}]"
