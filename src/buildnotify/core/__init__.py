"""
Core configuration for BuildNotify.

Provides:
- Configuration models (AppConfig, ClusterConfig)
- Config loading from YAML plus environment overrides
- Defaulting applied once, after loading
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from buildnotify.errors import ConfigError
from buildnotify.notifications.config import DEFAULT_NOTIFIER_NAME, FlowdockNotifierConfig
from buildnotify.watch.config import BuildsWatcherConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILE_NAME = "config.yaml"
CONFIG_PATH_ENV = "CONFIG_PATH"

_TRUE = {"1", "t", "true", "y", "yes", "on"}
_FALSE = {"0", "f", "false", "n", "no", "off"}


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


class ClusterConfig(BaseModel):
    """Connection settings for the OpenShift API server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    server: str = ""
    token: str = ""
    namespace: str = ""
    verify_tls: bool = True
    public_url: str = ""
    log_tail_lines: int = 50


class AppConfig(BaseModel):
    """Main configuration: named watchers, named notifiers, cluster access."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    builds_watchers: dict[str, BuildsWatcherConfig] = Field(default_factory=dict)
    notifiers: dict[str, FlowdockNotifierConfig] = Field(default_factory=dict)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)

    def has_watchers(self) -> bool:
        return len(self.builds_watchers) > 0

    def has_notifiers(self) -> bool:
        return len(self.notifiers) > 0

    def set_from_env(self, environ: Optional[dict[str, str]] = None) -> None:
        """Apply the environment-variable overrides on top of the loaded file."""
        env = os.environ if environ is None else environ

        default = self.notifiers.setdefault(DEFAULT_NOTIFIER_NAME, FlowdockNotifierConfig())
        for var, field in (
            ("NOTIFIERS_DEFAULT_TOKEN", "token"),
            ("NOTIFIERS_DEFAULT_SOURCE", "source"),
            ("NOTIFIERS_DEFAULT_FROM_NAME", "from_name"),
            ("NOTIFIERS_DEFAULT_FROM_ADDRESS", "from_address"),
        ):
            if env.get(var):
                setattr(default, field, env[var])

        if _env_flag(env, "ENABLE_DEFAULT_BUILDS_WATCHER"):
            self.builds_watchers.setdefault(
                "default",
                BuildsWatcherConfig(namespace=env.get("DEFAULT_BUILDS_WATCHER_NAMESPACE", "")),
            )
        if _env_flag(env, "ENABLE_ALL_BUILDS_WATCHER"):
            self.builds_watchers.setdefault("all", BuildsWatcherConfig(all_namespaces=True))

        for var, field in (
            ("OPENSHIFT_SERVER", "server"),
            ("OPENSHIFT_TOKEN", "token"),
            ("OPENSHIFT_NAMESPACE", "namespace"),
        ):
            if env.get(var):
                setattr(self.cluster, field, env[var])

    def set_defaults(self) -> None:
        for notifier in self.notifiers.values():
            notifier.set_defaults()
        for watcher in self.builds_watchers.values():
            watcher.set_defaults()

    def describe(self) -> str:
        lines = [
            f"AppConfig with {len(self.builds_watchers)} Builds Watchers "
            f"and {len(self.notifiers)} Notifiers"
        ]
        for name, watcher in self.builds_watchers.items():
            lines.append(f"  - Build Watcher {name}: {watcher.describe()}")
        for name, notifier in self.notifiers.items():
            lines.append(f"  - Notifier {name}: {notifier.describe()}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def _env_flag(env: Any, name: str) -> bool:
    raw = env.get(name, "")
    if not raw:
        return False
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name}: invalid boolean {raw!r}")


def find_config_file(path: Optional[Path] = None) -> Optional[Path]:
    """Locate config.yaml: explicit path, then $CONFIG_PATH, then the cwd.

    An explicit path that doesn't exist is an error; otherwise a missing
    file returns None.
    """
    if path is not None:
        explicit = path / CONFIG_FILE_NAME if path.is_dir() else path
        if not explicit.is_file():
            raise ConfigError(f"config file not found: {explicit}")
        return explicit

    candidates: list[Path] = []
    if os.getenv(CONFIG_PATH_ENV):
        candidates.append(Path(os.environ[CONFIG_PATH_ENV]) / CONFIG_FILE_NAME)
    candidates.append(Path.cwd() / CONFIG_FILE_NAME)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path] = None, environ: Optional[dict[str, str]] = None) -> AppConfig:
    """Load, override from the environment, then default the configuration."""
    config_file = find_config_file(path)
    data: dict[str, Any] = {}
    if config_file is None:
        logger.warning(
            "Failed to find %s, falling back to environment variable defined configuration...",
            CONFIG_FILE_NAME,
        )
    else:
        logger.info("Loading configuration from %s", config_file)
        try:
            data = yaml.safe_load(config_file.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{config_file}: {exc}") from exc

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    logger.debug("Loaded configuration is %s", config.describe())
    config.set_from_env(environ)
    config.set_defaults()
    logger.debug(
        "Full configuration (post set-from-env / set-defaults) is %s", config.describe()
    )
    return config


__all__ = [
    "CONFIG_FILE_NAME",
    "CONFIG_PATH_ENV",
    "AppConfig",
    "BuildsWatcherConfig",
    "ClusterConfig",
    "FlowdockNotifierConfig",
    "find_config_file",
    "load_config",
]
