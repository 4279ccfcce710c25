"""
Exception types raised at the seams of the watch/notify pipeline.
"""

from __future__ import annotations


class BuildNotifyError(Exception):
    """Base class for buildnotify errors."""


class ConfigError(BuildNotifyError, ValueError):
    """Invalid configuration detected at startup (config, templates, notifier refs)."""


class WatchError(BuildNotifyError, RuntimeError):
    """Unrecoverable error while establishing a watch on the remote source."""
