"""
CLI — the command-line entry point for BuildNotify.

Commands:
    buildnotify run           — Watch builds and deliver notifications
    buildnotify check-config  — Validate and display the configuration
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from buildnotify import __version__
from buildnotify.errors import BuildNotifyError

console = Console()
logger = logging.getLogger("buildnotify")


def setup_logging(verbosity: int) -> None:
    """Map -v counts onto log levels: INFO by default, DEBUG with -v, HTTP traces with -vvv."""
    level = logging.DEBUG if verbosity >= 1 else logging.INFO
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    logging.getLogger("buildnotify").setLevel(level)
    if verbosity >= 3:
        logging.getLogger("httpx").setLevel(logging.DEBUG)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """BuildNotify — relay OpenShift build events to Flowdock."""
    pass


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


async def _serve(app, client) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            pass

    await client.connect()
    try:
        await app.run(stop)
    finally:
        await client.disconnect()


@main.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="config.yaml or the directory holding it")
@click.option("--server", default="", help="OpenShift API server URL")
@click.option("--token", default="", help="Bearer token for the API server")
@click.option("--namespace", "-n", default="", help="Default namespace for watchers without one")
@click.option("--insecure-skip-tls-verify", is_flag=True, help="Don't verify the API server certificate")
@click.option("--dry-run", is_flag=True, help="Print notifications instead of delivering them")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable)")
def run(
    config_path: Optional[Path],
    server: str,
    token: str,
    namespace: str,
    insecure_skip_tls_verify: bool,
    dry_run: bool,
    verbose: int,
) -> None:
    """Watch builds and deliver notifications until interrupted."""
    from buildnotify.app import Application
    from buildnotify.cluster.client import OpenShiftClient
    from buildnotify.core import load_config
    from buildnotify.notifications.channels.console import ConsoleChannel

    setup_logging(verbose)

    try:
        config = load_config(config_path)
        if server:
            config.cluster.server = server
        if token:
            config.cluster.token = token
        if namespace:
            config.cluster.namespace = namespace
        if insecure_skip_tls_verify:
            config.cluster.verify_tls = False

        client = OpenShiftClient.from_config(config.cluster)
        channel_factory = (lambda _cfg: ConsoleChannel(console)) if dry_run else None
        app = Application.from_config(config, client, client, channel_factory)
    except BuildNotifyError as exc:
        logger.critical("Failed to start: %s", exc)
        sys.exit(1)

    try:
        asyncio.run(_serve(app, client))
    except Exception as exc:
        logger.critical("Exiting: %s", exc)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Config check
# ---------------------------------------------------------------------------


@main.command("check-config")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="config.yaml or the directory holding it")
@click.option("-v", "--verbose", count=True)
def check_config(config_path: Optional[Path], verbose: int) -> None:
    """Validate the configuration: templates, watchers and notifier references."""
    from buildnotify.core import load_config
    from buildnotify.notifications.registry import NotifierRegistry
    from buildnotify.notifications.router import NotificationRouter

    setup_logging(verbose)

    try:
        config = load_config(config_path)
        registry = NotifierRegistry.from_config(config.notifiers)
        for name, watcher in config.builds_watchers.items():
            NotificationRouter(name, watcher.notifiers, registry)
    except BuildNotifyError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(1)

    watchers = Table(title="Builds watchers")
    watchers.add_column("Name", style="bold")
    watchers.add_column("Scope")
    watchers.add_column("Notifiers")
    watchers.add_column("Phases")
    for name, watcher in config.builds_watchers.items():
        scope = "all namespaces" if watcher.all_namespaces else (watcher.namespace or "<current>")
        phases = ", ".join(
            phase.value for phase, enabled in watcher.watch_for_build_phase.items() if enabled
        )
        watchers.add_row(name, scope, ", ".join(watcher.notifiers), phases)
    console.print(watchers)

    notifiers = Table(title="Notifiers")
    notifiers.add_column("Name", style="bold")
    notifiers.add_column("Source")
    notifiers.add_column("From")
    notifiers.add_column("Token")
    for name, notifier in config.notifiers.items():
        notifiers.add_row(
            name,
            notifier.source,
            f"{notifier.from_name} <{notifier.from_address}>",
            "[green]set[/green]" if notifier.token else "[red]missing[/red]",
        )
    console.print(notifiers)

    if not config.has_watchers():
        console.print("[red]No watchers have been defined in the configuration.[/red]")
        sys.exit(1)
    console.print("[green]>[/green] Configuration OK")
