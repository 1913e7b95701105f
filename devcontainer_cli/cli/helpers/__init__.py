"""CLI Helper Functions for devcontainer-cli.

This module provides reusable helper functions for CLI commands to reduce
code duplication and standardize behavior across all commands.

The helpers provide:
- The shared command context built from global options
- Provider construction
- Configuration resolution with consistent error reporting
- Running coroutines with uniform error handling
- Table formatting for plans
"""

import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import click
from rich.console import Console
from tabulate import tabulate

from devcontainer_cli.core.config_resolver import resolve
from devcontainer_cli.core.constants import DEFAULT_DOCKER_PATH
from devcontainer_cli.core.devcontainer_runner import DevcontainerRunner
from devcontainer_cli.models.config import ConfigOverrides, ConfigSource, ResolvedConfig
from devcontainer_cli.models.lifecycle import LifecycleEvent, LifecyclePlan
from devcontainer_cli.services import (
    DevcontainerError,
    DockerApiProvider,
    DockerCliProvider,
    MockProvider,
    Provider,
)

T = TypeVar("T")

PROVIDER_NAMES = ("docker", "docker-api", "mock")

console = Console(stderr=True)


@dataclass
class CommandContext:
    """Global options shared by every command."""

    project_root: Path
    workspace_folder: Optional[Path] = None
    config_path: Optional[Path] = None
    provider_name: str = "docker"
    docker_path: str = DEFAULT_DOCKER_PATH
    timeout: Optional[float] = None

    def config_source(self) -> ConfigSource:
        """Explicit --config wins, otherwise search the workspace."""
        if self.config_path is not None:
            return ConfigSource.explicit_file(self.config_path)
        return ConfigSource.workspace(self.workspace_folder or self.project_root)

    def config_overrides(self) -> ConfigOverrides:
        return ConfigOverrides(workspace_folder=self.workspace_folder)


def get_command_context() -> CommandContext:
    """Get the context created by the top-level group."""
    ctx = click.get_current_context()
    obj = ctx.find_object(CommandContext)
    if obj is None:
        obj = CommandContext(project_root=Path.cwd())
    return obj


def create_provider(name: str, docker_path: str = DEFAULT_DOCKER_PATH,
                    timeout: Optional[float] = None) -> Provider:
    """Build the provider selected with --provider.

    Args:
        name: One of ``docker``, ``docker-api`` or ``mock``
        docker_path: Engine executable for the docker provider
        timeout: Per-command deadline in seconds
    """
    if name == "docker":
        return DockerCliProvider(docker_path=docker_path, timeout=timeout)
    if name == "docker-api":
        if timeout is not None:
            return DockerApiProvider(timeout=timeout)
        return DockerApiProvider()
    if name == "mock":
        return MockProvider()
    raise click.BadParameter(f"Unknown provider '{name}'", param_hint="--provider")


def print_event(event: LifecycleEvent) -> None:
    """Show executor progress on stderr."""
    if event.status == "started":
        console.print(f"[bold cyan]>[/] {event.phase}")
    elif event.status == "skipped":
        console.print(f"[yellow]-[/] {event.phase} skipped ({event.detail.get('reason')})")


def get_runner(context: CommandContext, show_progress: bool = False) -> DevcontainerRunner:
    provider = create_provider(context.provider_name, context.docker_path, context.timeout)
    return DevcontainerRunner(provider, event_sink=print_event if show_progress else None)


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def resolve_config(context: CommandContext) -> ResolvedConfig:
    """Resolve the configuration, exiting with an error message on failure."""
    try:
        return resolve(context.config_source(), context.config_overrides())
    except DevcontainerError as e:
        fail(str(e))


def run_async(factory: Callable[[], Awaitable[T]]) -> T:
    """Run a coroutine, turning devcontainer errors into a clean exit.

    Args:
        factory: Zero-argument callable returning the awaitable
    """
    try:
        return asyncio.run(factory())
    except DevcontainerError as e:
        fail(str(e))


def plan_rows(plan: LifecyclePlan) -> List[List[Any]]:
    rows = []
    for step in plan.steps:
        action = step.action.kind.value if step.action else ""
        rows.append([str(step.phase), step.code, action, step.message])
    return rows


def print_table(headers: list[str], rows: list[list[Any]],
                tablefmt: str = "simple") -> None:
    """Print a table with project-wide defaults.

    Args:
        headers: Table headers
        rows: Table rows
        tablefmt: Table format (default: "simple")
    """
    table_str = tabulate(rows, headers=headers, tablefmt=tablefmt)
    click.echo(table_str)


def warn_unsupported(flag: str, reason: str) -> None:
    click.echo(f"Warning: {flag} is not supported: {reason}", err=True)


# Re-export commonly used functions for convenience
__all__ = [
    'CommandContext',
    'PROVIDER_NAMES',
    'get_command_context',
    'create_provider',
    'get_runner',
    'fail',
    'resolve_config',
    'run_async',
    'plan_rows',
    'print_event',
    'print_table',
    'warn_unsupported',
]
