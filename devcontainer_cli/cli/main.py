"""Main CLI entry point for devcontainer-cli."""

from pathlib import Path

import click

from .. import __version__
from ..core.constants import DEFAULT_DOCKER_PATH, DOCKER_PATH_ENV
from ..utils.log_setup import LOG_FORMATS, configure_logging
from .commands.build import build
from .commands.down import down
from .commands.exec import exec_command
from .commands.read_configuration import read_configuration
from .commands.run_user_commands import run_user_commands
from .commands.up import up
from .helpers import PROVIDER_NAMES, CommandContext


@click.group()
@click.option('-v', '--verbose', count=True, help='Increase log verbosity')
@click.option('--log-format', type=click.Choice(LOG_FORMATS), default='auto',
              envvar='DEVCONTAINER_LOG_FORMAT', show_default=True, help='Log output format')
@click.option('--project-root', type=click.Path(path_type=Path), help='Project root (defaults to the current directory)')
@click.option('--workspace-folder', type=click.Path(path_type=Path), help='Workspace folder to use instead of the project root')
@click.option('--config', 'config_path', type=click.Path(path_type=Path), help='Path to devcontainer.json')
@click.option('--provider', type=click.Choice(PROVIDER_NAMES), default='docker',
              envvar='DEVCONTAINER_PROVIDER', show_default=True, help='Container engine backend')
@click.option('--docker-path', default=DEFAULT_DOCKER_PATH, envvar=DOCKER_PATH_ENV,
              show_default=True, help='Docker compatible executable (name or path)')
@click.option('--timeout', type=float, help='Deadline in seconds for each engine command')
@click.pass_context
def cli(ctx, verbose, log_format, project_root, workspace_folder, config_path,
        provider, docker_path, timeout):
    """devcontainer - Manage development containers from devcontainer.json"""
    configure_logging(verbose, log_format)
    ctx.obj = CommandContext(
        project_root=project_root or Path.cwd(),
        workspace_folder=workspace_folder,
        config_path=config_path,
        provider_name=provider,
        docker_path=docker_path,
        timeout=timeout,
    )


@click.command()
def version():
    """Print the version"""
    click.echo(__version__)


# Register commands
cli.add_command(up)
cli.add_command(down)
cli.add_command(build)
cli.add_command(exec_command)
cli.add_command(run_user_commands)
cli.add_command(read_configuration)
cli.add_command(version)


if __name__ == '__main__':
    cli()
