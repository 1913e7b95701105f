"""Down command for devcontainer-cli."""

import click

from devcontainer_cli.cli.helpers import (
    get_command_context,
    get_runner,
    resolve_config,
    run_async,
)
from ...models.container import CleanupOptions


@click.command()
@click.option('--remove-volumes', is_flag=True, help='Also remove the devcontainer volumes')
@click.option('--remove-unknown', is_flag=True, help='Also remove orphaned resources (not implemented)')
def down(remove_volumes, remove_unknown):
    """Stop and remove the devcontainer"""
    context = get_command_context()
    config = resolve_config(context)
    runner = get_runner(context)

    options = CleanupOptions(remove_volumes=remove_volumes, remove_unknown=remove_unknown)
    run_async(lambda: runner.run_down(config, options))

    click.echo(f"Devcontainer for {config.project_name} removed")
