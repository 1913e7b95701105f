"""Read configuration command for devcontainer-cli."""

import json

import click

from devcontainer_cli.cli.helpers import get_command_context, resolve_config


@click.command(name='read-configuration')
def read_configuration():
    """Print the resolved configuration as JSON"""
    context = get_command_context()
    config = resolve_config(context)
    click.echo(json.dumps(config.model_dump(mode="json"), indent=2))
