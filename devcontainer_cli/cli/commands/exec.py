"""Exec command for devcontainer-cli."""

import sys

import click

from devcontainer_cli.cli.helpers import (
    fail,
    get_command_context,
    get_runner,
    resolve_config,
    run_async,
    warn_unsupported,
)


@click.command(name='exec', context_settings=dict(ignore_unknown_options=True))
@click.option('--id-label', help='Select the container by label (not supported)')
@click.argument('command', nargs=-1, required=True, type=click.UNPROCESSED)
def exec_command(id_label, command):
    """Run a command inside the running devcontainer"""
    if id_label:
        warn_unsupported("--id-label", "the container is always selected from the configuration")

    context = get_command_context()
    config = resolve_config(context)
    runner = get_runner(context)

    async def _exec():
        container = await runner.container_for(config)
        return await runner.exec(container, list(command))

    result = run_async(_exec)

    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, nl=False, err=True)
    if result.exit_code != 0:
        if result.exit_code < 0:
            fail(f"Command terminated abnormally ({result.exit_code})")
        sys.exit(result.exit_code)
