"""Run user commands command for devcontainer-cli."""

import click

from devcontainer_cli.cli.helpers import (
    get_command_context,
    get_runner,
    resolve_config,
    run_async,
    warn_unsupported,
)
from ...models.lifecycle import LifecyclePhase

TRIGGERS = {
    'post-create': LifecyclePhase.POST_CREATE,
    'post-attach': LifecyclePhase.POST_ATTACH,
}


@click.command(name='run-user-commands')
@click.option('--trigger', type=click.Choice(['init', *TRIGGERS]), required=True,
              help='Which hook to run')
def run_user_commands(trigger):
    """Run a lifecycle hook in the running devcontainer"""
    if trigger == 'init':
        warn_unsupported("--trigger init", "initializeCommand is not read from the configuration")
        return

    context = get_command_context()
    config = resolve_config(context)
    runner = get_runner(context)

    phase = TRIGGERS[trigger]
    ran = run_async(lambda: runner.run_user_commands(config, phase))
    if ran:
        click.echo(f"{phase} commands completed")
    else:
        click.echo(f"No {phase} command defined")
