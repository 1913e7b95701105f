"""Up command for devcontainer-cli."""

import click

from devcontainer_cli.cli.helpers import (
    get_command_context,
    get_runner,
    plan_rows,
    print_table,
    resolve_config,
    run_async,
    warn_unsupported,
)
from ...models.lifecycle import UpOptions


@click.command()
@click.option('--skip-post-create', is_flag=True, help='Do not run postCreateCommand')
@click.option('--skip-post-attach', is_flag=True, help='Do not run postAttachCommand')
@click.option('--attach', is_flag=True, help='Attach to the container once it is running')
@click.option('--dry-run', is_flag=True, help='Print the lifecycle plan without executing it')
def up(skip_post_create, skip_post_attach, attach, dry_run):
    """Create and start the devcontainer, then run its hooks"""
    context = get_command_context()
    config = resolve_config(context)

    options = UpOptions(
        skip_post_create_reason="skipped by --skip-post-create" if skip_post_create else None,
        skip_post_attach_reason="skipped by --skip-post-attach" if skip_post_attach else None,
    )

    runner = get_runner(context, show_progress=True)

    if dry_run:
        plan = runner.plan(config, options)
        print_table(["Phase", "Code", "Action", "Description"], plan_rows(plan))
        return

    outcome = run_async(lambda: runner.run_up(config, options))

    container = outcome.container
    click.echo(f"Devcontainer is ready: {container.name or container.id}")
    if container.id:
        click.echo(f"Container id: {container.id}")
    click.echo(f"Executed phases: {', '.join(str(p) for p in outcome.executed_phases)}")

    if attach:
        warn_unsupported("--attach", "interactive attach is not implemented; use 'devcontainer exec'")
