"""Build command for devcontainer-cli."""

import click

from devcontainer_cli.cli.helpers import (
    get_command_context,
    get_runner,
    resolve_config,
    run_async,
    warn_unsupported,
)


@click.command()
@click.option('--no-cache', is_flag=True, help='Build without using the engine cache')
@click.option('--push', is_flag=True, help='Push the image after building')
def build(no_cache, push):
    """Build or pull the devcontainer image"""
    context = get_command_context()
    config = resolve_config(context)
    runner = get_runner(context)

    image = run_async(lambda: runner.build(config, no_cache=no_cache))
    click.echo(f"Image ready: {image}")

    if push:
        warn_unsupported("--push", "push the image with your container engine")
