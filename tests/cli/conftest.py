from unittest.mock import patch

import pytest

from devcontainer_cli.cli.main import cli


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from replacing the test session's log handlers."""
    with patch('devcontainer_cli.cli.main.configure_logging') as mock_configure:
        yield mock_configure


@pytest.fixture
def invoke(cli_runner, workspace):
    """Runs the CLI against the workspace fixture with the mock provider."""
    def _invoke(*args, provider="mock"):
        return cli_runner.invoke(
            cli,
            ["--project-root", str(workspace), "--provider", provider, *args],
        )

    return _invoke


@pytest.fixture
def fake_provider():
    """Replaces the provider the CLI builds with the given instance."""
    with patch('devcontainer_cli.cli.helpers.create_provider') as mock_create:
        def _use(provider):
            mock_create.return_value = provider
            return provider

        yield _use
