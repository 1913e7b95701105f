import json
import logging

import pytest
from click.testing import CliRunner

from devcontainer_cli.models.config import ResolvedConfig

BASE_IMAGE = "mcr.microsoft.com/devcontainers/base:ubuntu"


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def workspace(tmp_path):
    """Creates an empty workspace directory named ``myproj``."""
    root = tmp_path / "myproj"
    (root / ".devcontainer").mkdir(parents=True)
    return root


@pytest.fixture
def write_config(workspace):
    """Writes a devcontainer.json into the workspace.

    Documents given as dicts are serialized as JSON, strings are written
    verbatim so tests can use comments and trailing commas.
    """
    def _write(document, directory=".devcontainer", name="devcontainer.json"):
        folder = workspace / directory if directory else workspace
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / name
        if isinstance(document, str):
            path.write_text(document)
        else:
            path.write_text(json.dumps(document, indent=2))
        return path

    return _write


@pytest.fixture
def make_config(workspace):
    """Builds a ResolvedConfig for the workspace fixture."""
    def _make(**overrides):
        values = dict(
            project_name="myproj",
            workspace_folder=workspace,
            config_path=workspace / ".devcontainer" / "devcontainer.json",
            image_reference=BASE_IMAGE,
        )
        values.update(overrides)
        return ResolvedConfig(**values)

    return _make


def _is_pytest_handler(handler):
    return type(handler).__module__.startswith("_pytest")


@pytest.fixture
def restore_root_logger():
    """Puts the root logger back the way it was after the test."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if not _is_pytest_handler(h)]
    level = root.level
    yield root
    for handler in list(root.handlers):
        if not _is_pytest_handler(handler):
            root.removeHandler(handler)
    for handler in saved:
        root.addHandler(handler)
    root.setLevel(level)
