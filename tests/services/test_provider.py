"""Tests for the provider contract helpers."""

from pathlib import Path

import pytest

from devcontainer_cli.models.container import (
    ImageBuild,
    ImageReference,
    RunningContainer,
    VolumeSpec,
)
from devcontainer_cli.services.exceptions import ConfigurationError, ProviderError
from devcontainer_cli.services.provider import (
    container_identifier,
    plan_preparation,
    sanitize_name,
)


class TestSanitizeName:
    """Test cases for project slugs."""

    @pytest.mark.parametrize("value,expected", [
        ("Sample Project", "sample-project"),
        ("my_app.v2", "my_app.v2"),
        ("--Edge--", "edge"),
        ("café", "caf"),
        ("!!!", "devcontainer"),
    ])
    def test_sanitize(self, value, expected):
        assert sanitize_name(value) == expected


class TestContainerIdentifier:

    def test_prefers_name(self):
        assert container_identifier(RunningContainer(id="abc", name="dev")) == "dev"

    def test_falls_back_to_id(self):
        assert container_identifier(RunningContainer(id="abc")) == "abc"

    def test_requires_one(self):
        with pytest.raises(ProviderError, match="no identifier"):
            container_identifier(RunningContainer())


class TestPlanPreparation:
    """Test cases for plan_preparation."""

    def test_names_derived_from_project(self, make_config):
        """Test resource names follow the project slug."""
        preparation = plan_preparation(make_config(project_name="Sample Project", image_reference="alpine"))

        assert preparation.project_slug == "sample-project"
        assert preparation.container_name == "devcontainer-sample-project"
        assert preparation.networks == ["devcontainer-sample-project-network"]
        assert preparation.volumes == [
            VolumeSpec(name="devcontainer-sample-project-data", mount_path=Path("/workspaces/.devcontainer"))
        ]
        assert preparation.workspace_mount_path == Path("/workspaces/sample-project")
        assert preparation.image == ImageReference("alpine")

    def test_is_deterministic(self, make_config):
        config = make_config()
        assert plan_preparation(config) == plan_preparation(config)

    def test_container_workspace_folder_used(self, make_config):
        """Test an explicit container workspace path is mounted as given."""
        preparation = plan_preparation(make_config(container_workspace_folder=Path("/workspace/myproj")))
        assert preparation.workspace_mount_path == Path("/workspace/myproj")

    def test_dockerfile_build(self, make_config, workspace):
        """Test a Dockerfile becomes a build with its directory as context."""
        dockerfile = workspace / ".devcontainer" / "Dockerfile"
        dockerfile.write_text("FROM alpine\n")

        preparation = plan_preparation(make_config(image_reference=None, dockerfile=dockerfile))

        assert preparation.image == ImageBuild(
            dockerfile=dockerfile,
            build_context=dockerfile.parent,
            tag="devcontainer-myproj:latest",
        )

    def test_image_wins_over_dockerfile(self, make_config, workspace):
        preparation = plan_preparation(
            make_config(image_reference="alpine", dockerfile=workspace / "Dockerfile")
        )
        assert preparation.image == ImageReference("alpine")

    def test_missing_workspace(self, make_config, tmp_path):
        with pytest.raises(ConfigurationError, match="Workspace folder .* does not exist"):
            plan_preparation(make_config(workspace_folder=tmp_path / "missing"))

    def test_missing_dockerfile(self, make_config, workspace):
        with pytest.raises(ConfigurationError, match="Dockerfile .* does not exist"):
            plan_preparation(make_config(image_reference=None, dockerfile=workspace / "Dockerfile"))

    def test_no_image_source(self, make_config):
        with pytest.raises(ConfigurationError, match="either `image` or `dockerFile`"):
            plan_preparation(make_config(image_reference=None))
