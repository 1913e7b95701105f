"""Tests for configuration resolution."""

from pathlib import Path

import pytest

from devcontainer_cli.core.config_resolver import (
    ConfigResolver,
    parse_forward_port,
    resolve,
    substitute_placeholders,
    validate_document,
)
from devcontainer_cli.models.config import (
    ConfigOverrides,
    ConfigSource,
    ForwardPort,
    ForwardPortObject,
    PortProtocol,
)
from devcontainer_cli.services.exceptions import ConfigurationError


class TestParseForwardPort:
    """Test cases for forwardPorts normalization."""

    def test_integer_forwards_same_port(self):
        """Test a bare integer maps to the same local and container port."""
        port = parse_forward_port(3000)
        assert port == ForwardPort(local_port=3000, container_port=3000, protocol=PortProtocol.TCP)

    def test_local_and_container_string(self):
        """Test 'L:C' is split into local and container ports."""
        port = parse_forward_port("4000:9229")
        assert port.local_port == 4000
        assert port.container_port == 9229
        assert port.protocol == PortProtocol.TCP

    def test_single_number_string(self):
        """Test a string without a colon is used for both sides."""
        port = parse_forward_port(" 8080 ")
        assert port.local_port == 8080
        assert port.container_port == 8080

    def test_object_taken_verbatim(self):
        """Test detailed entries keep their protocol."""
        entry = ForwardPortObject(localPort=5000, containerPort=5001, protocol="udp")
        port = parse_forward_port(entry)
        assert port == ForwardPort(local_port=5000, container_port=5001, protocol=PortProtocol.UDP)

    def test_empty_string_rejected(self):
        """Test an empty entry is reported."""
        with pytest.raises(ConfigurationError, match="Invalid forward port value '': value must not be empty"):
            parse_forward_port("")

    def test_blank_string_rejected(self):
        """Test a whitespace-only entry is reported."""
        with pytest.raises(ConfigurationError, match="must not be empty"):
            parse_forward_port("   ")

    def test_non_numeric_rejected(self):
        """Test a non-numeric entry names the offending value."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_forward_port("abc")
        assert "'abc'" in str(exc_info.value)
        assert "container port" in str(exc_info.value)

    def test_non_numeric_local_part(self):
        """Test the local side is validated too."""
        with pytest.raises(ConfigurationError, match="local port: 'web' is not a number"):
            parse_forward_port("web:3000")

    def test_container_checked_before_local(self):
        """Test the container side is reported first when both are bad."""
        with pytest.raises(ConfigurationError, match="container port"):
            parse_forward_port("x:y")

    def test_out_of_range(self):
        """Test ports above 65535 are rejected."""
        with pytest.raises(ConfigurationError, match="70000 is out of range"):
            parse_forward_port("70000")

    def test_negative_string_rejected(self):
        """Test signs are not accepted."""
        with pytest.raises(ConfigurationError, match="is not a number"):
            parse_forward_port("-1")


class TestSubstitutePlaceholders:
    """Test cases for workspace placeholder substitution."""

    def test_basename(self):
        """Test the basename placeholder."""
        assert substitute_placeholders(
            "/workspace/${localWorkspaceFolderBasename}", Path("/home/dev/myproj")
        ) == "/workspace/myproj"

    def test_full_path(self):
        """Test the full path placeholder."""
        assert substitute_placeholders(
            "${localWorkspaceFolder}/sub", Path("/home/dev/myproj")
        ) == "/home/dev/myproj/sub"

    def test_no_placeholders(self):
        """Test plain values are unchanged."""
        assert substitute_placeholders("nested/project", Path("/home/dev/myproj")) == "nested/project"


class TestValidateDocument:
    """Test cases for schema validation."""

    def test_valid_document(self, tmp_path):
        """Test a well-formed document passes."""
        validate_document({"image": "alpine", "forwardPorts": [3000]}, tmp_path / "devcontainer.json")

    def test_errors_are_aggregated(self, tmp_path):
        """Test every violation is listed in one error."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_document(
                {"image": "alpine", "name": 5, "forwardPorts": [True]},
                tmp_path / "devcontainer.json",
            )
        message = str(exc_info.value)
        assert message.startswith("Invalid devcontainer.json")
        assert "name:" in message
        assert "forwardPorts/0:" in message

    def test_image_and_dockerfile_together_accepted(self, tmp_path):
        """Test the overlapping root branches alone do not reject a document."""
        validate_document({"image": "alpine", "dockerFile": "Dockerfile"}, tmp_path / "devcontainer.json")

    def test_overlap_does_not_hide_other_errors(self, tmp_path):
        """Test other violations still fail when root branches overlap."""
        with pytest.raises(ConfigurationError, match="name:"):
            validate_document(
                {"image": "alpine", "dockerFile": "Dockerfile", "name": 5},
                tmp_path / "devcontainer.json",
            )

    def test_non_object_document(self, tmp_path):
        """Test a document that is not an object is rejected."""
        with pytest.raises(ConfigurationError, match="<root>"):
            validate_document(["image"], tmp_path / "devcontainer.json")


class TestConfigResolver:
    """Test cases for ConfigResolver."""

    def test_resolve_basic_document(self, workspace, write_config):
        """Test resolving a document in .devcontainer/."""
        config_path = write_config({
            "name": "Sample",
            "image": "mcr.microsoft.com/devcontainers/base:ubuntu",
            "forwardPorts": [3000, "4000:9229", {"localPort": 5000, "containerPort": 5001, "protocol": "udp"}],
            "features": {"ghcr.io/devcontainers/features/node:1": {"version": "20"}},
            "postCreateCommand": "echo post create",
            "postAttachCommand": ["echo", "post-attach"],
        })

        config = resolve(ConfigSource.workspace(workspace))

        assert config.project_name == "Sample"
        assert config.workspace_folder == workspace.absolute()
        assert config.config_path == config_path.absolute()
        assert config.image_reference == "mcr.microsoft.com/devcontainers/base:ubuntu"
        assert config.dockerfile is None
        assert config.container_workspace_folder is None
        assert config.features == {"ghcr.io/devcontainers/features/node:1": {"version": "20"}}
        assert config.forward_ports == [
            ForwardPort(local_port=3000, container_port=3000),
            ForwardPort(local_port=4000, container_port=9229),
            ForwardPort(local_port=5000, container_port=5001, protocol=PortProtocol.UDP),
        ]
        assert config.post_create_command == "echo post create"
        assert config.post_attach_command == ["echo", "post-attach"]

    def test_named_commands_preserved(self, workspace, write_config):
        """Test map-form hooks keep their names and commands."""
        write_config({
            "image": "alpine",
            "postCreateCommand": {"install": "npm install", "build": ["npm", "run", "build"]},
        })

        config = resolve(ConfigSource.workspace(workspace))

        assert config.post_create_command == {"install": "npm install", "build": ["npm", "run", "build"]}
        assert config.post_attach_command is None

    def test_resolve_is_idempotent(self, workspace, write_config):
        """Test resolving twice gives equal results."""
        write_config({"image": "alpine", "forwardPorts": ["8080"]})
        source = ConfigSource.workspace(workspace)

        assert resolve(source) == resolve(source)

    def test_project_name_defaults_to_workspace_name(self, workspace, write_config):
        """Test the workspace directory name is used when name is absent."""
        write_config({"image": "alpine"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.project_name == "myproj"

    def test_root_level_document(self, workspace, write_config):
        """Test devcontainer.json at the workspace root is found."""
        config_path = write_config({"image": "alpine"}, directory=None)

        config = resolve(ConfigSource.workspace(workspace))

        assert config.config_path == config_path.absolute()

    def test_devcontainer_dir_preferred(self, workspace, write_config):
        """Test .devcontainer/devcontainer.json wins over the root file."""
        write_config({"image": "root-image"}, directory=None)
        write_config({"image": "nested-image"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.image_reference == "nested-image"

    def test_missing_document(self, workspace):
        """Test a workspace without configuration fails."""
        with pytest.raises(ConfigurationError, match="Failed to locate devcontainer.json"):
            resolve(ConfigSource.workspace(workspace))

    def test_explicit_file(self, tmp_path):
        """Test an explicit file anchors the workspace at its directory."""
        config_dir = tmp_path / "configs"
        config_dir.mkdir()
        config_file = config_dir / "custom.json"
        config_file.write_text('{"image": "alpine"}')

        config = resolve(ConfigSource.explicit_file(config_file))

        assert config.config_path == config_file.absolute()
        assert config.workspace_folder == config_dir.absolute()
        assert config.project_name == "configs"

    def test_explicit_file_missing(self, tmp_path):
        """Test a missing explicit file fails."""
        with pytest.raises(ConfigurationError, match="does not exist"):
            resolve(ConfigSource.explicit_file(tmp_path / "missing.json"))

    def test_relaxed_json(self, workspace, write_config):
        """Test comments and trailing commas are accepted."""
        write_config(
            """{
                // the base image
                "image": "alpine",
                /* ports */
                "forwardPorts": [3000,],
            }"""
        )

        config = resolve(ConfigSource.workspace(workspace))

        assert config.image_reference == "alpine"
        assert config.forward_ports == [ForwardPort(local_port=3000, container_port=3000)]

    def test_unparsable_document(self, workspace, write_config):
        """Test garbage is reported as invalid JSON."""
        write_config("{ this is not json")

        with pytest.raises(ConfigurationError, match="is not valid JSON"):
            resolve(ConfigSource.workspace(workspace))

    def test_invalid_utf8_document(self, workspace):
        (workspace / ".devcontainer" / "devcontainer.json").write_bytes(b'{"name": "\xff\xfe"}')

        with pytest.raises(ConfigurationError, match="is not valid UTF-8"):
            resolve(ConfigSource.workspace(workspace))

    def test_schema_violation(self, workspace, write_config):
        """Test schema errors are raised from resolve."""
        write_config({"image": 42})

        with pytest.raises(ConfigurationError, match="Invalid devcontainer.json"):
            resolve(ConfigSource.workspace(workspace))

    def test_invalid_forward_port_in_document(self, workspace, write_config):
        """Test bad port strings fail resolution."""
        write_config({"image": "alpine", "forwardPorts": ["abc"]})

        with pytest.raises(ConfigurationError, match="Invalid forward port value 'abc'"):
            resolve(ConfigSource.workspace(workspace))

    def test_unknown_keys_ignored(self, workspace, write_config):
        """Test properties outside the supported subset are ignored."""
        write_config({"image": "alpine", "customizations": {"vscode": {"extensions": []}}})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.image_reference == "alpine"

    def test_container_workspace_folder_with_placeholder(self, workspace, write_config):
        """Test an absolute workspaceFolder is a container path."""
        write_config({"image": "alpine", "workspaceFolder": "/workspace/${localWorkspaceFolderBasename}"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.container_workspace_folder == Path("/workspace/myproj")
        assert config.workspace_folder == workspace.absolute()

    def test_relative_workspace_folder(self, workspace, write_config):
        """Test a relative workspaceFolder is joined to the workspace root."""
        write_config({"image": "alpine", "workspaceFolder": "nested/project"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.workspace_folder == workspace.absolute() / "nested" / "project"
        assert config.container_workspace_folder is None

    def test_local_placeholder_workspace_folder(self, workspace, write_config):
        """Test ${localWorkspaceFolder} expands to the host workspace."""
        write_config({"image": "alpine", "workspaceFolder": "${localWorkspaceFolder}/sub"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.workspace_folder == workspace.absolute() / "sub"

    def test_dockerfile_relative_to_config(self, workspace, write_config):
        """Test dockerFile is resolved against the configuration directory."""
        write_config({"dockerFile": "Dockerfile"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.dockerfile == workspace.absolute() / ".devcontainer" / "Dockerfile"
        assert config.image_reference is None

    def test_absolute_dockerfile_kept(self, workspace, write_config, tmp_path):
        """Test an absolute dockerFile is used as given."""
        dockerfile = tmp_path / "images" / "Dockerfile"
        write_config({"dockerFile": str(dockerfile)})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.dockerfile == dockerfile

    def test_image_and_dockerfile_both_kept(self, workspace, write_config):
        """Test a document with both sources resolves with both set."""
        write_config({"image": "alpine", "dockerFile": "Dockerfile"})

        config = resolve(ConfigSource.workspace(workspace))

        assert config.image_reference == "alpine"
        assert config.dockerfile is not None

    def test_overrides_win(self, workspace, write_config, tmp_path):
        """Test caller overrides take precedence over the document."""
        other = tmp_path / "other"
        other.mkdir()
        write_config({"name": "Sample", "image": "alpine", "workspaceFolder": "nested"})

        config = ConfigResolver(
            ConfigSource.workspace(workspace),
            ConfigOverrides(project_name="override", workspace_folder=other, image_reference="debian"),
        ).resolve()

        assert config.project_name == "override"
        assert config.workspace_folder == other.absolute()
        assert config.image_reference == "debian"

    def test_find_config_path(self, workspace, write_config):
        """Test find_config_path returns an absolute path."""
        write_config({"image": "alpine"})

        path = ConfigResolver(ConfigSource.workspace(workspace)).find_config_path()

        assert path.is_absolute()
        assert path.name == "devcontainer.json"
