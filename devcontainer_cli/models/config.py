"""Configuration models for devcontainer documents."""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import SHELL_COMMAND

# A single command is either a shell string or an argument vector.
CommandArgs = Union[str, List[str]]
# A hook is a single command or a map of named commands.
CommandDefinition = Union[str, List[str], Dict[str, CommandArgs]]


class PortProtocol(str, Enum):
    """Protocol of a forwarded port."""

    TCP = "tcp"
    UDP = "udp"


class ForwardPort(BaseModel):
    """A forwarded port after normalization."""

    model_config = ConfigDict(frozen=True)

    local_port: int = Field(ge=0, le=65535)
    container_port: int = Field(ge=0, le=65535)
    protocol: PortProtocol = PortProtocol.TCP


class ForwardPortObject(BaseModel):
    """Detailed forward port entry as written in devcontainer.json."""

    model_config = ConfigDict(populate_by_name=True)

    local_port: int = Field(alias="localPort", ge=0, le=65535)
    container_port: int = Field(alias="containerPort", ge=0, le=65535)
    protocol: PortProtocol = PortProtocol.TCP


class RawConfig(BaseModel):
    """The configuration document as authored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    image: Optional[str] = None
    docker_file: Optional[str] = Field(default=None, alias="dockerFile")
    workspace_folder: Optional[str] = Field(default=None, alias="workspaceFolder")
    features: Dict[str, Any] = Field(default_factory=dict)
    forward_ports: List[Union[int, str, ForwardPortObject]] = Field(
        default_factory=list, alias="forwardPorts"
    )
    post_create_command: Optional[CommandDefinition] = Field(
        default=None, alias="postCreateCommand"
    )
    post_attach_command: Optional[CommandDefinition] = Field(
        default=None, alias="postAttachCommand"
    )


class ResolvedConfig(BaseModel):
    """Normalized configuration after applying overrides and defaults.

    Built once per command invocation and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(min_length=1)
    workspace_folder: Path
    container_workspace_folder: Optional[Path] = None
    config_path: Path
    image_reference: Optional[str] = None
    dockerfile: Optional[Path] = None
    features: Dict[str, Any] = Field(default_factory=dict)
    forward_ports: List[ForwardPort] = Field(default_factory=list)
    post_create_command: Optional[CommandDefinition] = None
    post_attach_command: Optional[CommandDefinition] = None


class ConfigOverrides(BaseModel):
    """Values supplied by the caller that win over the document."""

    project_name: Optional[str] = None
    workspace_folder: Optional[Path] = None
    image_reference: Optional[str] = None


class ConfigSource(BaseModel):
    """Where to read the configuration document from.

    Use :meth:`workspace` to search a workspace directory for the document
    or :meth:`explicit_file` to point at a specific file.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    explicit: bool = False

    @classmethod
    def workspace(cls, path: Path) -> 'ConfigSource':
        """Search ``path`` for a devcontainer.json."""
        return cls(path=Path(path), explicit=False)

    @classmethod
    def explicit_file(cls, path: Path) -> 'ConfigSource':
        """Use the configuration file at ``path``."""
        return cls(path=Path(path), explicit=True)


def command_to_argv(command: CommandArgs) -> List[str]:
    """Convert a single command into the argv passed to exec."""
    if isinstance(command, str):
        return [*SHELL_COMMAND, command]
    return list(command)
