"""Container provisioning models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union


@dataclass(frozen=True)
class ImageReference:
    """Use an image that already exists in a registry or locally."""

    reference: str


@dataclass(frozen=True)
class ImageBuild:
    """Build an image from a Dockerfile."""

    dockerfile: Path
    build_context: Path
    tag: str


ImageSource = Union[ImageReference, ImageBuild]


@dataclass(frozen=True)
class VolumeSpec:
    """A named volume and where it is mounted inside the container."""

    name: str
    mount_path: Path


@dataclass(frozen=True)
class ProviderPreparation:
    """Engine-specific naming and mounting decisions for one run."""

    image: ImageSource
    container_name: str
    project_slug: str
    networks: List[str] = field(default_factory=list)
    volumes: List[VolumeSpec] = field(default_factory=list)
    workspace_mount_path: Path = Path("/workspaces")


@dataclass(frozen=True)
class RunningContainer:
    """Identity of a provisioned container."""

    id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a command executed inside a container."""

    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class CleanupOptions:
    """Options for tearing down a devcontainer."""

    remove_volumes: bool = False
    remove_unknown: bool = False
