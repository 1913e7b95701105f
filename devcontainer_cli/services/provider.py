"""Provider contract for container-engine backends."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List

from ..core.constants import (
    CONTAINER_PREFIX,
    DATA_VOLUME_MOUNT,
    DEFAULT_PROJECT_NAME,
    WORKSPACES_ROOT,
)
from ..models.config import ResolvedConfig
from ..models.container import (
    CleanupOptions,
    ExecResult,
    ImageBuild,
    ImageReference,
    ProviderPreparation,
    RunningContainer,
    VolumeSpec,
)
from .exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    DOCKER = "docker"
    DOCKER_API = "docker-api"
    PODMAN = "podman"
    MOCK = "mock"


@dataclass(frozen=True)
class ProviderCapabilities:
    """Optional features a provider may support."""

    supports_features: bool = False
    supports_templates: bool = False
    supports_attach: bool = False
    supports_no_cache: bool = False


def sanitize_name(value: str) -> str:
    """Turn a project name into a slug usable in engine resource names.

    ASCII letters and digits are lowercased, ``-``, ``_`` and ``.`` are
    kept, and every other character becomes ``-``. Leading and trailing
    hyphens are stripped.
    """
    chars = []
    for ch in value:
        if ch.isascii() and ch.isalnum():
            chars.append(ch.lower())
        elif ch in "-_.":
            chars.append(ch)
        else:
            chars.append("-")
    slug = "".join(chars).strip("-")
    return slug or DEFAULT_PROJECT_NAME


def container_identifier(container: RunningContainer) -> str:
    """Name or id used to address a container, preferring the name.

    Raises:
        ProviderError: If the container has neither a name nor an id
    """
    identifier = container.name or container.id
    if not identifier:
        raise ProviderError("Container has no identifier")
    return identifier


def plan_preparation(config: ResolvedConfig) -> ProviderPreparation:
    """Compute the naming and mounting decisions for ``config``.

    The result depends only on ``config``, so repeated calls agree on
    every name.

    Raises:
        ConfigurationError: If the workspace is missing or no image source is usable
    """
    if not config.workspace_folder.exists():
        raise ConfigurationError(
            f"Workspace folder {config.workspace_folder} does not exist"
        )

    project_slug = sanitize_name(config.project_name)
    base_name = f"{CONTAINER_PREFIX}-{project_slug}"

    if config.image_reference:
        image = ImageReference(config.image_reference)
    elif config.dockerfile is not None:
        if not config.dockerfile.is_file():
            raise ConfigurationError(f"Dockerfile {config.dockerfile} does not exist")
        image = ImageBuild(
            dockerfile=config.dockerfile,
            build_context=config.dockerfile.parent,
            tag=f"{base_name}:latest",
        )
    else:
        raise ConfigurationError(
            "devcontainer.json must define either `image` or `dockerFile`"
        )

    if config.container_workspace_folder is not None:
        workspace_mount_path = config.container_workspace_folder
    else:
        workspace_mount_path = Path(WORKSPACES_ROOT) / project_slug

    return ProviderPreparation(
        image=image,
        container_name=base_name,
        project_slug=project_slug,
        networks=[f"{base_name}-network"],
        volumes=[VolumeSpec(name=f"{base_name}-data", mount_path=Path(DATA_VOLUME_MOUNT))],
        workspace_mount_path=workspace_mount_path,
    )


class Provider(ABC):
    """Capability interface every container-engine backend implements.

    All operations are coroutines because they may wait on the engine.
    Reconciliation operations (networks, volumes, stop, cleanup) treat a
    missing resource as success.
    """

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        """The backend variant."""

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities()

    @abstractmethod
    async def prepare(self, config: ResolvedConfig) -> ProviderPreparation:
        """Validate preconditions and compute names for this run."""

    @abstractmethod
    async def ensure_networks(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        """Create every declared network that does not exist yet."""

    @abstractmethod
    async def ensure_volumes(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        """Create every declared volume that does not exist yet."""

    @abstractmethod
    async def build_image(self, config: ResolvedConfig, preparation: ProviderPreparation) -> str:
        """Make the image available and return its reference."""

    @abstractmethod
    async def create_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        image_reference: str,
    ) -> RunningContainer:
        """Replace any stale container and create a fresh idle one."""

    @abstractmethod
    async def start_container(self, container: RunningContainer) -> None:
        """Start the container."""

    @abstractmethod
    async def exec(self, container: RunningContainer, command: List[str]) -> ExecResult:
        """Run ``command`` inside the container and capture its output."""

    @abstractmethod
    async def stop_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        container: RunningContainer,
    ) -> None:
        """Stop the container; already stopped or missing is fine."""

    @abstractmethod
    async def cleanup(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        options: CleanupOptions,
    ) -> None:
        """Remove the container, its networks and optionally its volumes."""
