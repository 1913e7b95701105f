"""Provider backed by the Docker Engine API through the docker SDK."""

import asyncio
import logging
from typing import List, Optional

import docker
import docker.errors
import requests.exceptions
from docker.types import Mount

from ..core.constants import DEFAULT_TIMEOUT, IDLE_COMMAND, PROJECT_LABEL
from ..models.config import ResolvedConfig
from ..models.container import (
    CleanupOptions,
    ExecResult,
    ImageReference,
    ProviderPreparation,
    RunningContainer,
)
from .exceptions import ProviderError, ProviderTimeoutError
from .provider import (
    Provider,
    ProviderKind,
    container_identifier,
    plan_preparation,
)

logger = logging.getLogger(__name__)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class DockerApiProvider(Provider):
    """Provider that talks to the Docker daemon directly.

    The SDK is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self._client = None

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.DOCKER_API

    @property
    def client(self):
        """Docker client, connected and pinged on first use.

        Raises:
            ProviderError: If the daemon cannot be reached
        """
        if self._client is None:
            try:
                client = docker.from_env(timeout=self.timeout)
                client.ping()
            except docker.errors.DockerException as e:
                if "connection refused" in str(e).lower() or "cannot connect" in str(e).lower():
                    raise ProviderError(
                        "Docker daemon is not running. Please start Docker Desktop or the Docker service."
                    ) from e
                raise ProviderError(f"Failed to connect to Docker: {e}") from e
            self._client = client
        return self._client

    async def _call(self, func, *args):
        """Run a blocking SDK call in a worker thread.

        Transport failures surface from ``requests`` rather than the SDK's own
        exception types, so they are translated here.
        """
        try:
            return await asyncio.to_thread(func, *args)
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(
                f"Docker API call timed out after {self.timeout}s: {e}",
                timeout=self.timeout,
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderError(f"Lost connection to Docker: {e}") from e

    async def prepare(self, config: ResolvedConfig) -> ProviderPreparation:
        await self._call(lambda: self.client)
        return plan_preparation(config)

    def _ensure_network(self, name: str) -> None:
        try:
            self.client.networks.get(name)
            logger.debug("Docker network %s already exists", name)
        except docker.errors.NotFound:
            logger.info("Creating docker network %s", name)
            try:
                self.client.networks.create(name)
            except docker.errors.APIError as e:
                raise ProviderError(f"Failed to create docker network {name}: {e}") from e
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to inspect docker network {name}: {e}") from e

    def _ensure_volume(self, name: str) -> None:
        try:
            self.client.volumes.get(name)
            logger.debug("Docker volume %s already exists", name)
        except docker.errors.NotFound:
            logger.info("Creating docker volume %s", name)
            try:
                self.client.volumes.create(name=name)
            except docker.errors.APIError as e:
                raise ProviderError(f"Failed to create docker volume {name}: {e}") from e
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to inspect docker volume {name}: {e}") from e

    async def ensure_networks(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        for network in preparation.networks:
            await self._call(self._ensure_network, network)

    async def ensure_volumes(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        for volume in preparation.volumes:
            await self._call(self._ensure_volume, volume.name)

    def _build_image(self, preparation: ProviderPreparation) -> str:
        image = preparation.image
        if isinstance(image, ImageReference):
            try:
                self.client.images.get(image.reference)
                logger.debug("Using locally available image %s", image.reference)
                return image.reference
            except docker.errors.ImageNotFound:
                logger.info("Pulling image %s", image.reference)
            except docker.errors.APIError as e:
                raise ProviderError(f"Failed to inspect image {image.reference}: {e}") from e

            try:
                self.client.images.pull(image.reference)
            except docker.errors.APIError as e:
                raise ProviderError(f"Failed to pull image {image.reference}: {e}") from e
            return image.reference

        logger.info("Building image %s from %s", image.tag, image.dockerfile)
        try:
            self.client.images.build(
                path=str(image.build_context),
                dockerfile=str(image.dockerfile),
                tag=image.tag,
                rm=True,
            )
        except docker.errors.BuildError as e:
            raise ProviderError(f"Failed to build image: {e}") from e
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to build image: {e}") from e
        return image.tag

    async def build_image(self, config: ResolvedConfig, preparation: ProviderPreparation) -> str:
        return await self._call(self._build_image, preparation)

    def _create_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        image_reference: str,
    ) -> RunningContainer:
        name = preparation.container_name
        try:
            self.client.containers.get(name).remove(force=True)
        except docker.errors.NotFound:
            pass
        except docker.errors.APIError as e:
            logger.warning("Failed to remove existing container %s before create: %s", name, e)

        workspace_dst = str(preparation.workspace_mount_path)
        mounts = [Mount(target=workspace_dst, source=str(config.workspace_folder), type="bind")]
        mounts += [
            Mount(target=str(volume.mount_path), source=volume.name, type="volume")
            for volume in preparation.volumes
        ]

        try:
            container = self.client.containers.create(
                image=image_reference,
                command=IDLE_COMMAND,
                name=name,
                hostname=name,
                network=preparation.networks[0] if preparation.networks else None,
                labels={PROJECT_LABEL: config.project_name},
                working_dir=workspace_dst,
                mounts=mounts,
            )
        except docker.errors.ImageNotFound as e:
            raise ProviderError(f"Image '{image_reference}' not found") from e
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to create container: {e}") from e

        logger.info("Created container %s", name)
        return RunningContainer(id=container.id, name=name)

    async def create_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        image_reference: str,
    ) -> RunningContainer:
        return await self._call(self._create_container, config, preparation, image_reference)

    def _get_container(self, identifier: str):
        try:
            return self.client.containers.get(identifier)
        except docker.errors.NotFound as e:
            raise ProviderError(f"Container '{identifier}' not found") from e
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to get container: {e}") from e

    def _start_container(self, identifier: str) -> None:
        container = self._get_container(identifier)
        try:
            container.start()
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to start container {identifier}: {e}") from e

    async def start_container(self, container: RunningContainer) -> None:
        identifier = container_identifier(container)
        await self._call(self._start_container, identifier)
        logger.info("Started container %s", identifier)

    def _exec(self, identifier: str, command: List[str]) -> ExecResult:
        container = self._get_container(identifier)
        try:
            exit_code, output = container.exec_run(command, demux=True)
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to execute in container: {e}") from e
        stdout, stderr = output if output else (None, None)
        return ExecResult(
            exit_code=exit_code if exit_code is not None else -1,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )

    async def exec(self, container: RunningContainer, command: List[str]) -> ExecResult:
        if not command:
            return ExecResult()
        identifier = container_identifier(container)
        return await self._call(self._exec, identifier, command)

    def _stop_container(self, identifier: str) -> None:
        try:
            self.client.containers.get(identifier).stop()
            logger.info("Stopped container %s", identifier)
        except docker.errors.NotFound:
            logger.debug("Container %s already missing", identifier)
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to stop container {identifier}: {e}") from e

    async def stop_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        container: RunningContainer,
    ) -> None:
        identifier = container.name or container.id or preparation.container_name
        await self._call(self._stop_container, identifier)

    def _cleanup(self, preparation: ProviderPreparation, options: CleanupOptions) -> None:
        name = preparation.container_name
        try:
            self.client.containers.get(name).remove(force=True, v=options.remove_volumes)
        except docker.errors.NotFound:
            logger.debug("Container %s already absent", name)
        except docker.errors.APIError as e:
            raise ProviderError(f"Failed to remove container {name}: {e}") from e

        for network in preparation.networks:
            try:
                self.client.networks.get(network).remove()
                logger.info("Removed docker network %s", network)
            except docker.errors.NotFound:
                logger.debug("Docker network %s already absent", network)
            except docker.errors.APIError as e:
                raise ProviderError(f"Failed to remove docker network {network}: {e}") from e

        if options.remove_volumes:
            for volume in preparation.volumes:
                try:
                    self.client.volumes.get(volume.name).remove()
                    logger.info("Removed docker volume %s", volume.name)
                except docker.errors.NotFound:
                    logger.debug("Docker volume %s already absent", volume.name)
                except docker.errors.APIError as e:
                    raise ProviderError(f"Failed to remove docker volume {volume.name}: {e}") from e

        if options.remove_unknown:
            logger.warning("remove-unknown cleanup is not implemented for the docker-api provider")

    async def cleanup(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        options: CleanupOptions,
    ) -> None:
        await self._call(self._cleanup, preparation, options)
