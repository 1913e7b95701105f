"""Provider that drives the docker command line through subprocesses."""

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.constants import (
    BUILD_TIMEOUT,
    DEFAULT_DOCKER_PATH,
    IDLE_COMMAND,
    NO_SUCH_CONTAINER,
    NO_SUCH_NETWORK,
    NO_SUCH_VOLUME,
    NOT_RUNNING,
    PROJECT_LABEL,
)
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


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of one engine command."""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def reports(self, *patterns: str) -> bool:
        """True if stderr contains any of ``patterns``, ignoring case."""
        stderr = self.stderr.lower()
        return any(pattern in stderr for pattern in patterns)

    def ensure_success(self) -> 'CommandOutput':
        """Return self, or raise if the command failed.

        Raises:
            ProviderError: Carrying the command line, exit code and stderr
        """
        if self.success:
            return self
        raise ProviderError(
            f"Command '{self.command}' exited with code {self.returncode}. "
            f"stdout: {self.stdout.strip()} stderr: {self.stderr.strip()}",
            command=self.command,
            exit_code=self.returncode,
            stderr=self.stderr,
        )


def format_command(program: Path, args: Sequence[str]) -> str:
    return " ".join([str(program), *args])


class DockerCli:
    """Runs a docker-compatible executable and captures its output."""

    def __init__(self, program: Path):
        self.program = program

    @classmethod
    def locate(cls, path: str) -> 'DockerCli':
        """Resolve ``path`` to an executable.

        A bare command name is looked up on PATH; anything containing a
        path separator is used as given.

        Raises:
            ProviderError: If a bare name cannot be found on PATH
        """
        if os.sep in path or (os.altsep and os.altsep in path):
            return cls(Path(path))

        found = shutil.which(path)
        if not found:
            raise ProviderError(f"Failed to locate docker binary '{path}' on PATH")
        return cls(Path(found))

    async def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandOutput:
        """Run the executable with ``args``.

        A non-zero exit is returned, not raised, so callers can classify it.

        Raises:
            ProviderError: If the process cannot be spawned
            ProviderTimeoutError: If ``timeout`` seconds elapse first
        """
        command = format_command(self.program, args)
        logger.debug("Running %s", command)
        try:
            proc = await asyncio.create_subprocess_exec(
                str(self.program),
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProviderError(f"Failed to spawn '{command}': {e}", command=command) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Command '%s' timed out after %ss", command, timeout)
            raise ProviderTimeoutError(
                f"Command '{command}' timed out after {timeout}s",
                command=command,
                timeout=timeout,
            )
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        return CommandOutput(
            command=command,
            returncode=proc.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def run_expect_success(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandOutput:
        output = await self.run(args, timeout=timeout)
        return output.ensure_success()


class DockerCliProvider(Provider):
    """Reference provider backed by the docker CLI.

    Any executable that speaks the same subcommands (for example podman)
    can be used by passing its name or path as ``docker_path``.
    """

    def __init__(
        self,
        docker_path: str = DEFAULT_DOCKER_PATH,
        timeout: Optional[float] = None,
        build_timeout: Optional[float] = BUILD_TIMEOUT,
    ):
        self.docker_path = docker_path
        self.timeout = timeout
        self.build_timeout = build_timeout

    @property
    def kind(self) -> ProviderKind:
        if Path(self.docker_path).name == "podman":
            return ProviderKind.PODMAN
        return ProviderKind.DOCKER

    @cached_property
    def cli(self) -> DockerCli:
        """The engine executable, resolved on first use."""
        return DockerCli.locate(self.docker_path)

    async def _run(self, *args: str) -> CommandOutput:
        return await self.cli.run(list(args), timeout=self.timeout)

    async def _run_ok(self, *args: str, timeout: Optional[float] = None) -> CommandOutput:
        return await self.cli.run_expect_success(list(args), timeout=timeout or self.timeout)

    async def verify_binary(self) -> None:
        """Check that the engine answers.

        Raises:
            ProviderError: If the engine server cannot be reached
        """
        output = await self._run("version", "--format", "{{.Server.Version}}")
        if not output.success:
            raise ProviderError(
                f"Failed to execute '{output.command}': {output.stderr.strip()}",
                command=output.command,
                exit_code=output.returncode,
                stderr=output.stderr,
            )
        logger.debug("Docker CLI %s reachable, server %s", self.cli.program, output.stdout.strip())

    async def prepare(self, config: ResolvedConfig) -> ProviderPreparation:
        await self.verify_binary()
        return plan_preparation(config)

    async def _ensure(self, resource: str, name: str, absent: str) -> None:
        inspect = await self._run(resource, "inspect", name)
        if inspect.success:
            logger.debug("Docker %s %s already exists", resource, name)
            return

        if not inspect.reports(absent):
            raise ProviderError(
                f"Failed to inspect docker {resource} {name}: {inspect.stderr.strip()}",
                command=inspect.command,
                exit_code=inspect.returncode,
                stderr=inspect.stderr,
            )

        logger.info("Creating docker %s %s", resource, name)
        await self._run_ok(resource, "create", name)

    async def ensure_networks(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        for network in preparation.networks:
            await self._ensure("network", network, NO_SUCH_NETWORK)

    async def ensure_volumes(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        for volume in preparation.volumes:
            await self._ensure("volume", volume.name, NO_SUCH_VOLUME)

    async def build_image(self, config: ResolvedConfig, preparation: ProviderPreparation) -> str:
        image = preparation.image
        if isinstance(image, ImageReference):
            inspect = await self._run("image", "inspect", image.reference)
            if inspect.success:
                logger.debug("Using locally available image %s", image.reference)
                return image.reference

            logger.info("Pulling image %s", image.reference)
            await self._run_ok("pull", image.reference, timeout=self.build_timeout)
            return image.reference

        logger.info(
            "Building image %s from %s (context %s)",
            image.tag, image.dockerfile, image.build_context,
        )
        await self._run_ok(
            "build",
            "-f", str(image.dockerfile),
            "-t", image.tag,
            str(image.build_context),
            timeout=self.build_timeout,
        )
        return image.tag

    async def create_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        image_reference: str,
    ) -> RunningContainer:
        name = preparation.container_name

        remove = await self._run("container", "rm", "--force", name)
        if not remove.success and not remove.reports(NO_SUCH_CONTAINER) and remove.stderr.strip():
            logger.warning(
                "Failed to remove existing container %s before create: %s",
                name, remove.stderr.strip(),
            )

        workspace_src = str(config.workspace_folder)
        workspace_dst = str(preparation.workspace_mount_path)

        args: List[str] = ["create", "--name", name, "--hostname", name]
        if preparation.networks:
            args += ["--network", preparation.networks[0]]
        args += ["--label", f"{PROJECT_LABEL}={config.project_name}"]
        args += ["--workdir", workspace_dst]
        args += ["--mount", f"type=bind,src={workspace_src},dst={workspace_dst}"]
        for volume in preparation.volumes:
            args += ["--mount", f"type=volume,src={volume.name},dst={volume.mount_path}"]
        args.append(image_reference)
        args += IDLE_COMMAND

        output = await self._run_ok(*args)
        container_id = output.stdout.strip()
        logger.info("Created container %s", name)
        return RunningContainer(id=container_id or None, name=name)

    async def start_container(self, container: RunningContainer) -> None:
        identifier = container_identifier(container)
        await self._run_ok("start", identifier)
        logger.info("Started container %s", identifier)

    async def exec(self, container: RunningContainer, command: List[str]) -> ExecResult:
        if not command:
            return ExecResult()

        identifier = container_identifier(container)
        output = await self._run("exec", identifier, *command)
        return ExecResult(
            exit_code=output.returncode,
            stdout=output.stdout,
            stderr=output.stderr,
        )

    async def stop_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        container: RunningContainer,
    ) -> None:
        identifier = container.name or container.id or preparation.container_name

        output = await self._run("container", "stop", identifier)
        if output.success:
            logger.info("Stopped container %s", identifier)
            return

        if output.reports(NO_SUCH_CONTAINER, NOT_RUNNING):
            logger.debug("Container %s already stopped or missing", identifier)
            return

        raise ProviderError(
            f"Failed to stop container {identifier}: {output.stderr.strip()}",
            command=output.command,
            exit_code=output.returncode,
            stderr=output.stderr,
        )

    async def _remove(self, resource: str, name: str, absent: str) -> None:
        output = await self._run(resource, "rm", name)
        if output.success:
            logger.info("Removed docker %s %s", resource, name)
        elif output.reports(absent):
            logger.debug("Docker %s %s already absent", resource, name)
        else:
            raise ProviderError(
                f"Failed to remove docker {resource} {name}: {output.stderr.strip()}",
                command=output.command,
                exit_code=output.returncode,
                stderr=output.stderr,
            )

    async def cleanup(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        options: CleanupOptions,
    ) -> None:
        args = ["container", "rm", "--force"]
        if options.remove_volumes:
            args.append("--volumes")
        args.append(preparation.container_name)

        remove = await self._run(*args)
        if not remove.success and not remove.reports(NO_SUCH_CONTAINER):
            raise ProviderError(
                f"Failed to remove container {preparation.container_name}: {remove.stderr.strip()}",
                command=remove.command,
                exit_code=remove.returncode,
                stderr=remove.stderr,
            )

        for network in preparation.networks:
            await self._remove("network", network, NO_SUCH_NETWORK)

        if options.remove_volumes:
            for volume in preparation.volumes:
                await self._remove("volume", volume.name, NO_SUCH_VOLUME)

        if options.remove_unknown:
            logger.warning("remove-unknown cleanup is not implemented for the docker provider")
