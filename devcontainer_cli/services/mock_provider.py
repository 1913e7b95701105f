"""In-memory provider used by tests and dry runs."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.config import ResolvedConfig
from ..models.container import (
    CleanupOptions,
    ExecResult,
    ImageReference,
    ProviderPreparation,
    RunningContainer,
)
from .exceptions import ProviderError
from .provider import (
    Provider,
    ProviderKind,
    container_identifier,
    plan_preparation,
)

logger = logging.getLogger(__name__)


class MockProvider(Provider):
    """Provider that records calls instead of touching an engine.

    Args:
        exec_results: Results returned by successive ``exec`` calls; once
            exhausted every call succeeds with empty output
        fail_on: Operation names that raise :class:`ProviderError`
    """

    def __init__(
        self,
        exec_results: Optional[Iterable[ExecResult]] = None,
        fail_on: Iterable[str] = (),
    ):
        self.exec_results = list(exec_results or [])
        self.fail_on = set(fail_on)
        self.calls: List[Tuple[str, Any]] = []
        self.exec_calls: List[List[str]] = []
        self.networks: Dict[str, bool] = {}
        self.volumes: Dict[str, bool] = {}
        self.containers: Dict[str, str] = {}

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.MOCK

    def _record(self, operation: str, payload: Any = None) -> None:
        self.calls.append((operation, payload))
        if operation in self.fail_on:
            raise ProviderError(f"Simulated failure in {operation}")

    @property
    def operations(self) -> List[str]:
        """Names of the recorded operations, in call order."""
        return [operation for operation, _ in self.calls]

    async def prepare(self, config: ResolvedConfig) -> ProviderPreparation:
        self._record("prepare", config.project_name)
        return plan_preparation(config)

    async def ensure_networks(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        self._record("ensure_networks", list(preparation.networks))
        for network in preparation.networks:
            self.networks.setdefault(network, True)

    async def ensure_volumes(self, config: ResolvedConfig, preparation: ProviderPreparation) -> None:
        self._record("ensure_volumes", [volume.name for volume in preparation.volumes])
        for volume in preparation.volumes:
            self.volumes.setdefault(volume.name, True)

    async def build_image(self, config: ResolvedConfig, preparation: ProviderPreparation) -> str:
        self._record("build_image")
        if isinstance(preparation.image, ImageReference):
            return preparation.image.reference
        return preparation.image.tag

    async def create_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        image_reference: str,
    ) -> RunningContainer:
        self._record("create_container", image_reference)
        name = preparation.container_name
        self.containers[name] = "created"
        return RunningContainer(id=f"mock-{preparation.project_slug}", name=name)

    async def start_container(self, container: RunningContainer) -> None:
        identifier = container_identifier(container)
        self._record("start_container", identifier)
        self.containers[identifier] = "running"

    async def exec(self, container: RunningContainer, command: List[str]) -> ExecResult:
        if not command:
            return ExecResult()
        container_identifier(container)
        self._record("exec", list(command))
        self.exec_calls.append(list(command))
        if self.exec_results:
            return self.exec_results.pop(0)
        return ExecResult()

    async def stop_container(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        container: RunningContainer,
    ) -> None:
        identifier = container.name or container.id or preparation.container_name
        self._record("stop_container", identifier)
        if identifier in self.containers:
            self.containers[identifier] = "stopped"

    async def cleanup(
        self,
        config: ResolvedConfig,
        preparation: ProviderPreparation,
        options: CleanupOptions,
    ) -> None:
        self._record("cleanup", options)
        self.containers.pop(preparation.container_name, None)
        for network in preparation.networks:
            self.networks.pop(network, None)
        if options.remove_volumes:
            for volume in preparation.volumes:
                self.volumes.pop(volume.name, None)
        if options.remove_unknown:
            logger.warning("remove-unknown cleanup is not implemented for the mock provider")
