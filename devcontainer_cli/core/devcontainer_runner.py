"""High level operations used by the command line."""

import logging
from typing import Any, Dict, List, Optional

from ..models.config import ConfigOverrides, ConfigSource, ResolvedConfig
from ..models.container import CleanupOptions, ExecResult, RunningContainer
from ..models.lifecycle import (
    LifecycleOutcome,
    LifecyclePhase,
    LifecyclePlan,
    UpOptions,
)
from ..services.provider import Provider
from .config_resolver import resolve
from .lifecycle_executor import EventSink, LifecycleExecutor
from .lifecycle_planner import plan_for_up

logger = logging.getLogger(__name__)


class DevcontainerRunner:
    """Runs devcontainer commands against one provider."""

    def __init__(self, provider: Provider, event_sink: Optional[EventSink] = None):
        self.provider = provider
        self.executor = LifecycleExecutor(provider, event_sink=event_sink)

    @staticmethod
    def resolve_configuration(
        source: ConfigSource,
        overrides: Optional[ConfigOverrides] = None,
    ) -> Dict[str, Any]:
        """Resolve the configuration and return it as JSON-compatible data."""
        return resolve(source, overrides).model_dump(mode="json")

    @staticmethod
    def plan(config: ResolvedConfig, options: Optional[UpOptions] = None) -> LifecyclePlan:
        return plan_for_up(config, options)

    async def run_up(self, config: ResolvedConfig, options: Optional[UpOptions] = None) -> LifecycleOutcome:
        """Plan and execute ``up``."""
        plan = plan_for_up(config, options)
        return await self.executor.execute(config, plan)

    async def run_down(self, config: ResolvedConfig, options: Optional[CleanupOptions] = None) -> None:
        """Stop and remove the devcontainer for ``config``."""
        options = options or CleanupOptions()
        preparation = await self.provider.prepare(config)
        container = RunningContainer(name=preparation.container_name)
        await self.provider.stop_container(config, preparation, container)
        await self.provider.cleanup(config, preparation, options)
        logger.info("Removed devcontainer %s", preparation.container_name)

    async def build(self, config: ResolvedConfig, no_cache: bool = False) -> str:
        """Make the devcontainer image available and return its reference."""
        if no_cache and not self.provider.capabilities.supports_no_cache:
            logger.warning("--no-cache is not supported by the %s provider; ignoring it", self.provider.kind.value)
        preparation = await self.provider.prepare(config)
        return await self.provider.build_image(config, preparation)

    async def container_for(self, config: ResolvedConfig) -> RunningContainer:
        """Handle of the container ``up`` created for ``config``."""
        preparation = await self.provider.prepare(config)
        return RunningContainer(name=preparation.container_name)

    async def exec(self, container: RunningContainer, command: List[str]) -> ExecResult:
        return await self.provider.exec(container, command)

    async def run_user_commands(self, config: ResolvedConfig, phase: LifecyclePhase) -> bool:
        """Run one hook against the existing container.

        Returns:
            False if the configuration defines no command for the hook

        Raises:
            ValueError: If ``phase`` is not a hook phase
            ProviderError: If a hook command fails
        """
        commands = {
            LifecyclePhase.POST_CREATE: config.post_create_command,
            LifecyclePhase.POST_ATTACH: config.post_attach_command,
        }
        if phase not in commands:
            raise ValueError(f"{phase} is not a user command phase")

        definition = commands[phase]
        if definition is None:
            logger.info("No %s command defined", phase)
            return False

        container = await self.container_for(config)
        await self.executor.run_hook(phase, definition, container)
        return True
