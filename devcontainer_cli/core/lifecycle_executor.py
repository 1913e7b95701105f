"""Execute a lifecycle plan against a provider."""

import logging
from typing import Callable, List, Optional, Tuple

from ..models.config import CommandDefinition, ResolvedConfig, command_to_argv
from ..models.container import RunningContainer
from ..models.lifecycle import (
    HOOK_PHASES,
    LifecycleEvent,
    LifecycleOutcome,
    LifecyclePhase,
    LifecyclePlan,
)
from ..services.exceptions import ProviderError
from ..services.provider import Provider

logger = logging.getLogger(__name__)

EventSink = Callable[[LifecycleEvent], None]


def hook_commands(definition: CommandDefinition) -> List[Tuple[Optional[str], List[str]]]:
    """Expand a hook definition into ``(name, argv)`` pairs.

    Single commands have no name. Named commands are returned sorted by
    name so they always run in the same order.
    """
    if isinstance(definition, dict):
        return [
            (name, command_to_argv(definition[name]))
            for name in sorted(definition)
        ]
    return [(None, command_to_argv(definition))]


class LifecycleExecutor:
    """Walks a :class:`LifecyclePlan` using one provider.

    Phases run strictly in order and the first failure stops the run. A
    container that was already created is left in place so a failing hook
    can be inspected.
    """

    def __init__(self, provider: Provider, event_sink: Optional[EventSink] = None):
        self.provider = provider
        self.event_sink = event_sink

    def _emit(self, phase: LifecyclePhase, status: str, **detail) -> None:
        if self.event_sink is not None:
            self.event_sink(LifecycleEvent(phase=phase, status=status, detail=detail))

    async def run_hook(
        self,
        phase: LifecyclePhase,
        definition: CommandDefinition,
        container: RunningContainer,
    ) -> None:
        """Run every command of a hook, stopping at the first failure.

        Raises:
            ProviderError: If a command exits non-zero
        """
        for name, argv in hook_commands(definition):
            label = f"{phase} command '{name}'" if name else f"{phase} command"
            logger.info("Running %s: %s", label, " ".join(argv))
            result = await self.provider.exec(container, argv)
            if result.exit_code != 0:
                message = f"{label} failed with exit code {result.exit_code}"
                stderr = result.stderr.strip()
                if stderr:
                    message = f"{message}: {stderr}"
                raise ProviderError(message, exit_code=result.exit_code, stderr=result.stderr)

    async def execute(self, config: ResolvedConfig, plan: LifecyclePlan) -> LifecycleOutcome:
        """Run the plan.

        Args:
            config: Resolved configuration
            plan: Plan produced by :func:`plan_for_up`

        Returns:
            The container plus the phases that were executed

        Raises:
            ConfigurationError: If the provider rejects the configuration
            ProviderError: If any engine operation or hook command fails
            ValueError: If the plan runs a hook the configuration does not define
        """
        commands = {
            LifecyclePhase.POST_CREATE: config.post_create_command,
            LifecyclePhase.POST_ATTACH: config.post_attach_command,
        }
        for phase in HOOK_PHASES:
            action = plan.step(phase).action
            if action is not None and not action.is_skip and commands[phase] is None:
                raise ValueError(f"Plan executes {phase} but the configuration defines no {phase} command")

        logger.info("Starting lifecycle execution for %s", config.project_name)
        logger.debug("Plan has %d steps", len(plan.steps))
        executed: List[LifecyclePhase] = []

        self._emit(LifecyclePhase.RESOLVE, "started")
        preparation = await self.provider.prepare(config)
        executed.append(LifecyclePhase.RESOLVE)
        self._emit(LifecyclePhase.RESOLVE, "completed", container_name=preparation.container_name)

        await self.provider.ensure_networks(config, preparation)
        await self.provider.ensure_volumes(config, preparation)

        self._emit(LifecyclePhase.BUILD, "started")
        image_reference = await self.provider.build_image(config, preparation)
        executed.append(LifecyclePhase.BUILD)
        self._emit(LifecyclePhase.BUILD, "completed", image=image_reference)

        self._emit(LifecyclePhase.CREATE, "started")
        container = await self.provider.create_container(config, preparation, image_reference)
        executed.append(LifecyclePhase.CREATE)
        self._emit(LifecyclePhase.CREATE, "completed", container=container.name or container.id)

        self._emit(LifecyclePhase.START, "started")
        await self.provider.start_container(container)
        executed.append(LifecyclePhase.START)
        self._emit(LifecyclePhase.START, "completed")

        for phase in HOOK_PHASES:
            action = plan.step(phase).action
            if action is None or action.is_skip:
                reason = action.reason if action is not None else "no action planned"
                logger.info("Skipping %s: %s", phase, reason)
                self._emit(phase, "skipped", reason=reason)
            else:
                self._emit(phase, "started")
                await self.run_hook(phase, commands[phase], container)
                self._emit(phase, "completed")
            executed.append(phase)

        logger.info("Devcontainer %s is ready", container.name or container.id)
        return LifecycleOutcome(container=container, executed_phases=executed)
