"""Plan the phases of bringing a devcontainer up."""

from typing import Optional

from ..models.config import CommandDefinition, ResolvedConfig
from ..models.lifecycle import (
    HookAction,
    LifecyclePhase,
    LifecyclePlan,
    LifecycleStep,
    UpOptions,
)
from .constants import NO_POST_ATTACH_REASON, NO_POST_CREATE_REASON


def hook_action(
    command: Optional[CommandDefinition],
    skip_reason: Optional[str],
    missing_reason: str,
) -> HookAction:
    """Decide whether a hook runs.

    An explicit skip wins over a missing command, which wins over running.
    """
    if skip_reason is not None:
        return HookAction.skip(skip_reason)
    if command is None:
        return HookAction.skip(missing_reason)
    return HookAction.execute()


def _hook_step(phase: LifecyclePhase, action: HookAction) -> LifecycleStep:
    if action.is_skip:
        return LifecycleStep(
            phase=phase,
            code=f"{phase}.skip",
            message=f"Skip {phase} command: {action.reason}",
            detail={"action": action.kind.value, "reason": action.reason},
            action=action,
        )
    return LifecycleStep(
        phase=phase,
        code=f"{phase}.execute",
        message=f"Run {phase} command",
        detail={"action": action.kind.value},
        action=action,
    )


def plan_for_up(config: ResolvedConfig, options: Optional[UpOptions] = None) -> LifecyclePlan:
    """Build the six-step plan for ``up``.

    Args:
        config: Resolved configuration
        options: Caller supplied skip reasons

    Returns:
        Plan with one step per phase in execution order
    """
    options = options or UpOptions()

    if config.image_reference:
        build_step = LifecycleStep(
            phase=LifecyclePhase.BUILD,
            code="build.pull-image",
            message=f"Ensure pre-built image {config.image_reference} is available",
            detail={"image": config.image_reference},
        )
    else:
        build_step = LifecycleStep(
            phase=LifecyclePhase.BUILD,
            code="build.dockerfile",
            message="Build image from workspace Dockerfile",
            detail={"dockerfile": str(config.dockerfile) if config.dockerfile else None},
        )

    steps = (
        LifecycleStep(
            phase=LifecyclePhase.RESOLVE,
            code="resolve.configuration",
            message="Resolve devcontainer configuration",
            detail={
                "config_path": str(config.config_path),
                "project_name": config.project_name,
            },
        ),
        build_step,
        LifecycleStep(
            phase=LifecyclePhase.CREATE,
            code="create.container",
            message="Create devcontainer",
            detail={"workspace_folder": str(config.workspace_folder)},
        ),
        LifecycleStep(
            phase=LifecyclePhase.START,
            code="start.container",
            message="Start devcontainer",
        ),
        _hook_step(
            LifecyclePhase.POST_CREATE,
            hook_action(
                config.post_create_command,
                options.skip_post_create_reason,
                NO_POST_CREATE_REASON,
            ),
        ),
        _hook_step(
            LifecyclePhase.POST_ATTACH,
            hook_action(
                config.post_attach_command,
                options.skip_post_attach_reason,
                NO_POST_ATTACH_REASON,
            ),
        ),
    )
    return LifecyclePlan(steps=steps)
