"""Models for devcontainer-cli."""

from .config import (
    CommandArgs,
    CommandDefinition,
    ConfigOverrides,
    ConfigSource,
    ForwardPort,
    PortProtocol,
    RawConfig,
    ResolvedConfig,
    command_to_argv,
)
from .container import (
    CleanupOptions,
    ExecResult,
    ImageBuild,
    ImageReference,
    ProviderPreparation,
    RunningContainer,
    VolumeSpec,
)
from .lifecycle import (
    HookAction,
    HookActionKind,
    LifecycleEvent,
    LifecycleOutcome,
    LifecyclePhase,
    LifecyclePlan,
    LifecycleStep,
    UpOptions,
)

__all__ = [
    'CommandArgs',
    'CommandDefinition',
    'ConfigOverrides',
    'ConfigSource',
    'ForwardPort',
    'PortProtocol',
    'RawConfig',
    'ResolvedConfig',
    'command_to_argv',
    'CleanupOptions',
    'ExecResult',
    'ImageBuild',
    'ImageReference',
    'ProviderPreparation',
    'RunningContainer',
    'VolumeSpec',
    'HookAction',
    'HookActionKind',
    'LifecycleEvent',
    'LifecycleOutcome',
    'LifecyclePhase',
    'LifecyclePlan',
    'LifecycleStep',
    'UpOptions',
]
