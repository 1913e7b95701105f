"""Lifecycle plan and outcome models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .container import RunningContainer


class LifecyclePhase(str, Enum):
    """Phases of bringing a devcontainer up, in execution order."""

    RESOLVE = "resolve"
    BUILD = "build"
    CREATE = "create"
    START = "start"
    POST_CREATE = "postCreate"
    POST_ATTACH = "postAttach"

    def __str__(self) -> str:
        return self.value


PHASE_ORDER: Tuple[LifecyclePhase, ...] = (
    LifecyclePhase.RESOLVE,
    LifecyclePhase.BUILD,
    LifecyclePhase.CREATE,
    LifecyclePhase.START,
    LifecyclePhase.POST_CREATE,
    LifecyclePhase.POST_ATTACH,
)

HOOK_PHASES: Tuple[LifecyclePhase, ...] = (
    LifecyclePhase.POST_CREATE,
    LifecyclePhase.POST_ATTACH,
)


class HookActionKind(str, Enum):
    EXECUTE = "execute"
    SKIP = "skip"


@dataclass(frozen=True)
class HookAction:
    """Whether a hook phase runs its command, and why not if it doesn't."""

    kind: HookActionKind
    reason: Optional[str] = None

    @classmethod
    def execute(cls) -> 'HookAction':
        return cls(HookActionKind.EXECUTE)

    @classmethod
    def skip(cls, reason: str) -> 'HookAction':
        return cls(HookActionKind.SKIP, reason)

    @property
    def is_skip(self) -> bool:
        return self.kind is HookActionKind.SKIP


@dataclass(frozen=True)
class LifecycleStep:
    """One planned phase."""

    phase: LifecyclePhase
    code: str
    message: str
    detail: Mapping[str, Any] = field(default_factory=dict)
    action: Optional[HookAction] = None


@dataclass(frozen=True)
class LifecyclePlan:
    """Ordered steps for one ``up`` run.

    Raises:
        ValueError: If the steps do not cover every phase exactly once in order
    """

    steps: Tuple[LifecycleStep, ...]

    def __post_init__(self):
        phases = tuple(step.phase for step in self.steps)
        if phases != PHASE_ORDER:
            raise ValueError(
                "Lifecycle plan phases must be "
                f"{[str(p) for p in PHASE_ORDER]}, got {[str(p) for p in phases]}"
            )

    def step(self, phase: LifecyclePhase) -> LifecycleStep:
        """Get the step planned for ``phase``."""
        return self.steps[PHASE_ORDER.index(phase)]

    @property
    def phases(self) -> List[LifecyclePhase]:
        return [step.phase for step in self.steps]


@dataclass(frozen=True)
class UpOptions:
    """Caller choices for ``up``."""

    skip_post_create_reason: Optional[str] = None
    skip_post_attach_reason: Optional[str] = None


@dataclass
class LifecycleOutcome:
    """Container handle plus the phases that ran."""

    container: RunningContainer
    executed_phases: List[LifecyclePhase] = field(default_factory=list)


@dataclass(frozen=True)
class LifecycleEvent:
    """Progress notification emitted by the executor."""

    phase: LifecyclePhase
    status: str
    detail: Dict[str, Any] = field(default_factory=dict)
