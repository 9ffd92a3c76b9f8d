"""Pipeline step records"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class StepName(Enum):
    """Pipeline steps in execution order, valued by their display label"""

    BUILD = "Build"
    PUBLISH = "Publish"
    CONNECT = "Connect"
    PROVISION_RUNTIME = ".NET Install"
    PROVISION_DEBUG_AGENT = "VSDBG Install"
    MANAGE_TARGET_DIR = "Manage Folders"
    UPLOAD = "File Transfer"
    EMIT_CONFIG = "Generate launch.json"
    LAUNCH = "Launch VSDBG"


class StepOutcome(Enum):
    SUCCEEDED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PipelineStep:
    """Outcome of one step, reported to the progress sink and never persisted"""

    name: StepName
    outcome: StepOutcome
    message: str = ""

    @property
    def status_text(self) -> str:
        return f"Step '{self.name.value}' {self.outcome.value}"


@dataclass
class PipelineResult:
    """Everything that happened during one pipeline run"""

    steps: List[PipelineStep] = field(default_factory=list)
    cancelled: bool = False
    error: Optional[str] = None

    @property
    def failed_step(self) -> Optional[PipelineStep]:
        for step in self.steps:
            if step.outcome is StepOutcome.FAILED:
                return step
        return None

    @property
    def succeeded(self) -> bool:
        return not self.cancelled and self.error is None and self.failed_step is None

    @property
    def step_names(self) -> List[StepName]:
        return [step.name for step in self.steps]
