from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import ProvisionCtx
from .errors import ProvisionError
from .state_store import mark_step_completed, record_warning

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    START = "start"
    PREREQUISITES_CHECKED = "prerequisites_checked"
    SYSTEM_PACKAGES_INSTALLED = "system_packages_installed"
    ENVIRONMENT_READY = "environment_ready"
    DEPENDENCIES_INSTALLED = "dependencies_installed"
    CLI_INSTALLED = "cli_installed"
    PLUGINS_BUILT = "plugins_built"
    PINS_REAPPLIED = "pins_reapplied"
    SUMMARIZED = "summarized"


class StepStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    messages: List[str] = field(default_factory=list)
    hint: Optional[str] = None

    @classmethod
    def ok(cls) -> "StepResult":
        return cls(StepStatus.OK)

    @classmethod
    def warning(cls, *messages: str) -> "StepResult":
        return cls(StepStatus.WARNING, list(messages))

    @classmethod
    def fatal(cls, message: str, *, hint: Optional[str] = None) -> "StepResult":
        return cls(StepStatus.FATAL, [message], hint=hint)

    @classmethod
    def from_warnings(cls, warnings: List[str]) -> "StepResult":
        return cls.warning(*warnings) if warnings else cls.ok()


class Step(Protocol):
    """A single idempotent provisioning step."""

    step_id: str
    reaches: Stage

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    stage: Stage
    ran_steps: List[str]
    failed_step: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None


def run_pipeline(*, ctx: ProvisionCtx, state: Dict[str, Any], steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. The first fatal result stops the run; nothing is rolled back."""

    ran: List[str] = []
    stage = Stage.START
    exe = state.setdefault("execution", {})

    for step in steps:
        exe["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)

        try:
            result = step.run(ctx, state)
        except ProvisionError as e:
            result = StepResult.fatal(str(e), hint=e.hint)

        ran.append(step.step_id)

        if result.status is StepStatus.FATAL:
            message = result.messages[0] if result.messages else "step failed"
            logger.error("%s: %s", step.step_id, message)
            if result.hint:
                logger.error("%s", result.hint)
            exe.setdefault("errors", []).append({"step": step.step_id, "error": message, "hint": result.hint})
            exe["stage"] = stage.value
            return PipelineResult(
                state=state,
                stage=stage,
                ran_steps=ran,
                failed_step=step.step_id,
                error=message,
                hint=result.hint,
            )

        for msg in result.messages:
            record_warning(state, step.step_id, msg)

        mark_step_completed(state, step.step_id)
        stage = step.reaches
        exe["stage"] = stage.value

    exe["current_step"] = None
    return PipelineResult(state=state, stage=stage, ran_steps=ran)
