from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping, Optional, Protocol

from website_pipeline.actions import Action, ActionKind
from website_pipeline.core import (
    ExecutionError,
    ILogger,
    StageError,
    get_logger,
    monotonic_ms,
    stage_error_from_exc,
    utc_now_iso,
)

from .models import Pipeline, Stage


def format_duration_ms(ms: int) -> str:
    """Return a short human-readable duration string."""
    if ms < 1000:
        return f"{ms} ms"
    return f"{ms / 1000:.2f} s"


class ExecutionStatus(StrEnum):
    succeeded = "Succeeded"
    failed = "Failed"
    skipped = "Skipped"


class ActionExecutor(Protocol):
    """
    Stand-in for the platform's executor of one action kind. Returns the
    payload of the action's output artifact (None when it declares none) and
    raises to report failure.
    """

    def __call__(self, action: Action, inputs: Mapping[str, Any]) -> Any: ...


@dataclass(slots=True)
class StageOutcome:
    stage: str
    status: ExecutionStatus
    started_at_utc: Optional[str] = None
    finished_at_utc: Optional[str] = None
    duration_ms: int = 0
    actions: list[str] = field(default_factory=list)
    error: Optional[StageError] = None


@dataclass(slots=True)
class ExecutionReport:
    pipeline: str
    status: ExecutionStatus
    stages: list[StageOutcome] = field(default_factory=list)
    artifacts: dict[str, Any] = field(default_factory=dict)

    def outcome(self, stage: str) -> StageOutcome:
        for s in self.stages:
            if s.stage == stage:
                return s
        raise KeyError(stage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pipeline": self.pipeline,
            "status": self.status.value,
            "stages": [
                {
                    "stage": s.stage,
                    "status": s.status.value,
                    "duration_ms": s.duration_ms,
                    "actions": list(s.actions),
                    "error": (
                        {"exc_type": s.error.exc_type, "message": s.error.message}
                        if s.error
                        else None
                    ),
                }
                for s in self.stages
            ],
            "artifacts": sorted(self.artifacts.keys()),
        }


def _run_stage(
    *,
    stage: Stage,
    executors: Mapping[ActionKind, ActionExecutor],
    artifacts: dict[str, Any],
    log: ILogger,
    position: str,
) -> StageOutcome:
    t0 = monotonic_ms()
    started_at = utc_now_iso()
    log.info("Stage starting", position=position, started_at=started_at)

    ran: list[str] = []
    try:
        for action in stage.ordered_actions():
            executor = executors.get(action.kind)
            if executor is None:
                raise ExecutionError(f"No executor for {action.kind.value} actions")

            inputs: dict[str, Any] = {}
            if action.input_artifact:
                if action.input_artifact not in artifacts:
                    raise ExecutionError(
                        f"Artifact {action.input_artifact!r} not available for {action.name}"
                    )
                inputs[action.input_artifact] = artifacts[action.input_artifact]

            out = executor(action, inputs)
            ran.append(action.name)
            if action.output_artifact:
                artifacts[action.output_artifact] = out

    except Exception as e:
        duration = monotonic_ms() - t0
        log.error(
            "Stage failed",
            position=position,
            duration_ms=duration,
            duration=format_duration_ms(duration),
            error=str(e),
        )
        return StageOutcome(
            stage=stage.name.value,
            status=ExecutionStatus.failed,
            started_at_utc=started_at,
            finished_at_utc=utc_now_iso(),
            duration_ms=duration,
            actions=ran,
            error=stage_error_from_exc(e),
        )

    duration = monotonic_ms() - t0
    log.info(
        "Stage succeeded",
        position=position,
        duration_ms=duration,
        duration=format_duration_ms(duration),
        actions=ran,
    )
    return StageOutcome(
        stage=stage.name.value,
        status=ExecutionStatus.succeeded,
        started_at_utc=started_at,
        finished_at_utc=utc_now_iso(),
        duration_ms=duration,
        actions=ran,
    )


def execute_pipeline(
    pipeline: Pipeline,
    executors: Mapping[ActionKind, ActionExecutor],
    *,
    logger: ILogger | None = None,
) -> ExecutionReport:
    """
    Walk the stages the way the orchestrator does: one stage at a time, each
    action gated on its input artifact. The first failure ends the run and
    every later stage is reported as skipped. No retries.
    """
    log = logger or get_logger("website_pipeline.execution")
    log = log.bind(pipeline=pipeline.name)

    artifacts: dict[str, Any] = {}
    outcomes: list[StageOutcome] = []
    failed = False

    total = len(pipeline.stages)
    for idx, stage in enumerate(pipeline.stages, start=1):
        if failed:
            outcomes.append(
                StageOutcome(stage=stage.name.value, status=ExecutionStatus.skipped)
            )
            continue

        res = _run_stage(
            stage=stage,
            executors=executors,
            artifacts=artifacts,
            log=log.bind(stage=stage.name.value),
            position=f"{idx}/{total}",
        )
        outcomes.append(res)
        if res.status is ExecutionStatus.failed:
            log.error("Stopping on first failure", stage=stage.name.value)
            failed = True

    status = ExecutionStatus.failed if failed else ExecutionStatus.succeeded
    log.info("Execution complete", status=status.value)
    return ExecutionReport(
        pipeline=pipeline.name, status=status, stages=outcomes, artifacts=artifacts
    )
