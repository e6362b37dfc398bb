from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Sequence

from website_pipeline.actions import Action, ActionKind
from website_pipeline.core import StructuralValidationError
from website_pipeline.resources import ResourceRef


class StageName(StrEnum):
    source = "Source"
    build = "Build"
    deploy = "Deploy"
    invalidation = "Invalidation"


STAGE_ORDER: Final[tuple[StageName, ...]] = (
    StageName.source,
    StageName.build,
    StageName.deploy,
    StageName.invalidation,
)

STAGE_ACTION_KIND: Final[dict[StageName, ActionKind]] = {
    StageName.source: ActionKind.checkout,
    StageName.build: ActionKind.build,
    StageName.deploy: ActionKind.deploy,
    StageName.invalidation: ActionKind.invoke,
}

# (needs input, needs output) per action kind
_ARTIFACT_SHAPE: Final[dict[ActionKind, tuple[bool, bool]]] = {
    ActionKind.checkout: (False, True),
    ActionKind.build: (True, True),
    ActionKind.deploy: (True, False),
    ActionKind.invoke: (False, False),
}


@dataclass(frozen=True, slots=True)
class Stage:
    name: StageName
    actions: tuple[Action, ...]

    def ordered_actions(self) -> tuple[Action, ...]:
        return tuple(sorted(self.actions, key=lambda a: a.run_order))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "actions": [a.to_dict() for a in self.ordered_actions()],
        }


def _check_stage_order(stages: Sequence[Stage]) -> None:
    names = tuple(s.name for s in stages)
    if names != STAGE_ORDER:
        raise StructuralValidationError(
            f"Stage order must be {[s.value for s in STAGE_ORDER]}, "
            f"got {[str(n) for n in names]}"
        )


def _check_run_order(stage: Stage) -> None:
    orders = [a.run_order for a in stage.actions]
    if any(o < 1 for o in orders):
        raise StructuralValidationError(
            f"Stage {stage.name.value}: run order must be >= 1, got {orders}"
        )
    if any(b <= a for a, b in zip(orders, orders[1:])):
        raise StructuralValidationError(
            f"Stage {stage.name.value}: run orders must be unique and strictly "
            f"increasing, got {orders}"
        )


def _check_action_shape(stage: Stage, action: Action) -> None:
    expected = STAGE_ACTION_KIND[stage.name]
    if action.kind is not expected:
        raise StructuralValidationError(
            f"Stage {stage.name.value} only admits {expected.value} actions, "
            f"got {action.kind.value} ({action.name})"
        )
    needs_input, needs_output = _ARTIFACT_SHAPE[action.kind]
    if bool(action.input_artifact) != needs_input:
        raise StructuralValidationError(
            f"{action.kind.value} action {action.name} "
            + ("must consume an artifact" if needs_input else "must not consume an artifact")
        )
    if bool(action.output_artifact) != needs_output:
        raise StructuralValidationError(
            f"{action.kind.value} action {action.name} "
            + ("must produce an artifact" if needs_output else "must not produce an artifact")
        )


def validate_topology(stages: Sequence[Stage]) -> None:
    """
    Raises StructuralValidationError on the first violation found:
    stage order, empty stages, action kind per stage, run order, duplicate
    action names, artifact shape and artifact wiring.
    """
    _check_stage_order(stages)

    produced: set[str] = set()
    names: set[str] = set()
    for stage in stages:
        if not stage.actions:
            raise StructuralValidationError(f"Stage {stage.name.value} has no actions")
        _check_run_order(stage)

        for action in stage.ordered_actions():
            if action.name in names:
                raise StructuralValidationError(f"Duplicate action name: {action.name}")
            names.add(action.name)

            _check_action_shape(stage, action)

            if action.input_artifact and action.input_artifact not in produced:
                raise StructuralValidationError(
                    f"Action {action.name} consumes {action.input_artifact!r}, "
                    f"which no earlier action produces (available: {sorted(produced)})"
                )
            if action.output_artifact:
                if action.output_artifact in produced:
                    raise StructuralValidationError(
                        f"Artifact {action.output_artifact!r} is produced more than once"
                    )
                produced.add(action.output_artifact)


@dataclass(frozen=True, slots=True)
class Pipeline:
    """
    Immutable pipeline definition. Changes mean building a new one.
    """

    name: str
    stages: tuple[Stage, ...]
    artifact_store: ResourceRef
    role_arn: str

    def __post_init__(self) -> None:
        validate_topology(self.stages)

    @property
    def stage_names(self) -> list[str]:
        return [s.name.value for s in self.stages]

    def actions(self) -> tuple[Action, ...]:
        return tuple(a for s in self.stages for a in s.ordered_actions())

    def find_action(self, name: str) -> Action | None:
        for a in self.actions():
            if a.name == name:
                return a
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "role_arn": self.role_arn,
            "artifact_store": self.artifact_store.identifier,
            "stages": [s.to_dict() for s in self.stages],
        }
