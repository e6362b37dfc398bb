from __future__ import annotations

from typing import Mapping, Sequence

from website_pipeline.actions import Action
from website_pipeline.core import ConfigurationError, StructuralValidationError, get_logger
from website_pipeline.iam import Role
from website_pipeline.resources import ResourceKind, ResourceRef

from .models import STAGE_ORDER, Pipeline, Stage, StageName

log = get_logger("website_pipeline.pipeline")


def pipeline_name(stage_label: str, project_name: str) -> str:
    return f"{stage_label}-{project_name}"


def assemble_pipeline(
    *,
    name: str,
    artifact_store: ResourceRef,
    role: Role,
    stages: Mapping[StageName, Sequence[Action]],
) -> Pipeline:
    """
    Attach the pipeline role to every action and build the Pipeline in the
    fixed stage order. Raises before anything is returned if wiring is off.
    """
    if artifact_store.kind is not ResourceKind.bucket:
        raise ConfigurationError(
            f"Artifact store must be a bucket, got {artifact_store.kind.value}"
        )

    unknown = sorted(str(k) for k in stages if k not in STAGE_ORDER)
    if unknown:
        raise StructuralValidationError(f"Unknown stage(s): {unknown}")
    missing = [s.value for s in STAGE_ORDER if s not in stages]
    if missing:
        raise StructuralValidationError(f"Missing stage(s): {missing}")

    built = tuple(
        Stage(
            name=stage_name,
            actions=tuple(a.with_role(role.arn) for a in stages[stage_name]),
        )
        for stage_name in STAGE_ORDER
    )
    pipeline = Pipeline(
        name=name,
        stages=built,
        artifact_store=artifact_store,
        role_arn=role.arn,
    )
    log.debug(
        "Pipeline assembled",
        pipeline=pipeline.name,
        stages=pipeline.stage_names,
        actions=[a.name for a in pipeline.actions()],
    )
    return pipeline
