from __future__ import annotations

import traceback
from dataclasses import dataclass


class PipelineDefinitionError(RuntimeError):
    """Base error"""


@dataclass(frozen=True, slots=True)
class StageError:
    """
    A normalized error record for stage failures.
    """

    exc_type: str
    message: str
    traceback: str


def stage_error_from_exc(exc: BaseException) -> StageError:
    return StageError(
        exc_type=type(exc).__name__,
        message=str(exc),
        traceback=traceback.format_exc(),
    )


class ConfigurationError(PipelineDefinitionError):
    """
    Missing or invalid required input (absent content store, wrong resource kind,
    empty webhook filter list). Nothing is created.
    """


class StructuralValidationError(PipelineDefinitionError):
    """
    Topology violation: stage order, run order, action kind or artifact wiring
    """


class PermissionSynthesisError(PipelineDefinitionError):
    """
    A statement cannot be scoped: resource reference is unset or has no ARN
    """


class TemplateValidationError(PipelineDefinitionError):
    """Rendered template did not validate against the shipped JSON schema"""


class ExecutionError(RuntimeError):
    """
    Raised while a defined pipeline runs (missing executor, unavailable
    artifact). Not a definition error: the pipeline itself is valid.
    """
