from .execution import (
    ActionExecutor,
    ExecutionReport,
    ExecutionStatus,
    StageOutcome,
    execute_pipeline,
)
from .models import (
    STAGE_ACTION_KIND,
    STAGE_ORDER,
    Pipeline,
    Stage,
    StageName,
    validate_topology,
)
from .topology import assemble_pipeline, pipeline_name

__all__ = [
    "ActionExecutor",
    "ExecutionReport",
    "ExecutionStatus",
    "StageOutcome",
    "execute_pipeline",
    "STAGE_ACTION_KIND",
    "STAGE_ORDER",
    "Pipeline",
    "Stage",
    "StageName",
    "validate_topology",
    "assemble_pipeline",
    "pipeline_name",
]
