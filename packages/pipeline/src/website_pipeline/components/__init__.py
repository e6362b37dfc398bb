from .build_project import BuildProject, ComputeType
from .handler import (
    DISTRIBUTION_ID_ENV,
    HandlerSettings,
    InvalidationHandler,
    make_invalidation_handler,
)

__all__ = [
    "BuildProject",
    "ComputeType",
    "DISTRIBUTION_ID_ENV",
    "HandlerSettings",
    "InvalidationHandler",
    "make_invalidation_handler",
]
