from .models import (
    DeploymentEnvironment,
    ResourceKind,
    ResourceRef,
    bucket,
    distribution,
)

__all__ = [
    "DeploymentEnvironment",
    "ResourceKind",
    "ResourceRef",
    "bucket",
    "distribution",
]
