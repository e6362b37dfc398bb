from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Mapping

from pydantic import BaseModel, ConfigDict, Field

from website_pipeline.core import ConfigurationError
from website_pipeline.iam.models import Role
from website_pipeline.resources import ResourceKind, ResourceRef

DISTRIBUTION_ID_ENV: Final[str] = "DISTRIBUTION_ID"


class HandlerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    runtime: str = Field(default="nodejs18.x", min_length=1)
    entrypoint: str = Field(default="index.handler", min_length=1)
    code_asset: str = Field(default="lib/invalidation-lambda", min_length=1)


@dataclass(frozen=True, slots=True)
class InvalidationHandler:
    """
    Function invoked as the pipeline's last action.

    Contract: it sees only DISTRIBUTION_ID in its environment and reports
    job success/failure back to the pipeline with its role's grants.
    """

    name: str
    arn: str
    runtime: str
    entrypoint: str
    code_asset: str
    role: Role
    environment: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "arn": self.arn,
            "runtime": self.runtime,
            "entrypoint": self.entrypoint,
            "code_asset": self.code_asset,
            "role": self.role.name,
            "environment": dict(self.environment),
        }


def make_invalidation_handler(
    *,
    name: str,
    arn: str,
    distribution: ResourceRef,
    settings: HandlerSettings,
    role: Role,
) -> InvalidationHandler:
    if distribution.kind is not ResourceKind.distribution:
        raise ConfigurationError(
            f"Invalidation handler needs a distribution reference, got {distribution.kind.value}"
        )
    return InvalidationHandler(
        name=name,
        arn=arn,
        runtime=settings.runtime,
        entrypoint=settings.entrypoint,
        code_asset=settings.code_asset,
        role=role,
        environment={DISTRIBUTION_ID_ENV: distribution.identifier},
    )
