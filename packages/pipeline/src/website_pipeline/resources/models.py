from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from website_pipeline.core import PermissionSynthesisError

ArnString = Annotated[
    str, StringConstraints(min_length=1, pattern=r"^arn:[a-z0-9\-]+:.+$")
]


class ResourceKind(StrEnum):
    bucket = "bucket"
    distribution = "distribution"


class ResourceRef(BaseModel):
    """
    Opaque handle to a pre-existing resource. Owned by the caller; the pipeline
    only references it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ResourceKind
    identifier: str = Field(..., min_length=1, examples=["my-site-content"])
    arn: Optional[ArnString] = None

    def require_arn(self, *, purpose: str) -> str:
        if not self.arn:
            raise PermissionSynthesisError(
                f"{self.kind.value} {self.identifier!r} has no ARN; required for {purpose}"
            )
        return self.arn


def bucket(identifier: str, arn: str | None = None) -> ResourceRef:
    return ResourceRef(kind=ResourceKind.bucket, identifier=identifier, arn=arn)


def distribution(identifier: str, arn: str | None = None) -> ResourceRef:
    return ResourceRef(kind=ResourceKind.distribution, identifier=identifier, arn=arn)


class DeploymentEnvironment(BaseModel):
    """
    Account/region the declarations target; derives ARNs for resources the
    pipeline itself names (log groups, build project, function, roles).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    account: str = Field(..., pattern=r"^\d{12}$")
    region: str = Field(..., pattern=r"^[a-z]{2}(-[a-z]+)+-\d$")
    partition: str = Field(default="aws", min_length=1)

    def build_log_group_arns(self, project_name: str) -> tuple[str, str]:
        group = (
            f"arn:{self.partition}:logs:{self.region}:{self.account}"
            f":log-group:/aws/codebuild/{project_name}"
        )
        return group, f"{group}:*"

    def build_project_arn(self, project_name: str) -> str:
        return f"arn:{self.partition}:codebuild:{self.region}:{self.account}:project/{project_name}"

    def function_arn(self, function_name: str) -> str:
        return f"arn:{self.partition}:lambda:{self.region}:{self.account}:function:{function_name}"

    def role_arn(self, role_name: str) -> str:
        return f"arn:{self.partition}:iam::{self.account}:role/{role_name}"
