from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from website_pipeline.actions import Action
from website_pipeline.core import get_logger
from website_pipeline.resources import DeploymentEnvironment

from .models import Policy, PolicyStatement, Role
from .synthesizer import Identity, PolicySynthesizer

log = get_logger("website_pipeline.iam")


class RolePrincipals(BaseModel):
    """
    Service principal trusted by each identity. Kept separate per identity so
    a shared value is always an explicit choice.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    build: str = Field(default="codebuild.amazonaws.com", min_length=1)
    pipeline: str = Field(default="codepipeline.amazonaws.com", min_length=1)
    handler: str = Field(default="lambda.amazonaws.com", min_length=1)


@dataclass(frozen=True, slots=True)
class ExecutionRoles:
    build: Role
    pipeline: Role


def make_role(
    *,
    name: str,
    policy_name: str,
    environment: DeploymentEnvironment,
    principal: str,
    statements: Sequence[PolicyStatement],
) -> Role:
    policy = Policy(name=policy_name, statements=tuple(statements))
    role = Role(
        name=name,
        arn=environment.role_arn(name),
        assumed_by=principal,
        policy=policy,
    )
    log.debug(
        "Role defined",
        role=role.name,
        assumed_by=principal,
        statements=[s.sid for s in policy.statements],
    )
    return role


def build_execution_roles(
    *,
    prefix: str,
    environment: DeploymentEnvironment,
    synthesizer: PolicySynthesizer,
    build_actions: Sequence[Action],
    pipeline_actions: Sequence[Action],
    principals: RolePrincipals | None = None,
) -> ExecutionRoles:
    """
    One role per executing identity, each bound to exactly the statements
    synthesized for that identity's actions.
    """
    principals = principals or RolePrincipals()

    build = make_role(
        name=f"{prefix}-codebuild-role",
        policy_name=f"{prefix}-codebuild",
        environment=environment,
        principal=principals.build,
        statements=synthesizer.synthesize(Identity.build_executor, build_actions),
    )
    pipeline = make_role(
        name=f"{prefix}-codepipeline-role",
        policy_name=f"{prefix}-codepipeline",
        environment=environment,
        principal=principals.pipeline,
        statements=synthesizer.synthesize(Identity.pipeline_executor, pipeline_actions),
    )
    return ExecutionRoles(build=build, pipeline=pipeline)


def make_handler_role(
    *,
    prefix: str,
    environment: DeploymentEnvironment,
    synthesizer: PolicySynthesizer,
    invoke_actions: Sequence[Action],
    principals: RolePrincipals | None = None,
) -> Role:
    principals = principals or RolePrincipals()
    return make_role(
        name=f"{prefix}-invalidation-role",
        policy_name=f"{prefix}-invalidation",
        environment=environment,
        principal=principals.handler,
        statements=synthesizer.synthesize(Identity.invalidation_handler, invoke_actions),
    )
