from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Final, Protocol, Sequence, runtime_checkable

from website_pipeline.actions import Action, ActionKind
from website_pipeline.core import PermissionSynthesisError, get_logger
from website_pipeline.resources import DeploymentEnvironment, ResourceRef

from .models import PolicyStatement

log = get_logger("website_pipeline.iam")


class Identity(StrEnum):
    build_executor = "build-executor"
    pipeline_executor = "pipeline-executor"
    invalidation_handler = "invalidation-handler"


class AddressingNeed(StrEnum):
    """
    Grants whose resource scope depends on what the platform can address.
    """

    function_invoke = "function-invoke"
    handler_logs = "handler-logs"
    job_results = "job-results"
    cache_invalidation = "cache-invalidation"


@runtime_checkable
class AddressingCapabilities(Protocol):
    def scope(self, need: AddressingNeed, *, target: str | None = None) -> tuple[str, ...]: ...


@dataclass(frozen=True, slots=True)
class PlatformWideAddressing:
    """
    Scopes for a platform without per-resource addressing for these grants:
    function listing, pipeline job results and cache invalidation are
    account-wide, and the handler's log group is unknown until it exists.
    """

    partition: str = "aws"

    def scope(self, need: AddressingNeed, *, target: str | None = None) -> tuple[str, ...]:
        if need is AddressingNeed.handler_logs:
            return (f"arn:{self.partition}:logs:*:*:*",)
        return ("*",)


@dataclass(frozen=True, slots=True)
class SynthesisContext:
    environment: DeploymentEnvironment
    artifact_store: ResourceRef | None = None
    content_store: ResourceRef | None = None
    build_project_name: str | None = None
    handler_arn: str | None = None
    distribution: ResourceRef | None = None
    addressing: AddressingCapabilities | None = None

    @property
    def capabilities(self) -> AddressingCapabilities:
        return self.addressing or PlatformWideAddressing(self.environment.partition)

    def require_artifact_store_arn(self) -> str:
        if self.artifact_store is None:
            raise PermissionSynthesisError("Artifact store reference is unset")
        return self.artifact_store.require_arn(purpose="artifact store access")

    def require_content_store_arn(self) -> str:
        if self.content_store is None:
            raise PermissionSynthesisError("Content store reference is unset")
        return self.content_store.require_arn(purpose="content store writes")

    def require_build_project_name(self) -> str:
        if not self.build_project_name:
            raise PermissionSynthesisError("Build project name is unset")
        return self.build_project_name


ActionPredicate = Callable[[Sequence[Action]], bool]
StatementBuilder = Callable[[SynthesisContext], tuple[PolicyStatement, ...]]


@dataclass(frozen=True, slots=True)
class _Rule:
    applies: ActionPredicate
    build: StatementBuilder


def _has(kind: ActionKind) -> ActionPredicate:
    return lambda actions: any(a.kind is kind for a in actions)


def _touches_artifacts(actions: Sequence[Action]) -> bool:
    return any(a.input_artifact or a.output_artifact for a in actions)


def _build_logs(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    name = ctx.require_build_project_name()
    return (
        PolicyStatement(
            sid="BuildLogs",
            actions=(
                "logs:CreateLogGroup",
                "logs:CreateLogStream",
                "logs:PutLogEvents",
            ),
            resources=ctx.environment.build_log_group_arns(name),
        ),
    )


def _artifact_store(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    arn = ctx.require_artifact_store_arn()
    return (
        PolicyStatement(
            sid="ArtifactStoreAccess",
            actions=("s3:GetObject", "s3:GetObjectVersion", "s3:PutObject"),
            resources=(f"{arn}/*",),
        ),
    )


def _build_trigger(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    name = ctx.require_build_project_name()
    return (
        PolicyStatement(
            sid="BuildTrigger",
            actions=("codebuild:BatchGetBuilds", "codebuild:StartBuild"),
            resources=(ctx.environment.build_project_arn(name),),
        ),
    )


def _content_store(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    arn = ctx.require_content_store_arn()
    return (
        PolicyStatement(
            sid="ContentStoreWrite",
            actions=("s3:PutObject", "s3:DeleteObject"),
            resources=(arn, f"{arn}/*"),
        ),
    )


def _handler_invoke(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    return (
        PolicyStatement(
            sid="HandlerInvoke",
            actions=("lambda:ListFunctions", "lambda:InvokeFunction"),
            resources=ctx.capabilities.scope(
                AddressingNeed.function_invoke, target=ctx.handler_arn
            ),
        ),
    )


def _handler_logs(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    return (
        PolicyStatement(
            sid="HandlerLogs",
            actions=("logs:*",),
            resources=ctx.capabilities.scope(
                AddressingNeed.handler_logs, target=ctx.handler_arn
            ),
        ),
    )


_JOB_RESULT_ACTIONS: Final[tuple[str, ...]] = (
    "codepipeline:PutJobSuccessResult",
    "codepipeline:PutJobFailureResult",
)
_INVALIDATION_ACTIONS: Final[tuple[str, ...]] = ("cloudfront:CreateInvalidation",)


def _job_results_and_invalidation(ctx: SynthesisContext) -> tuple[PolicyStatement, ...]:
    distribution_arn = ctx.distribution.arn if ctx.distribution is not None else None
    job_scope = ctx.capabilities.scope(AddressingNeed.job_results)
    invalidation_scope = ctx.capabilities.scope(
        AddressingNeed.cache_invalidation, target=distribution_arn
    )
    if job_scope == invalidation_scope:
        return (
            PolicyStatement(
                sid="JobResultsAndInvalidation",
                actions=_JOB_RESULT_ACTIONS + _INVALIDATION_ACTIONS,
                resources=job_scope,
            ),
        )
    return (
        PolicyStatement(sid="JobResults", actions=_JOB_RESULT_ACTIONS, resources=job_scope),
        PolicyStatement(
            sid="CacheInvalidation",
            actions=_INVALIDATION_ACTIONS,
            resources=invalidation_scope,
        ),
    )


# Which action kinds each identity carries out, and the grants those need.
_PERFORMS: Final[dict[Identity, frozenset[ActionKind]]] = {
    Identity.build_executor: frozenset({ActionKind.build}),
    Identity.pipeline_executor: frozenset(ActionKind),
    Identity.invalidation_handler: frozenset({ActionKind.invoke}),
}

_RULES: Final[dict[Identity, tuple[_Rule, ...]]] = {
    Identity.build_executor: (
        _Rule(_has(ActionKind.build), _build_logs),
        _Rule(_touches_artifacts, _artifact_store),
    ),
    Identity.pipeline_executor: (
        _Rule(_touches_artifacts, _artifact_store),
        _Rule(_has(ActionKind.build), _build_trigger),
        _Rule(_has(ActionKind.deploy), _content_store),
        _Rule(_has(ActionKind.invoke), _handler_invoke),
    ),
    Identity.invalidation_handler: (
        _Rule(_has(ActionKind.invoke), _handler_logs),
        _Rule(_has(ActionKind.invoke), _job_results_and_invalidation),
    ),
}


class PolicySynthesizer:
    """
    Derives the minimal statement set an identity needs for the actions it
    performs. Statements come out in fixed rule order, so identical inputs
    always give identical output.
    """

    def __init__(self, context: SynthesisContext) -> None:
        self.context = context

    def synthesize(
        self, identity: Identity, actions: Sequence[Action]
    ) -> tuple[PolicyStatement, ...]:
        actions = list(actions)
        if not actions:
            raise PermissionSynthesisError(f"No actions given for {identity.value}")

        allowed = _PERFORMS[identity]
        foreign = sorted({a.kind.value for a in actions if a.kind not in allowed})
        if foreign:
            raise PermissionSynthesisError(
                f"{identity.value} does not perform action kind(s): {foreign}"
            )

        statements: list[PolicyStatement] = []
        for rule in _RULES[identity]:
            if rule.applies(actions):
                statements.extend(rule.build(self.context))

        if not statements:
            raise PermissionSynthesisError(
                f"No permissions derived for {identity.value} from actions "
                f"{[a.name for a in actions]}"
            )

        log.debug(
            "Policy synthesized",
            identity=identity.value,
            actions=[a.name for a in actions],
            statements=[s.sid for s in statements],
        )
        return tuple(statements)
