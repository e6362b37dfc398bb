from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    StringConstraints,
    ValidationError,
    field_validator,
    model_validator,
)

from website_pipeline.actions import (
    BranchMapping,
    build_action,
    checkout_action,
    deploy_action,
    invoke_action,
)
from website_pipeline.components import (
    BuildProject,
    ComputeType,
    HandlerSettings,
    InvalidationHandler,
    make_invalidation_handler,
)
from website_pipeline.core import (
    ConfigurationError,
    ILogger,
    PipelineDefinitionError,
    get_logger,
)
from website_pipeline.iam import (
    AddressingCapabilities,
    PolicySynthesizer,
    Role,
    RolePrincipals,
    SynthesisContext,
    build_execution_roles,
    make_handler_role,
)
from website_pipeline.pipeline import Pipeline, StageName, assemble_pipeline, pipeline_name
from website_pipeline.resources import DeploymentEnvironment, ResourceKind, ResourceRef
from website_pipeline.trigger import (
    BRANCH_REF_FILTER,
    InvokePermission,
    Webhook,
    WebhookFilter,
    bind_triggers,
)

NamePart = Annotated[
    str,
    StringConstraints(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9][A-Za-z0-9_\-]*$"),
]


class WebsitePipelineProps(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    stage: NamePart = Field(..., examples=["dev", "prod"])
    project_name: NamePart
    environment: DeploymentEnvironment

    artifact_store: ResourceRef
    content_store: ResourceRef
    distribution: ResourceRef

    source_owner: str = Field(..., min_length=1)
    repository_name: str = Field(..., min_length=1)
    oauth_token: SecretStr

    build_image: str = Field(..., min_length=1, examples=["aws/codebuild/standard:7.0"])
    build_compute_type: ComputeType = ComputeType.small

    branches: BranchMapping = Field(default_factory=BranchMapping)
    principals: RolePrincipals = Field(default_factory=RolePrincipals)
    handler: HandlerSettings = Field(default_factory=HandlerSettings)
    webhook_filters: tuple[WebhookFilter, ...] = Field(
        default=(BRANCH_REF_FILTER,), min_length=1
    )

    @field_validator("oauth_token")
    @classmethod
    def _token_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("oauth_token must not be empty")
        return v

    @model_validator(mode="after")
    def _validate_kinds(self) -> "WebsitePipelineProps":
        expected = {
            "artifact_store": ResourceKind.bucket,
            "content_store": ResourceKind.bucket,
            "distribution": ResourceKind.distribution,
        }
        for field_name, kind in expected.items():
            ref: ResourceRef = getattr(self, field_name)
            if ref.kind is not kind:
                raise ValueError(
                    f"{field_name} must be a {kind.value} reference, got {ref.kind.value}"
                )
        return self

    @property
    def prefix(self) -> str:
        return pipeline_name(self.stage, self.project_name)


def _format_errors(e: ValidationError) -> str:
    lines: list[str] = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        lines.append(f"- {loc}: {err.get('msg')}")
    return "\n".join(lines)


def load_props(data: Mapping[str, Any] | WebsitePipelineProps) -> WebsitePipelineProps:
    """
    Validate raw props. Pydantic failures surface as ConfigurationError.
    """
    if isinstance(data, WebsitePipelineProps):
        return data
    try:
        return WebsitePipelineProps.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError("Invalid pipeline props:\n" + _format_errors(e)) from e


@dataclass(frozen=True, slots=True)
class WebsitePipelineStack:
    """
    Everything one definition produces. Only returned once every part exists.
    """

    stage_label: str
    project_name: str
    environment: DeploymentEnvironment
    pipeline: Pipeline
    build_project: BuildProject
    build_role: Role
    pipeline_role: Role
    invalidation_handler: InvalidationHandler
    webhook: Webhook
    invoke_permission: InvokePermission

    @property
    def roles(self) -> tuple[Role, ...]:
        return (self.build_role, self.pipeline_role, self.invalidation_handler.role)

    def outputs(self) -> dict[str, Any]:
        return {
            "pipeline_name": self.pipeline.name,
            "stages": self.pipeline.stage_names,
            "build_project_name": self.build_project.name,
            "build_project_arn": self.build_project.arn,
            "invalidation_handler_name": self.invalidation_handler.name,
            "invalidation_handler_arn": self.invalidation_handler.arn,
            "webhook_name": self.webhook.name,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "pipeline": self.pipeline.to_dict(),
            "build_project": self.build_project.to_dict(),
            "roles": [r.to_dict() for r in self.roles],
            "invalidation_handler": self.invalidation_handler.to_dict(),
            "webhook": self.webhook.to_dict(),
            "invoke_permission": self.invoke_permission.to_dict(),
        }


def _define(
    props: WebsitePipelineProps, addressing: AddressingCapabilities | None
) -> WebsitePipelineStack:
    env = props.environment
    prefix = props.prefix

    project_name = prefix
    handler_name = f"{prefix}-invalidation"
    handler_arn = env.function_arn(handler_name)

    checkout = checkout_action(
        stage_label=props.stage,
        owner=props.source_owner,
        repo=props.repository_name,
        oauth_token=props.oauth_token,
        branches=props.branches,
    )
    build = build_action(project_name=project_name)
    deploy = deploy_action(content_store=props.content_store)
    invoke = invoke_action(function_name=handler_name)

    synthesizer = PolicySynthesizer(
        SynthesisContext(
            environment=env,
            artifact_store=props.artifact_store,
            content_store=props.content_store,
            build_project_name=project_name,
            handler_arn=handler_arn,
            distribution=props.distribution,
            addressing=addressing,
        )
    )
    roles = build_execution_roles(
        prefix=prefix,
        environment=env,
        synthesizer=synthesizer,
        build_actions=[build],
        pipeline_actions=[checkout, build, deploy, invoke],
        principals=props.principals,
    )
    handler = make_invalidation_handler(
        name=handler_name,
        arn=handler_arn,
        distribution=props.distribution,
        settings=props.handler,
        role=make_handler_role(
            prefix=prefix,
            environment=env,
            synthesizer=synthesizer,
            invoke_actions=[invoke],
            principals=props.principals,
        ),
    )
    build_project = BuildProject(
        name=project_name,
        arn=env.build_project_arn(project_name),
        compute_type=props.build_compute_type,
        image=props.build_image,
        service_role_arn=roles.build.arn,
    )

    pipeline = assemble_pipeline(
        name=prefix,
        artifact_store=props.artifact_store,
        role=roles.pipeline,
        stages={
            StageName.source: [checkout],
            StageName.build: [build],
            StageName.deploy: [deploy],
            StageName.invalidation: [invoke],
        },
    )
    binding = bind_triggers(
        pipeline=pipeline,
        handler=handler,
        secret=props.oauth_token,
        filters=props.webhook_filters,
        pipeline_principal=props.principals.pipeline,
    )

    return WebsitePipelineStack(
        stage_label=props.stage,
        project_name=props.project_name,
        environment=env,
        pipeline=pipeline,
        build_project=build_project,
        build_role=roles.build,
        pipeline_role=roles.pipeline,
        invalidation_handler=handler,
        webhook=binding.webhook,
        invoke_permission=binding.invoke_permission,
    )


def build_website_pipeline(
    props: WebsitePipelineProps | Mapping[str, Any],
    *,
    addressing: AddressingCapabilities | None = None,
    logger: ILogger | None = None,
) -> WebsitePipelineStack:
    """
    Define the full pipeline in one shot. Either every part is built and
    consistent, or the first violation is raised and nothing is returned.
    """
    log = logger or get_logger("website_pipeline")
    try:
        p = load_props(props)
        log = log.bind(stage=p.stage, project=p.project_name)
        stack = _define(p, addressing)
    except PipelineDefinitionError as e:
        log.error("Pipeline definition failed", error_type=type(e).__name__, error=str(e))
        raise

    log.info(
        "Pipeline defined",
        pipeline=stack.pipeline.name,
        stages=stack.pipeline.stage_names,
        branch=stack.pipeline.actions()[0].configuration.get("Branch"),
        roles=[r.name for r in stack.roles],
    )
    return stack
