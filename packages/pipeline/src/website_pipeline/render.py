from __future__ import annotations

from typing import Any, Final, Mapping

from pydantic import SecretStr

from website_pipeline.actions import Action, ActionKind
from website_pipeline.contracts import validate_template
from website_pipeline.core import sha256_bytes, stable_json_dumps
from website_pipeline.iam import Role
from website_pipeline.stack import WebsitePipelineStack

TEMPLATE_FORMAT_VERSION: Final[str] = "2010-09-09"

CODE_BUCKET_PARAM: Final[str] = "InvalidationHandlerCodeS3Bucket"
CODE_KEY_PARAM: Final[str] = "InvalidationHandlerCodeS3Key"
SOURCE_TOKEN_PARAM: Final[str] = "SourceOAuthToken"

# (Category, Owner, Provider)
_ACTION_TYPES: Final[dict[ActionKind, tuple[str, str, str]]] = {
    ActionKind.checkout: ("Source", "ThirdParty", "GitHub"),
    ActionKind.build: ("Build", "AWS", "CodeBuild"),
    ActionKind.deploy: ("Deploy", "AWS", "S3"),
    ActionKind.invoke: ("Invoke", "AWS", "Lambda"),
}


def _secret_ref() -> dict[str, str]:
    return {"Ref": SOURCE_TOKEN_PARAM}


def _configuration(config: Mapping[str, Any]) -> dict[str, Any]:
    # Secrets are resolved at deploy time, never written into the template.
    return {
        k: (_secret_ref() if isinstance(v, SecretStr) else v)
        for k, v in config.items()
    }


def _role(role: Role) -> dict[str, Any]:
    return {
        "Type": "AWS::IAM::Role",
        "Properties": {
            "RoleName": role.name,
            "AssumeRolePolicyDocument": role.assume_role_document(),
            # Inline so the role and its policy are created together.
            "Policies": [
                {
                    "PolicyName": role.policy.name,
                    "PolicyDocument": role.policy.to_document(),
                }
            ],
        },
    }


def _action(action: Action) -> dict[str, Any]:
    category, owner, provider = _ACTION_TYPES[action.kind]
    out: dict[str, Any] = {
        "Name": action.name,
        "ActionTypeId": {
            "Category": category,
            "Owner": owner,
            "Provider": provider,
            "Version": "1",
        },
        "RunOrder": action.run_order,
        "Configuration": _configuration(action.configuration),
    }
    if action.input_artifact:
        out["InputArtifacts"] = [{"Name": action.input_artifact}]
    if action.output_artifact:
        out["OutputArtifacts"] = [{"Name": action.output_artifact}]
    if action.role_arn:
        out["RoleArn"] = action.role_arn
    return out


def render_template(stack: WebsitePipelineStack, *, validate: bool = True) -> dict[str, Any]:
    """
    Render the stack as a CloudFormation-shaped template. Logical ids are
    fixed, so identical stacks render identically.
    """
    pipeline = stack.pipeline
    project = stack.build_project
    handler = stack.invalidation_handler
    webhook = stack.webhook
    permission = stack.invoke_permission

    resources: dict[str, Any] = {
        "BuildRole": _role(stack.build_role),
        "PipelineRole": _role(stack.pipeline_role),
        "InvalidationHandlerRole": _role(handler.role),
        "BuildProject": {
            "Type": "AWS::CodeBuild::Project",
            "DependsOn": ["BuildRole"],
            "Properties": {
                "Name": project.name,
                "ServiceRole": project.service_role_arn,
                "Source": {"Type": "CODEPIPELINE"},
                "Artifacts": {"Type": "CODEPIPELINE"},
                "Environment": {
                    "Type": "LINUX_CONTAINER",
                    "ComputeType": project.compute_type.value,
                    "Image": project.image,
                },
            },
        },
        "InvalidationHandler": {
            "Type": "AWS::Lambda::Function",
            "DependsOn": ["InvalidationHandlerRole"],
            "Metadata": {"AssetPath": handler.code_asset},
            "Properties": {
                "FunctionName": handler.name,
                "Runtime": handler.runtime,
                "Handler": handler.entrypoint,
                "Role": handler.role.arn,
                "Code": {
                    "S3Bucket": {"Ref": CODE_BUCKET_PARAM},
                    "S3Key": {"Ref": CODE_KEY_PARAM},
                },
                "Environment": {"Variables": dict(handler.environment)},
            },
        },
        "PipelineInvokePermission": {
            "Type": "AWS::Lambda::Permission",
            "DependsOn": ["InvalidationHandler"],
            "Properties": {
                "FunctionName": permission.function_arn,
                "Action": permission.action,
                "Principal": permission.principal,
            },
        },
        "Pipeline": {
            "Type": "AWS::CodePipeline::Pipeline",
            "DependsOn": ["PipelineRole", "BuildProject", "PipelineInvokePermission"],
            "Properties": {
                "Name": pipeline.name,
                "RoleArn": pipeline.role_arn,
                "ArtifactStore": {
                    "Type": "S3",
                    "Location": pipeline.artifact_store.identifier,
                },
                "Stages": [
                    {
                        "Name": stage.name.value,
                        "Actions": [_action(a) for a in stage.ordered_actions()],
                    }
                    for stage in pipeline.stages
                ],
            },
        },
        "SourceWebhook": {
            "Type": "AWS::CodePipeline::Webhook",
            "DependsOn": ["Pipeline"],
            "Properties": {
                "Name": webhook.name,
                "Authentication": webhook.authentication.value,
                "AuthenticationConfiguration": {
                    "SecretToken": _secret_ref()
                },
                "Filters": [f.to_dict() for f in webhook.filters],
                "TargetPipeline": webhook.target_pipeline,
                "TargetAction": webhook.target_action,
                "TargetPipelineVersion": webhook.target_pipeline_version,
                "RegisterWithThirdParty": webhook.register_with_third_party,
            },
        },
    }

    template: dict[str, Any] = {
        "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
        "Description": f"Static website delivery pipeline {pipeline.name}",
        "Parameters": {
            CODE_BUCKET_PARAM: {
                "Type": "String",
                "Description": "Bucket holding the packaged invalidation handler",
            },
            CODE_KEY_PARAM: {
                "Type": "String",
                "Description": "Object key of the packaged invalidation handler",
            },
            SOURCE_TOKEN_PARAM: {
                "Type": "String",
                "NoEcho": True,
                "Description": "Source provider token, also the webhook secret",
            },
        },
        "Resources": resources,
        "Outputs": {
            "PipelineName": {"Value": pipeline.name},
            "BuildProjectName": {"Value": project.name},
            "BuildProjectArn": {"Value": project.arn},
            "InvalidationHandlerName": {"Value": handler.name},
            "InvalidationHandlerArn": {"Value": handler.arn},
            "WebhookName": {"Value": webhook.name},
        },
    }
    if validate:
        validate_template(template)
    return template


def template_fingerprint(template: dict[str, Any]) -> str:
    return sha256_bytes(stable_json_dumps(template, indent=None).encode("utf-8"))
