from __future__ import annotations

from pydantic import SecretStr

from website_pipeline.core import ConfigurationError
from website_pipeline.resources import ResourceKind, ResourceRef

from .branches import BranchMapping
from .models import BUILD_ARTIFACT, SOURCE_ARTIFACT, Action, ActionKind

CHECKOUT_ACTION_NAME = "GitHubCheckout"
BUILD_ACTION_NAME = "Build"
DEPLOY_ACTION_NAME = "Deploy"
INVOKE_ACTION_NAME = "CacheInvalidation"


def checkout_action(
    *,
    stage_label: str,
    owner: str,
    repo: str,
    oauth_token: SecretStr,
    branches: BranchMapping | None = None,
    output_artifact: str = SOURCE_ARTIFACT,
) -> Action:
    branch = (branches or BranchMapping()).branch_for(stage_label)
    return Action(
        name=CHECKOUT_ACTION_NAME,
        kind=ActionKind.checkout,
        output_artifact=output_artifact,
        configuration={
            "Owner": owner,
            "Repo": repo,
            "Branch": branch,
            "OAuthToken": oauth_token,
            # The webhook starts the pipeline; no polling.
            "PollForSourceChanges": False,
        },
    )


def build_action(
    *,
    project_name: str,
    input_artifact: str = SOURCE_ARTIFACT,
    output_artifact: str = BUILD_ARTIFACT,
) -> Action:
    return Action(
        name=BUILD_ACTION_NAME,
        kind=ActionKind.build,
        input_artifact=input_artifact,
        output_artifact=output_artifact,
        configuration={"ProjectName": project_name},
    )


def deploy_action(
    *,
    content_store: ResourceRef,
    input_artifact: str = BUILD_ARTIFACT,
    extract: bool = True,
) -> Action:
    if content_store.kind is not ResourceKind.bucket:
        raise ConfigurationError(
            f"Deploy target must be a bucket, got {content_store.kind.value}"
        )
    return Action(
        name=DEPLOY_ACTION_NAME,
        kind=ActionKind.deploy,
        input_artifact=input_artifact,
        configuration={"BucketName": content_store.identifier, "Extract": extract},
    )


def invoke_action(*, function_name: str) -> Action:
    return Action(
        name=INVOKE_ACTION_NAME,
        kind=ActionKind.invoke,
        configuration={"FunctionName": function_name},
    )
