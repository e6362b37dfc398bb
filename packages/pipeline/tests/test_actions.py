from __future__ import annotations

import pytest
from pydantic import SecretStr
from website_pipeline.actions import (
    BUILD_ARTIFACT,
    SOURCE_ARTIFACT,
    Action,
    ActionKind,
    BranchMapping,
    build_action,
    checkout_action,
    deploy_action,
    invoke_action,
)
from website_pipeline.core import ConfigurationError


def _checkout(stage_label: str, branches: BranchMapping | None = None):
    return checkout_action(
        stage_label=stage_label,
        owner="acme",
        repo="acme-site",
        oauth_token=SecretStr("t"),
        branches=branches,
    )


@pytest.mark.parametrize(
    "label, branch",
    [("dev", "dev"), ("prod", "master"), ("staging", "master"), ("", "master")],
)
def test_checkout_branch_follows_stage_label(label: str, branch: str) -> None:
    assert _checkout(label).configuration["Branch"] == branch


def test_branch_mapping_is_open_for_extension() -> None:
    branches = BranchMapping(branches={"dev": "dev", "qa": "release"}, default="main")
    assert _checkout("qa", branches).configuration["Branch"] == "release"
    assert _checkout("prod", branches).configuration["Branch"] == "main"


def test_checkout_declares_only_output() -> None:
    a = _checkout("dev")
    assert a.kind is ActionKind.checkout
    assert a.input_artifact is None
    assert a.output_artifact == SOURCE_ARTIFACT
    assert a.configuration["PollForSourceChanges"] is False


def test_checkout_token_is_masked_in_dict_form() -> None:
    d = _checkout("dev").to_dict()
    assert d["configuration"]["OAuthToken"] == "**********"


def test_build_deploy_invoke_shapes(content_store) -> None:
    b = build_action(project_name="dev-acme-site")
    assert (b.input_artifact, b.output_artifact) == (SOURCE_ARTIFACT, BUILD_ARTIFACT)
    assert b.configuration == {"ProjectName": "dev-acme-site"}

    d = deploy_action(content_store=content_store)
    assert d.input_artifact == BUILD_ARTIFACT
    assert d.output_artifact is None
    assert d.configuration == {"BucketName": "site-content", "Extract": True}

    i = invoke_action(function_name="dev-acme-site-invalidation")
    assert i.input_artifact is None and i.output_artifact is None


def test_deploy_needs_a_bucket(cdn) -> None:
    with pytest.raises(ConfigurationError):
        deploy_action(content_store=cdn)


def test_with_role_returns_new_action() -> None:
    a = invoke_action(function_name="fn")
    b = a.with_role("arn:aws:iam::123456789012:role/r")
    assert a.role_arn is None
    assert b.role_arn == "arn:aws:iam::123456789012:role/r"


def test_configuration_is_copied_not_shared() -> None:
    config = {"ProjectName": "dev-acme-site"}
    a = Action(name="Build", kind=ActionKind.build, configuration=config)
    config["ProjectName"] = "other"

    assert a.configuration["ProjectName"] == "dev-acme-site"
    assert a.with_role("arn:aws:iam::123456789012:role/r").configuration is not a.configuration
