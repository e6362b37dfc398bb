from __future__ import annotations

from dataclasses import replace

import pytest
from pydantic import SecretStr, ValidationError
from website_pipeline.core import ConfigurationError, StructuralValidationError
from website_pipeline.pipeline import Stage, StageName
from website_pipeline.trigger import (
    BRANCH_REF_FILTER,
    INVOKE_FUNCTION_ACTION,
    Webhook,
    WebhookFilter,
    bind_triggers,
)


def test_binding_targets_the_checkout_action(stack) -> None:
    binding = bind_triggers(
        pipeline=stack.pipeline,
        handler=stack.invalidation_handler,
        secret=SecretStr("s3cret"),
        filters=[BRANCH_REF_FILTER],
        pipeline_principal="codepipeline.amazonaws.com",
    )

    wh = binding.webhook
    assert wh.name == "dev-acme-site-webhook"
    assert wh.target_pipeline == "dev-acme-site"
    assert wh.target_action == "GitHubCheckout"
    assert wh.target_pipeline_version == 1
    assert wh.to_dict()["authentication"] == "GITHUB_HMAC"
    assert wh.to_dict()["filters"] == [
        {"JsonPath": "$.ref", "MatchEquals": "refs/heads/{Branch}"}
    ]

    perm = binding.invoke_permission
    assert perm.function_arn == stack.invalidation_handler.arn
    assert perm.principal == "codepipeline.amazonaws.com"
    assert perm.action == INVOKE_FUNCTION_ACTION


def test_mismatched_target_action_is_rejected(stack) -> None:
    with pytest.raises(StructuralValidationError, match="GitCheckout"):
        bind_triggers(
            pipeline=stack.pipeline,
            handler=stack.invalidation_handler,
            secret=SecretStr("s3cret"),
            filters=[BRANCH_REF_FILTER],
            pipeline_principal="codepipeline.amazonaws.com",
            target_action="GitCheckout",
        )


def test_empty_filters_are_rejected(stack) -> None:
    with pytest.raises(ConfigurationError, match="filters"):
        bind_triggers(
            pipeline=stack.pipeline,
            handler=stack.invalidation_handler,
            secret=SecretStr("s3cret"),
            filters=[],
            pipeline_principal="codepipeline.amazonaws.com",
        )


def test_webhook_itself_refuses_no_filters() -> None:
    with pytest.raises(ConfigurationError):
        Webhook(
            name="w",
            secret_token=SecretStr("x"),
            filters=(),
            target_pipeline="p",
            target_action="GitHubCheckout",
        )


def test_webhook_dict_never_carries_secret(stack) -> None:
    d = stack.webhook.to_dict()
    assert "secret_token" not in d
    assert "gho_" not in repr(d)


def test_filter_json_path_must_be_rooted() -> None:
    with pytest.raises(ValidationError):
        WebhookFilter(json_path="ref", match_equals="refs/heads/main")


def test_pipeline_without_checkout_entry_cannot_be_bound(stack) -> None:
    build = stack.pipeline.find_action("Build")
    stages = (Stage(name=StageName.source, actions=(build,)),) + stack.pipeline.stages[1:]
    with pytest.raises(StructuralValidationError, match="only admits Checkout"):
        replace(stack.pipeline, stages=stages)
