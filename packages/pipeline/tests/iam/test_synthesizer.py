from __future__ import annotations

import pytest
from pydantic import SecretStr
from website_pipeline.actions import (
    build_action,
    checkout_action,
    deploy_action,
    invoke_action,
)
from website_pipeline.core import PermissionSynthesisError
from website_pipeline.iam import (
    AddressingNeed,
    Identity,
    PolicySynthesizer,
    SynthesisContext,
)
from website_pipeline.resources import bucket

PROJECT = "dev-acme-site"
HANDLER_ARN = "arn:aws:lambda:eu-west-1:123456789012:function:dev-acme-site-invalidation"


@pytest.fixture
def actions(content_store):
    return {
        "checkout": checkout_action(
            stage_label="dev", owner="acme", repo="acme-site", oauth_token=SecretStr("t")
        ),
        "build": build_action(project_name=PROJECT),
        "deploy": deploy_action(content_store=content_store),
        "invoke": invoke_action(function_name="dev-acme-site-invalidation"),
    }


@pytest.fixture
def context(environment, artifact_store, content_store, cdn) -> SynthesisContext:
    return SynthesisContext(
        environment=environment,
        artifact_store=artifact_store,
        content_store=content_store,
        build_project_name=PROJECT,
        handler_arn=HANDLER_ARN,
        distribution=cdn,
    )


def _by_sid(statements):
    return {s.sid: s for s in statements}


def test_build_executor_statements(context, actions) -> None:
    stmts = _by_sid(
        PolicySynthesizer(context).synthesize(Identity.build_executor, [actions["build"]])
    )
    assert list(stmts) == ["BuildLogs", "ArtifactStoreAccess"]

    logs = stmts["BuildLogs"]
    assert set(logs.actions) == {
        "logs:CreateLogGroup",
        "logs:CreateLogStream",
        "logs:PutLogEvents",
    }
    group = "arn:aws:logs:eu-west-1:123456789012:log-group:/aws/codebuild/dev-acme-site"
    assert logs.resources == (group, group + ":*")

    art = stmts["ArtifactStoreAccess"]
    assert set(art.actions) == {"s3:GetObject", "s3:GetObjectVersion", "s3:PutObject"}
    assert art.resources == ("arn:aws:s3:::site-artifacts/*",)


def test_pipeline_executor_statements(context, actions) -> None:
    stmts = PolicySynthesizer(context).synthesize(
        Identity.pipeline_executor, list(actions.values())
    )
    by_sid = _by_sid(stmts)
    assert list(by_sid) == [
        "ArtifactStoreAccess",
        "BuildTrigger",
        "ContentStoreWrite",
        "HandlerInvoke",
    ]
    assert by_sid["BuildTrigger"].resources == (
        "arn:aws:codebuild:eu-west-1:123456789012:project/dev-acme-site",
    )
    assert set(by_sid["HandlerInvoke"].actions) == {
        "lambda:ListFunctions",
        "lambda:InvokeFunction",
    }
    assert by_sid["HandlerInvoke"].resources == ("*",)


def test_content_store_statement_is_exact(context, actions) -> None:
    stmts = PolicySynthesizer(context).synthesize(
        Identity.pipeline_executor, list(actions.values())
    )
    content = [s for s in stmts if any("arn:x:content" in r for r in s.resources)]
    assert len(content) == 1
    assert set(content[0].actions) == {"s3:PutObject", "s3:DeleteObject"}
    assert set(content[0].resources) == {"arn:x:content", "arn:x:content/*"}


def test_identity_policies_are_disjoint(context, actions) -> None:
    synth = PolicySynthesizer(context)
    build = synth.synthesize(Identity.build_executor, [actions["build"]])
    pipeline = synth.synthesize(Identity.pipeline_executor, list(actions.values()))

    build_resources = {r for s in build for r in s.resources}
    assert not any(r.startswith("arn:x:content") for r in build_resources)

    pipeline_actions = {a for s in pipeline for a in s.actions}
    assert not any(a.startswith("logs:") for a in pipeline_actions)


def test_handler_statements_platform_wide(context, actions) -> None:
    stmts = PolicySynthesizer(context).synthesize(
        Identity.invalidation_handler, [actions["invoke"]]
    )
    by_sid = _by_sid(stmts)
    assert list(by_sid) == ["HandlerLogs", "JobResultsAndInvalidation"]
    assert by_sid["HandlerLogs"].actions == ("logs:*",)
    assert by_sid["HandlerLogs"].resources == ("arn:aws:logs:*:*:*",)
    assert set(by_sid["JobResultsAndInvalidation"].actions) == {
        "codepipeline:PutJobSuccessResult",
        "codepipeline:PutJobFailureResult",
        "cloudfront:CreateInvalidation",
    }
    assert by_sid["JobResultsAndInvalidation"].resources == ("*",)


class _FineGrainedAddressing:
    """A platform that can address functions and distributions directly."""

    def scope(self, need, *, target=None):
        if need in (AddressingNeed.function_invoke, AddressingNeed.cache_invalidation):
            return (target,)
        if need is AddressingNeed.handler_logs:
            return ("arn:aws:logs:eu-west-1:123456789012:log-group:/aws/lambda/h:*",)
        return ("*",)


def test_capability_seam_tightens_scopes(context, actions, cdn) -> None:
    ctx = SynthesisContext(
        environment=context.environment,
        artifact_store=context.artifact_store,
        content_store=context.content_store,
        build_project_name=PROJECT,
        handler_arn=HANDLER_ARN,
        distribution=cdn,
        addressing=_FineGrainedAddressing(),
    )
    synth = PolicySynthesizer(ctx)

    pipeline = _by_sid(synth.synthesize(Identity.pipeline_executor, list(actions.values())))
    assert pipeline["HandlerInvoke"].resources == (HANDLER_ARN,)

    handler = _by_sid(synth.synthesize(Identity.invalidation_handler, [actions["invoke"]]))
    assert list(handler) == ["HandlerLogs", "JobResults", "CacheInvalidation"]
    assert handler["CacheInvalidation"].resources == (cdn.arn,)
    assert handler["JobResults"].resources == ("*",)


def test_only_needed_statements_are_emitted(context, actions) -> None:
    stmts = PolicySynthesizer(context).synthesize(
        Identity.pipeline_executor, [actions["invoke"]]
    )
    assert [s.sid for s in stmts] == ["HandlerInvoke"]


def test_missing_content_store_arn_fails(context, actions) -> None:
    ctx = SynthesisContext(
        environment=context.environment,
        artifact_store=context.artifact_store,
        content_store=bucket("site-content"),
        build_project_name=PROJECT,
    )
    with pytest.raises(PermissionSynthesisError, match="site-content"):
        PolicySynthesizer(ctx).synthesize(
            Identity.pipeline_executor, list(actions.values())
        )


def test_unset_content_store_fails(context, actions) -> None:
    ctx = SynthesisContext(
        environment=context.environment,
        artifact_store=context.artifact_store,
        build_project_name=PROJECT,
    )
    with pytest.raises(PermissionSynthesisError, match="Content store"):
        PolicySynthesizer(ctx).synthesize(Identity.pipeline_executor, [actions["deploy"]])


def test_unset_build_project_fails(context, actions) -> None:
    ctx = SynthesisContext(
        environment=context.environment, artifact_store=context.artifact_store
    )
    with pytest.raises(PermissionSynthesisError, match="Build project"):
        PolicySynthesizer(ctx).synthesize(Identity.build_executor, [actions["build"]])


def test_empty_action_list_fails(context) -> None:
    with pytest.raises(PermissionSynthesisError):
        PolicySynthesizer(context).synthesize(Identity.build_executor, [])


def test_identity_cannot_take_foreign_actions(context, actions) -> None:
    with pytest.raises(PermissionSynthesisError, match="Deploy"):
        PolicySynthesizer(context).synthesize(
            Identity.build_executor, [actions["build"], actions["deploy"]]
        )


def test_synthesis_is_deterministic(context, actions) -> None:
    synth = PolicySynthesizer(context)
    first = synth.synthesize(Identity.pipeline_executor, list(actions.values()))
    second = PolicySynthesizer(context).synthesize(
        Identity.pipeline_executor, list(actions.values())
    )
    assert first == second
