from __future__ import annotations

from typing import Any

import pytest
from website_pipeline.resources import DeploymentEnvironment, bucket, distribution
from website_pipeline.stack import WebsitePipelineStack, build_website_pipeline

OAUTH_TOKEN = "gho_not-a-real-token-1234"


class RecordingLogger:
    """ILogger that keeps every call in memory."""

    def __init__(self, records: list[dict[str, Any]] | None = None, **context: Any) -> None:
        self.records = records if records is not None else []
        self.context = context

    def _log(self, level: str, event: str, **kw: Any) -> None:
        self.records.append({"level": level, "event": event, **self.context, **kw})

    def debug(self, event: str, **kw: Any) -> None:
        self._log("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log("error", event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        self._log("exception", event, **kw)

    def bind(self, **kw: Any) -> "RecordingLogger":
        return RecordingLogger(self.records, **{**self.context, **kw})


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def environment() -> DeploymentEnvironment:
    return DeploymentEnvironment(account="123456789012", region="eu-west-1")


@pytest.fixture
def artifact_store():
    return bucket("site-artifacts", "arn:aws:s3:::site-artifacts")


@pytest.fixture
def content_store():
    return bucket("site-content", "arn:x:content")


@pytest.fixture
def cdn():
    return distribution(
        "E2EXAMPLE", "arn:aws:cloudfront::123456789012:distribution/E2EXAMPLE"
    )


@pytest.fixture
def props_data(environment, artifact_store, content_store, cdn) -> dict[str, Any]:
    return {
        "stage": "dev",
        "project_name": "acme-site",
        "environment": environment,
        "artifact_store": artifact_store,
        "content_store": content_store,
        "distribution": cdn,
        "source_owner": "acme",
        "repository_name": "acme-site",
        "oauth_token": OAUTH_TOKEN,
        "build_image": "aws/codebuild/standard:7.0",
    }


@pytest.fixture
def stack(props_data, recording_logger) -> WebsitePipelineStack:
    return build_website_pipeline(props_data, logger=recording_logger)
