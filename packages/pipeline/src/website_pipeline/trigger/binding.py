from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pydantic import SecretStr

from website_pipeline.components import InvalidationHandler
from website_pipeline.core import (
    ConfigurationError,
    StructuralValidationError,
    get_logger,
)
from website_pipeline.pipeline import Pipeline, StageName

from .models import InvokePermission, Webhook, WebhookFilter

log = get_logger("website_pipeline.trigger")


@dataclass(frozen=True, slots=True)
class TriggerBinding:
    webhook: Webhook
    invoke_permission: InvokePermission


def _entry_action_name(pipeline: Pipeline) -> str:
    # A constructed Pipeline always has a non-empty Source stage of checkouts.
    source = next(s for s in pipeline.stages if s.name is StageName.source)
    return source.ordered_actions()[0].name


def bind_triggers(
    *,
    pipeline: Pipeline,
    handler: InvalidationHandler,
    secret: SecretStr,
    filters: Sequence[WebhookFilter],
    pipeline_principal: str,
    target_action: str | None = None,
    webhook_name: str | None = None,
) -> TriggerBinding:
    """
    Webhook -> pipeline entry action, and pipeline -> handler invoke grant.
    """
    if not filters:
        raise ConfigurationError(
            "Webhook filters are required; supply a replacement to drop the branch filter"
        )

    entry = _entry_action_name(pipeline)
    target = target_action or entry
    if target != entry:
        raise StructuralValidationError(
            f"Webhook targets action {target!r}, but pipeline {pipeline.name} "
            f"starts at {entry!r}"
        )

    webhook = Webhook(
        name=webhook_name or f"{pipeline.name}-webhook",
        secret_token=secret,
        filters=tuple(filters),
        target_pipeline=pipeline.name,
        target_action=target,
    )
    permission = InvokePermission(
        function_arn=handler.arn,
        principal=pipeline_principal,
    )
    log.debug(
        "Triggers bound",
        pipeline=pipeline.name,
        target_action=target,
        filters=[f.match_equals for f in webhook.filters],
        handler=handler.name,
    )
    return TriggerBinding(webhook=webhook, invoke_permission=permission)
