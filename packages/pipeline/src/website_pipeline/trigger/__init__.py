from .binding import TriggerBinding, bind_triggers
from .models import (
    BRANCH_REF_FILTER,
    INVOKE_FUNCTION_ACTION,
    InvokePermission,
    Webhook,
    WebhookAuthentication,
    WebhookFilter,
)

__all__ = [
    "TriggerBinding",
    "bind_triggers",
    "BRANCH_REF_FILTER",
    "INVOKE_FUNCTION_ACTION",
    "InvokePermission",
    "Webhook",
    "WebhookAuthentication",
    "WebhookFilter",
]
