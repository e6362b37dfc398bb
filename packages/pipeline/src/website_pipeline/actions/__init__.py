from .branches import BranchMapping
from .factories import (
    BUILD_ACTION_NAME,
    CHECKOUT_ACTION_NAME,
    DEPLOY_ACTION_NAME,
    INVOKE_ACTION_NAME,
    build_action,
    checkout_action,
    deploy_action,
    invoke_action,
)
from .models import BUILD_ARTIFACT, SOURCE_ARTIFACT, Action, ActionKind

__all__ = [
    "Action",
    "ActionKind",
    "BranchMapping",
    "BUILD_ARTIFACT",
    "SOURCE_ARTIFACT",
    "BUILD_ACTION_NAME",
    "CHECKOUT_ACTION_NAME",
    "DEPLOY_ACTION_NAME",
    "INVOKE_ACTION_NAME",
    "build_action",
    "checkout_action",
    "deploy_action",
    "invoke_action",
]
