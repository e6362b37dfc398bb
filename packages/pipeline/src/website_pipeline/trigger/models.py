from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from website_pipeline.core import ConfigurationError

INVOKE_FUNCTION_ACTION: Final[str] = "lambda:InvokeFunction"


class WebhookAuthentication(StrEnum):
    github_hmac = "GITHUB_HMAC"


class WebhookFilter(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    json_path: str = Field(..., min_length=2, pattern=r"^\$")
    match_equals: str = Field(..., min_length=1)

    def to_dict(self) -> dict[str, str]:
        return {"JsonPath": self.json_path, "MatchEquals": self.match_equals}


# {Branch} is resolved by the platform from the checkout action's Branch setting.
BRANCH_REF_FILTER: Final[WebhookFilter] = WebhookFilter(
    json_path="$.ref", match_equals="refs/heads/{Branch}"
)


@dataclass(frozen=True, slots=True)
class Webhook:
    name: str
    secret_token: SecretStr
    filters: tuple[WebhookFilter, ...]
    target_pipeline: str
    target_action: str
    target_pipeline_version: int = 1
    authentication: WebhookAuthentication = WebhookAuthentication.github_hmac
    register_with_third_party: bool = True

    def __post_init__(self) -> None:
        if not self.filters:
            raise ConfigurationError(
                f"Webhook {self.name} needs at least one filter; refusing to match every push"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "authentication": self.authentication.value,
            "filters": [f.to_dict() for f in self.filters],
            "target_pipeline": self.target_pipeline,
            "target_action": self.target_action,
            "target_pipeline_version": self.target_pipeline_version,
            "register_with_third_party": self.register_with_third_party,
        }


@dataclass(frozen=True, slots=True)
class InvokePermission:
    """
    Resource-level grant on the handler itself; needed on top of the
    pipeline role's identity policy.
    """

    function_arn: str
    principal: str
    action: str = INVOKE_FUNCTION_ACTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_arn": self.function_arn,
            "principal": self.principal,
            "action": self.action,
        }
