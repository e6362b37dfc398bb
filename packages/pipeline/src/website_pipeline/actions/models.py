from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Final, Mapping, Optional

from pydantic import SecretStr

SOURCE_ARTIFACT: Final[str] = "SourceArtifact"
BUILD_ARTIFACT: Final[str] = "BuildArtifact"


class ActionKind(StrEnum):
    checkout = "Checkout"
    build = "Build"
    deploy = "Deploy"
    invoke = "Invoke"


@dataclass(frozen=True, slots=True)
class Action:
    """
    Pure descriptor of one pipeline step. Nothing here executes.
    """

    name: str
    kind: ActionKind
    input_artifact: Optional[str] = None
    output_artifact: Optional[str] = None
    run_order: int = 1
    configuration: Mapping[str, Any] = field(default_factory=dict)
    role_arn: Optional[str] = None

    def __post_init__(self) -> None:
        # Own read-only copy; replace() and callers never share it.
        object.__setattr__(
            self, "configuration", MappingProxyType(dict(self.configuration))
        )

    def with_role(self, role_arn: str) -> "Action":
        return replace(self, role_arn=role_arn)

    def to_dict(self) -> dict[str, Any]:
        config = {
            k: ("**********" if isinstance(v, SecretStr) else v)
            for k, v in self.configuration.items()
        }
        return {
            "name": self.name,
            "kind": self.kind.value,
            "input_artifact": self.input_artifact,
            "output_artifact": self.output_artifact,
            "run_order": self.run_order,
            "configuration": config,
            "role_arn": self.role_arn,
        }
