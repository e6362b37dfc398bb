from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

from website_pipeline.core import PermissionSynthesisError

POLICY_VERSION: Final[str] = "2012-10-17"


class Effect(StrEnum):
    allow = "Allow"


def _dedupe(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True, slots=True)
class PolicyStatement:
    sid: str
    actions: tuple[str, ...]
    resources: tuple[str, ...]
    effect: Effect = Effect.allow

    def __post_init__(self) -> None:
        if not self.actions:
            raise PermissionSynthesisError(f"Statement {self.sid} has no actions")
        if not self.resources or any(not r for r in self.resources):
            raise PermissionSynthesisError(
                f"Statement {self.sid} has an empty resource pattern"
            )
        object.__setattr__(self, "actions", _dedupe(tuple(self.actions)))
        object.__setattr__(self, "resources", _dedupe(tuple(self.resources)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "Sid": self.sid,
            "Effect": self.effect.value,
            "Action": list(self.actions),
            "Resource": list(self.resources),
        }


@dataclass(frozen=True, slots=True)
class Policy:
    name: str
    statements: tuple[PolicyStatement, ...]

    def __post_init__(self) -> None:
        if not self.statements:
            raise PermissionSynthesisError(f"Policy {self.name} has no statements")
        sids = [s.sid for s in self.statements]
        if len(sids) != len(set(sids)):
            dupes = sorted({x for x in sids if sids.count(x) > 1})
            raise PermissionSynthesisError(
                f"Policy {self.name} has duplicate statement ids: {dupes}"
            )

    def to_document(self) -> dict[str, Any]:
        return {
            "Version": POLICY_VERSION,
            "Statement": [s.to_dict() for s in self.statements],
        }


@dataclass(frozen=True, slots=True)
class Role:
    """
    Execution identity. The policy is a constructor argument, so a Role never
    exists without its permissions.
    """

    name: str
    arn: str
    assumed_by: str
    policy: Policy

    def assume_role_document(self) -> dict[str, Any]:
        return {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": Effect.allow.value,
                    "Principal": {"Service": self.assumed_by},
                    "Action": "sts:AssumeRole",
                }
            ],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "arn": self.arn,
            "assumed_by": self.assumed_by,
            "policy": {"name": self.policy.name, **self.policy.to_document()},
        }
