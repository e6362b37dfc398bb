from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

BranchName = Annotated[str, StringConstraints(min_length=1, pattern=r"^[^\s~^:?*\[\\]+$")]


class BranchMapping(BaseModel):
    """
    Stage label -> branch checked out for that stage. Labels not listed fall
    back to `default`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    branches: dict[str, BranchName] = Field(default_factory=lambda: {"dev": "dev"})
    default: BranchName = "master"

    def branch_for(self, stage_label: str) -> str:
        return self.branches.get(stage_label, self.default)
