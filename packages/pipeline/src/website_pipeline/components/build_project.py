from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ComputeType(StrEnum):
    small = "BUILD_GENERAL1_SMALL"
    medium = "BUILD_GENERAL1_MEDIUM"
    large = "BUILD_GENERAL1_LARGE"
    x2_large = "BUILD_GENERAL1_2XLARGE"


@dataclass(frozen=True, slots=True)
class BuildProject:
    """
    External build executor. Compilation itself happens in the build tool;
    the pipeline only references the project by name and ARN.
    """

    name: str
    arn: str
    compute_type: ComputeType
    image: str
    service_role_arn: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "arn": self.arn,
            "compute_type": self.compute_type.value,
            "image": self.image,
            "service_role_arn": self.service_role_arn,
        }
