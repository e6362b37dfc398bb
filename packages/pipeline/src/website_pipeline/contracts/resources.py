from __future__ import annotations

import json
from importlib.resources import files
from typing import Any, Final

from website_pipeline.core import TemplateValidationError

PKG: Final[str] = "website_pipeline.contracts"

TEMPLATE_SCHEMA_REL: Final[str] = "schema/template.schema.json"


def read_text(rel_path: str) -> str:
    try:
        return files(PKG).joinpath(rel_path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise TemplateValidationError(f"Missing contracts resource: {rel_path}") from e


def read_json(rel_path: str) -> dict[str, Any]:
    raw = read_text(rel_path)
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TemplateValidationError(
            f"Invalid JSON in contracts resource: {rel_path}: {e}"
        ) from e
    if not isinstance(obj, dict):
        raise TemplateValidationError(
            f"Expected JSON object in {rel_path}, got {type(obj).__name__}"
        )
    return obj


def template_schema() -> dict[str, Any]:
    """
    JSON Schema for the rendered deployment template
    """
    return read_json(TEMPLATE_SCHEMA_REL)
