from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable

from jsonschema import Draft202012Validator

from website_pipeline.core import TemplateValidationError

from .resources import template_schema


@lru_cache(maxsize=1)
def validator() -> Draft202012Validator:
    return Draft202012Validator(template_schema())


def format_errors(errors: Iterable[Any]) -> str:
    lines: list[str] = []
    for e in errors:
        path = (
            ".".join(str(p) for p in e.path) if getattr(e, "path", None) else "<root>"
        )
        lines.append(f"- {path}: {e.message}")
    return "\n".join(lines)


def validate_template(obj: dict[str, Any]) -> None:
    """
    Validate a rendered template against the shipped JSON schema.
    Raises TemplateValidationError with a readable message on failure.
    """
    v = validator()
    errs = sorted(v.iter_errors(obj), key=lambda e: [str(p) for p in e.path])
    if errs:
        raise TemplateValidationError(
            "Template validation failed:\n" + format_errors(errs)
        )
