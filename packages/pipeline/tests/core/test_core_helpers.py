from __future__ import annotations

from pathlib import Path

from pydantic import SecretStr
from website_pipeline.core import errors, hashing, json, logging


def test_stage_error_from_exc() -> None:
    try:
        raise ValueError("boom")
    except Exception as exc:
        err = errors.stage_error_from_exc(exc)
    assert err.exc_type == "ValueError"
    assert "boom" in err.message
    assert "ValueError" in err.traceback


def test_error_taxonomy_shares_one_base() -> None:
    for cls in (
        errors.ConfigurationError,
        errors.StructuralValidationError,
        errors.PermissionSynthesisError,
        errors.TemplateValidationError,
    ):
        assert issubclass(cls, errors.PipelineDefinitionError)
        assert issubclass(cls, RuntimeError)


def test_execution_error_is_not_a_definition_error() -> None:
    assert issubclass(errors.ExecutionError, RuntimeError)
    assert not issubclass(errors.ExecutionError, errors.PipelineDefinitionError)


def test_redact_secrets_masks_secret_values_and_keys() -> None:
    event = {
        "event": "token rotated",
        "oauth": SecretStr("s3cr3t"),
        "secret_token": "plain",
        "nested": {"github_token": "abc", "repo": "site"},
        "repo": "site",
    }
    out = logging.redact_secrets(None, "info", event)
    assert out["event"] == "token rotated"
    assert out["oauth"] == logging.REDACTED
    assert out["secret_token"] == logging.REDACTED
    assert out["nested"] == {"github_token": logging.REDACTED, "repo": "site"}
    assert out["repo"] == "site"


def test_json_helpers(tmp_path: Path) -> None:
    obj = {"b": 1, "a": 2}
    out = tmp_path / "nested" / "sample.json"
    json.atomic_write_json(out, obj)
    assert json.read_json(out) == {"a": 2, "b": 1}
    assert out.read_text(encoding="utf-8").index('"a"') < out.read_text(
        encoding="utf-8"
    ).index('"b"')

    compact = json.stable_json_dumps(obj, indent=None)
    assert compact == '{"a":2,"b":1}'


def test_sha256_helpers(tmp_path: Path) -> None:
    assert (
        hashing.sha256_bytes(b"abc")
        == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )
    out = tmp_path / "template.sha256"
    hashing.write_sha256_sum_txt(out, "template.json", "ff" * 32)
    assert out.read_text() == f"{'ff' * 32}  template.json\n"
