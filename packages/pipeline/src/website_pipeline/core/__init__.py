from .config import Settings, load_props_file, load_settings
from .errors import (
    ConfigurationError,
    ExecutionError,
    PermissionSynthesisError,
    PipelineDefinitionError,
    StageError,
    StructuralValidationError,
    TemplateValidationError,
    stage_error_from_exc,
)
from .fs import atomic_write_text, ensure_parent
from .hashing import sha256_bytes, write_sha256_sum_txt
from .json import atomic_write_json, read_json, stable_json_dumps
from .logging import (
    ILogger,
    bind,
    clear_bindings,
    configure_logging,
    get_logger,
    redact_secrets,
)
from .time import monotonic_ms, utc_now_iso

__all__ = [
    "Settings",
    "load_settings",
    "load_props_file",
    "PipelineDefinitionError",
    "ConfigurationError",
    "StructuralValidationError",
    "PermissionSynthesisError",
    "TemplateValidationError",
    "ExecutionError",
    "StageError",
    "stage_error_from_exc",
    "atomic_write_text",
    "ensure_parent",
    "sha256_bytes",
    "write_sha256_sum_txt",
    "atomic_write_json",
    "read_json",
    "stable_json_dumps",
    "ILogger",
    "bind",
    "clear_bindings",
    "configure_logging",
    "get_logger",
    "redact_secrets",
    "monotonic_ms",
    "utc_now_iso",
]
