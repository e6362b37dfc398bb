from .core import (
    ConfigurationError,
    ExecutionError,
    PermissionSynthesisError,
    PipelineDefinitionError,
    StructuralValidationError,
    TemplateValidationError,
)
from .stack import (
    WebsitePipelineProps,
    WebsitePipelineStack,
    build_website_pipeline,
    load_props,
)

__all__ = [
    "ConfigurationError",
    "ExecutionError",
    "PermissionSynthesisError",
    "PipelineDefinitionError",
    "StructuralValidationError",
    "TemplateValidationError",
    "WebsitePipelineProps",
    "WebsitePipelineStack",
    "build_website_pipeline",
    "load_props",
]
