from .resources import TEMPLATE_SCHEMA_REL, template_schema
from .template import validate_template

__all__ = ["TEMPLATE_SCHEMA_REL", "template_schema", "validate_template"]
