from .models import POLICY_VERSION, Effect, Policy, PolicyStatement, Role
from .roles import (
    ExecutionRoles,
    RolePrincipals,
    build_execution_roles,
    make_handler_role,
    make_role,
)
from .synthesizer import (
    AddressingCapabilities,
    AddressingNeed,
    Identity,
    PlatformWideAddressing,
    PolicySynthesizer,
    SynthesisContext,
)

__all__ = [
    "POLICY_VERSION",
    "Effect",
    "Policy",
    "PolicyStatement",
    "Role",
    "ExecutionRoles",
    "RolePrincipals",
    "build_execution_roles",
    "make_handler_role",
    "make_role",
    "AddressingCapabilities",
    "AddressingNeed",
    "Identity",
    "PlatformWideAddressing",
    "PolicySynthesizer",
    "SynthesisContext",
]
