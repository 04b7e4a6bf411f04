"""
Validation Layer

Declarative, rule-based payload validation with support for asynchronous
custom rules.
"""

from .exceptions import (
    VALIDATION_FAILED_MESSAGE,
    ValidationError,
    RuleViolation,
    RuleNotFoundError,
    ValidationInfrastructureError,
)
from .registry import (
    MISSING,
    RuleContext,
    RuleHandler,
    RuleRegistry,
    get_value,
    is_existy,
    parse_rule_spec,
)
from .rules import BUILTIN_RULES, default_registry
from .validator import ValidationFailure, Validator, default_message

__all__ = [
    # Exceptions
    "VALIDATION_FAILED_MESSAGE",
    "ValidationError",
    "RuleViolation",
    "RuleNotFoundError",
    "ValidationInfrastructureError",

    # Registry
    "MISSING",
    "RuleContext",
    "RuleHandler",
    "RuleRegistry",
    "get_value",
    "is_existy",
    "parse_rule_spec",

    # Rules
    "BUILTIN_RULES",
    "default_registry",

    # Engine
    "ValidationFailure",
    "Validator",
    "default_message",
]
