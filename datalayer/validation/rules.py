"""
Built-in Validation Rules

Every rule except ``required`` is skipped when the key is absent from the
payload; an explicit ``None`` is still evaluated.
"""

import re
from numbers import Number
from typing import Dict

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .registry import RuleContext, RuleHandler, RuleRegistry


ALPHA_RE = re.compile(r"^[a-zA-Z]+$")
ALPHA_NUMERIC_RE = re.compile(r"^[a-zA-Z0-9]+$")
EMAIL_ADAPTER = TypeAdapter(EmailStr)


def _skippable(ctx: RuleContext) -> bool:
    return not ctx.present


def _is_number(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _arg(ctx: RuleContext, index: int = 0) -> str:
    if len(ctx.args) <= index:
        raise ValueError(f"Rule '{ctx.rule}' on '{ctx.field}' expects at least {index + 1} argument(s)")
    return ctx.args[index]


def _numeric_arg(ctx: RuleContext, index: int = 0) -> float:
    return float(_arg(ctx, index))


def required(ctx: RuleContext) -> bool:
    if not ctx.present or ctx.value is None:
        return False
    if isinstance(ctx.value, (str, list, tuple, dict, set)) and len(ctx.value) == 0:
        return False
    return True


def alpha(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return isinstance(ctx.value, str) and bool(ALPHA_RE.match(ctx.value))


def alpha_numeric(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return isinstance(ctx.value, str) and bool(ALPHA_NUMERIC_RE.match(ctx.value))


def email(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    if not isinstance(ctx.value, str):
        return False
    try:
        EMAIL_ADAPTER.validate_python(ctx.value)
    except PydanticValidationError:
        return False
    return True


def string(ctx: RuleContext) -> bool:
    return _skippable(ctx) or isinstance(ctx.value, str)


def number(ctx: RuleContext) -> bool:
    return _skippable(ctx) or _is_number(ctx.value)


def integer(ctx: RuleContext) -> bool:
    return _skippable(ctx) or (isinstance(ctx.value, int) and not isinstance(ctx.value, bool))


def boolean(ctx: RuleContext) -> bool:
    return _skippable(ctx) or isinstance(ctx.value, bool)


def array(ctx: RuleContext) -> bool:
    return _skippable(ctx) or isinstance(ctx.value, (list, tuple))


def object_(ctx: RuleContext) -> bool:
    return _skippable(ctx) or isinstance(ctx.value, dict)


def in_(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return ctx.value is not None and str(ctx.value) in ctx.args


def not_in(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return ctx.value is None or str(ctx.value) not in ctx.args


def min_(ctx: RuleContext) -> bool:
    """Minimum length of a string or sequence."""
    if _skippable(ctx):
        return True
    try:
        return len(ctx.value) >= _numeric_arg(ctx)
    except TypeError:
        return False


def max_(ctx: RuleContext) -> bool:
    """Maximum length of a string or sequence."""
    if _skippable(ctx):
        return True
    try:
        return len(ctx.value) <= _numeric_arg(ctx)
    except TypeError:
        return False


def above(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return _is_number(ctx.value) and ctx.value > _numeric_arg(ctx)


def under(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return _is_number(ctx.value) and ctx.value < _numeric_arg(ctx)


def equals(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    return ctx.value is not None and str(ctx.value) == _arg(ctx)


def regex(ctx: RuleContext) -> bool:
    if _skippable(ctx):
        return True
    # commas belong to the pattern, not to the argument list
    pattern = ",".join(ctx.args)
    return isinstance(ctx.value, str) and re.search(pattern, ctx.value) is not None


BUILTIN_RULES: Dict[str, RuleHandler] = {
    "required": required,
    "alpha": alpha,
    "alpha_numeric": alpha_numeric,
    "email": email,
    "string": string,
    "number": number,
    "integer": integer,
    "boolean": boolean,
    "array": array,
    "object": object_,
    "in": in_,
    "not_in": not_in,
    "min": min_,
    "max": max_,
    "above": above,
    "under": under,
    "equals": equals,
    "regex": regex,
}


def default_registry() -> RuleRegistry:
    """Return a fresh registry holding the built-in rules."""
    return RuleRegistry(BUILTIN_RULES)
