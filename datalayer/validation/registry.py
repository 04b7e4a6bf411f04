"""
Validation Rule Registry

Rules are plain callables registered under a name. A rule set maps each field
to a pipe-delimited list of rule tokens, a token being ``name`` or
``name:arg1,arg2``::

    {"email": "required|email|unique:users", "age": "integer|above:17"}
"""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .exceptions import RuleNotFoundError


class _Missing:
    """Marker for a key absent from the payload."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass
class RuleContext:
    """Everything a rule handler gets to look at."""
    data: Dict[str, Any]
    field: str
    value: Any
    rule: str
    args: List[str] = dataclass_field(default_factory=list)
    owner: Any = None

    @property
    def present(self) -> bool:
        return self.value is not MISSING

    def get(self, path: str, default: Any = None) -> Any:
        """Read another field of the payload."""
        value = get_value(self.data, path)
        return default if value is MISSING else value


RuleResult = Union[bool, None, Awaitable[Union[bool, None]]]
RuleHandler = Callable[[RuleContext], RuleResult]


def get_value(data: Any, path: str) -> Any:
    """Resolve a dotted path in nested mappings, MISSING when absent."""
    current = data
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return MISSING
    return current


def is_existy(value: Any) -> bool:
    """Present and not None, regardless of truthiness."""
    return value is not MISSING and value is not None


def parse_rule_spec(spec: Union[str, List[str], Tuple[str, ...]]) -> List[Tuple[str, List[str]]]:
    """
    Split a rule spec into ``(name, args)`` pairs, preserving order.

    Args:
        spec: ``"required|min:3"`` or ``["required", "min:3"]``

    Returns:
        List[Tuple[str, List[str]]]: Parsed rules
    """
    tokens = spec.split("|") if isinstance(spec, str) else list(spec)

    parsed = []
    for token in tokens:
        token = token.strip()
        if not token:
            continue
        name, _, raw_args = token.partition(":")
        args = [arg.strip() for arg in raw_args.split(",")] if raw_args else []
        parsed.append((name.strip(), args))
    return parsed


class RuleRegistry:
    """Explicit mapping of rule name to handler."""

    def __init__(self, rules: Optional[Dict[str, RuleHandler]] = None):
        self._rules: Dict[str, RuleHandler] = dict(rules or {})

    def extend(self, name: str, handler: RuleHandler) -> "RuleRegistry":
        """Register (or replace) a rule. Returns the registry for chaining."""
        if not name:
            raise ValueError("Rule name cannot be empty")
        if not callable(handler):
            raise TypeError(f"Handler for rule '{name}' is not callable")
        self._rules[name] = handler
        return self

    def update(self, rules: Dict[str, RuleHandler]) -> "RuleRegistry":
        for name, handler in rules.items():
            self.extend(name, handler)
        return self

    def get(self, name: str, field: str = None) -> RuleHandler:
        try:
            return self._rules[name]
        except KeyError:
            raise RuleNotFoundError(name, field) from None

    def copy(self) -> "RuleRegistry":
        return RuleRegistry(self._rules)

    def names(self) -> List[str]:
        return sorted(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)
