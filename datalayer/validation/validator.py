"""
Declarative Validator

Evaluates a rule set against a payload. Fields are validated concurrently and
every failure is collected; nothing short-circuits. Within a field, rules run
in the order they are declared.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config.loguru_config import get_logger

from .exceptions import RuleViolation
from .registry import RuleContext, RuleRegistry, get_value, parse_rule_spec
from .rules import default_registry

logger = get_logger(__name__)


@dataclass
class ValidationFailure:
    """One failing rule on one field."""
    field: str
    validation: str
    message: str


def default_message(rule: str, field: str) -> str:
    return f"{rule} validation failed on {field}"


class Validator:
    """
    Rule engine bound to a registry.

    A handler passes by returning anything but ``False``. It fails by
    returning ``False`` (default message) or by raising ``RuleViolation``
    (its own message). Any other exception is not a validation failure: it
    propagates to the caller once every field has finished.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    async def validate_all(
        self,
        data: Optional[Dict[str, Any]],
        rules: Dict[str, Any],
        owner: Any = None
    ) -> List[ValidationFailure]:
        """
        Validate ``data`` against ``rules``.

        Args:
            data: Payload to validate
            rules: Mapping of field to pipe-delimited rule list
            owner: Passed to every handler as ``RuleContext.owner``

        Returns:
            List[ValidationFailure]: Every failure, empty when the payload passes

        Raises:
            RuleNotFoundError: If a rule is not registered
        """
        data = data or {}

        # Resolve handlers up front so a misconfigured rule set fails before any lookup runs
        plan = {}
        for field, spec in rules.items():
            plan[field] = [
                (name, args, self.registry.get(name, field))
                for name, args in parse_rule_spec(spec)
            ]

        results = await asyncio.gather(
            *(self._validate_field(data, field, field_rules, owner) for field, field_rules in plan.items()),
            return_exceptions=True,
        )

        failures: List[ValidationFailure] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            failures.extend(result)
        return failures

    async def passes(self, data: Optional[Dict[str, Any]], rules: Dict[str, Any], owner: Any = None) -> bool:
        return not await self.validate_all(data, rules, owner)

    async def _validate_field(self, data, field, field_rules, owner) -> List[ValidationFailure]:
        value = get_value(data, field)
        failures = []

        for name, args, handler in field_rules:
            ctx = RuleContext(data=data, field=field, value=value, rule=name, args=args, owner=owner)
            try:
                outcome = handler(ctx)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except RuleViolation as violation:
                failures.append(ValidationFailure(field, name, violation.message or default_message(name, field)))
                continue

            if outcome is False:
                failures.append(ValidationFailure(field, name, default_message(name, field)))

        if failures:
            logger.debug(f"Field '{field}' failed {len(failures)} rule(s): {[f.validation for f in failures]}")
        return failures
