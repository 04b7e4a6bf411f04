"""
Repository Validation Rules

Rules that need the owning repository, which the validator hands over as
``RuleContext.owner``.
"""

from typing import Dict

from pymongo.errors import PyMongoError

from config.loguru_config import get_logger
from datalayer.validation import (
    RuleContext,
    RuleHandler,
    RuleViolation,
    ValidationInfrastructureError,
    get_value,
    is_existy,
)

logger = get_logger(__name__)


async def unique(ctx: RuleContext) -> bool:
    """
    Fail when another document already holds the value.

    ``unique`` checks the repository's own collection, ``unique:<collection>``
    checks the named one.
    """
    value = ctx.value
    if not is_existy(value) or value == "":
        raise RuleViolation(f"{ctx.field} is required")

    repository = ctx.owner
    if repository is None:
        raise ValidationInfrastructureError(
            "The unique rule needs an owning repository",
            rule=ctx.rule,
            field=ctx.field,
        )

    collection = repository.db.get_collection(ctx.args[0]) if ctx.args else repository.collection

    try:
        existing = await collection.find_one({ctx.field: value})
    except PyMongoError as e:
        logger.error(f"Duplicate check on '{ctx.field}' failed: {str(e)}")
        raise ValidationInfrastructureError(
            "There was an error when checking for duplicates",
            rule=ctx.rule,
            field=ctx.field,
        ) from e

    if existing is None:
        return True

    # phone-like values are stored as {"number": ..., ...}
    shown = value.get("number", value) if isinstance(value, dict) else value
    raise RuleViolation(f"{shown} is already in use")


async def either(ctx: RuleContext) -> bool:
    """
    Pass when the field or its companion (``or:<companion>``) is present.

    Without a companion the rule only checks the field itself.
    """
    if is_existy(ctx.value):
        return True

    if not ctx.args:
        logger.warning(f"Rule 'or' on '{ctx.field}' has no companion field")
        raise RuleViolation(f"{ctx.field} should exist")

    companion = ctx.args[0]
    if is_existy(get_value(ctx.data, companion)):
        return True

    raise RuleViolation(f"Either {ctx.field} or {companion} should exist")


REPOSITORY_RULES: Dict[str, RuleHandler] = {
    "unique": unique,
    "or": either,
}
