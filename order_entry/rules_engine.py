"""Validation engine for draft medication orders."""

import dataclasses
import logging
from typing import Callable, Iterable

from .models import ErrorToken, OrderEntry, OrderField
from .rules import REQUIRED_FIELD_RULES

logger = logging.getLogger(__name__)


class RequiredFieldRule:
    """A single required-field check on one order field."""

    def __init__(
        self,
        order_field: OrderField,
        attribute: str,
        check: Callable[[object], bool],
        token: ErrorToken,
        stat_exempt: bool = False,
    ):
        self.field = order_field
        self.attribute = attribute
        self.check = check
        self.token = token
        self.stat_exempt = stat_exempt

    @classmethod
    def from_table(cls, rule: dict) -> "RequiredFieldRule":
        return cls(
            order_field=rule["field"],
            attribute=rule["attribute"],
            check=rule["check"],
            token=rule["token"],
            stat_exempt=rule.get("stat_exempt", False),
        )

    def evaluate(self, entry: OrderEntry) -> ErrorToken | None:
        """Return the error token if the entry fails this rule, else None.

        Args:
            entry: Order entry to check

        Returns:
            ErrorToken on failure, None when the field passes or is exempt
        """
        if self.stat_exempt and entry.is_stat:
            return None
        if self.check(getattr(entry, self.attribute)):
            return None
        return self.token


class OrderValidationEngine:
    """Evaluates order entries against required-field rules."""

    def __init__(self, rules: list[dict] | None = None):
        """Initialize validation engine.

        Args:
            rules: Optional rule table in the ``REQUIRED_FIELD_RULES`` layout
        """
        self.rules: list[RequiredFieldRule] = [
            RequiredFieldRule.from_table(rule)
            for rule in (rules if rules is not None else REQUIRED_FIELD_RULES)
        ]

    def evaluate(self, entry: OrderEntry) -> dict[str, str | None]:
        """Run every rule against one entry.

        Rules are independent of each other. A rule that raises counts as a
        failure for its field.

        Args:
            entry: Order entry to evaluate

        Returns:
            Dict of field key -> error token (failing) or None (passing)
        """
        results: dict[str, str | None] = {}

        for rule in self.rules:
            try:
                token = rule.evaluate(entry)
            except Exception as e:
                logger.error(
                    f"Error evaluating {rule.field.value} rule for {entry.id}: {e}", exc_info=True
                )
                token = rule.token
            results[rule.field.value] = token.value if token else None

        return results

    def apply(self, entry: OrderEntry) -> OrderEntry:
        """Return a copy of the entry with its errors recomputed.

        Checked fields are re-evaluated from scratch: failures set their
        token and passes delete any earlier error. The entry is marked as
        validated whatever the outcome.
        """
        errors = dict(entry.errors)
        for key, token in self.evaluate(entry).items():
            if token:
                errors[key] = token
            else:
                errors.pop(key, None)

        return dataclasses.replace(entry, errors=errors, has_been_validated=True)

    def validate_all(self, entries: Iterable[OrderEntry]) -> tuple[tuple[OrderEntry, ...], bool]:
        """Validate every entry in the collection.

        Args:
            entries: The full entry collection

        Returns:
            (validated entries in the same order, True if no entry has errors)
        """
        validated = tuple(self.apply(entry) for entry in entries)
        invalid = [entry.id for entry in validated if entry.errors]

        if invalid:
            logger.info(f"Validation failed for {len(invalid)} of {len(validated)} orders: {invalid}")
        else:
            logger.debug(f"Validation passed for {len(validated)} orders")

        return validated, not invalid
