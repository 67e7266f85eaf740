"""Rule tables for order entry validation and error clearing.

Two tables drive all error handling on an entry:

- ``REQUIRED_FIELD_RULES``: what validate-all checks for each field and the
  token it writes when the check fails.
- ``ERROR_CLEARING_RULES``: when a field update may delete that field's
  existing error. Updates only ever delete errors; adding them is reserved
  for validate-all.
"""

from typing import Mapping

from .models import ErrorToken, OrderEntry, OrderField


def is_positive(value) -> bool:
    """True for a numeric value greater than zero."""
    if value is None or isinstance(value, bool):
        return False
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def is_present(value) -> bool:
    """True for a non-empty code."""
    if value is None:
        return False
    return str(value).strip() != ""


# =============================================================================
# Required-field rules (validate-all)
# =============================================================================

# Duration and duration unit form one rule pair; a STAT order is given once,
# so neither is required while is_stat is set.
REQUIRED_FIELD_RULES = [
    {
        "field": OrderField.DOSAGE,
        "attribute": "dosage",
        "check": is_positive,
        "token": ErrorToken.DOSAGE_REQUIRED,
        "stat_exempt": False,
    },
    {
        "field": OrderField.DOSAGE_UNIT,
        "attribute": "dosage_unit",
        "check": is_present,
        "token": ErrorToken.DROPDOWN_VALUE_REQUIRED,
        "stat_exempt": False,
    },
    {
        "field": OrderField.FREQUENCY,
        "attribute": "frequency",
        "check": is_present,
        "token": ErrorToken.DROPDOWN_VALUE_REQUIRED,
        "stat_exempt": False,
    },
    {
        "field": OrderField.ROUTE,
        "attribute": "route",
        "check": is_present,
        "token": ErrorToken.DROPDOWN_VALUE_REQUIRED,
        "stat_exempt": False,
    },
    {
        "field": OrderField.DURATION,
        "attribute": "duration",
        "check": is_positive,
        "token": ErrorToken.DURATION_REQUIRED,
        "stat_exempt": True,
    },
    {
        "field": OrderField.DURATION_UNIT,
        "attribute": "duration_unit",
        "check": is_present,
        "token": ErrorToken.DROPDOWN_VALUE_REQUIRED,
        "stat_exempt": True,
    },
]


# =============================================================================
# Error-clearing rules (field updates)
# =============================================================================

# field -> condition on the new value under which an already-validated
# entry loses its error for that field
ERROR_CLEARING_RULES = {
    OrderField.DOSAGE: is_positive,
    OrderField.DOSAGE_UNIT: is_present,
    OrderField.FREQUENCY: is_present,
    OrderField.ROUTE: is_present,
    OrderField.DURATION: is_positive,
    OrderField.DURATION_UNIT: is_present,
}

# Fields whose errors are dropped whenever STAT is switched on
STAT_CLEARED_FIELDS = (OrderField.DURATION, OrderField.DURATION_UNIT)


def should_clear_error(entry: OrderEntry, order_field: OrderField, new_value) -> bool:
    """Decide whether updating ``order_field`` to ``new_value`` clears its error.

    Args:
        entry: The entry as it was before the update
        order_field: Field being updated
        new_value: Value being written

    Returns:
        True if the field's error key should be deleted
    """
    if not entry.has_been_validated:
        return False
    condition = ERROR_CLEARING_RULES.get(order_field)
    if condition is None:
        return False
    return condition(new_value)


def without_errors(errors: Mapping[str, str], fields) -> dict[str, str]:
    """Return a copy of ``errors`` with the given fields' keys removed."""
    remaining = dict(errors)
    for order_field in fields:
        remaining.pop(OrderField(order_field).value, None)
    return remaining
