"""Dispense quantity calculation.

Formula:
    total_days     = duration x days_multiplier(duration_unit)
    total_quantity = ceil(dosage x times_per_day(frequency) x total_days)

Partial dispense units cannot be issued, so the result is always rounded up.
The calculation is informational only: it never touches an entry's errors
and returns 0 rather than failing when a code does not resolve.
"""

import logging
import math
from decimal import Decimal, InvalidOperation

from .catalogs import ReferenceCatalogs
from .models import OrderEntry

logger = logging.getLogger(__name__)


def _to_decimal(value) -> Decimal | None:
    # str() first so 0.1 stays 0.1 rather than its binary expansion
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return result if result.is_finite() else None


def total_days(entry: OrderEntry | None, catalogs: ReferenceCatalogs) -> Decimal:
    """Number of days the order covers, or 0 if it cannot be resolved."""
    if entry is None:
        return Decimal(0)

    duration_unit = catalogs.get_duration_unit(entry.duration_unit)
    if duration_unit is None:
        return Decimal(0)

    duration = _to_decimal(entry.duration)
    multiplier = _to_decimal(duration_unit.days_multiplier)
    if duration is None or multiplier is None or duration <= 0:
        return Decimal(0)

    return duration * multiplier


def calculate_total_quantity(entry: OrderEntry | None, catalogs: ReferenceCatalogs) -> int:
    """Calculate the total dispense quantity for one entry.

    Args:
        entry: Order entry, or None if the lookup found nothing
        catalogs: Reference catalogs used to resolve frequency and duration unit

    Returns:
        Total units to dispense; 0 when the entry is missing, a code does not
        resolve, or dosage/duration is not positive
    """
    if entry is None:
        return 0

    frequency = catalogs.get_frequency(entry.frequency)
    if frequency is None:
        logger.debug(f"Unknown frequency '{entry.frequency}' for {entry.id}, quantity is 0")
        return 0
    if catalogs.get_duration_unit(entry.duration_unit) is None:
        logger.debug(f"Unknown duration unit '{entry.duration_unit}' for {entry.id}, quantity is 0")
        return 0

    dosage = _to_decimal(entry.dosage)
    times_per_day = _to_decimal(frequency.times_per_day)
    if dosage is None or times_per_day is None or dosage <= 0 or times_per_day <= 0:
        return 0

    days = total_days(entry, catalogs)
    if days <= 0:
        return 0

    return int(math.ceil(dosage * times_per_day * days))
