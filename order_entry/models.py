"""Data models for the medication order entry engine."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class OrderField(str, Enum):
    """Order entry fields checked by validation.

    Values are the keys used in ``OrderEntry.errors``.
    """
    DOSAGE = "dosage"
    DOSAGE_UNIT = "dosageUnit"
    FREQUENCY = "frequency"
    ROUTE = "route"
    DURATION = "duration"
    DURATION_UNIT = "durationUnit"

    @classmethod
    def display_name(cls, value):
        """Get human-readable display name for a field."""
        display_map = {
            cls.DOSAGE: "Dosage",
            cls.DOSAGE_UNIT: "Dosage Unit",
            cls.FREQUENCY: "Frequency",
            cls.ROUTE: "Route",
            cls.DURATION: "Duration",
            cls.DURATION_UNIT: "Duration Unit",
        }
        if isinstance(value, cls):
            return display_map[value]
        if value in cls.keys():
            return display_map[cls(value)]
        return value or ""

    @classmethod
    def keys(cls) -> frozenset[str]:
        """All error-map keys the validator may write."""
        return frozenset(f.value for f in cls)


class ErrorToken(str, Enum):
    """Error-message tokens stored on an entry for a failing field."""
    DOSAGE_REQUIRED = "MEDICATION_DOSAGE_REQUIRED"
    DURATION_REQUIRED = "MEDICATION_DURATION_REQUIRED"
    DROPDOWN_VALUE_REQUIRED = "DROPDOWN_VALUE_REQUIRED"


@dataclass(frozen=True)
class MedicationRef:
    """A medication concept from the catalog lookup, used to start an order."""
    id: str
    display: str
    strength: str | None = None
    dosage_form: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "MedicationRef":
        """Create from a catalog lookup record.

        Accepts either ``dosageForm`` or ``dosage_form`` for the form.
        """
        return cls(
            id=data["id"],
            display=data.get("display", ""),
            strength=data.get("strength"),
            dosage_form=data.get("dosageForm", data.get("dosage_form")),
        )


@dataclass(frozen=True)
class OrderEntry:
    """One draft medication order line being composed.

    Entries are never edited in place. The store derives a new entry for
    every change. ``errors`` is copied on construction into a read-only
    mapping.
    """
    id: str
    display: str
    strength: str | None = None
    dosage_form: str | None = None

    # Dose
    dosage: float = 1
    dosage_unit: str | None = None
    frequency: str | None = None
    route: str | None = None

    # Duration
    duration: float = 0
    duration_unit: str | None = None

    timing: str | None = None
    is_stat: bool = False
    is_prn: bool = False
    start_date: str = field(default_factory=lambda: date.today().isoformat())
    instructions: str | None = None

    # Dispense
    dispense_quantity: float = 0
    dispense_unit: str | None = None

    # Validation state
    errors: Mapping[str, str] = field(default_factory=dict)
    has_been_validated: bool = False

    def __post_init__(self):
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @property
    def is_valid(self) -> bool:
        """True when the entry currently carries no field errors."""
        return not self.errors

    def error_for(self, order_field: OrderField | str) -> str | None:
        """Get the error token for a field, if any."""
        key = order_field.value if isinstance(order_field, OrderField) else order_field
        return self.errors.get(key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "display": self.display,
            "strength": self.strength,
            "dosageForm": self.dosage_form,
            "dosage": self.dosage,
            "dosageUnit": self.dosage_unit,
            "frequency": self.frequency,
            "route": self.route,
            "duration": self.duration,
            "durationUnit": self.duration_unit,
            "timing": self.timing,
            "isSTAT": self.is_stat,
            "isPRN": self.is_prn,
            "startDate": self.start_date,
            "instructions": self.instructions,
            "dispenseQuantity": self.dispense_quantity,
            "dispenseUnit": self.dispense_unit,
            "errors": dict(self.errors),
            "hasBeenValidated": self.has_been_validated,
        }
