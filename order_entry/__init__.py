"""Medication order entry engine.

Keeps the draft medication orders a clinician is composing, validates them
before submission and derives dispense quantities.
"""

from .catalogs import (
    DEFAULT_CATALOGS,
    CatalogOption,
    DurationUnitOption,
    FrequencyOption,
    ReferenceCatalogs,
    is_immediate_frequency,
    load_catalogs,
)
from .config import OrderDefaults, OrderEntryConfig
from .models import ErrorToken, MedicationRef, OrderEntry, OrderField
from .quantity import calculate_total_quantity
from .rules_engine import OrderValidationEngine
from .store import MedicationOrderStore, OrderStoreState

__all__ = [
    # Models
    "ErrorToken",
    "MedicationRef",
    "OrderEntry",
    "OrderField",
    # Catalogs
    "CatalogOption",
    "DEFAULT_CATALOGS",
    "DurationUnitOption",
    "FrequencyOption",
    "ReferenceCatalogs",
    "is_immediate_frequency",
    "load_catalogs",
    # Config
    "OrderDefaults",
    "OrderEntryConfig",
    # Engine
    "MedicationOrderStore",
    "OrderStoreState",
    "OrderValidationEngine",
    "calculate_total_quantity",
]

__version__ = "1.0.0"
