"""Shared fixtures for order entry tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from order_entry.catalogs import (
    CatalogOption,
    DurationUnitOption,
    FrequencyOption,
    ReferenceCatalogs,
)
from order_entry.config import OrderDefaults
from order_entry.models import MedicationRef
from order_entry.store import MedicationOrderStore


@pytest.fixture
def catalogs():
    """Small catalog set with easy multipliers."""
    return ReferenceCatalogs(
        frequencies=[
            FrequencyOption("OD", "Once a day", 1),
            FrequencyOption("BD", "Twice a day", 2),
            FrequencyOption("TDS", "Thrice a day", 3),
            FrequencyOption("QOD", "Alternate days", 0.5),
        ],
        routes=[CatalogOption("PO", "Oral"), CatalogOption("IV", "Intravenous")],
        timings=[CatalogOption("AC", "Before meals")],
        dosage_units=[CatalogOption("tablet", "Tablet(s)"), CatalogOption("mg", "mg")],
        duration_units=[
            DurationUnitOption("d", "Day(s)", 1),
            DurationUnitOption("wk", "Week(s)", 7),
        ],
    )


@pytest.fixture
def medication():
    return MedicationRef(id="med-123", display="Paracetamol 500 mg", strength="500 mg", dosage_form="Tablet")


@pytest.fixture
def other_medication():
    return MedicationRef(id="med-456", display="Ibuprofen 200 mg", strength="200 mg", dosage_form="Tablet")


@pytest.fixture
def store(catalogs):
    """Store with no dosage-form defaults, so new entries start bare."""
    return MedicationOrderStore(
        catalogs=catalogs,
        defaults=OrderDefaults(use_dosage_form_defaults=False),
    )


@pytest.fixture
def complete_store(store, medication):
    """Store holding one entry with every required field filled in."""
    store.add(medication, medication.display)
    store.update_dosage("med-123", 2)
    store.update_dosage_unit("med-123", "tablet")
    store.update_frequency("med-123", "BD")
    store.update_route("med-123", "PO")
    store.update_duration("med-123", 5)
    store.update_duration_unit("med-123", "d")
    return store
