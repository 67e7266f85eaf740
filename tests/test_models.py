"""Tests for order entry data models."""

import dataclasses
from datetime import date

import pytest

from order_entry.models import ErrorToken, MedicationRef, OrderEntry, OrderField


def test_order_field_keys_are_the_six_validated_fields():
    assert OrderField.keys() == {
        "dosage", "dosageUnit", "frequency", "route", "duration", "durationUnit",
    }


def test_order_field_display_name():
    assert OrderField.display_name(OrderField.DOSAGE_UNIT) == "Dosage Unit"
    assert OrderField.display_name("durationUnit") == "Duration Unit"


def test_order_field_display_name_passes_unknown_values_through():
    assert OrderField.display_name("strength") == "strength"
    assert OrderField.display_name(None) == ""


def test_medication_ref_from_dict_accepts_camel_case_form():
    ref = MedicationRef.from_dict(
        {"id": "m1", "display": "Aspirin", "strength": "100 mg", "dosageForm": "Tablet"}
    )
    assert ref == MedicationRef(id="m1", display="Aspirin", strength="100 mg", dosage_form="Tablet")


def test_medication_ref_from_dict_accepts_snake_case_form():
    ref = MedicationRef.from_dict({"id": "m1", "display": "Aspirin", "dosage_form": "Capsule"})
    assert ref.dosage_form == "Capsule"
    assert ref.strength is None


def test_new_entry_defaults():
    entry = OrderEntry(id="m1", display="Aspirin")
    assert entry.dosage == 1
    assert entry.duration == 0
    assert entry.errors == {}
    assert entry.has_been_validated is False
    assert entry.is_stat is False
    assert entry.is_prn is False
    assert entry.start_date == date.today().isoformat()
    assert entry.is_valid


def test_entry_is_frozen():
    entry = OrderEntry(id="m1", display="Aspirin")
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.dosage = 5


def test_error_for_accepts_enum_or_key():
    entry = OrderEntry(id="m1", display="Aspirin", errors={"dosage": ErrorToken.DOSAGE_REQUIRED.value})
    assert entry.error_for(OrderField.DOSAGE) == "MEDICATION_DOSAGE_REQUIRED"
    assert entry.error_for("dosage") == "MEDICATION_DOSAGE_REQUIRED"
    assert entry.error_for(OrderField.ROUTE) is None
    assert not entry.is_valid


def test_entry_errors_are_read_only_copy():
    source = {"dosage": ErrorToken.DOSAGE_REQUIRED.value}
    entry = OrderEntry(id="m1", display="Aspirin", errors=source)

    source.clear()
    assert entry.errors == {"dosage": "MEDICATION_DOSAGE_REQUIRED"}
    with pytest.raises(TypeError):
        entry.errors["route"] = ErrorToken.DROPDOWN_VALUE_REQUIRED.value


def test_to_dict_uses_camel_case_keys():
    entry = OrderEntry(id="m1", display="Aspirin", is_stat=True, dosage_unit="tablet")
    data = entry.to_dict()
    assert data["isSTAT"] is True
    assert data["isPRN"] is False
    assert data["dosageUnit"] == "tablet"
    assert data["hasBeenValidated"] is False
    assert data["errors"] == {}
