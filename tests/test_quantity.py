"""Tests for dispense quantity calculation."""

import pytest

from order_entry.models import OrderEntry
from order_entry.quantity import calculate_total_quantity, total_days


def entry(**overrides) -> OrderEntry:
    values = dict(id="m1", display="Test", dosage=2, frequency="BD", duration=5, duration_unit="d")
    values.update(overrides)
    return OrderEntry(**values)


def test_basic_quantity(catalogs):
    # ceil(2 x 2 x 5 x 1)
    assert calculate_total_quantity(entry(), catalogs) == 20


def test_week_duration_unit(catalogs):
    # 5 x 2 x 2 weeks x 7
    assert calculate_total_quantity(entry(dosage=5, duration=2, duration_unit="wk"), catalogs) == 140


def test_fractional_result_rounds_up(catalogs):
    # 0.5/day x 1 x 3 days = 1.5
    assert calculate_total_quantity(entry(dosage=1, frequency="QOD", duration=3), catalogs) == 2


def test_fractional_dosage(catalogs):
    assert calculate_total_quantity(entry(dosage=2.5, duration=3), catalogs) == 15


def test_float_artifacts_do_not_round_up(catalogs):
    # 0.1 x 3 x 10 is 3.0000000000000004 in binary floating point
    assert calculate_total_quantity(entry(dosage=0.1, frequency="TDS", duration=10), catalogs) == 3


@pytest.mark.parametrize("overrides", [
    {"dosage": 0},
    {"dosage": -10},
    {"duration": 0},
    {"duration": -5},
])
def test_non_positive_inputs_give_zero(catalogs, overrides):
    assert calculate_total_quantity(entry(**overrides), catalogs) == 0


def test_unknown_frequency_gives_zero(catalogs):
    assert calculate_total_quantity(entry(frequency="Q2H"), catalogs) == 0


def test_unknown_duration_unit_gives_zero(catalogs):
    assert calculate_total_quantity(entry(duration_unit="mo"), catalogs) == 0


def test_missing_codes_give_zero(catalogs):
    assert calculate_total_quantity(entry(frequency=None), catalogs) == 0
    assert calculate_total_quantity(entry(duration_unit=None), catalogs) == 0


def test_missing_entry_gives_zero(catalogs):
    assert calculate_total_quantity(None, catalogs) == 0


def test_does_not_require_validation(catalogs):
    unvalidated = entry(route=None, dosage_unit=None)
    assert calculate_total_quantity(unvalidated, catalogs) == 20


def test_calculation_is_pure(catalogs):
    e = entry(errors={"route": "DROPDOWN_VALUE_REQUIRED"}, has_been_validated=True)
    first = calculate_total_quantity(e, catalogs)
    second = calculate_total_quantity(e, catalogs)
    assert first == second
    assert e.errors == {"route": "DROPDOWN_VALUE_REQUIRED"}
    assert e.has_been_validated is True


def test_returns_int(catalogs):
    assert isinstance(calculate_total_quantity(entry(), catalogs), int)


def test_total_days(catalogs):
    assert total_days(entry(duration=2, duration_unit="wk"), catalogs) == 14
    assert total_days(entry(duration_unit="unknown"), catalogs) == 0
    assert total_days(None, catalogs) == 0
