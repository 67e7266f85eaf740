#!/usr/bin/env python3
"""Compose demo prescriptions with the order entry engine.

Builds an order from a predefined scenario, runs validation and prints each
entry with its errors and calculated dispense quantity.

Usage:
    # Complete twice-daily order that passes validation
    python demo_order_entry.py --scenario complete

    # STAT dose without a duration
    python demo_order_entry.py --scenario stat-no-duration

    # Missing route and frequency (fails validation)
    python demo_order_entry.py --scenario missing-fields

    # Print MedicationRequest resources for a valid order
    python demo_order_entry.py --scenario complete --fhir

    # List all scenarios
    python demo_order_entry.py --list
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from order_entry import MedicationOrderStore, OrderEntryConfig
from order_entry.fhir import create_medication_request_resources

# ============================================================================
# PREDEFINED SCENARIOS
# ============================================================================
SCENARIOS = {
    "complete": {
        "description": "Amoxicillin 500 mg capsule, 1 capsule BD for 5 days",
        "medication": {"id": "amoxicillin-500", "display": "Amoxicillin 500 mg", "strength": "500 mg", "dosageForm": "Capsule"},
        "updates": {"frequency": "BD", "duration": 5, "duration_unit": "d"},
        "expected_valid": True,
    },
    "stat-no-duration": {
        "description": "Ondansetron 4 mg injection, single STAT dose",
        "medication": {"id": "ondansetron-4", "display": "Ondansetron 4 mg/2 mL", "strength": "4 mg", "dosageForm": "Injection"},
        "updates": {"dosage": 2, "frequency": "STAT", "is_stat": True},
        "expected_valid": True,
    },
    "prn-no-duration": {
        "description": "Paracetamol 500 mg PRN without a duration (duration still required)",
        "medication": {"id": "paracetamol-500", "display": "Paracetamol 500 mg", "strength": "500 mg", "dosageForm": "Tablet"},
        "updates": {"dosage": 2, "frequency": "Q6H", "is_prn": True},
        "expected_valid": False,
    },
    "missing-fields": {
        "description": "Cream with no frequency, unit or duration",
        "medication": {"id": "hydrocortisone-1", "display": "Hydrocortisone 1% cream", "dosageForm": "Cream"},
        "updates": {},
        "expected_valid": False,
    },
}


def setup_logging(level: str = "INFO"):
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def apply_updates(store: MedicationOrderStore, entry_id: str, updates: dict) -> None:
    """Apply scenario field updates through the matching store operations."""
    for field_name, value in updates.items():
        getattr(store, f"update_{field_name}")(entry_id, value)


def print_entry(store: MedicationOrderStore, entry_id: str) -> None:
    entry = store.get_entry(entry_id)
    print(f"\n{entry.display} [{entry.id}]")
    print(f"  Dose: {entry.dosage} {entry.dosage_unit or '-'} {entry.route or '-'} {entry.frequency or '-'}")
    print(f"  Duration: {entry.duration} {entry.duration_unit or '-'}")
    print(f"  STAT: {entry.is_stat}  PRN: {entry.is_prn}  Start: {entry.start_date}")
    print(f"  Dispense quantity: {store.calculate_total_quantity(entry.id)}")
    if entry.errors:
        for key, token in entry.errors.items():
            print(f"  ✗ {key}: {token}")
    else:
        print("  ✓ No errors")


def run_scenario(name: str, store: MedicationOrderStore, show_fhir: bool = False) -> bool:
    scenario = SCENARIOS[name]
    print("\n" + "=" * 60)
    print(f"{name}: {scenario['description']}")
    print("=" * 60)

    entry = store.add(scenario["medication"], scenario["medication"]["display"])
    if entry is None:
        print("  Order already present, skipping")
        return True
    apply_updates(store, entry.id, scenario["updates"])

    is_valid = store.validate_all()
    print_entry(store, entry.id)

    matched = is_valid == scenario["expected_valid"]
    print(f"\nValid: {is_valid} (expected {scenario['expected_valid']}) {'✓' if matched else '✗'}")

    if show_fhir and is_valid:
        resources = create_medication_request_resources(
            [store.get_entry(entry.id)],
            store.catalogs,
            subject={"reference": "Patient/demo-patient"},
        )
        print(json.dumps(resources, indent=2))

    return matched


def main():
    parser = argparse.ArgumentParser(
        description="Medication order entry demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument("--scenario", choices=sorted(SCENARIOS), help="Run a single scenario")
    mode_group.add_argument("--all", action="store_true", help="Run every scenario in one order")
    mode_group.add_argument("--list", action="store_true", help="List scenarios")
    parser.add_argument("--fhir", action="store_true", help="Print MedicationRequest resources for valid orders")
    parser.add_argument("--env-file", help="Optional .env file with ORDER_ENTRY_* settings")

    args = parser.parse_args()

    if args.list:
        for name, scenario in SCENARIOS.items():
            print(f"  {name:20} {scenario['description']}")
        return 0

    config = OrderEntryConfig.from_env(args.env_file)
    setup_logging(config.log_level)
    store = MedicationOrderStore(catalogs=config.load_catalogs(), defaults=config.defaults)

    names = list(SCENARIOS) if args.all else [args.scenario]
    results = []
    for name in names:
        if args.all:
            store.reset()
        results.append(run_scenario(name, store, show_fhir=args.fhir))

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
