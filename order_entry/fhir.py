"""Build FHIR R4 MedicationRequest resources from draft orders.

Only constructs resource dictionaries; sending them to a FHIR server is the
caller's job.
"""

import json
import logging
from typing import Iterable

from .catalogs import ReferenceCatalogs
from .models import OrderEntry
from .quantity import calculate_total_quantity

logger = logging.getLogger(__name__)

# Timing.repeat.durationUnit only accepts these UCUM time units
UCUM_TIME_UNITS = frozenset({"s", "min", "h", "d", "wk", "mo", "a"})


def create_coding(code: str, display: str | None = None, system: str | None = None) -> dict:
    coding = {"code": code}
    if display:
        coding["display"] = display
    if system:
        coding["system"] = system
    return coding


def create_codeable_concept(codings: list[dict], text: str | None = None) -> dict:
    concept = {"coding": codings}
    if text:
        concept["text"] = text
    return concept


def create_medication_reference(medication_id: str) -> dict:
    return {"reference": f"Medication/{medication_id}", "type": "Medication"}


def _option_concept(option, code: str) -> dict:
    display = option.display if option else None
    return create_codeable_concept([create_coding(code, display)], text=display)


def _build_timing(entry: OrderEntry, catalogs: ReferenceCatalogs) -> dict | None:
    timing: dict = {}

    if entry.start_date:
        timing["event"] = [entry.start_date]

    if entry.duration and entry.duration > 0 and entry.duration_unit:
        if entry.duration_unit in UCUM_TIME_UNITS:
            timing["repeat"] = {
                "duration": entry.duration,
                "durationUnit": entry.duration_unit,
            }
        else:
            logger.warning(
                f"Order {entry.id}: duration unit {entry.duration_unit!r} is not a UCUM time unit, "
                f"omitting timing.repeat"
            )

    if entry.frequency:
        timing["code"] = _option_concept(catalogs.get_frequency(entry.frequency), entry.frequency)

    return timing or None


def create_medication_request_resource(
    entry: OrderEntry,
    catalogs: ReferenceCatalogs,
    subject: dict,
    encounter: dict | None = None,
    requester: dict | None = None,
) -> dict:
    """Convert one order entry into a MedicationRequest resource.

    Args:
        entry: Order entry (normally already validated)
        catalogs: Reference catalogs, used for displays and quantity
        subject: Patient reference, e.g. {"reference": "Patient/123"}
        encounter: Encounter reference
        requester: Practitioner reference

    Returns:
        MedicationRequest resource as a dict
    """
    text = {"instructions": entry.instructions} if entry.instructions else {}
    dosage: dict = {
        "text": json.dumps(text),
        "asNeededBoolean": entry.is_prn,
    }

    timing = _build_timing(entry, catalogs)
    if timing:
        dosage["timing"] = timing

    if entry.route:
        dosage["route"] = _option_concept(catalogs.get_route(entry.route), entry.route)

    if entry.timing:
        dosage["additionalInstruction"] = [
            _option_concept(catalogs.get_timing(entry.timing), entry.timing)
        ]

    if entry.dosage and entry.dosage > 0 and entry.dosage_unit:
        dosage["doseAndRate"] = [{
            "doseQuantity": {
                "value": entry.dosage,
                "code": entry.dosage_unit,
            }
        }]

    # Fall back to the calculated quantity when none was entered
    dispense_value = entry.dispense_quantity or calculate_total_quantity(entry, catalogs)
    dispense_unit = entry.dispense_unit or entry.dosage_unit
    quantity: dict = {"value": dispense_value}
    if dispense_unit:
        quantity["code"] = dispense_unit

    resource = {
        "resourceType": "MedicationRequest",
        "status": "active",
        "intent": "order",
        "priority": "stat" if entry.is_stat else "routine",
        "medicationReference": create_medication_reference(entry.id),
        "subject": subject,
        "dosageInstruction": [dosage],
        "dispenseRequest": {
            "numberOfRepeatsAllowed": 0,
            "quantity": quantity,
        },
    }
    if encounter:
        resource["encounter"] = encounter
    if requester:
        resource["requester"] = requester

    return resource


def create_medication_request_resources(
    entries: Iterable[OrderEntry],
    catalogs: ReferenceCatalogs,
    subject: dict,
    encounter: dict | None = None,
    requester: dict | None = None,
) -> list[dict]:
    """Convert every order entry into a MedicationRequest resource."""
    resources = [
        create_medication_request_resource(entry, catalogs, subject, encounter, requester)
        for entry in entries
    ]
    logger.debug(f"Built {len(resources)} MedicationRequest resources")
    return resources
