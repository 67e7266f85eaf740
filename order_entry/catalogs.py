"""Reference catalogs for order entry.

Static, read-only code lists for frequency, route, timing, dosage unit and
duration unit. Frequencies carry a ``times_per_day`` multiplier and duration
units carry a ``days_multiplier``; both feed the dispense quantity formula.

Catalogs are handed to the store and calculator explicitly so that tests and
deployments can swap in their own lists.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogOption:
    """A plain coded option (route, timing, dosage unit)."""
    code: str
    display: str


@dataclass(frozen=True)
class FrequencyOption:
    """A dosing frequency and how many administrations it means per day."""
    code: str
    display: str
    times_per_day: float


@dataclass(frozen=True)
class DurationUnitOption:
    """A duration unit and how many days one unit spans."""
    code: str
    display: str
    days_multiplier: float


def _find(options: tuple, code: str | None):
    if not code:
        return None
    for option in options:
        if option.code == code:
            return option
    return None


@dataclass(frozen=True)
class ReferenceCatalogs:
    """The full set of reference catalogs.

    All lookups are exact matches on ``code``.
    """
    frequencies: tuple[FrequencyOption, ...] = ()
    routes: tuple[CatalogOption, ...] = ()
    timings: tuple[CatalogOption, ...] = ()
    dosage_units: tuple[CatalogOption, ...] = ()
    duration_units: tuple[DurationUnitOption, ...] = ()

    def __post_init__(self):
        # Freeze whatever sequence type the caller passed in
        for name in ("frequencies", "routes", "timings", "dosage_units", "duration_units"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def get_frequency(self, code: str | None) -> FrequencyOption | None:
        return _find(self.frequencies, code)

    def get_duration_unit(self, code: str | None) -> DurationUnitOption | None:
        return _find(self.duration_units, code)

    def get_route(self, code: str | None) -> CatalogOption | None:
        return _find(self.routes, code)

    def get_timing(self, code: str | None) -> CatalogOption | None:
        return _find(self.timings, code)

    def get_dosage_unit(self, code: str | None) -> CatalogOption | None:
        return _find(self.dosage_units, code)

    def to_dict(self) -> dict:
        """Convert to the JSON catalog file layout."""
        return {
            "frequencies": [
                {"code": f.code, "display": f.display, "timesPerDay": f.times_per_day}
                for f in self.frequencies
            ],
            "routes": [{"code": r.code, "display": r.display} for r in self.routes],
            "timings": [{"code": t.code, "display": t.display} for t in self.timings],
            "dosageUnits": [{"code": u.code, "display": u.display} for u in self.dosage_units],
            "durationUnits": [
                {"code": u.code, "display": u.display, "daysMultiplier": u.days_multiplier}
                for u in self.duration_units
            ],
        }


# =============================================================================
# Default Catalog Data
# =============================================================================

IMMEDIATE_FREQUENCY_CODE = "STAT"

DEFAULT_FREQUENCIES = (
    FrequencyOption("OD", "Once a day", 1),
    FrequencyOption("BD", "Twice a day", 2),
    FrequencyOption("TDS", "Thrice a day", 3),
    FrequencyOption("QDS", "Four times a day", 4),
    FrequencyOption("Q4H", "Every 4 hours", 6),
    FrequencyOption("Q6H", "Every 6 hours", 4),
    FrequencyOption("Q8H", "Every 8 hours", 3),
    FrequencyOption("Q12H", "Every 12 hours", 2),
    FrequencyOption("HS", "At bedtime", 1),
    FrequencyOption("QOD", "On alternate days", 0.5),
    FrequencyOption("QWK", "Once a week", 1 / 7),
    FrequencyOption(IMMEDIATE_FREQUENCY_CODE, "Immediately", 1),
)

DEFAULT_ROUTES = (
    CatalogOption("PO", "Oral"),
    CatalogOption("IV", "Intravenous"),
    CatalogOption("IM", "Intramuscular"),
    CatalogOption("SC", "Subcutaneous"),
    CatalogOption("SL", "Sublingual"),
    CatalogOption("PR", "Per rectum"),
    CatalogOption("TOP", "Topical"),
    CatalogOption("INH", "Inhalation"),
)

DEFAULT_TIMINGS = (
    CatalogOption("AC", "Before meals"),
    CatalogOption("PC", "After meals"),
    CatalogOption("HS", "At bedtime"),
    CatalogOption("ES", "Empty stomach"),
)

DEFAULT_DOSAGE_UNITS = (
    CatalogOption("tablet", "Tablet(s)"),
    CatalogOption("capsule", "Capsule(s)"),
    CatalogOption("mg", "mg"),
    CatalogOption("g", "g"),
    CatalogOption("mcg", "mcg"),
    CatalogOption("mL", "mL"),
    CatalogOption("drop", "Drop(s)"),
    CatalogOption("puff", "Puff(s)"),
    CatalogOption("unit", "Unit(s)"),
)

DEFAULT_DURATION_UNITS = (
    DurationUnitOption("d", "Day(s)", 1),
    DurationUnitOption("wk", "Week(s)", 7),
    DurationUnitOption("mo", "Month(s)", 30),
)

DEFAULT_CATALOGS = ReferenceCatalogs(
    frequencies=DEFAULT_FREQUENCIES,
    routes=DEFAULT_ROUTES,
    timings=DEFAULT_TIMINGS,
    dosage_units=DEFAULT_DOSAGE_UNITS,
    duration_units=DEFAULT_DURATION_UNITS,
)


def is_immediate_frequency(code: str | None) -> bool:
    """Check whether a frequency code means a single immediate dose."""
    return code == IMMEDIATE_FREQUENCY_CODE


# =============================================================================
# Loading
# =============================================================================

def _parse_options(raw: list, key: str) -> tuple[CatalogOption, ...]:
    if not isinstance(raw, list):
        raise ValueError(f"Catalog '{key}' must be a JSON array")
    try:
        return tuple(CatalogOption(code=str(item["code"]), display=item.get("display", "")) for item in raw)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid entry in catalog '{key}': {e}") from e


def catalogs_from_dict(data: dict) -> ReferenceCatalogs:
    """Build catalogs from the JSON catalog layout.

    Args:
        data: Dict with ``frequencies``, ``routes``, ``timings``,
              ``dosageUnits`` and ``durationUnits`` arrays. Missing keys are
              treated as empty lists.

    Returns:
        ReferenceCatalogs

    Raises:
        ValueError: If the structure or any multiplier is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Catalog file must contain a JSON object")

    frequencies_raw = data.get("frequencies", [])
    duration_units_raw = data.get("durationUnits", [])
    if not isinstance(frequencies_raw, list):
        raise ValueError("Catalog 'frequencies' must be a JSON array")
    if not isinstance(duration_units_raw, list):
        raise ValueError("Catalog 'durationUnits' must be a JSON array")

    try:
        frequencies = tuple(
            FrequencyOption(
                code=str(item["code"]),
                display=item.get("display", ""),
                times_per_day=float(item["timesPerDay"]),
            )
            for item in frequencies_raw
        )
        duration_units = tuple(
            DurationUnitOption(
                code=str(item["code"]),
                display=item.get("display", ""),
                days_multiplier=float(item["daysMultiplier"]),
            )
            for item in duration_units_raw
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"Invalid frequency or duration unit entry: {e}") from e

    return ReferenceCatalogs(
        frequencies=frequencies,
        routes=_parse_options(data.get("routes", []), "routes"),
        timings=_parse_options(data.get("timings", []), "timings"),
        dosage_units=_parse_options(data.get("dosageUnits", []), "dosageUnits"),
        duration_units=duration_units,
    )


def load_catalogs(path: str | Path) -> ReferenceCatalogs:
    """Load reference catalogs from a JSON file.

    Args:
        path: Path to the catalog JSON file

    Returns:
        ReferenceCatalogs

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid catalog JSON
    """
    catalog_path = Path(path).expanduser()
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    with open(catalog_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Catalog file is not valid JSON: {e}") from e

    catalogs = catalogs_from_dict(data)
    logger.info(
        f"Loaded catalogs from {catalog_path}: {len(catalogs.frequencies)} frequencies, "
        f"{len(catalogs.routes)} routes, {len(catalogs.duration_units)} duration units"
    )
    return catalogs
