"""Configuration for the order entry engine.

Settings come from the environment (optionally seeded from a ``.env`` file)
and are read with django-environ:

    ORDER_ENTRY_CATALOG_PATH            JSON catalog file (default: built-in catalogs)
    ORDER_ENTRY_DEFAULT_DOSAGE          Initial dosage for new entries (default: 1)
    ORDER_ENTRY_DEFAULT_DURATION        Initial duration for new entries (default: 0)
    ORDER_ENTRY_DEFAULT_DOSAGE_UNIT     Initial dosage unit code
    ORDER_ENTRY_DEFAULT_FREQUENCY       Initial frequency code
    ORDER_ENTRY_DEFAULT_ROUTE           Initial route code
    ORDER_ENTRY_DEFAULT_DURATION_UNIT   Initial duration unit code
    ORDER_ENTRY_USE_DOSAGE_FORM_DEFAULTS  Derive route/unit from dosage form (default: True)
    ORDER_ENTRY_LOG_LEVEL               Logging level for scripts (default: INFO)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import environ

from .catalogs import DEFAULT_CATALOGS, ReferenceCatalogs, load_catalogs
from .models import MedicationRef

logger = logging.getLogger(__name__)


# Dosage form -> default route and dosage unit codes
DRUG_FORM_DEFAULTS: dict[str, dict[str, str]] = {
    "Tablet": {"route": "PO", "dosage_unit": "tablet"},
    "Capsule": {"route": "PO", "dosage_unit": "capsule"},
    "Syrup": {"route": "PO", "dosage_unit": "mL"},
    "Suspension": {"route": "PO", "dosage_unit": "mL"},
    "Injection": {"route": "IV", "dosage_unit": "mL"},
    "Inhaler": {"route": "INH", "dosage_unit": "puff"},
    "Drops": {"route": "TOP", "dosage_unit": "drop"},
    "Cream": {"route": "TOP"},
    "Suppository": {"route": "PR", "dosage_unit": "unit"},
}


@dataclass(frozen=True)
class OrderDefaults:
    """Initial field values used when a medication is added to the order."""
    dosage: float = 1
    duration: float = 0
    dosage_unit: str | None = None
    frequency: str | None = None
    route: str | None = None
    duration_unit: str | None = None
    use_dosage_form_defaults: bool = True
    drug_form_defaults: dict[str, dict[str, str]] = field(
        default_factory=lambda: dict(DRUG_FORM_DEFAULTS)
    )

    def resolve(self, medication: MedicationRef, catalogs: ReferenceCatalogs) -> dict:
        """Work out the initial field values for a new entry.

        Configured defaults win. Otherwise the route and dosage unit come
        from the medication's dosage form, but only when that code exists in
        the catalogs.

        Args:
            medication: The medication being added
            catalogs: Reference catalogs to check derived codes against

        Returns:
            Dict of OrderEntry field name -> initial value
        """
        route = self.route
        dosage_unit = self.dosage_unit

        if self.use_dosage_form_defaults and medication.dosage_form:
            form_defaults = self.drug_form_defaults.get(medication.dosage_form, {})
            if route is None and catalogs.get_route(form_defaults.get("route")):
                route = form_defaults["route"]
            if dosage_unit is None and catalogs.get_dosage_unit(form_defaults.get("dosage_unit")):
                dosage_unit = form_defaults["dosage_unit"]

        return {
            "dosage": self.dosage,
            "dosage_unit": dosage_unit,
            "frequency": self.frequency,
            "route": route,
            "duration": self.duration,
            "duration_unit": self.duration_unit,
        }


@dataclass(frozen=True)
class OrderEntryConfig:
    """Engine configuration assembled from the environment."""
    defaults: OrderDefaults = field(default_factory=OrderDefaults)
    catalog_path: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "OrderEntryConfig":
        """Read configuration from environment variables.

        Args:
            env_file: Optional ``.env`` file to read first. Values already
                      present in the environment take precedence.

        Returns:
            OrderEntryConfig
        """
        env = environ.Env(
            ORDER_ENTRY_DEFAULT_DOSAGE=(float, 1.0),
            ORDER_ENTRY_DEFAULT_DURATION=(float, 0.0),
            ORDER_ENTRY_USE_DOSAGE_FORM_DEFAULTS=(bool, True),
            ORDER_ENTRY_LOG_LEVEL=(str, "INFO"),
        )
        if env_file and os.path.exists(env_file):
            environ.Env.read_env(str(env_file))

        defaults = OrderDefaults(
            dosage=env("ORDER_ENTRY_DEFAULT_DOSAGE"),
            duration=env("ORDER_ENTRY_DEFAULT_DURATION"),
            dosage_unit=env.str("ORDER_ENTRY_DEFAULT_DOSAGE_UNIT", default=None),
            frequency=env.str("ORDER_ENTRY_DEFAULT_FREQUENCY", default=None),
            route=env.str("ORDER_ENTRY_DEFAULT_ROUTE", default=None),
            duration_unit=env.str("ORDER_ENTRY_DEFAULT_DURATION_UNIT", default=None),
            use_dosage_form_defaults=env("ORDER_ENTRY_USE_DOSAGE_FORM_DEFAULTS"),
        )

        config = cls(
            defaults=defaults,
            catalog_path=env.str("ORDER_ENTRY_CATALOG_PATH", default=None),
            log_level=env("ORDER_ENTRY_LOG_LEVEL").upper(),
        )
        logger.debug(f"Order entry config: catalogs={config.catalog_path or 'built-in'}, defaults={defaults}")
        return config

    def load_catalogs(self) -> ReferenceCatalogs:
        """Load the configured catalogs, or the built-in set if none is configured."""
        if not self.catalog_path:
            return DEFAULT_CATALOGS
        return load_catalogs(self.catalog_path)
