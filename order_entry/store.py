"""In-memory store for the medication orders being composed."""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable

from .catalogs import DEFAULT_CATALOGS, ReferenceCatalogs
from .config import OrderDefaults
from .models import MedicationRef, OrderEntry, OrderField
from .quantity import calculate_total_quantity
from .rules import STAT_CLEARED_FIELDS, should_clear_error, without_errors
from .rules_engine import OrderValidationEngine

logger = logging.getLogger(__name__)

Listener = Callable[[tuple[OrderEntry, ...], tuple[OrderEntry, ...]], None]


@dataclass(frozen=True)
class OrderStoreState:
    """A synchronous snapshot of the store: its entries plus its operations."""
    entries: tuple[OrderEntry, ...]
    actions: dict[str, Callable[..., Any]]


class MedicationOrderStore:
    """Ordered collection of draft medication orders.

    The collection is a tuple that is replaced on every change, never edited
    in place, so a reader always holds a consistent snapshot. Operations
    addressed to an id that is not in the collection do nothing.
    """

    def __init__(
        self,
        catalogs: ReferenceCatalogs | None = None,
        defaults: OrderDefaults | None = None,
        engine: OrderValidationEngine | None = None,
    ):
        """Initialize order store.

        Args:
            catalogs: Reference catalogs. Defaults to the built-in set.
            defaults: Initial field values for new entries
            engine: Validation engine. Defaults to the standard required-field rules.
        """
        self.catalogs = catalogs or DEFAULT_CATALOGS
        self.defaults = defaults or OrderDefaults()
        self.engine = engine or OrderValidationEngine()
        self._entries: tuple[OrderEntry, ...] = ()
        self._listeners: list[Listener] = []

    # --- State ---

    @property
    def entries(self) -> tuple[OrderEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, entry_id: str) -> OrderEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def _set_entries(self, entries: tuple[OrderEntry, ...]) -> None:
        previous = self._entries
        self._entries = entries
        if entries is previous:
            return
        for listener in list(self._listeners):
            try:
                listener(entries, previous)
            except Exception as e:
                logger.error(f"Order store listener failed: {e}", exc_info=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called as ``listener(new_entries, old_entries)``.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update_entry(self, entry_id: str, change: Callable[[OrderEntry], OrderEntry], action: str) -> None:
        """Replace the entry with ``change(entry)``; no-op for an unknown id."""
        if self.get_entry(entry_id) is None:
            logger.debug(f"{action}: no order with id {entry_id}, ignoring")
            return

        self._set_entries(tuple(
            change(entry) if entry.id == entry_id else entry
            for entry in self._entries
        ))
        logger.debug(f"{action}: updated order {entry_id}")

    def _set_field(self, entry_id: str, attribute: str, value, order_field: OrderField | None = None) -> None:
        """Set one attribute, clearing the field's error when the clearing rule allows."""

        def change(entry: OrderEntry) -> OrderEntry:
            errors = entry.errors
            if order_field is not None and should_clear_error(entry, order_field, value):
                errors = without_errors(errors, [order_field])
            return dataclasses.replace(entry, errors=errors, **{attribute: value})

        self._update_entry(entry_id, change, f"update_{attribute}")

    # --- Collection ---

    def add(self, medication: MedicationRef | dict, display_name: str | None = None) -> OrderEntry | None:
        """Start a new draft order for a medication.

        The new entry is placed first in the collection.

        Args:
            medication: Medication from the catalog lookup (MedicationRef or dict)
            display_name: Name to show for the order. Defaults to the medication display.

        Returns:
            The new entry, or None if an order for this medication already exists
        """
        if isinstance(medication, dict):
            medication = MedicationRef.from_dict(medication)

        if self.get_entry(medication.id) is not None:
            logger.debug(f"add: order for {medication.id} already exists, ignoring")
            return None

        entry = OrderEntry(
            id=medication.id,
            display=display_name or medication.display,
            strength=medication.strength,
            dosage_form=medication.dosage_form,
            start_date=date.today().isoformat(),
            **self.defaults.resolve(medication, self.catalogs),
        )

        self._set_entries((entry,) + self._entries)
        logger.debug(f"add: added order {entry.id} ({entry.display})")
        return entry

    def remove(self, entry_id: str) -> None:
        """Remove an order; unknown ids are ignored."""
        remaining = tuple(entry for entry in self._entries if entry.id != entry_id)
        if len(remaining) == len(self._entries):
            logger.debug(f"remove: no order with id {entry_id}, ignoring")
            return
        self._set_entries(remaining)
        logger.debug(f"remove: removed order {entry_id}")

    def reset(self) -> None:
        """Empty the collection."""
        self._set_entries(())
        logger.info("Order store reset")

    # --- Field updates ---

    def update_dosage(self, entry_id: str, dosage: float) -> None:
        self._set_field(entry_id, "dosage", dosage, OrderField.DOSAGE)

    def update_dosage_unit(self, entry_id: str, unit: str | None) -> None:
        self._set_field(entry_id, "dosage_unit", unit, OrderField.DOSAGE_UNIT)

    def update_frequency(self, entry_id: str, frequency: str | None) -> None:
        self._set_field(entry_id, "frequency", frequency, OrderField.FREQUENCY)

    def update_route(self, entry_id: str, route: str | None) -> None:
        self._set_field(entry_id, "route", route, OrderField.ROUTE)

    def update_duration(self, entry_id: str, duration: float) -> None:
        self._set_field(entry_id, "duration", duration, OrderField.DURATION)

    def update_duration_unit(self, entry_id: str, unit: str | None) -> None:
        self._set_field(entry_id, "duration_unit", unit, OrderField.DURATION_UNIT)

    def update_timing(self, entry_id: str, timing: str | None) -> None:
        self._set_field(entry_id, "timing", timing)

    def update_is_prn(self, entry_id: str, is_prn: bool) -> None:
        self._set_field(entry_id, "is_prn", bool(is_prn))

    def update_is_stat(self, entry_id: str, is_stat: bool) -> None:
        """Set the STAT flag.

        Turning STAT on drops any duration and duration unit errors, since a
        STAT order does not need a duration. Turning it off only flips the
        flag; cleared errors come back on the next validate-all.
        """
        is_stat = bool(is_stat)

        def change(entry: OrderEntry) -> OrderEntry:
            errors = without_errors(entry.errors, STAT_CLEARED_FIELDS) if is_stat else entry.errors
            return dataclasses.replace(entry, is_stat=is_stat, errors=errors)

        self._update_entry(entry_id, change, "update_is_stat")

    def update_start_date(self, entry_id: str, start_date: date | str) -> None:
        if isinstance(start_date, datetime):
            start_date = start_date.date()
        if isinstance(start_date, date):
            start_date = start_date.isoformat()
        self._set_field(entry_id, "start_date", start_date)

    def update_instructions(self, entry_id: str, instructions: str | None) -> None:
        self._set_field(entry_id, "instructions", instructions)

    def update_dispense_quantity(self, entry_id: str, quantity: float) -> None:
        self._set_field(entry_id, "dispense_quantity", quantity)

    def update_dispense_unit(self, entry_id: str, unit: str | None) -> None:
        self._set_field(entry_id, "dispense_unit", unit)

    # --- Validation & derived values ---

    def validate_all(self) -> bool:
        """Validate every order and store the resulting errors on each entry.

        Returns:
            True if no order has any error
        """
        entries, is_valid = self.engine.validate_all(self._entries)
        self._set_entries(entries)
        return is_valid

    def calculate_total_quantity(self, entry_id: str) -> int:
        """Dispense quantity for one order; 0 if the order or its codes are unknown."""
        return calculate_total_quantity(self.get_entry(entry_id), self.catalogs)

    def get_state(self) -> OrderStoreState:
        """Snapshot of the current entries together with every store operation."""
        return OrderStoreState(
            entries=self._entries,
            actions={
                "add": self.add,
                "remove": self.remove,
                "update_dosage": self.update_dosage,
                "update_dosage_unit": self.update_dosage_unit,
                "update_frequency": self.update_frequency,
                "update_route": self.update_route,
                "update_duration": self.update_duration,
                "update_duration_unit": self.update_duration_unit,
                "update_timing": self.update_timing,
                "update_is_prn": self.update_is_prn,
                "update_is_stat": self.update_is_stat,
                "update_start_date": self.update_start_date,
                "update_instructions": self.update_instructions,
                "update_dispense_quantity": self.update_dispense_quantity,
                "update_dispense_unit": self.update_dispense_unit,
                "validate_all": self.validate_all,
                "calculate_total_quantity": self.calculate_total_quantity,
                "reset": self.reset,
                "get_state": self.get_state,
            },
        )
