"""What-if simulation overlay.

A SimulationOverlay is owned by one session. Its entries are never persisted
and never merged into the real entry set; the projection engine only reads a
snapshot of them. Exiting a simulation is `clear()`.
"""

import dataclasses
import logging
from datetime import date
from typing import Iterator, List, Optional, Tuple

from ledger_projection.domain.exceptions import (
    InvalidAmountError,
    InvalidInstallmentCountError,
    InvalidSimulationError,
)
from ledger_projection.domain.installments import split_amount
from ledger_projection.domain.models import EntryKind, LedgerEntry
from ledger_projection.infrastructure.observability.metrics import record_simulation_entries
from ledger_projection.utils.date_utils import shift_months

logger = logging.getLogger(__name__)

SIMULATED_ACCOUNT = "simulated_account"
SIMULATED_CATEGORY = "simulated_category"
SIMULATION_KINDS = (EntryKind.INFLOW, EntryKind.OUTFLOW, EntryKind.INVESTMENT)


class SimulationOverlay:
    """Mutable, session-local set of hypothetical ledger entries"""

    def __init__(self, prefix: str = "sim"):
        self._prefix = prefix
        self._sequence = 0
        self._entries: dict[str, LedgerEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.entries)

    @property
    def entries(self) -> Tuple[LedgerEntry, ...]:
        """Immutable snapshot, in creation order"""
        return tuple(self._entries.values())

    def entries_on(self, day: date, kind: Optional[EntryKind] = None) -> List[LedgerEntry]:
        return [
            entry for entry in self._entries.values()
            if entry.date == day and (kind is None or entry.kind is kind)
        ]

    def _next_id(self) -> str:
        self._sequence += 1
        return f"{self._prefix}-{self._sequence}"

    def _make(self, day: date, kind: EntryKind, amount: int, description: str) -> LedgerEntry:
        return LedgerEntry(
            id=self._next_id(),
            date=day,
            amount=amount,
            kind=kind,
            description=description,
            account_id=SIMULATED_ACCOUNT,
            category_id=SIMULATED_CATEGORY,
            virtual=True,
            settled=False,
        )

    @staticmethod
    def _check(kind: EntryKind, amount: int, description: str) -> str:
        if kind not in SIMULATION_KINDS:
            raise InvalidSimulationError(f"Simulations support inflow, outflow and investment, not {kind.value}")
        if amount <= 0:
            raise InvalidAmountError(f"Simulated amount must be positive, got {amount}")
        description = description.strip()
        if not description:
            raise InvalidSimulationError("Simulated entry needs a description")
        return description

    def _store(self, entries: List[LedgerEntry], launch_type: str) -> List[LedgerEntry]:
        for entry in entries:
            self._entries[entry.id] = entry
        record_simulation_entries(launch_type, len(entries))
        logger.debug("Added %d simulated %s entries", len(entries), launch_type)
        return entries

    def add_single(self, day: date, kind: EntryKind, amount: int, description: str) -> LedgerEntry:
        description = self._check(kind, amount, description)
        return self._store([self._make(day, kind, amount, description)], "single")[0]

    def add_installments(
        self,
        day: date,
        kind: EntryKind,
        total: int,
        count: int,
        description: str,
    ) -> List[LedgerEntry]:
        """Split `total` over `count` consecutive months, labelled "(i/n)" """
        description = self._check(kind, total, description)
        amounts = split_amount(total, count)
        entries = [
            self._make(shift_months(day, i), kind, amount, f"{description} ({i + 1}/{count})")
            for i, amount in enumerate(amounts)
        ]
        return self._store(entries, "installments")

    def add_recurring(
        self,
        day: date,
        kind: EntryKind,
        amount: int,
        months: int,
        description: str,
    ) -> List[LedgerEntry]:
        """Repeat the same amount on the same day for `months` months"""
        description = self._check(kind, amount, description)
        if months <= 0:
            raise InvalidInstallmentCountError(f"Recurrence months must be positive, got {months}")
        entries = [self._make(shift_months(day, i), kind, amount, description) for i in range(months)]
        return self._store(entries, "recurring")

    def update(
        self,
        entry_id: str,
        *,
        description: Optional[str] = None,
        amount: Optional[int] = None,
    ) -> LedgerEntry:
        current = self._entries[entry_id]
        amount = current.amount if amount is None else amount
        description = self._check(
            current.kind,
            amount,
            current.description if description is None else description,
        )
        updated = dataclasses.replace(current, description=description, amount=amount)
        self._entries[entry_id] = updated
        return updated

    def remove(self, entry_id: str) -> None:
        del self._entries[entry_id]

    def clear(self) -> None:
        """Exit the simulation, discarding every entry"""
        self._entries.clear()
