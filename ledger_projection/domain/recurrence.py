"""Expansion of recurring ledger events into bounded forecast series"""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from ledger_projection.domain.exceptions import InvalidInstallmentCountError
from ledger_projection.domain.models import LedgerEntry
from ledger_projection.infrastructure.observability.metrics import record_recurrence
from ledger_projection.utils.date_utils import shift_months, shift_years

logger = logging.getLogger(__name__)

# Fixed forecast horizon: two years of monthly events, five of annual ones.
MONTHLY_OCCURRENCES = 24
ANNUAL_OCCURRENCES = 5


class Frequency(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass(frozen=True)
class RecurrenceSeries:
    """Dated clones of one base entry sharing a recurrence id"""

    recurrence_id: str
    frequency: Frequency
    entries: Tuple[LedgerEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def dates(self) -> list[date]:
        return [entry.date for entry in self.entries]


def occurrences_for(frequency: Frequency) -> int:
    if frequency is Frequency.ANNUAL:
        return ANNUAL_OCCURRENCES
    return MONTHLY_OCCURRENCES


def occurrence_date(base_date: date, frequency: Frequency, index: int) -> date:
    """Date of the index-th occurrence, always computed from the base date"""
    if frequency is Frequency.ANNUAL:
        return shift_years(base_date, index)
    return shift_months(base_date, index)


def expand(
    base: LedgerEntry,
    frequency: Frequency,
    recurrence_id: Optional[str] = None,
    count: Optional[int] = None,
) -> RecurrenceSeries:
    """
    Expand a base entry into its recurrence series.

    Rules:
    - 24 monthly or 5 annual occurrences unless count is given
    - First occurrence keeps the base id and settlement state
    - Following occurrences are unsettled forecasts with id "<base.id>-<i>"
    - Day 29-31 is clamped on shorter months, never overflowed

    Example:
        Base 2024-01-31 monthly -> 2024-01-31, 2024-02-29, 2024-03-31, ...
    """
    count = occurrences_for(frequency) if count is None else count
    if count <= 0:
        raise InvalidInstallmentCountError(f"Occurrence count must be positive, got {count}")

    group_id = recurrence_id or base.recurrence_id or base.id
    entries = [dataclasses.replace(base, recurrence_id=group_id)]
    for i in range(1, count):
        entries.append(
            dataclasses.replace(
                base,
                id=f"{base.id}-{i}",
                date=occurrence_date(base.date, frequency, i),
                settled=False,
                recurrence_id=group_id,
            )
        )

    record_recurrence(frequency.value)
    logger.debug("Expanded %s into %d %s occurrences", base.id, count, frequency.value)
    return RecurrenceSeries(recurrence_id=group_id, frequency=frequency, entries=tuple(entries))


def retarget(series: RecurrenceSeries, **changes) -> RecurrenceSeries:
    """
    Apply the same field changes to every forecast occurrence of a series.

    The first occurrence is left as-is when it is already settled.
    """
    entries = tuple(
        entry if entry.settled and index == 0 else dataclasses.replace(entry, **changes)
        for index, entry in enumerate(series.entries)
    )
    return dataclasses.replace(series, entries=entries)
