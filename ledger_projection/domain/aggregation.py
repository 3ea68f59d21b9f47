"""Per-day aggregation and running balance over ledger entries"""

from collections import defaultdict
from datetime import date
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence

from ledger_projection.domain.exceptions import UnresolvedTransferPairError
from ledger_projection.domain.models import DaySummary, EntryKind, LedgerEntry, PeriodTotals
from ledger_projection.utils.date_utils import generate_date_range


def is_visible(entry: LedgerEntry, visible_accounts: Optional[AbstractSet[str]]) -> bool:
    """Virtual entries are always visible; others need their account selected"""
    if entry.virtual or visible_accounts is None:
        return True
    return entry.account_id in visible_accounts


def resolve_transfer_pairs(entries: Iterable[LedgerEntry]) -> Dict[str, LedgerEntry]:
    """
    Map each transfer leg id to its counterpart.

    A counterpart must be a different transfer leg whose own pair_id points
    back at the entry.

    Raises:
        UnresolvedTransferPairError: a leg's pair_id is missing from the set,
            points at the leg itself, at a non-transfer entry, or at a leg
            paired elsewhere
    """
    by_id = {entry.id: entry for entry in entries}
    pairs = {}
    for entry in by_id.values():
        if not entry.kind.is_transfer:
            continue
        counterpart = by_id.get(entry.pair_id) if entry.pair_id else None
        if (
            counterpart is None
            or counterpart.id == entry.id
            or not counterpart.kind.is_transfer
            or counterpart.pair_id != entry.id
        ):
            raise UnresolvedTransferPairError(entry.id, entry.pair_id)
        pairs[entry.id] = counterpart
    return pairs


def classify_transfer(entry: LedgerEntry, pair: LedgerEntry) -> EntryKind:
    """The leg with the smaller id is the debit, whatever order they arrive in"""
    return EntryKind.TRANSFER_DEBIT if entry.id < pair.id else EntryKind.TRANSFER_CREDIT


def _sort_key(entry: LedgerEntry):
    return (entry.description, entry.id)


def aggregate(
    entries: Sequence[LedgerEntry],
    start: date,
    end: date,
    opening_balance: int = 0,
    visible_accounts: Optional[AbstractSet[str]] = None,
) -> List[DaySummary]:
    """
    Group entries by day and compute the running balance over [start, end].

    Classification:
    - INFLOW -> inflow
    - OUTFLOW, CARD_BILL_DUE -> outflow
    - INVESTMENT -> investment
    - Transfers with both legs visible -> internal move, recorded once, no effect
    - Transfers with one leg visible -> outflow (debit side) or inflow (credit side)
    - INITIAL_BALANCE -> seeds the balance on its own date

    Every day of the window is returned, empty days included, with the
    balance carried forward.
    """
    pairs = resolve_transfer_pairs(entries)

    inflow: Dict[date, int] = defaultdict(int)
    outflow: Dict[date, int] = defaultdict(int)
    investment: Dict[date, int] = defaultdict(int)
    initial: Dict[date, int] = defaultdict(int)
    listed: Dict[date, List[LedgerEntry]] = defaultdict(list)
    transfers: Dict[date, List[LedgerEntry]] = defaultdict(list)

    for entry in entries:
        day = entry.date
        if day < start or day > end or not is_visible(entry, visible_accounts):
            continue

        kind = entry.kind
        if kind is EntryKind.INFLOW:
            inflow[day] += entry.amount
        elif kind in (EntryKind.OUTFLOW, EntryKind.CARD_BILL_DUE):
            outflow[day] += entry.amount
        elif kind is EntryKind.INVESTMENT:
            investment[day] += entry.amount
        elif kind is EntryKind.INITIAL_BALANCE:
            initial[day] += entry.amount
        else:
            pair = pairs[entry.id]
            side = classify_transfer(entry, pair)
            if is_visible(pair, visible_accounts):
                # Internal move: list the debit leg only, balance unchanged
                if side is EntryKind.TRANSFER_DEBIT:
                    transfers[day].append(entry)
                    listed[day].append(entry)
                continue
            if side is EntryKind.TRANSFER_DEBIT:
                outflow[day] += entry.amount
            else:
                inflow[day] += entry.amount

        listed[day].append(entry)

    summaries = []
    balance = opening_balance
    for day in generate_date_range(start, end):
        balance += initial[day] + inflow[day] - outflow[day] - investment[day]
        summaries.append(
            DaySummary(
                date=day,
                inflow=inflow[day],
                outflow=outflow[day],
                investment=investment[day],
                initial_balance=initial[day],
                balance=balance,
                entries=tuple(sorted(listed[day], key=_sort_key)),
                transfers=tuple(sorted(transfers[day], key=_sort_key)),
            )
        )
    return summaries


def entry_effect(
    entry: LedgerEntry,
    pairs: Dict[str, LedgerEntry],
    visible_accounts: Optional[AbstractSet[str]] = None,
) -> int:
    """Signed balance effect of one entry, following the aggregation rules"""
    if not is_visible(entry, visible_accounts):
        return 0
    kind = entry.kind
    if kind in (EntryKind.INFLOW, EntryKind.INITIAL_BALANCE):
        return entry.amount
    if kind in (EntryKind.OUTFLOW, EntryKind.CARD_BILL_DUE, EntryKind.INVESTMENT):
        return -entry.amount
    pair = pairs[entry.id]
    if is_visible(pair, visible_accounts):
        return 0
    return -entry.amount if classify_transfer(entry, pair) is EntryKind.TRANSFER_DEBIT else entry.amount


def balance_before(
    entries: Sequence[LedgerEntry],
    day: date,
    visible_accounts: Optional[AbstractSet[str]] = None,
) -> int:
    """Net effect of every entry dated strictly before `day`, settled or forecast"""
    pairs = resolve_transfer_pairs(entries)
    return sum(entry_effect(entry, pairs, visible_accounts) for entry in entries if entry.date < day)


def period_totals(days: Iterable[DaySummary]) -> PeriodTotals:
    inflow = outflow = investment = 0
    for day in days:
        inflow += day.inflow
        outflow += day.outflow
        investment += day.investment
    return PeriodTotals(inflow=inflow, outflow=outflow, investment=investment)
