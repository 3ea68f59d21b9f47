"""Unit tests for per-day aggregation and running balance"""

import dataclasses
import random
import pytest
from datetime import date

from ledger_projection.domain.aggregation import (
    aggregate,
    balance_before,
    classify_transfer,
    period_totals,
    resolve_transfer_pairs,
)
from ledger_projection.domain.exceptions import UnresolvedTransferPairError
from ledger_projection.domain.models import EntryKind, LedgerEntry, make_transfer_pair

MARCH_1 = date(2024, 3, 1)
MARCH_31 = date(2024, 3, 31)


def _by_date(days):
    return {day.date: day for day in days}


def test_aggregate_classifies_and_runs_balance(household_entries):
    """Test running balance with carry-forward across empty days"""
    days = _by_date(aggregate(household_entries, MARCH_1, MARCH_31, opening_balance=0))

    assert len(days) == 31
    assert days[MARCH_1].initial_balance == 100_000
    assert days[MARCH_1].inflow == 0  # initial balance is not income
    assert days[MARCH_1].balance == 100_000
    assert days[date(2024, 3, 4)].balance == 100_000  # carried forward
    assert days[date(2024, 3, 5)].inflow == 500_000
    assert days[date(2024, 3, 10)].outflow == 200_000
    assert days[date(2024, 3, 15)].investment == 50_000
    # Transfer between two visible accounts moves nothing
    assert days[date(2024, 3, 20)].inflow == 0
    assert days[date(2024, 3, 20)].outflow == 0
    assert days[MARCH_31].balance == 100_000 + 500_000 - 200_000 - 50_000


def test_aggregate_internal_transfer_listed_once(household_entries):
    day = _by_date(aggregate(household_entries, MARCH_1, MARCH_31))[date(2024, 3, 20)]

    assert [entry.id for entry in day.transfers] == ["tx-a"]
    assert [entry.id for entry in day.entries] == ["tx-a"]


def test_aggregate_transfer_with_one_visible_leg(household_entries):
    """Only checking visible: the debit leg leaves as an outflow"""
    days = _by_date(aggregate(household_entries, MARCH_1, MARCH_31, visible_accounts={"checking"}))
    transfer_day = days[date(2024, 3, 20)]

    assert transfer_day.outflow == 30_000
    assert transfer_day.transfers == ()
    assert days[MARCH_31].balance == 350_000 - 30_000


def test_aggregate_transfer_credit_side_is_inflow(household_entries):
    days = _by_date(aggregate(household_entries, MARCH_1, MARCH_31, visible_accounts={"savings"}))

    assert days[date(2024, 3, 20)].inflow == 30_000
    assert days[MARCH_31].balance == 30_000


def test_transfer_pairing_independent_of_order():
    """Smaller id is the debit no matter which leg comes first or which kind it was given"""
    first = LedgerEntry(id="b", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_CREDIT, pair_id="a", account_id="x")
    second = LedgerEntry(id="a", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_CREDIT, pair_id="b", account_id="y")

    for ordering in ([first, second], [second, first]):
        pairs = resolve_transfer_pairs(ordering)
        sides = {entry.id: classify_transfer(entry, pairs[entry.id]) for entry in ordering}
        assert sides == {"a": EntryKind.TRANSFER_DEBIT, "b": EntryKind.TRANSFER_CREDIT}


def test_make_transfer_pair_assigns_smaller_id_to_debit():
    debit, credit = make_transfer_pair("z-2", "z-1", "checking", "savings", MARCH_1, 500)

    assert (debit.id, debit.kind, debit.account_id) == ("z-1", EntryKind.TRANSFER_DEBIT, "checking")
    assert (credit.id, credit.kind, credit.pair_id) == ("z-2", EntryKind.TRANSFER_CREDIT, "z-1")


def test_unresolved_transfer_raises():
    orphan = LedgerEntry(id="t1", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_DEBIT, pair_id="missing")

    with pytest.raises(UnresolvedTransferPairError) as exc:
        aggregate([orphan], MARCH_1, MARCH_31)
    assert exc.value.entry_id == "t1"


def test_self_paired_transfer_raises():
    loop = LedgerEntry(id="a", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_DEBIT, pair_id="a")

    with pytest.raises(UnresolvedTransferPairError):
        aggregate([loop], MARCH_1, MARCH_1)


def test_transfer_paired_with_plain_outflow_raises():
    leg = LedgerEntry(id="a", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_DEBIT, pair_id="b")
    groceries = LedgerEntry(id="b", date=MARCH_1, amount=999, kind=EntryKind.OUTFLOW, pair_id="a")

    with pytest.raises(UnresolvedTransferPairError):
        aggregate([leg, groceries], MARCH_1, MARCH_1)


def test_non_reciprocal_transfer_raises():
    """b belongs to another transfer, so a has no counterpart of its own"""
    a = LedgerEntry(id="a", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_DEBIT, pair_id="b")
    b = LedgerEntry(id="b", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_CREDIT, pair_id="c")
    c = LedgerEntry(id="c", date=MARCH_1, amount=10, kind=EntryKind.TRANSFER_DEBIT, pair_id="b")

    with pytest.raises(UnresolvedTransferPairError) as exc:
        resolve_transfer_pairs([a, b, c])
    assert (exc.value.entry_id, exc.value.pair_id) == ("a", "b")


def test_transfer_pair_found_outside_window():
    debit, credit = make_transfer_pair("a", "b", "checking", "savings", date(2024, 2, 29), 100)
    moved = dataclasses.replace(credit, date=date(2024, 3, 1))

    days = aggregate([debit, moved], MARCH_1, MARCH_31, visible_accounts={"savings"})

    assert days[0].inflow == 100


def test_aggregate_order_independent(household_entries):
    """Shuffling entries yields identical aggregates and balances"""
    baseline = aggregate(household_entries, MARCH_1, MARCH_31, opening_balance=5_000)
    rng = random.Random(7)
    for _ in range(5):
        shuffled = household_entries[:]
        rng.shuffle(shuffled)
        assert aggregate(shuffled, MARCH_1, MARCH_31, opening_balance=5_000) == baseline


def test_entries_sorted_by_description():
    entries = [
        LedgerEntry(id="1", date=MARCH_1, amount=1, kind=EntryKind.OUTFLOW, description="Zoo"),
        LedgerEntry(id="2", date=MARCH_1, amount=1, kind=EntryKind.OUTFLOW, description="Apple"),
        LedgerEntry(id="3", date=MARCH_1, amount=1, kind=EntryKind.INFLOW, description="Market"),
    ]
    day = aggregate(entries, MARCH_1, MARCH_1)[0]

    assert [entry.description for entry in day.entries] == ["Apple", "Market", "Zoo"]


def test_card_bill_due_is_outflow_and_virtual_always_visible():
    bill = LedgerEntry(
        id="cc-1", date=MARCH_1, amount=700, kind=EntryKind.CARD_BILL_DUE,
        account_id="credit_card_projection", virtual=True,
    )
    day = aggregate([bill], MARCH_1, MARCH_1, opening_balance=1_000, visible_accounts={"checking"})[0]

    assert day.outflow == 700
    assert day.balance == 300


def test_hidden_account_entries_are_ignored(household_entries):
    days = aggregate(household_entries, MARCH_1, MARCH_31, visible_accounts={"savings"})

    assert all(day.outflow == 0 and day.investment == 0 for day in days)


def test_entries_outside_window_ignored(household_entries):
    days = aggregate(household_entries, date(2024, 3, 6), date(2024, 3, 12), opening_balance=0)

    assert len(days) == 7
    assert days[-1].balance == -200_000


def test_balance_before(household_entries):
    assert balance_before(household_entries, date(2024, 3, 11)) == 100_000 + 500_000 - 200_000
    assert balance_before(household_entries, MARCH_1) == 0
    assert balance_before(household_entries, date(2024, 4, 1), visible_accounts={"checking"}) == 320_000


def test_period_totals(household_entries):
    totals = period_totals(aggregate(household_entries, MARCH_1, MARCH_31))

    assert (totals.inflow, totals.outflow, totals.investment) == (500_000, 200_000, 50_000)
    assert totals.net == 250_000
