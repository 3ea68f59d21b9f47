"""Pytest fixtures for testing"""

import pytest
from datetime import date

from ledger_projection.config import Settings
from ledger_projection.domain.models import Card, CardPurchase, EntryKind, LedgerEntry, make_transfer_pair
from ledger_projection.domain.projection import ProjectionEngine
from ledger_projection.domain.simulation import SimulationOverlay


@pytest.fixture
def card() -> Card:
    """Card closing on the 25th, due on the 5th"""
    return Card(id="card-1", nickname="Roxinho", closing_day=25, due_day=5)


@pytest.fixture
def late_due_card() -> Card:
    """Card due on the 31st, clamped on short months"""
    return Card(id="card-2", nickname="Black", closing_day=31, due_day=31)


@pytest.fixture
def purchase() -> CardPurchase:
    """1000 cents in 3x, bought after the 25th"""
    return CardPurchase(
        id="p-1",
        card_id="card-1",
        purchase_date=date(2024, 1, 31),
        total=1000,
        installment_count=3,
        description="Headphones",
    )


@pytest.fixture
def household_entries() -> list[LedgerEntry]:
    """One month of a checking account plus a savings account"""
    entries = [
        LedgerEntry(
            id="init-checking",
            date=date(2024, 3, 1),
            amount=100_000,  # $1000 opening
            kind=EntryKind.INITIAL_BALANCE,
            description="Saldo inicial",
            account_id="checking",
        ),
        LedgerEntry(
            id="salary",
            date=date(2024, 3, 5),
            amount=500_000,
            kind=EntryKind.INFLOW,
            description="Salary",
            account_id="checking",
        ),
        LedgerEntry(
            id="rent",
            date=date(2024, 3, 10),
            amount=200_000,
            kind=EntryKind.OUTFLOW,
            description="Rent",
            account_id="checking",
        ),
        LedgerEntry(
            id="broker",
            date=date(2024, 3, 15),
            amount=50_000,
            kind=EntryKind.INVESTMENT,
            description="Treasury bonds",
            account_id="checking",
        ),
    ]
    entries.extend(
        make_transfer_pair(
            "tx-b", "tx-a",
            from_account="checking",
            to_account="savings",
            on=date(2024, 3, 20),
            amount=30_000,
            description="Emergency fund",
        )
    )
    return entries


@pytest.fixture
def overlay() -> SimulationOverlay:
    return SimulationOverlay()


@pytest.fixture
def engine() -> ProjectionEngine:
    return ProjectionEngine(Settings(projection_horizon_months=24, paid_tolerance_cents=1))
