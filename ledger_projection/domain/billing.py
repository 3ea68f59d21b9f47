"""Card billing cycle resolution and statement projection"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ledger_projection.domain.models import (
    Card,
    CardInstallment,
    CompetencyKey,
    EntryKind,
    LedgerEntry,
)
from ledger_projection.utils.date_utils import add_months, clamp_day, last_day_of_month

logger = logging.getLogger(__name__)

BillKey = Tuple[str, CompetencyKey]  # (card_id, competency)


def first_competency(purchase_date: date, closing_day: int) -> CompetencyKey:
    """
    Statement period a purchase lands on.

    A purchase made after the closing day goes to the next month's statement;
    on or before it, to the current month's. Closing days past the end of a
    short month are clamped to that month's last day.

    Example:
        first_competency(date(2024, 1, 31), closing_day=25) -> 2024-02
        first_competency(date(2024, 12, 26), closing_day=25) -> 2025-01
    """
    effective_closing = min(closing_day, last_day_of_month(purchase_date.year, purchase_date.month))
    if purchase_date.day > effective_closing:
        year, month_index = add_months(purchase_date.year, purchase_date.month - 1, 1)
        return CompetencyKey(year, month_index + 1)
    return CompetencyKey(purchase_date.year, purchase_date.month)


def competency_at(first: CompetencyKey, installment_index: int) -> CompetencyKey:
    """Competency of the 0-based installment_index-th installment"""
    return first.shift(installment_index)


def bill_due_date(competency: CompetencyKey, due_day: int) -> date:
    """Due date of a statement, min(due_day, last day of month)"""
    return clamp_day(competency.year, competency.month, due_day)


def installments_by_competency(
    installments: Iterable[CardInstallment],
    card_id: Optional[str] = None,
) -> Dict[BillKey, int]:
    """Sum installment amounts per (card, competency), optionally for one card"""
    totals: Dict[BillKey, int] = defaultdict(int)
    for inst in installments:
        if card_id is not None and inst.card_id != card_id:
            continue
        totals[(inst.card_id, inst.competency)] += inst.amount
    return dict(totals)


def payments_by_competency(entries: Iterable[LedgerEntry], settled_only: bool = False) -> Dict[BillKey, int]:
    """
    Sum card-bill payments per (card, competency).

    A payment is any non-virtual outflow carrying both card_id and competency.
    """
    totals: Dict[BillKey, int] = defaultdict(int)
    for entry in entries:
        if entry.kind is not EntryKind.OUTFLOW or entry.virtual:
            continue
        if entry.card_id is None or entry.competency is None:
            continue
        if settled_only and not entry.settled:
            continue
        totals[(entry.card_id, entry.competency)] += entry.amount
    return dict(totals)


def outstanding_amount(total: int, paid: int, tolerance: int) -> int:
    """Remaining amount of a statement, or 0 when within tolerance"""
    remainder = total - paid
    return remainder if remainder > tolerance else 0


def is_paid_in_full(total: int, paid: int, tolerance: int) -> bool:
    return outstanding_amount(total, paid, tolerance) == 0


def carried_over_debt(
    installments: Iterable[CardInstallment],
    payments: Dict[BillKey, int],
    before: CompetencyKey,
    tolerance: int,
) -> int:
    """Unpaid remainder of every statement earlier than `before`"""
    debt = 0
    for (card_id, competency), total in installments_by_competency(installments).items():
        if competency >= before:
            continue
        debt += outstanding_amount(total, payments.get((card_id, competency), 0), tolerance)
    return debt


def project_card_bills(
    cards: Iterable[Card],
    installments: Iterable[CardInstallment],
    payments: Dict[BillKey, int],
    competencies: Iterable[CompetencyKey],
    tolerance: int,
) -> List[LedgerEntry]:
    """
    Synthesize one CARD_BILL_DUE entry per card and competency still owed.

    The entry is dated on the card's due day (clamped to the month length) and
    carries the statement total minus payments already made for it.
    """
    totals = installments_by_competency(installments)
    wanted = list(competencies)
    bills = []
    for card in cards:
        for competency in wanted:
            total = totals.get((card.id, competency), 0)
            if total <= 0:
                continue
            pending = outstanding_amount(total, payments.get((card.id, competency), 0), tolerance)
            if not pending:
                continue
            bills.append(
                LedgerEntry(
                    id=f"cc-{card.id}-{competency}",
                    date=bill_due_date(competency, card.due_day),
                    amount=pending,
                    kind=EntryKind.CARD_BILL_DUE,
                    description=f"Fatura {card.nickname}",
                    account_id="credit_card_projection",
                    virtual=True,
                    settled=False,
                    card_id=card.id,
                    competency=competency,
                )
            )
    logger.debug("Projected %d card bills", len(bills))
    return bills
