"""Installment plan generation for card purchases"""

import dataclasses
from typing import List

from ledger_projection.domain.billing import competency_at, first_competency
from ledger_projection.domain.exceptions import InvalidAmountError, InvalidInstallmentCountError
from ledger_projection.domain.models import Card, CardInstallment, CardPurchase, InstallmentPlan
from ledger_projection.domain.recurrence import Frequency, occurrence_date, occurrences_for
from ledger_projection.infrastructure.observability.metrics import record_installment_plan


def split_amount(total_cents: int, count: int) -> List[int]:
    """
    Split a total into `count` nearly equal parts with no cent lost or gained.

    Requirements:
    - First `total % count` parts receive one extra cent
    - No part differs from another by more than 1 cent

    Example:
        1000 cents / 3 -> [334, 333, 333]
        40003 cents / 4 = 10000 base, remainder 3 -> [10001, 10001, 10001, 10000]
    """
    if count <= 0:
        raise InvalidInstallmentCountError(f"Installment count must be positive, got {count}")

    base_amount, remainder = divmod(total_cents, count)
    parts = [base_amount + 1 if i < remainder else base_amount for i in range(count)]

    assert sum(parts) == total_cents
    return parts


def _validate_purchase(purchase: CardPurchase) -> None:
    if purchase.total <= 0:
        raise InvalidAmountError(f"Purchase {purchase.id} total must be positive, got {purchase.total}")
    if purchase.installment_count <= 0:
        raise InvalidInstallmentCountError(
            f"Purchase {purchase.id} installment count must be positive, got {purchase.installment_count}"
        )


def build_installment_plan(purchase: CardPurchase, card: Card) -> InstallmentPlan:
    """
    Break a card purchase into installments attributed to statement periods.

    Args:
        purchase: Purchase with positive total and installment count
        card: Card the purchase was made on (its closing day drives the cycle)

    Returns:
        InstallmentPlan with one installment per month starting at the
        purchase's first competency

    Example:
        1000 cents in 3x on 2024-01-31, card closing on the 25th
        -> 2024-02: 334, 2024-03: 333, 2024-04: 333
    """
    _validate_purchase(purchase)

    amounts = split_amount(purchase.total, purchase.installment_count)
    first = first_competency(purchase.purchase_date, card.closing_day)

    installments = tuple(
        CardInstallment(
            id=f"{purchase.id}-{i + 1}",
            purchase_id=purchase.id,
            card_id=card.id,
            number=i + 1,
            amount=amount,
            competency=competency_at(first, i),
        )
        for i, amount in enumerate(amounts)
    )

    plan = InstallmentPlan(purchase=purchase, installments=installments)
    assert plan.total == purchase.total
    record_installment_plan(purchase.installment_count)
    return plan


def rebuild_installment_plan(purchase: CardPurchase, card: Card) -> InstallmentPlan:
    """Recompute a plan wholesale after the purchase was edited"""
    return build_installment_plan(purchase, card)


def build_recurring_purchase_plans(
    purchase: CardPurchase,
    card: Card,
    frequency: Frequency,
) -> List[InstallmentPlan]:
    """
    Expand a recurring card purchase (subscriptions and the like).

    Each occurrence is a single-installment purchase dated one period after
    the previous one; each resolves its own first competency.
    """
    recurrence_id = purchase.recurrence_id or purchase.id
    plans = []
    for i in range(occurrences_for(frequency)):
        occurrence = dataclasses.replace(
            purchase,
            id=purchase.id if i == 0 else f"{purchase.id}-{i}",
            purchase_date=occurrence_date(purchase.purchase_date, frequency, i),
            installment_count=1,
            recurrence_id=recurrence_id,
        )
        plans.append(build_installment_plan(occurrence, card))
    return plans
