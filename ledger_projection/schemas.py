"""Pydantic schemas for the engine boundary.

Incoming records carry display-currency decimals; they are converted to cents
here. Outgoing summaries carry cents plus a formatted display string.
"""

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ledger_projection.domain.models import (
    Card,
    CardPurchase,
    CompetencyKey,
    DaySummary,
    EntryKind,
    InstallmentPlan,
    LedgerEntry,
    ProjectionResult,
)
from ledger_projection.utils.money import format_cents, to_cents


class LedgerEntryIn(BaseModel):
    """Ledger record supplied by the application layer"""

    id: str = Field(..., min_length=1)
    date: dt.date
    amount: Decimal = Field(..., ge=0, description="Amount in display currency")
    kind: EntryKind
    description: str = ""
    account_id: Optional[str] = None
    pair_id: Optional[str] = None
    settled: bool = True
    category_id: Optional[str] = None
    card_id: Optional[str] = None
    competency: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}$")
    recurrence_id: Optional[str] = None

    def to_domain(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            date=self.date,
            amount=to_cents(self.amount),
            kind=self.kind,
            description=self.description,
            account_id=self.account_id,
            pair_id=self.pair_id,
            settled=self.settled,
            category_id=self.category_id,
            card_id=self.card_id,
            competency=CompetencyKey.parse(self.competency) if self.competency else None,
            recurrence_id=self.recurrence_id,
        )


class CardIn(BaseModel):
    """Card billing metadata"""

    id: str = Field(..., min_length=1)
    nickname: str
    closing_day: int = Field(..., ge=1, le=31)
    due_day: int = Field(..., ge=1, le=31)
    limit: Optional[Decimal] = Field(default=None, ge=0)

    def to_domain(self) -> Card:
        return Card(
            id=self.id,
            nickname=self.nickname,
            closing_day=self.closing_day,
            due_day=self.due_day,
            limit=to_cents(self.limit) if self.limit is not None else None,
        )


class CardPurchaseIn(BaseModel):
    """Card purchase as typed in the purchase form"""

    id: str = Field(..., min_length=1)
    card_id: str
    purchase_date: dt.date
    total: Decimal = Field(..., gt=0)
    installment_count: int = Field(default=1, gt=0)
    description: str = ""
    category_id: Optional[str] = None

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    def to_domain(self) -> CardPurchase:
        return CardPurchase(
            id=self.id,
            card_id=self.card_id,
            purchase_date=self.purchase_date,
            total=to_cents(self.total),
            installment_count=self.installment_count,
            description=self.description,
            category_id=self.category_id,
        )


class InstallmentOut(BaseModel):
    number: int
    amount_cents: int
    amount_display: str
    competency: str


class InstallmentPlanOut(BaseModel):
    purchase_id: str
    total_cents: int
    installments: List[InstallmentOut]

    @classmethod
    def from_domain(cls, plan: InstallmentPlan) -> "InstallmentPlanOut":
        return cls(
            purchase_id=plan.purchase.id,
            total_cents=plan.total,
            installments=[
                InstallmentOut(
                    number=inst.number,
                    amount_cents=inst.amount,
                    amount_display=format_cents(inst.amount),
                    competency=str(inst.competency),
                )
                for inst in plan.installments
            ],
        )


class EntryOut(BaseModel):
    id: str
    description: str
    kind: EntryKind
    amount_cents: int
    simulated: bool


class DaySummaryOut(BaseModel):
    """Single day of a projection"""

    date: dt.date
    inflow_cents: int
    outflow_cents: int
    investment_cents: int
    balance_cents: int
    balance_display: str
    entries: List[EntryOut]

    @classmethod
    def from_domain(cls, day: DaySummary) -> "DaySummaryOut":
        return cls(
            date=day.date,
            inflow_cents=day.inflow,
            outflow_cents=day.outflow,
            investment_cents=day.investment,
            balance_cents=day.balance,
            balance_display=format_cents(day.balance),
            entries=[
                EntryOut(
                    id=entry.id,
                    description=entry.description,
                    kind=entry.kind,
                    amount_cents=entry.amount,
                    simulated=entry.virtual and entry.kind is not EntryKind.CARD_BILL_DUE,
                )
                for entry in day.entries
            ],
        )


class ProjectionOut(BaseModel):
    """Projection payload for rendering (heatmap scale and KPI totals)"""

    start: dt.date
    end: dt.date
    opening_balance_cents: int
    carried_card_debt_cents: int
    min_balance_cents: int
    max_balance_cents: int
    total_inflow_cents: int
    total_outflow_cents: int
    total_investment_cents: int
    days: List[DaySummaryOut]

    @classmethod
    def from_domain(cls, result: ProjectionResult) -> "ProjectionOut":
        totals = result.totals
        return cls(
            start=result.start,
            end=result.end,
            opening_balance_cents=result.opening_balance,
            carried_card_debt_cents=result.carried_card_debt,
            min_balance_cents=result.min_balance,
            max_balance_cents=result.max_balance,
            total_inflow_cents=totals.inflow,
            total_outflow_cents=totals.outflow,
            total_investment_cents=totals.investment,
            days=[DaySummaryOut.from_domain(day) for day in result.days],
        )
