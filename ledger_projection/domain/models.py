"""Domain models - pure Python dataclasses representing ledger entities.

All amounts are integer cents. Dates are calendar dates with no time component.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from ledger_projection.domain.exceptions import InvalidDateError
from ledger_projection.utils.date_utils import add_months, last_day_of_month


class EntryKind(str, Enum):
    """Closed set of ledger entry variants, fixed at construction"""

    INFLOW = "inflow"
    OUTFLOW = "outflow"
    INVESTMENT = "investment"
    TRANSFER_DEBIT = "transfer_debit"
    TRANSFER_CREDIT = "transfer_credit"
    INITIAL_BALANCE = "initial_balance"
    CARD_BILL_DUE = "card_bill_due"

    @property
    def is_transfer(self) -> bool:
        return self in (EntryKind.TRANSFER_DEBIT, EntryKind.TRANSFER_CREDIT)


@dataclass(frozen=True, order=True)
class CompetencyKey:
    """Billing statement period, serialized as YYYY-MM (month is 1-12)"""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidDateError(f"Competency month out of range: {self.month}")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @classmethod
    def parse(cls, text: str) -> "CompetencyKey":
        try:
            year, month = text.split("-")
            return cls(int(year), int(month))
        except (AttributeError, ValueError) as e:
            raise InvalidDateError(f"Expected YYYY-MM, got {text!r}") from e

    @classmethod
    def of(cls, value: date) -> "CompetencyKey":
        return cls(value.year, value.month)

    def shift(self, months: int) -> "CompetencyKey":
        year, month_index = add_months(self.year, self.month - 1, months)
        return CompetencyKey(year, month_index + 1)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return date(self.year, self.month, last_day_of_month(self.year, self.month))


@dataclass(frozen=True)
class LedgerEntry:
    """Atomic dated monetary event consumed by the aggregator"""

    id: str
    date: date
    amount: int  # cents, never negative
    kind: EntryKind
    description: str = ""
    account_id: Optional[str] = None
    pair_id: Optional[str] = None  # counterpart leg for transfers
    virtual: bool = False  # simulated or projected, not tied to a persisted account
    settled: bool = True
    category_id: Optional[str] = None
    card_id: Optional[str] = None  # set on card-bill payments and bill projections
    competency: Optional[CompetencyKey] = None
    recurrence_id: Optional[str] = None


@dataclass(frozen=True)
class Card:
    """Credit card billing metadata"""

    id: str
    nickname: str
    closing_day: int
    due_day: int
    limit: Optional[int] = None


@dataclass(frozen=True)
class CardPurchase:
    """Single purchase made on a card, possibly split into installments"""

    id: str
    card_id: str
    purchase_date: date
    total: int
    installment_count: int = 1
    description: str = ""
    category_id: Optional[str] = None
    recurrence_id: Optional[str] = None


@dataclass(frozen=True)
class CardInstallment:
    """One installment of a purchase, attributed to a statement competency"""

    id: str
    purchase_id: str
    card_id: str
    number: int  # 1-based
    amount: int
    competency: CompetencyKey


@dataclass(frozen=True)
class InstallmentPlan:
    """Ordered installments of one purchase; amounts always sum to the total"""

    purchase: CardPurchase
    installments: Tuple[CardInstallment, ...]

    @property
    def total(self) -> int:
        return sum(inst.amount for inst in self.installments)

    @property
    def competencies(self) -> list[str]:
        return [str(inst.competency) for inst in self.installments]

    @property
    def amounts(self) -> list[int]:
        return [inst.amount for inst in self.installments]


@dataclass(frozen=True)
class DaySummary:
    """Aggregated view of one calendar day"""

    date: date
    inflow: int = 0
    outflow: int = 0
    investment: int = 0
    initial_balance: int = 0
    balance: int = 0  # running balance at end of day
    entries: Tuple[LedgerEntry, ...] = ()
    transfers: Tuple[LedgerEntry, ...] = ()  # internal moves, shown once

    @property
    def net(self) -> int:
        return self.initial_balance + self.inflow - self.outflow - self.investment


@dataclass(frozen=True)
class PeriodTotals:
    """Sums over a range of days"""

    inflow: int = 0
    outflow: int = 0
    investment: int = 0

    @property
    def net(self) -> int:
        return self.inflow - self.outflow - self.investment


@dataclass(frozen=True)
class ProjectionResult:
    """Output of a projection run"""

    start: date
    end: date
    opening_balance: int
    carried_card_debt: int
    days: Tuple[DaySummary, ...] = field(default_factory=tuple)

    @property
    def final_balance(self) -> int:
        return self.days[-1].balance if self.days else self.opening_balance

    @property
    def min_balance(self) -> int:
        """Lowest balance in range, never above zero (heatmap scale)"""
        return min([0, *(day.balance for day in self.days)])

    @property
    def max_balance(self) -> int:
        """Highest balance in range, never below zero (heatmap scale)"""
        return max([0, *(day.balance for day in self.days)])

    @property
    def totals(self) -> PeriodTotals:
        return PeriodTotals(
            inflow=sum(day.inflow for day in self.days),
            outflow=sum(day.outflow for day in self.days),
            investment=sum(day.investment for day in self.days),
        )

    def window(self, start: date, end: date) -> "ProjectionResult":
        """Slice to [start, end], keeping balances from the full walk"""
        days = tuple(day for day in self.days if start <= day.date <= end)
        opening = self.opening_balance
        for day in self.days:
            if day.date >= start:
                break
            opening = day.balance
        return ProjectionResult(
            start=start,
            end=end,
            opening_balance=opening,
            carried_card_debt=self.carried_card_debt,
            days=days,
        )

    def month(self, key: CompetencyKey) -> "ProjectionResult":
        return self.window(key.first_day(), key.last_day())


def make_transfer_pair(
    first_id: str,
    second_id: str,
    from_account: str,
    to_account: str,
    on: date,
    amount: int,
    description: str = "",
    settled: bool = True,
) -> Tuple[LedgerEntry, LedgerEntry]:
    """
    Build the two legs of a transfer between accounts.

    The smaller of the two ids is given to the debit (origin) leg so the
    aggregator's id-ordering rule agrees with the kinds set here.
    """
    debit_id, credit_id = sorted((first_id, second_id))
    debit = LedgerEntry(
        id=debit_id,
        date=on,
        amount=amount,
        kind=EntryKind.TRANSFER_DEBIT,
        description=description,
        account_id=from_account,
        pair_id=credit_id,
        settled=settled,
    )
    credit = LedgerEntry(
        id=credit_id,
        date=on,
        amount=amount,
        kind=EntryKind.TRANSFER_CREDIT,
        description=description,
        account_id=to_account,
        pair_id=debit_id,
        settled=settled,
    )
    return debit, credit
