"""Forward-looking balance projection.

Combines real entries, projected card bills and a simulation overlay into a
day-by-day running balance over a fixed horizon.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import AbstractSet, Optional, Tuple

from ledger_projection.config import Settings, settings as default_settings
from ledger_projection.domain.aggregation import aggregate, balance_before
from ledger_projection.domain.billing import carried_over_debt, payments_by_competency, project_card_bills
from ledger_projection.domain.exceptions import InvalidHorizonError
from ledger_projection.domain.models import (
    Card,
    CardInstallment,
    CompetencyKey,
    LedgerEntry,
    ProjectionResult,
)
from ledger_projection.infrastructure.observability.logging import log_projection
from ledger_projection.infrastructure.observability.metrics import (
    projection_duration_histogram,
    record_projection,
)
from ledger_projection.utils.date_utils import format_iso_date, month_span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionInputs:
    """Immutable snapshot of everything a projection depends on"""

    start_month: CompetencyKey
    entries: Tuple[LedgerEntry, ...] = ()
    overlay: Tuple[LedgerEntry, ...] = ()
    cards: Tuple[Card, ...] = ()
    installments: Tuple[CardInstallment, ...] = ()
    anchor_balance: Optional[int] = None  # computed from entries before the window when None
    visible_accounts: Optional[AbstractSet[str]] = field(default=None)
    horizon_months: Optional[int] = None


class ProjectionEngine:
    """Stateless projection runner; every call recomputes from its inputs"""

    def __init__(self, config: Settings | None = None):
        self.config = config or default_settings

    def project(self, inputs: ProjectionInputs) -> ProjectionResult:
        """
        Walk the horizon day by day from the first day of start_month.

        Steps:
        1. Window: start_month through horizon_months - 1 months later
        2. Opening balance: anchor (or real entries before the window)
           + overlay entries before the window - unpaid earlier card statements
        3. Card bills: one due entry per card and competency still owed
        4. Aggregate real + overlay + bills over the window
        """
        started = time.perf_counter()
        with projection_duration_histogram.time():
            result, card_bills = self._run(inputs)
        duration_ms = (time.perf_counter() - started) * 1000

        record_projection(bool(inputs.overlay), len(result.days), card_bills)
        log_projection(
            start=format_iso_date(result.start),
            end=format_iso_date(result.end),
            days=len(result.days),
            real_entries=len(inputs.entries),
            simulated_entries=len(inputs.overlay),
            card_bills=card_bills,
            opening_balance_cents=result.opening_balance,
            final_balance_cents=result.final_balance,
            duration_ms=round(duration_ms, 3),
        )
        return result

    def _run(self, inputs: ProjectionInputs) -> Tuple[ProjectionResult, int]:
        horizon = self.config.projection_horizon_months if inputs.horizon_months is None else inputs.horizon_months
        if horizon < 1:
            raise InvalidHorizonError(f"Projection horizon must be at least one month, got {horizon}")
        tolerance = self.config.paid_tolerance_cents
        start_month = inputs.start_month
        start, end = month_span(start_month.year, start_month.month, horizon)

        real = tuple(inputs.entries)
        overlay = tuple(inputs.overlay)

        if inputs.anchor_balance is None:
            anchor = balance_before(real, start, inputs.visible_accounts)
        else:
            anchor = inputs.anchor_balance
        simulated_before = balance_before(overlay, start)

        carried = carried_over_debt(
            inputs.installments,
            payments_by_competency(real),
            before=start_month,
            tolerance=tolerance,
        )
        opening = anchor + simulated_before - carried

        bills = project_card_bills(
            inputs.cards,
            inputs.installments,
            payments_by_competency(real, settled_only=True),
            [start_month.shift(i) for i in range(horizon)],
            tolerance=tolerance,
        )

        days = aggregate(
            real + overlay + tuple(bills),
            start,
            end,
            opening_balance=opening,
            visible_accounts=inputs.visible_accounts,
        )
        logger.debug(
            "Projected %s..%s: opening=%d carried_debt=%d bills=%d",
            start, end, opening, carried, len(bills),
        )

        result = ProjectionResult(
            start=start,
            end=end,
            opening_balance=opening,
            carried_card_debt=carried,
            days=tuple(days),
        )
        return result, len(bills)


def project(inputs: ProjectionInputs) -> ProjectionResult:
    """Run a projection with the default settings"""
    return ProjectionEngine().project(inputs)
