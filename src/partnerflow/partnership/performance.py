# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partner performance metrics.

Every metric is recomputed from the capital ledger and the cash-flow
entries as of a date; nothing is cached on the partner records.

Metrics:
- Totals: verified/received contributions, realized distributions
- Current equity: unreturned capital plus unpaid accrued preferred return
- ROI, MOIC, trailing cash-on-cash and annualized return
- IRR over the partner's cash-flow entries (or ledger-derived flows)
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from ..core.calculations import FinancialCalculations
from ..core.exceptions import NoConvergenceError, NoSolutionError
from ..core.irr import solve_irr
from ..core.ledger import CapitalLedger
from ..core.primitives import GlobalSettings, PartnerStatus, coerce_amount, coerce_date
from .accrual import PreferredReturnAccrual
from .entities import CapitalContribution, CashFlowEntry, Distribution, Partner
from .partnership import WaterfallConfig, validate_partnership_ownership
from .results import (
    PartnerPerformance,
    PartnershipSummary,
    ProfitLossAllocation,
    performance_to_dataframe,
)

logger = logging.getLogger(__name__)


def _whole_months(start: datetime.date, end: datetime.date) -> int:
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


@dataclass
class PerformanceAggregator:
    """
    Computes per-partner and partnership-level performance as of a date.

    Attributes:
        partners: Partners to report on (all statuses)
        contributions: Capital contribution history
        distributions: Distribution history; only realized ones count
        cash_flows: Explicit cash-flow entries used for IRR
        config: Waterfall policy; when given, current equity includes unpaid
            accrued preferred return
        settings: Global settings (trailing window, IRR solver, error policy)
        restrict_to_partners: Skip history belonging to other partners
            instead of rejecting it
    """

    partners: Sequence[Partner]
    contributions: Sequence[CapitalContribution] = ()
    distributions: Sequence[Distribution] = ()
    cash_flows: Sequence[CashFlowEntry] = ()
    config: Optional[WaterfallConfig] = None
    settings: GlobalSettings = field(default_factory=GlobalSettings)
    restrict_to_partners: bool = False

    def __post_init__(self):
        self.ledger = CapitalLedger(
            self.partners,
            self.contributions,
            self.distributions,
            restrict_to_partners=self.restrict_to_partners,
        )
        self.accrual = (
            PreferredReturnAccrual(self.ledger, self.config, self.settings.calculation)
            if self.config is not None
            else None
        )

    def compute(self, partner: Partner, as_of: object) -> PartnerPerformance:
        """
        Performance metrics for one partner as of ``as_of``.

        Raises:
            InvalidInputError: Malformed ``as_of``
            NoSolutionError, NoConvergenceError: IRR failures, only when
                ``CalculationSettings.fail_on_error`` is set
        """
        as_of_date = coerce_date(as_of, "as_of")
        pid = partner.id

        contributed = self.ledger.contributed_capital(as_of_date).get(pid, 0.0)
        distributed = self.ledger.total_distributed(pid, as_of_date)
        equity = self.ledger.unreturned_capital(as_of_date).get(pid, 0.0)
        if self.accrual is not None:
            equity += self.accrual.accrued(pid, as_of_date)

        roi = FinancialCalculations.calculate_roi(contributed, distributed)
        moic = FinancialCalculations.calculate_moic(contributed, distributed)

        window_start = as_of_date - relativedelta(
            months=self.settings.calculation.trailing_months
        )
        trailing = self.ledger.distributions_between(pid, window_start, as_of_date)
        cash_on_cash = FinancialCalculations.calculate_cash_on_cash(trailing, contributed)

        months = self._holding_period_months(partner, as_of_date)

        return PartnerPerformance(
            partner_id=pid,
            partner_name=partner.name,
            initial_investment=partner.initial_capital,
            total_contributions=contributed,
            total_distributions=distributed,
            current_equity=equity,
            roi=roi,
            moic=moic,
            irr=self._irr(partner, as_of_date),
            cash_on_cash_return=cash_on_cash,
            holding_period_months=months,
            annualized_return=FinancialCalculations.calculate_annualized_return(roi, months),
        )

    def _partner_cash_flows(self, partner_id: str, as_of: datetime.date) -> List[CashFlowEntry]:
        explicit = [
            entry
            for entry in self.cash_flows
            if entry.partner_id == partner_id and entry.date <= as_of
        ]
        if explicit:
            return explicit
        return self.ledger.derived_cash_flows(partner_id, as_of)

    def _irr(self, partner: Partner, as_of: datetime.date) -> Optional[float]:
        flows = self._partner_cash_flows(partner.id, as_of)
        try:
            return solve_irr(flows, settings=self.settings.irr)
        except (NoSolutionError, NoConvergenceError) as e:
            if self.settings.calculation.fail_on_error:
                raise
            logger.warning("IRR unavailable for partner %s (%s): %s", partner.name, partner.id, e)
            return None

    def _holding_period_months(self, partner: Partner, as_of: datetime.date) -> int:
        start = partner.join_date or self.ledger.first_contribution_date(partner.id)
        if start is None:
            return 0
        end = as_of
        if (
            partner.status == PartnerStatus.EXITED
            and partner.exit_date is not None
            and partner.exit_date < end
        ):
            end = partner.exit_date
        return _whole_months(start, end)

    def compute_all(self, as_of: object) -> List[PartnerPerformance]:
        """Performance for every partner, in input order."""
        return [self.compute(partner, as_of) for partner in self.partners]

    def summarize(
        self, as_of: object, performances: Optional[List[PartnerPerformance]] = None
    ) -> PartnershipSummary:
        """
        Partnership-level roll-up.

        Averages run over all reported partners; the IRR average only over
        partners that have one.
        """
        as_of_date = coerce_date(as_of, "as_of")
        if performances is None:
            performances = self.compute_all(as_of_date)

        total_contributions = sum(p.total_contributions for p in performances)
        total_distributions = sum(p.total_distributions for p in performances)
        irrs = [p.irr for p in performances if p.irr is not None]
        count = len(performances)

        return PartnershipSummary(
            as_of=as_of_date,
            partner_count=len(self.partners),
            gp_count=sum(1 for p in self.partners if p.is_general_partner),
            lp_count=sum(1 for p in self.partners if not p.is_general_partner),
            active_partner_count=sum(1 for p in self.partners if p.is_active),
            total_initial_capital=sum(p.initial_capital for p in self.partners),
            total_contributions=total_contributions,
            total_distributions=total_distributions,
            net_cash_flow=total_distributions - total_contributions,
            average_roi=sum(p.roi for p in performances) / count if count else 0.0,
            average_moic=sum(p.moic for p in performances) / count if count else 0.0,
            average_irr=sum(irrs) / len(irrs) if irrs else None,
            ownership=validate_partnership_ownership(
                self.partners, self.settings.validation.ownership_tolerance
            ),
        )

    @staticmethod
    def to_dataframe(performances: List[PartnerPerformance]) -> pd.DataFrame:
        return performance_to_dataframe(performances)


def compute_performance(
    partner: Partner,
    contributions: Sequence[CapitalContribution],
    distributions: Sequence[Distribution],
    cash_flows: Sequence[CashFlowEntry],
    as_of: object,
    config: Optional[WaterfallConfig] = None,
    settings: Optional[GlobalSettings] = None,
) -> PartnerPerformance:
    """
    Performance metrics for a single partner.

    History belonging to other partners is ignored, so the full partnership
    record set can be passed as-is.

    Example:
        ```python
        perf = compute_performance(lp, contributions, distributions, [], "2025-12-31")
        print(f"{perf.partner_name}: MOIC {perf.moic:.2f}x")
        ```
    """
    aggregator = PerformanceAggregator(
        partners=[partner],
        contributions=contributions,
        distributions=distributions,
        cash_flows=cash_flows,
        config=config,
        settings=settings or GlobalSettings(),
        restrict_to_partners=True,
    )
    return aggregator.compute(partner, as_of)


def allocate_profit_loss(
    partners: Sequence[Partner],
    net_profit: float,
    prior: Optional[Sequence[ProfitLossAllocation]] = None,
) -> List[ProfitLossAllocation]:
    """
    Allocate a period's net profit (or loss) to active partners by ownership.

    A positive ``net_profit`` lands in ``allocated_profit``, a negative one
    in ``allocated_loss`` (as a positive magnitude). ``cumulative_allocation``
    carries forward the ``prior`` allocation of each partner.
    """
    amount = coerce_amount(net_profit, "net_profit")
    carried: Dict[str, float] = {a.partner_id: a.cumulative_allocation for a in prior or ()}

    allocations = []
    for partner in partners:
        if not partner.is_active:
            continue
        share = amount * partner.ownership_fraction
        allocations.append(
            ProfitLossAllocation(
                partner_id=partner.id,
                partner_name=partner.name,
                ownership_percent=partner.ownership_percent,
                allocated_profit=max(share, 0.0),
                allocated_loss=abs(min(share, 0.0)),
                net_allocation=share,
                cumulative_allocation=carried.get(partner.id, 0.0) + share,
            )
        )
    return allocations


__all__ = [
    "PerformanceAggregator",
    "compute_performance",
    "allocate_profit_loss",
]
