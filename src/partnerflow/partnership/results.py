# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Result models for waterfall allocations and partner performance.

Results are derived, immutable and never a source of truth: every value
here is a function of the partnership records at a point in time.
DataFrame helpers give the dashboard a tabular view.
"""

from __future__ import annotations

import datetime
from typing import Dict, List, Optional

import pandas as pd
from pydantic import Field, computed_field

from ..core.primitives import Model, WaterfallTierEnum
from .entities import PartnerDistribution
from .partnership import OwnershipValidation


class WaterfallTier(Model):
    """Descriptive breakdown of one waterfall tier for display."""

    tier_number: WaterfallTierEnum
    tier_name: str
    description: str
    amount: float
    notes: str = ""


class AllocationResult(Model):
    """
    Outcome of allocating one distribution amount through the waterfall.

    Attributes:
        as_of: Allocation date (ledger and accrual state are taken as of it)
        total_amount: Rounded amount allocated
        partner_distributions: Per-partner tier breakdown, in partner input order
        tiers: Four-tier descriptive breakdown
    """

    as_of: datetime.date
    total_amount: float
    partner_distributions: List[PartnerDistribution]
    tiers: List[WaterfallTier]

    @computed_field(alias="totalAllocated")
    @property
    def total_allocated(self) -> float:
        return sum(line.total_distribution for line in self.partner_distributions)

    @property
    def tier_totals(self) -> Dict[WaterfallTierEnum, float]:
        return {tier.tier_number: tier.amount for tier in self.tiers}

    def for_partner(self, partner_id: str) -> Optional[PartnerDistribution]:
        for line in self.partner_distributions:
            if line.partner_id == partner_id:
                return line
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """Per-partner breakdown indexed by partner id."""
        rows = [
            {
                "partner_name": line.partner_name,
                "return_of_capital": line.return_of_capital,
                "preferred_return": line.preferred_return,
                "catchup": line.catchup,
                "remaining_profit": line.remaining_profit,
                "total_distribution": line.total_distribution,
                "percent_of_total": line.percent_of_total,
            }
            for line in self.partner_distributions
        ]
        index = pd.Index([line.partner_id for line in self.partner_distributions], name="partner_id")
        return pd.DataFrame(rows, index=index)


class PartnerPerformance(Model):
    """Derived performance metrics for one partner as of a date."""

    partner_id: str
    partner_name: str
    initial_investment: float
    total_contributions: float
    total_distributions: float
    current_equity: float
    roi: float = Field(..., description="(distributions - contributions) / contributions")
    moic: float = Field(..., description="distributions / contributions")
    irr: Optional[float] = Field(
        None, description="Annualized IRR; None when the cash flows admit no solution"
    )
    cash_on_cash_return: float
    holding_period_months: int
    annualized_return: float


class ProfitLossAllocation(Model):
    """Profit or loss allocated to a partner by ownership percentage."""

    partner_id: str
    partner_name: str
    ownership_percent: float
    allocated_profit: float = 0.0
    allocated_loss: float = 0.0
    net_allocation: float = 0.0
    cumulative_allocation: float = 0.0


class PartnershipSummary(Model):
    """Partnership-level roll-up for the dashboard."""

    as_of: datetime.date
    partner_count: int
    gp_count: int
    lp_count: int
    active_partner_count: int
    total_initial_capital: float
    total_contributions: float
    total_distributions: float
    net_cash_flow: float
    average_roi: float
    average_moic: float
    average_irr: Optional[float] = None
    ownership: OwnershipValidation


class PartnershipResults(Model):
    """Everything the analysis API produces for one pending distribution."""

    allocation: AllocationResult
    performance: List[PartnerPerformance]
    summary: PartnershipSummary

    @property
    def partner_distributions(self) -> List[PartnerDistribution]:
        return self.allocation.partner_distributions

    @property
    def tiers(self) -> List[WaterfallTier]:
        return self.allocation.tiers

    def performance_frame(self) -> pd.DataFrame:
        return performance_to_dataframe(self.performance)


def performance_to_dataframe(performances: List[PartnerPerformance]) -> pd.DataFrame:
    """Dashboard table of partner performance indexed by partner id."""
    columns = list(PartnerPerformance.model_fields)
    frame = pd.DataFrame([p.model_dump() for p in performances], columns=columns)
    return frame.set_index("partner_id")


__all__ = [
    "WaterfallTier",
    "AllocationResult",
    "PartnerPerformance",
    "ProfitLossAllocation",
    "PartnershipSummary",
    "PartnershipResults",
    "performance_to_dataframe",
]
