# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Entity and event records for partnership accounting.

Partners own the partnership; contributions, distributions and cash-flow
entries form the append-only event history every calculation derives
from. Records are immutable, and the core never mutates history: a
correction is a new record supplied by the surrounding application.
"""

from __future__ import annotations

import datetime
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import Field, computed_field, field_validator, model_validator

from ..core.primitives import (
    ContributionStatus,
    ContributionType,
    DistributionStatus,
    DistributionType,
    Model,
    PartnerRole,
    PartnerStatus,
    Percent0To100,
    PositiveFloat,
    StrictlyPositiveFloat,
)


def _new_id() -> str:
    return uuid4().hex


class Partner(Model):
    """Equity partner with an ownership percentage (0-100) and a role."""

    # Core Identity
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., description="Partner name")
    email: str = ""
    phone: str = ""

    # Economics
    ownership_percent: Percent0To100 = Field(
        ..., description="Equity ownership as a whole-number percentage (0-100)"
    )
    initial_capital: PositiveFloat = Field(
        default=0.0, description="Capital committed at formation"
    )

    role: PartnerRole = PartnerRole.LIMITED_PARTNER
    status: PartnerStatus = PartnerStatus.ACTIVE
    join_date: Optional[datetime.date] = None
    exit_date: Optional[datetime.date] = None
    notes: str = ""

    @field_validator("join_date", "exit_date", mode="before")
    @classmethod
    def blank_date_to_none(cls, v: Any) -> Any:
        """The surrounding application stores unset dates as empty strings."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_dates(self) -> "Partner":
        if self.join_date and self.exit_date and self.exit_date < self.join_date:
            raise ValueError(f"Partner {self.id}: exit_date precedes join_date")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == PartnerStatus.ACTIVE

    @property
    def is_general_partner(self) -> bool:
        """General partners are the promote-designated partners."""
        return self.role == PartnerRole.GENERAL_PARTNER

    @property
    def ownership_fraction(self) -> float:
        return self.ownership_percent / 100.0

    def __str__(self) -> str:
        return f"{self.name} ({self.role.value}): {self.ownership_percent:.1f}% equity"


class CapitalContribution(Model):
    """A capital contribution event. Only verified/received contributions form basis."""

    id: str = Field(default_factory=_new_id)
    partner_id: str
    partner_name: str = ""
    contribution_date: datetime.date
    type: ContributionType = ContributionType.INITIAL_CAPITAL
    amount: StrictlyPositiveFloat
    status: ContributionStatus = ContributionStatus.RECEIVED
    payment_method: str = ""
    description: str = ""
    notes: str = ""

    @property
    def counts_toward_basis(self) -> bool:
        return self.status.counts_toward_basis


class PartnerDistribution(Model):
    """
    One partner's share of one distribution, broken down by waterfall tier.

    ``total_distribution`` is always derived from the four tiers. Records
    arriving with a stored total are accepted only when it agrees with the
    tier breakdown.
    """

    partner_id: str
    partner_name: str = ""
    return_of_capital: PositiveFloat = 0.0
    preferred_return: PositiveFloat = 0.0
    catchup: PositiveFloat = 0.0
    remaining_profit: PositiveFloat = 0.0
    percent_of_total: float = Field(
        default=0.0, description="Fraction (0-1) of the distribution paid to this partner"
    )
    roi: float = 0.0
    moic: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def drop_stored_total(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        stored = None
        for key in ("totalDistribution", "total_distribution"):
            if key in data:
                stored = data.pop(key)
        if stored is not None:
            parts = sum(
                float(data.get(camel, data.get(snake, 0.0)) or 0.0)
                for camel, snake in (
                    ("returnOfCapital", "return_of_capital"),
                    ("preferredReturn", "preferred_return"),
                    ("catchup", "catchup"),
                    ("remainingProfit", "remaining_profit"),
                )
            )
            if abs(float(stored) - parts) > 0.01:
                raise ValueError(
                    f"total_distribution {stored} does not match tier breakdown {parts}"
                )
        return data

    @computed_field(alias="totalDistribution")
    @property
    def total_distribution(self) -> float:
        return (
            self.return_of_capital
            + self.preferred_return
            + self.catchup
            + self.remaining_profit
        )


class Distribution(Model):
    """
    A dated cash distribution with its per-partner breakdown.

    Only realized distributions (not projected, status completed) move the
    capital ledger; projected ones are hypothetical.
    """

    id: str = Field(default_factory=_new_id)
    distribution_date: datetime.date
    type: DistributionType = DistributionType.QUARTERLY_CASH_FLOW
    total_amount: PositiveFloat
    status: DistributionStatus = DistributionStatus.COMPLETED
    is_projected: bool = False
    notes: str = ""
    partner_distributions: List[PartnerDistribution] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_breakdown_total(self) -> "Distribution":
        """Per-partner totals must add up to the distribution amount."""
        if self.partner_distributions:
            allocated = sum(line.total_distribution for line in self.partner_distributions)
            if abs(allocated - self.total_amount) > 0.01:
                raise ValueError(
                    f"Distribution {self.id}: partner breakdown sums to {allocated:,.2f}, "
                    f"expected {self.total_amount:,.2f}"
                )
        return self

    @property
    def is_realized(self) -> bool:
        return not self.is_projected and self.status == DistributionStatus.COMPLETED

    def for_partner(self, partner_id: str) -> Optional[PartnerDistribution]:
        for line in self.partner_distributions:
            if line.partner_id == partner_id:
                return line
        return None


class CashFlowEntry(Model):
    """A signed, dated cash flow from one partner's point of view (negative = capital out)."""

    partner_id: str
    date: datetime.date
    amount: float
    description: str = ""


__all__ = [
    "Partner",
    "CapitalContribution",
    "PartnerDistribution",
    "Distribution",
    "CashFlowEntry",
]
