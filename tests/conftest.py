# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for Partnerflow testing.

This module provides convenient builders for partners and capital history
so tests only spell out the fields they care about.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Tuple

import pytest

from partnerflow.core.primitives import (
    ContributionStatus,
    DistributionStatus,
    PartnerRole,
)
from partnerflow.partnership import (
    CapitalContribution,
    Distribution,
    Partner,
    PartnerDistribution,
    WaterfallConfig,
)


# Partner Utilities
def make_partner(
    name: str,
    ownership: float,
    role: PartnerRole = PartnerRole.LIMITED_PARTNER,
    **kwargs,
) -> Partner:
    """
    Create a partner whose id is derived from its name.

    Example:
        >>> gp = make_partner("Sponsor GP", 20, PartnerRole.GENERAL_PARTNER)
        >>> gp.id
        'sponsor-gp'
    """
    kwargs.setdefault("id", name.lower().replace(" ", "-"))
    return Partner(name=name, ownership_percent=ownership, role=role, **kwargs)


def make_gp(name: str = "Sponsor GP", ownership: float = 20, **kwargs) -> Partner:
    return make_partner(name, ownership, PartnerRole.GENERAL_PARTNER, **kwargs)


def make_lp(name: str = "Investor LP", ownership: float = 80, **kwargs) -> Partner:
    return make_partner(name, ownership, PartnerRole.LIMITED_PARTNER, **kwargs)


# Capital History Utilities
def make_contribution(
    partner: Partner,
    amount: float,
    on: date,
    status: ContributionStatus = ContributionStatus.RECEIVED,
    **kwargs,
) -> CapitalContribution:
    return CapitalContribution(
        partner_id=partner.id,
        partner_name=partner.name,
        contribution_date=on,
        amount=amount,
        status=status,
        **kwargs,
    )


def make_distribution(
    on: date,
    lines: Dict[Partner, Tuple[float, float, float, float]],
    projected: bool = False,
    status: Optional[DistributionStatus] = None,
) -> Distribution:
    """
    Create a distribution from per-partner tier amounts.

    Args:
        on: Distribution date
        lines: Partner -> (return of capital, preferred, catch-up, residual)
        projected: Mark the distribution as hypothetical
        status: Defaults to PROJECTED for projected distributions, else COMPLETED
    """
    partner_lines = [
        PartnerDistribution(
            partner_id=partner.id,
            partner_name=partner.name,
            return_of_capital=roc,
            preferred_return=pref,
            catchup=catchup,
            remaining_profit=residual,
        )
        for partner, (roc, pref, catchup, residual) in lines.items()
    ]
    if status is None:
        status = DistributionStatus.PROJECTED if projected else DistributionStatus.COMPLETED
    return Distribution(
        distribution_date=on,
        total_amount=sum(line.total_distribution for line in partner_lines),
        status=status,
        is_projected=projected,
        partner_distributions=partner_lines,
    )


def tier1_only_config() -> WaterfallConfig:
    """Waterfall with only return of capital enabled (residual still catches overflow)."""
    return WaterfallConfig(
        return_of_capital_enabled=True,
        preferred_return_enabled=False,
        catchup_enabled=False,
    )


# Fixtures
@pytest.fixture
def gp() -> Partner:
    """20% General Partner."""
    return make_gp()


@pytest.fixture
def lp() -> Partner:
    """80% Limited Partner."""
    return make_lp()


@pytest.fixture
def partners(gp: Partner, lp: Partner) -> Tuple[Partner, Partner]:
    return (gp, lp)


@pytest.fixture
def equal_contributions(gp: Partner, lp: Partner):
    """100,000 from each partner on 2025-01-01."""
    return [
        make_contribution(gp, 100_000, date(2025, 1, 1)),
        make_contribution(lp, 100_000, date(2025, 1, 1)),
    ]
