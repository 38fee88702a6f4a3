# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Public analysis API for a partnership.

Provides the single entry point for allocating a pending distribution and
reporting partner performance from a complete partnership snapshot.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.ledger import CapitalLedger
from ..core.primitives import GlobalSettings, coerce_amount, coerce_date
from .distribution_calculator import DistributionCalculator
from .partnership import PartnershipData
from .performance import PerformanceAggregator
from .results import PartnershipResults

logger = logging.getLogger(__name__)


def analyze(
    data: PartnershipData,
    total_amount: float,
    as_of: object,
    settings: Optional[GlobalSettings] = None,
) -> PartnershipResults:
    """
    Allocate a pending distribution and report partner performance.

    Workflow:
      1) Build the capital ledger from the realized history
      2) Allocate ``total_amount`` through the waterfall as of ``as_of``
      3) Compute per-partner performance and the partnership summary

    The pending distribution is not appended to the history; performance
    reflects realized history only. Use ``build_distribution`` on the
    allocation to record it.

    Args:
        data: Partnership snapshot (partners, history, waterfall config)
        total_amount: Cash to distribute (>= 0)
        as_of: Distribution date (date or ISO-8601 string)
        settings: Optional global settings; created if not provided.

    Returns:
        PartnershipResults with the allocation, tier breakdown, partner
        performance and summary (including ownership validation).

    Raises:
        InvalidInputError: Negative amount or malformed date
        InvalidStateError: No active partners, or history referencing an
            unknown partner
    """
    if settings is None:
        settings = GlobalSettings()

    amount = coerce_amount(total_amount, "total_amount", allow_negative=False)
    as_of_date = coerce_date(as_of, "as_of")
    logger.info(
        f"Analyzing partnership {data.property_id or '(unnamed)'}: "
        f"distributing {amount:,.2f} as of {as_of_date.isoformat()} "
        f"across {len(data.active_partners)} active partner(s)"
    )

    ledger = CapitalLedger(data.partners, data.capital_contributions, data.distributions)
    calculator = DistributionCalculator(
        partners=data.partners,
        ledger=ledger,
        config=data.waterfall_config,
        settings=settings,
    )
    allocation = calculator.allocate(amount, as_of_date)

    aggregator = PerformanceAggregator(
        partners=data.partners,
        contributions=data.capital_contributions,
        distributions=data.distributions,
        cash_flows=data.cash_flow_entries,
        config=data.waterfall_config,
        settings=settings,
    )
    performance = aggregator.compute_all(as_of_date)
    summary = aggregator.summarize(as_of_date, performance)

    logger.info(
        f"Allocated {allocation.total_allocated:,.2f} "
        f"(tiers: {', '.join(f'{t.tier_name}={t.amount:,.2f}' for t in allocation.tiers)})"
    )
    return PartnershipResults(allocation=allocation, performance=performance, summary=summary)


__all__ = ["analyze"]
