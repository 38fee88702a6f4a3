# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnerflow Partnership Models
Public API for the partnerflow.partnership subpackage.

Partners and their capital history, the four-tier distribution waterfall,
preferred return accrual and partner performance reporting.
"""

from .accrual import PreferredReturnAccrual
from .api import analyze
from .distribution_calculator import (
    DistributionCalculator,
    allocate,
    build_distribution,
    solve_catchup,
)
from .entities import (
    CapitalContribution,
    CashFlowEntry,
    Distribution,
    Partner,
    PartnerDistribution,
)
from .partnership import (
    OwnershipValidation,
    PartnershipData,
    WaterfallConfig,
    validate_partnership_ownership,
)
from .performance import (
    PerformanceAggregator,
    allocate_profit_loss,
    compute_performance,
)
from .results import (
    AllocationResult,
    PartnerPerformance,
    PartnershipResults,
    PartnershipSummary,
    ProfitLossAllocation,
    WaterfallTier,
    performance_to_dataframe,
)

__all__ = [
    # Analysis API
    "analyze",
    "PartnershipResults",
    # Records
    "Partner",
    "CapitalContribution",
    "Distribution",
    "PartnerDistribution",
    "CashFlowEntry",
    # Partnership structure
    "PartnershipData",
    "WaterfallConfig",
    "OwnershipValidation",
    "validate_partnership_ownership",
    # Waterfall
    "DistributionCalculator",
    "PreferredReturnAccrual",
    "allocate",
    "build_distribution",
    "solve_catchup",
    "AllocationResult",
    "WaterfallTier",
    # Performance
    "PerformanceAggregator",
    "PartnerPerformance",
    "PartnershipSummary",
    "ProfitLossAllocation",
    "compute_performance",
    "allocate_profit_loss",
    "performance_to_dataframe",
]
