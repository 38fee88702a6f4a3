# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnerflow Core Primitives

Essential building blocks shared by the ledger, the waterfall and the
performance metrics: the immutable base model, constrained types, enums,
settings and boundary validation.
"""

from .enums import (
    CompoundingMethod,
    ContributionStatus,
    ContributionType,
    DistributionFrequency,
    DistributionStatus,
    DistributionType,
    LedgerEventKind,
    PartnerRole,
    PartnerStatus,
    WaterfallTierEnum,
)
from .model import Model
from .settings import (
    CalculationSettings,
    GlobalSettings,
    IRRSettings,
    ReportingSettings,
    ValidationSettings,
)
from .types import (
    FloatBetween0And1,
    Percent0To100,
    PositiveFloat,
    PositiveInt,
    PositiveIntGt0,
    StrictlyPositiveFloat,
)
from .validation import coerce_amount, coerce_date

__all__ = [
    # Core models
    "Model",
    # Settings
    "GlobalSettings",
    "CalculationSettings",
    "IRRSettings",
    "ReportingSettings",
    "ValidationSettings",
    # Enums
    "CompoundingMethod",
    "ContributionStatus",
    "ContributionType",
    "DistributionFrequency",
    "DistributionStatus",
    "DistributionType",
    "LedgerEventKind",
    "PartnerRole",
    "PartnerStatus",
    "WaterfallTierEnum",
    # Types
    "PositiveFloat",
    "PositiveInt",
    "PositiveIntGt0",
    "StrictlyPositiveFloat",
    "FloatBetween0And1",
    "Percent0To100",
    # Validation
    "coerce_amount",
    "coerce_date",
]
