# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnership Models for the Equity Waterfall

This module defines the waterfall policy and the complete partnership
snapshot consumed by the engine.

Key Features:
- Four-tier waterfall policy: return of capital, preferred return,
  GP catch-up and residual split (by ownership or by promote)
- Ownership validation over active partners (a checked invariant, never
  auto-corrected)
- A snapshot model mirroring the records the surrounding application keeps

Example:
    ```python
    # Industry standard defaults: 8% pref, 20% GP promote with catch-up
    config = WaterfallConfig()

    # Raw application records use the camelCase / tierN_ names
    config = WaterfallConfig.model_validate({
        "tier1_returnOfCapital": True,
        "tier2_preferredReturnRate": 0.08,
        "tier2_preferredReturnEnabled": True,
        "tier3_catchupEnabled": False,
        "tier3_gpPromotePercent": 0.20,
        "tier4_splitByOwnership": True,
        "distributionFrequency": "quarterly",
    })
    ```
"""

from __future__ import annotations

import datetime
from typing import Any, List, Optional, Sequence

from pydantic import Field, model_validator

from ..core.primitives import (
    CompoundingMethod,
    DistributionFrequency,
    FloatBetween0And1,
    Model,
    PositiveFloat,
)
from .entities import CapitalContribution, CashFlowEntry, Distribution, Partner


class WaterfallConfig(Model):
    """
    Waterfall policy flags and parameters.

    Rates are fractions (0.08 = 8%), unlike ``Partner.ownership_percent``
    which is a whole-number percentage.
    """

    return_of_capital_enabled: bool = Field(
        default=True,
        alias="tier1_returnOfCapital",
        description="Tier 1: return unreturned capital before any profit",
    )
    preferred_return_rate: PositiveFloat = Field(
        default=0.08,
        alias="tier2_preferredReturnRate",
        description="Tier 2: annual simple preferred return rate (e.g., 0.08 for 8%)",
    )
    preferred_return_enabled: bool = Field(
        default=True, alias="tier2_preferredReturnEnabled"
    )
    catchup_enabled: bool = Field(default=True, alias="tier3_catchupEnabled")
    gp_promote_percent: FloatBetween0And1 = Field(
        default=0.20,
        alias="tier3_gpPromotePercent",
        description="Target GP share of cumulative profit (e.g., 0.20 for 20%)",
    )
    split_by_ownership: bool = Field(
        default=True,
        alias="tier4_splitByOwnership",
        description="Tier 4: split by ownership; if False, GP takes the promote share first",
    )
    distribution_frequency: DistributionFrequency = Field(
        default=DistributionFrequency.AT_EXIT,
        description="Informational only; does not change the allocation math",
    )
    preferred_return_compounding: CompoundingMethod = Field(
        default=CompoundingMethod.SIMPLE,
        description="Whether unpaid preferred return is capitalised when the balance changes",
    )

    @property
    def accrues_preferred_return(self) -> bool:
        return self.preferred_return_enabled and self.preferred_return_rate > 0

    def __str__(self) -> str:
        tiers = []
        if self.return_of_capital_enabled:
            tiers.append("ROC")
        if self.preferred_return_enabled:
            tiers.append(f"{self.preferred_return_rate:.1%} pref")
        if self.catchup_enabled:
            tiers.append(f"{self.gp_promote_percent:.0%} catch-up")
        tiers.append("ownership split" if self.split_by_ownership else "promote split")
        return "Waterfall: " + " -> ".join(tiers)


class OwnershipValidation(Model):
    """Result of checking that active partners' ownership sums to 100%."""

    is_valid: bool
    total_ownership: float
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def validate_partnership_ownership(
    partners: Sequence[Partner], tolerance: float = 0.01
) -> OwnershipValidation:
    """
    Check the ownership invariant over active partners.

    Args:
        partners: All partners (inactive and exited partners are reported
            as warnings when they still hold ownership)
        tolerance: Allowed deviation from 100, in percentage points

    Returns:
        OwnershipValidation; never raises, callers decide how strict to be
    """
    active = [p for p in partners if p.is_active]
    total = sum(p.ownership_percent for p in active)
    errors: List[str] = []
    warnings: List[str] = []

    if not active:
        errors.append("Partnership has no active partners")
    elif abs(total - 100.0) > tolerance:
        errors.append(f"Total ownership is {total:.2f}% (should be 100%)")

    ids = [p.id for p in partners]
    if len(ids) != len(set(ids)):
        errors.append("Partner ids must be unique")

    for partner in partners:
        if not partner.is_active and partner.ownership_percent > 0:
            warnings.append(
                f"{partner.name} is {partner.status.value} but holds "
                f"{partner.ownership_percent:.2f}% ownership"
            )
    if active and not any(p.is_general_partner for p in active):
        warnings.append("No active General Partner; catch-up and promote will not apply")

    return OwnershipValidation(
        is_valid=not errors, total_ownership=total, errors=errors, warnings=warnings
    )


class PartnershipData(Model):
    """
    Complete partnership snapshot supplied by the surrounding application.

    Contributions, distributions and cash-flow entries are append-only
    history; the engine derives everything else from them.
    """

    property_id: str = ""
    partners: List[Partner] = Field(default_factory=list)
    capital_contributions: List[CapitalContribution] = Field(default_factory=list)
    waterfall_config: WaterfallConfig = Field(default_factory=WaterfallConfig)
    distributions: List[Distribution] = Field(default_factory=list)
    cash_flow_entries: List[CashFlowEntry] = Field(default_factory=list)
    last_updated: Optional[datetime.datetime] = None

    @model_validator(mode="before")
    @classmethod
    def drop_milestones(cls, data: Any) -> Any:
        """Application snapshots carry a milestones list the engine does not use."""
        if isinstance(data, dict) and "milestones" in data:
            data = {key: value for key, value in data.items() if key != "milestones"}
        return data

    @model_validator(mode="after")
    def check_unique_partner_ids(self) -> "PartnershipData":
        ids = [p.id for p in self.partners]
        if len(ids) != len(set(ids)):
            raise ValueError("Partner ids must be unique")
        return self

    @property
    def active_partners(self) -> List[Partner]:
        return [p for p in self.partners if p.is_active]

    @property
    def gp_partners(self) -> List[Partner]:
        """Get all General Partners."""
        return [p for p in self.partners if p.is_general_partner]

    @property
    def lp_partners(self) -> List[Partner]:
        """Get all partners that are not General Partners."""
        return [p for p in self.partners if not p.is_general_partner]

    def get_partner(self, partner_id: str) -> Optional[Partner]:
        """Get partner by id."""
        for partner in self.partners:
            if partner.id == partner_id:
                return partner
        return None

    def validate_ownership(self, tolerance: float = 0.01) -> OwnershipValidation:
        return validate_partnership_ownership(self.partners, tolerance)

    def __str__(self) -> str:
        return (
            f"Partnership {self.property_id or '(unnamed)'}: "
            f"{len(self.gp_partners)} GP(s), {len(self.lp_partners)} other partner(s)"
        )


__all__ = [
    "WaterfallConfig",
    "OwnershipValidation",
    "validate_partnership_ownership",
    "PartnershipData",
]
