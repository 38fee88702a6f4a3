# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnership Distribution Calculator

This module implements the four-tier distribution waterfall. A distributable
cash amount flows through the tiers strictly in order, each tier consuming
from what the previous tiers left:

1. Return of Capital: pro-rata to unreturned capital, capped per partner
2. Preferred Return: pro-rata to accrued-but-unpaid preferred return
3. GP Catch-up: brings the General Partners' cumulative share of profit up
   to the configured promote percentage
4. Residual Split: by ownership, or promote share to the GPs first

A disabled tier allocates nothing; only the undistributed cash carries
forward. Allocation reads a snapshot of the ledger as of the distribution
date, so allocating the same amount against the same history twice gives
identical results.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.calculations import FinancialCalculations
from ..core.exceptions import InvalidInputError, InvalidStateError
from ..core.ledger import CapitalLedger
from ..core.primitives import (
    DistributionStatus,
    DistributionType,
    GlobalSettings,
    WaterfallTierEnum,
    coerce_amount,
    coerce_date,
)
from .accrual import PreferredReturnAccrual
from .entities import Distribution, Partner, PartnerDistribution
from .partnership import WaterfallConfig, validate_partnership_ownership
from .results import AllocationResult, WaterfallTier

logger = logging.getLogger(__name__)

_ROC, _PREF, _CATCHUP, _RESIDUAL = range(4)


def _pro_rata_fill(claims: np.ndarray, available: float) -> np.ndarray:
    """
    Fill claims from ``available`` cash.

    Claims are paid in full when cash suffices; otherwise every claim is
    filled by the same fraction (pro-rata, never first-come).
    """
    total_claims = float(claims.sum())
    if total_claims <= 0 or available <= 0:
        return np.zeros_like(claims)
    if available >= total_claims:
        return claims.copy()
    return claims * (available / total_claims)


def _weights(values: np.ndarray) -> Optional[np.ndarray]:
    total = float(values.sum())
    if total <= 0:
        return None
    return values / total


def solve_catchup(gp_profit: float, total_profit: float, promote_percent: float) -> float:
    """
    Catch-up amount ``c`` with (gp_profit + c) / (total_profit + c) = promote_percent.

    Returns 0.0 when the GPs already hold at least their promote share and
    ``inf`` for a 100% promote (every remaining dollar is catch-up).
    """
    if promote_percent >= 1.0:
        return math.inf
    return max(0.0, (promote_percent * total_profit - gp_profit) / (1.0 - promote_percent))


@dataclass
class DistributionCalculator:
    """
    Allocates a distribution amount across partners through the waterfall.

    Attributes:
        partners: Partners in input order; only active partners participate,
            and this order is the rounding tie-break order
        ledger: Capital ledger holding the realized history
        config: Waterfall policy
        settings: Global settings (rounding precision, ownership validation)
        accrual: Preferred return accrual engine; built from the ledger and
            config when omitted
    """

    partners: Sequence[Partner]
    ledger: CapitalLedger
    config: WaterfallConfig = field(default_factory=WaterfallConfig)
    settings: GlobalSettings = field(default_factory=GlobalSettings)
    accrual: Optional[PreferredReturnAccrual] = None

    def __post_init__(self):
        if self.accrual is None:
            self.accrual = PreferredReturnAccrual(
                self.ledger, self.config, self.settings.calculation
            )

    def _eligible_partners(self) -> List[Partner]:
        eligible = [p for p in self.partners if p.is_active]
        if not eligible:
            raise InvalidStateError(
                "No active partners are eligible for distribution",
                details={"partner_count": len(self.partners)},
            )

        validation = validate_partnership_ownership(
            self.partners, self.settings.validation.ownership_tolerance
        )
        if not validation.is_valid:
            if self.settings.validation.strict_ownership:
                raise InvalidInputError(
                    "; ".join(validation.errors),
                    field="ownership_percent",
                    details={"total_ownership": validation.total_ownership},
                )
            logger.warning("Ownership check failed: %s", "; ".join(validation.errors))
        return eligible

    def allocate(self, total_amount: float, as_of: object) -> AllocationResult:
        """
        Allocate ``total_amount`` through the waterfall as of ``as_of``.

        Args:
            total_amount: Cash to distribute (>= 0)
            as_of: Distribution date (date or ISO-8601 string)

        Returns:
            AllocationResult whose per-partner totals sum exactly to the
            rounded ``total_amount``

        Raises:
            InvalidInputError: Negative or non-numeric amount, malformed
                date, or invalid ownership under strict validation
            InvalidStateError: No active partners, or no ownership to split
                residual profit by

        Example:
            ```python
            calculator = DistributionCalculator(partners, ledger, WaterfallConfig())
            result = calculator.allocate(50_000, "2025-12-31")
            for line in result.partner_distributions:
                print(line.partner_name, line.total_distribution)
            ```
        """
        amount = coerce_amount(total_amount, "total_amount", allow_negative=False)
        as_of_date = coerce_date(as_of, "as_of")
        eligible = self._eligible_partners()

        ids = [p.id for p in eligible]
        gp_mask = np.array([p.is_general_partner for p in eligible], dtype=bool)
        raw = np.zeros((len(eligible), 4))
        remaining = amount

        # Tier 1: Return of Capital
        if self.config.return_of_capital_enabled and remaining > 0:
            balances = self.ledger.unreturned_capital(as_of_date)
            claims = np.array([balances.get(pid, 0.0) for pid in ids])
            raw[:, _ROC] = _pro_rata_fill(claims, remaining)
            remaining = max(0.0, remaining - raw[:, _ROC].sum())
            logger.debug("Tier 1 allocated %.2f, remaining %.2f", raw[:, _ROC].sum(), remaining)

        # Tier 2: Preferred Return
        if self.config.preferred_return_enabled and remaining > 0:
            outstanding = self.accrual.outstanding(as_of_date, ids)
            claims = np.array([outstanding[pid] for pid in ids])
            raw[:, _PREF] = _pro_rata_fill(claims, remaining)
            remaining = max(0.0, remaining - raw[:, _PREF].sum())
            logger.debug("Tier 2 allocated %.2f, remaining %.2f", raw[:, _PREF].sum(), remaining)

        # Tier 3: GP Catch-up
        if self.config.catchup_enabled and remaining > 0:
            if not gp_mask.any():
                logger.warning("Catch-up enabled but no active General Partner; tier 3 skipped")
            else:
                catchup = min(
                    self._catchup_amount(as_of_date, raw[:, _PREF], gp_mask), remaining
                )
                if catchup > 0:
                    gp_ownership = np.array(
                        [p.ownership_percent for p, is_gp in zip(eligible, gp_mask) if is_gp]
                    )
                    split = _weights(gp_ownership)
                    if split is None:
                        split = np.full(gp_ownership.shape, 1.0 / len(gp_ownership))
                    raw[gp_mask, _CATCHUP] = catchup * split
                    remaining = max(0.0, remaining - catchup)
                logger.debug("Tier 3 allocated %.2f, remaining %.2f", catchup, remaining)

        # Tier 4: Residual Split
        if remaining > 0:
            raw[:, _RESIDUAL] = remaining * self._residual_weights(eligible, gp_mask)
            logger.debug("Tier 4 allocated %.2f", remaining)

        rounded, target = self._round(raw, amount)
        return AllocationResult(
            as_of=as_of_date,
            total_amount=float(target),
            partner_distributions=self._partner_lines(eligible, rounded, target, as_of_date),
            tiers=self._describe_tiers(rounded),
        )

    def _catchup_amount(
        self, as_of: object, preferred: np.ndarray, gp_mask: np.ndarray
    ) -> float:
        """
        Catch-up needed for the GPs' cumulative tier-2 + tier-3 profit to reach
        the promote percentage of cumulative profit, counting this distribution's
        preferred return.
        """
        paid = self.ledger.paid_by_tier(as_of)
        gp_ids = {p.id for p in self.partners if p.is_general_partner}
        gp_rows = paid.index.isin(list(gp_ids))

        prior_gp_profit = float(paid.loc[gp_rows, ["preferred_return", "catchup"]].to_numpy().sum())
        prior_profit = float(
            paid[["preferred_return", "catchup", "residual"]].to_numpy().sum()
        )

        gp_profit = prior_gp_profit + float(preferred[gp_mask].sum())
        total_profit = prior_profit + float(preferred.sum())
        return solve_catchup(gp_profit, total_profit, self.config.gp_promote_percent)

    def _residual_weights(self, eligible: List[Partner], gp_mask: np.ndarray) -> np.ndarray:
        ownership = np.array([p.ownership_percent for p in eligible], dtype=float)
        promote_split = (
            not self.config.split_by_ownership and gp_mask.any() and not gp_mask.all()
        )

        if not promote_split:
            if not self.config.split_by_ownership:
                logger.debug("Promote split needs GP and non-GP partners; splitting by ownership")
            weights = _weights(ownership)
            if weights is None:
                raise InvalidStateError(
                    "Active partners hold no ownership; residual profit cannot be split",
                    details={"tier": WaterfallTierEnum.RESIDUAL.value},
                )
            return weights

        promote = self.config.gp_promote_percent
        weights = np.zeros(len(eligible))
        for mask, share in ((gp_mask, promote), (~gp_mask, 1.0 - promote)):
            group = _weights(ownership[mask])
            if group is None:
                group = np.full(int(mask.sum()), 1.0 / int(mask.sum()))
            weights[mask] = share * group
        return weights

    def _round(self, raw: np.ndarray, amount: float) -> Tuple[List[List[Decimal]], Decimal]:
        """
        Round every tier amount half-up to the reporting precision.

        The residual needed to make the rounded amounts sum exactly to the
        total, rounded down to the same precision, goes to the last partner (input order) with a non-zero
        allocation, on that partner's highest non-zero tier.
        """
        quantum = Decimal(1).scaleb(-self.settings.reporting.decimal_precision)

        def to_decimal(value: float) -> Decimal:
            return Decimal(str(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)

        raw = np.clip(raw, 0.0, None)
        rounded = [[to_decimal(v) for v in row] for row in raw]
        # The payout never exceeds the cash supplied
        target = Decimal(str(float(amount))).quantize(quantum, rounding=ROUND_DOWN)
        residual = target - sum((sum(row) for row in rounded), Decimal(0))

        if residual:
            for i in reversed(range(len(rounded))):
                cells = [
                    j for j in reversed(range(4))
                    if raw[i][j] > 0 and rounded[i][j] + residual >= 0
                ]
                if cells:
                    rounded[i][cells[0]] += residual
                    logger.debug("Assigned rounding residual %s to row %d tier %d", residual, i, cells[0] + 1)
                    break
        return rounded, target

    def _partner_lines(
        self,
        eligible: List[Partner],
        rounded: List[List[Decimal]],
        target: Decimal,
        as_of: object,
    ) -> List[PartnerDistribution]:
        contributed = self.ledger.contributed_capital(as_of)
        lines = []
        for partner, row in zip(eligible, rounded):
            total = float(sum(row, Decimal(0)))
            capital = contributed.get(partner.id, 0.0)
            lines.append(
                PartnerDistribution(
                    partner_id=partner.id,
                    partner_name=partner.name,
                    return_of_capital=float(row[_ROC]),
                    preferred_return=float(row[_PREF]),
                    catchup=float(row[_CATCHUP]),
                    remaining_profit=float(row[_RESIDUAL]),
                    percent_of_total=total / float(target) if target > 0 else 0.0,
                    roi=FinancialCalculations.calculate_roi(capital, total),
                    moic=FinancialCalculations.calculate_moic(capital, total),
                )
            )
        return lines

    def _describe_tiers(self, rounded: List[List[Decimal]]) -> List[WaterfallTier]:
        config = self.config
        totals = [float(sum((row[j] for row in rounded), Decimal(0))) for j in range(4)]
        promote = f"{config.gp_promote_percent:.0%}"

        def notes(enabled: bool, text: str) -> str:
            return text if enabled else "Disabled"

        return [
            WaterfallTier(
                tier_number=WaterfallTierEnum.RETURN_OF_CAPITAL,
                tier_name="Return of Capital",
                description="100% to partners pro-rata to unreturned capital",
                amount=totals[_ROC],
                notes=notes(config.return_of_capital_enabled, "Return original investment"),
            ),
            WaterfallTier(
                tier_number=WaterfallTierEnum.PREFERRED_RETURN,
                tier_name="Preferred Return",
                description=f"{config.preferred_return_rate:.1%} annually on unreturned capital",
                amount=totals[_PREF],
                notes=notes(config.preferred_return_enabled, "Preferred return on capital"),
            ),
            WaterfallTier(
                tier_number=WaterfallTierEnum.CATCHUP,
                tier_name="GP Catch-up",
                description=f"GP catch-up to {promote} of cumulative profit",
                amount=totals[_CATCHUP],
                notes=notes(config.catchup_enabled, "GP catch-up to promote level"),
            ),
            WaterfallTier(
                tier_number=WaterfallTierEnum.RESIDUAL,
                tier_name="Remaining Profit",
                description=(
                    "Split by ownership percentage"
                    if config.split_by_ownership
                    else f"{promote} promote to GP, remainder by ownership"
                ),
                amount=totals[_RESIDUAL],
                notes="Pro-rata distribution" if config.split_by_ownership else "Promote split",
            ),
        ]


def allocate(
    total_amount: float,
    as_of: object,
    partners: Sequence[Partner],
    ledger: CapitalLedger,
    accrual: Optional[PreferredReturnAccrual] = None,
    config: Optional[WaterfallConfig] = None,
    settings: Optional[GlobalSettings] = None,
) -> List[PartnerDistribution]:
    """
    Allocate a distribution and return only the per-partner breakdown.

    Convenience wrapper over ``DistributionCalculator.allocate``.
    """
    config = config or (accrual.config if accrual is not None else WaterfallConfig())
    calculator = DistributionCalculator(
        partners=partners,
        ledger=ledger,
        config=config,
        settings=settings or GlobalSettings(),
        accrual=accrual,
    )
    return calculator.allocate(total_amount, as_of).partner_distributions


def build_distribution(
    result: AllocationResult,
    distribution_type: DistributionType = DistributionType.QUARTERLY_CASH_FLOW,
    projected: bool = False,
    notes: str = "",
) -> Distribution:
    """
    Turn an allocation into a Distribution record for the caller to append.

    Projected distributions are hypothetical and never move the ledger;
    realized ones are recorded as completed.
    """
    return Distribution(
        distribution_date=result.as_of,
        type=distribution_type,
        total_amount=result.total_amount,
        status=DistributionStatus.PROJECTED if projected else DistributionStatus.COMPLETED,
        is_projected=projected,
        notes=notes,
        partner_distributions=result.partner_distributions,
    )


__all__ = [
    "DistributionCalculator",
    "allocate",
    "build_distribution",
    "solve_catchup",
]
