# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for core investment metrics. These functions are
pure (math-only) and independent of the ledger; the performance aggregator
and the waterfall delegate to these to ensure a single source of truth.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .irr import CashFlowInput, IRRSolver, normalize_cash_flows
from .primitives import IRRSettings


class FinancialCalculations:
    """
    Pure mathematical functions for partner return metrics.

    Ratios against zero contributed capital report 0.0 rather than raising,
    matching how the dashboard presents a partner that has not yet funded.
    """

    @staticmethod
    def calculate_irr(
        cash_flows: Iterable[CashFlowInput],
        settings: Optional[IRRSettings] = None,
        guess: Optional[float] = None,
    ) -> float:
        """
        Calculate the Internal Rate of Return of dated cash flows.

        Args:
            cash_flows: ``(date, amount)`` pairs or CashFlowEntry records
                       Negative values = capital contributed
                       Positive values = capital returned
            settings: Optional solver settings
            guess: Optional Newton seed (re-seed to retry a failed solve)

        Returns:
            IRR as decimal (e.g., 0.15 for 15%)

        Raises:
            NoSolutionError: All flows share one sign
            NoConvergenceError: No root found within the rate bounds

        Example:
            ```python
            flows = [("2025-01-01", -1000), ("2026-01-01", 1150)]
            irr = FinancialCalculations.calculate_irr(flows)
            print(f"IRR: {irr:.2%}")  # IRR: 15.00%
            ```
        """
        return IRRSolver(settings or IRRSettings()).solve(cash_flows, guess=guess)

    @staticmethod
    def calculate_npv(cash_flows: Iterable[CashFlowInput], discount_rate: float) -> float:
        """
        Calculate XNPV at ``discount_rate`` using PyXIRR.

        Returns 0.0 for an empty series.
        """
        dates, amounts = normalize_cash_flows(cash_flows)
        if not dates:
            return 0.0
        return IRRSolver().xnpv(discount_rate, dates, amounts)

    @staticmethod
    def calculate_roi(total_contributions: float, total_distributions: float) -> float:
        """
        Return on investment: (distributions - contributions) / contributions.

        Example:
            ```python
            FinancialCalculations.calculate_roi(100_000, 130_000)  # 0.30
            ```
        """
        if total_contributions <= 0:
            return 0.0
        return (total_distributions - total_contributions) / total_contributions

    @staticmethod
    def calculate_moic(total_contributions: float, total_distributions: float) -> float:
        """Multiple on invested capital: distributions / contributions."""
        if total_contributions <= 0:
            return 0.0
        return total_distributions / total_contributions

    @staticmethod
    def calculate_cash_on_cash(
        period_distributions: float, total_contributions: float
    ) -> float:
        """Distributions received in a period relative to contributed capital."""
        if total_contributions <= 0:
            return 0.0
        return period_distributions / total_contributions

    @staticmethod
    def calculate_annualized_return(roi: float, holding_period_months: float) -> float:
        """
        Annualize a cumulative ROI over the holding period.

        (1 + roi) ** (12 / months) - 1; a zero-length holding period yields
        0.0 instead of dividing by zero.
        """
        if holding_period_months <= 0:
            return 0.0
        growth = 1.0 + roi
        if growth <= 0:
            # Total loss of capital
            return -1.0
        return growth ** (12.0 / holding_period_months) - 1.0
