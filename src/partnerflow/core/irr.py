# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Internal rate of return solver for irregular (dated) cash flows.

The solver finds the rate zeroing

    XNPV(rate) = sum(amount_i / (1 + rate) ** (days_i / 365))

where ``days_i`` is measured from the earliest cash flow. Newton-Raphson
with an analytic derivative (``scipy.optimize.newton``) runs first. When it
does not converge or lands outside the sane rate interval, the solver scans
that interval for a sign change and runs ``scipy.optimize.brentq`` on the
bracket. Amounts are normalized by the largest absolute flow so that the
convergence tolerance does not depend on deal size.

Example:
    ```python
    from datetime import date
    from partnerflow.core.irr import solve_irr

    rate = solve_irr([(date(2023, 1, 1), -1000.0), (date(2024, 1, 1), 1200.0)])
    print(f"IRR: {rate:.2%}")  # IRR: 20.00%
    ```
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from pyxirr import xnpv
from scipy.optimize import brentq, newton

from .exceptions import InvalidInputError, NoConvergenceError, NoSolutionError
from .primitives import IRRSettings, coerce_amount, coerce_date

if TYPE_CHECKING:
    from ..partnership.entities import CashFlowEntry

logger = logging.getLogger(__name__)

XNPV_DAY_COUNT = 365

CashFlowInput = Union[Tuple[Union[date, str], float], "CashFlowEntry"]


def normalize_cash_flows(
    cash_flows: Iterable[CashFlowInput],
) -> Tuple[List[date], np.ndarray]:
    """
    Convert ``(date, amount)`` pairs or CashFlowEntry records to sorted arrays.

    Flows on the same date are kept as separate entries; ordering among them
    does not affect XNPV.

    Raises:
        InvalidInputError: For malformed dates or non-numeric amounts
    """
    pairs = []
    for item in cash_flows:
        if isinstance(item, (tuple, list)):
            if len(item) != 2:
                raise InvalidInputError(
                    "Cash flows must be (date, amount) pairs", field="cash_flows", value=item
                )
            raw_date, raw_amount = item
        else:
            raw_date, raw_amount = item.date, item.amount
        pairs.append((coerce_date(raw_date, "cash_flows.date"), coerce_amount(raw_amount)))

    pairs.sort(key=lambda pair: pair[0])
    dates = [pair[0] for pair in pairs]
    amounts = np.array([pair[1] for pair in pairs], dtype=float)
    return dates, amounts


@dataclass(frozen=True)
class IRRSolver:
    """
    Newton-Raphson IRR solver with a bracketed Brent fallback.

    Attributes:
        settings: Iteration limits, tolerances and the sane rate interval
    """

    settings: IRRSettings = field(default_factory=IRRSettings)

    def solve(
        self, cash_flows: Iterable[CashFlowInput], guess: Optional[float] = None
    ) -> float:
        """
        Solve for the annualized IRR of a dated cash-flow series.

        Args:
            cash_flows: ``(date, amount)`` pairs or CashFlowEntry records
                (negative = capital out, positive = capital back)
            guess: Optional Newton seed; defaults to ``settings.initial_guess``

        Returns:
            IRR as decimal (e.g., 0.20 for 20%)

        Raises:
            NoSolutionError: Fewer than one negative and one positive flow
            NoConvergenceError: Newton failed and no root could be bracketed
        """
        dates, amounts = normalize_cash_flows(cash_flows)

        if not ((amounts < 0).any() and (amounts > 0).any()):
            raise NoSolutionError(
                "IRR requires at least one negative and one positive cash flow",
                details={
                    "flow_count": len(amounts),
                    "total_amount": float(amounts.sum()) if len(amounts) else 0.0,
                },
            )

        scale = float(np.abs(amounts).max())
        normalized = amounts / scale
        years = np.array([(d - dates[0]).days for d in dates], dtype=float) / XNPV_DAY_COUNT

        seed = self.settings.initial_guess if guess is None else float(guess)
        rate = self._newton(dates, normalized, years, seed)
        if rate is None:
            logger.debug("Newton-Raphson did not converge from %.4f; searching a bracket", seed)
            rate = self._bracketed_search(dates, normalized, years)
        return rate

    def xnpv(self, rate: float, dates: Sequence[date], amounts: Sequence[float]) -> float:
        """XNPV on the 365-day convention, anchored at the first date; NaN on overflow."""
        if rate <= -1.0:
            return math.nan
        value = xnpv(rate, list(dates), [float(a) for a in amounts])
        return math.nan if value is None else float(value)

    @staticmethod
    def _xnpv_derivative(rate: float, amounts: np.ndarray, years: np.ndarray) -> float:
        # d/dr [a * (1+r)^-t] = -t * a * (1+r)^-(t+1)
        return float(np.sum(-years * amounts * np.power(1.0 + rate, -years - 1.0)))

    def _newton(
        self,
        dates: Sequence[date],
        amounts: np.ndarray,
        years: np.ndarray,
        seed: float,
    ) -> Optional[float]:
        s = self.settings
        with warnings.catch_warnings(), np.errstate(all="ignore"):
            # Non-convergence is reported through RootResults below
            warnings.simplefilter("ignore", RuntimeWarning)
            rate, result = newton(
                lambda r: self.xnpv(r, dates, amounts),
                seed,
                fprime=lambda r: self._xnpv_derivative(r, amounts, years),
                tol=s.rate_tolerance,
                maxiter=s.max_iterations,
                full_output=True,
                disp=False,
            )
        rate = float(rate)
        if not result.converged or not math.isfinite(rate):
            return None
        if not s.lower_bound <= rate <= s.upper_bound:
            return None
        if abs(self.xnpv(rate, dates, amounts)) >= s.npv_tolerance:
            return None
        logger.debug("Newton converged in %d iterations", result.iterations)
        return rate

    def _bracketed_search(
        self, dates: Sequence[date], amounts: np.ndarray, years: np.ndarray
    ) -> float:
        s = self.settings
        grid = np.linspace(s.lower_bound, s.upper_bound, s.bracket_steps + 1)
        values = [self.xnpv(float(r), dates, amounts) for r in grid]

        bracket = None
        for i in range(len(grid) - 1):
            low_value, high_value = values[i], values[i + 1]
            if not (math.isfinite(low_value) and math.isfinite(high_value)):
                continue
            if low_value == 0.0:
                return float(grid[i])
            if low_value * high_value < 0:
                bracket = (float(grid[i]), float(grid[i + 1]))
                break

        if bracket is None:
            raise NoConvergenceError(
                "Could not bracket an IRR within the rate bounds",
                details={"lower_bound": s.lower_bound, "upper_bound": s.upper_bound},
            )

        low, high = bracket
        rate, result = brentq(
            lambda r: self.xnpv(r, dates, amounts),
            low,
            high,
            xtol=s.rate_tolerance,
            maxiter=s.bracket_max_iterations,
            full_output=True,
            disp=False,
        )
        if not result.converged:
            raise NoConvergenceError(
                "Bracketed IRR search did not converge",
                details={"low": low, "high": high, "iterations": result.iterations},
            )
        return float(rate)


def solve_irr(
    cash_flows: Iterable[CashFlowInput],
    guess: Optional[float] = None,
    settings: Optional[IRRSettings] = None,
) -> float:
    """Solve for the IRR of ``cash_flows`` with default (or given) solver settings."""
    return IRRSolver(settings or IRRSettings()).solve(cash_flows, guess=guess)


__all__ = ["IRRSolver", "normalize_cash_flows", "solve_irr", "XNPV_DAY_COUNT"]
