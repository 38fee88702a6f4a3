# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field, model_validator

from .model import Model
from .types import FloatBetween0And1, PositiveFloat, PositiveInt, PositiveIntGt0


class ReportingSettings(Model):
    """Settings related to output rounding and display."""

    decimal_precision: PositiveInt = Field(
        default=2, description="Number of decimal places for currency values."
    )


class CalculationSettings(Model):
    """
    Configuration settings for the calculation engine behavior.

    Usage Examples:
        # Default settings (365-day year, 12-month trailing window)
        calc_settings = CalculationSettings()

        # Surface IRR failures instead of reporting an empty IRR
        calc_settings = CalculationSettings(fail_on_error=True)
    """

    day_count_basis: PositiveIntGt0 = Field(
        default=365,
        description="Days per year used to time-weight preferred return accrual.",
    )
    trailing_months: PositiveIntGt0 = Field(
        default=12,
        description="Window (in months) of distributions used for cash-on-cash return.",
    )
    fail_on_error: bool = Field(
        default=False,
        description=(
            "If True, raise metric calculation errors (e.g. IRR with no solution); "
            "otherwise, log a warning and report the metric as unavailable."
        ),
    )


class IRRSettings(Model):
    """
    Solver parameters for the internal rate of return.

    Newton-Raphson runs first from ``initial_guess``; a Brent search over
    [lower_bound, upper_bound] is the fallback.
    """

    initial_guess: float = Field(default=0.1, description="Newton seed rate.")
    max_iterations: PositiveIntGt0 = Field(
        default=100, description="Newton iteration limit."
    )
    npv_tolerance: PositiveFloat = Field(
        default=1e-6,
        description="Converged when |XNPV| divided by the largest cash flow is below this.",
    )
    rate_tolerance: PositiveFloat = Field(
        default=1e-10, description="Converged when the rate step is below this."
    )
    lower_bound: float = Field(default=-0.999, gt=-1.0)
    upper_bound: float = Field(default=10.0)
    bracket_max_iterations: PositiveIntGt0 = Field(default=200)
    bracket_steps: PositiveIntGt0 = Field(
        default=200,
        description="Grid points scanned for a sign change before the Brent search.",
    )

    @model_validator(mode="after")
    def check_bounds(self) -> "IRRSettings":
        """Ensure the search interval is well-formed and contains the seed."""
        if self.upper_bound <= self.lower_bound:
            raise ValueError("upper_bound must be greater than lower_bound")
        if not self.lower_bound <= self.initial_guess <= self.upper_bound:
            raise ValueError("initial_guess must lie within [lower_bound, upper_bound]")
        return self


class ValidationSettings(Model):
    """Settings for partnership-level invariant checks."""

    ownership_tolerance: FloatBetween0And1 = Field(
        default=0.01,
        description="Allowed deviation (in percentage points) from 100% total ownership.",
    )
    strict_ownership: bool = Field(
        default=False,
        description="If True, allocation fails when active ownership does not sum to 100%.",
    )


# --- Main Global Settings Class ---


class GlobalSettings(Model):
    """Global engine settings

    Configures parameters affecting every calculation, grouped by
    functional area.
    """

    reporting: ReportingSettings = Field(default_factory=ReportingSettings)
    calculation: CalculationSettings = Field(default_factory=CalculationSettings)
    irr: IRRSettings = Field(default_factory=IRRSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
