# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest
from pydantic import ValidationError

from partnerflow.core.primitives import (
    CalculationSettings,
    GlobalSettings,
    IRRSettings,
    ReportingSettings,
    ValidationSettings,
)


def test_global_settings_default_instantiation():
    """Test that GlobalSettings can be instantiated with default values."""
    settings = GlobalSettings()
    assert isinstance(settings.reporting, ReportingSettings)
    assert settings.reporting.decimal_precision == 2
    assert settings.calculation.day_count_basis == 365
    assert settings.calculation.trailing_months == 12
    assert settings.calculation.fail_on_error is False
    assert settings.validation.ownership_tolerance == 0.01
    assert settings.validation.strict_ownership is False


def test_irr_settings_defaults():
    irr = IRRSettings()
    assert irr.initial_guess == 0.1
    assert irr.max_iterations == 100
    assert irr.npv_tolerance == 1e-6
    assert (irr.lower_bound, irr.upper_bound) == (-0.999, 10.0)


def test_global_settings_custom_instantiation():
    """Nested groups accept plain dicts."""
    settings = GlobalSettings(
        reporting=ReportingSettings(decimal_precision=0),
        calculation={"trailing_months": 6, "fail_on_error": True},
    )
    assert settings.reporting.decimal_precision == 0
    assert settings.calculation.trailing_months == 6
    assert settings.calculation.fail_on_error is True


def test_irr_settings_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        IRRSettings(lower_bound=0.5, upper_bound=0.1, initial_guess=0.2)


def test_irr_settings_rejects_guess_outside_bounds():
    with pytest.raises(ValidationError):
        IRRSettings(initial_guess=20.0)


def test_irr_settings_lower_bound_above_minus_one():
    with pytest.raises(ValidationError):
        IRRSettings(lower_bound=-1.0)


def test_calculation_settings_day_count_must_be_positive():
    with pytest.raises(ValidationError):
        CalculationSettings(day_count_basis=0)


@pytest.mark.parametrize(
    "model, field",
    [
        (CalculationSettings, "trailing_months"),
        (IRRSettings, "max_iterations"),
        (IRRSettings, "bracket_max_iterations"),
        (IRRSettings, "bracket_steps"),
    ],
)
def test_counts_must_be_positive(model, field):
    with pytest.raises(ValidationError):
        model(**{field: 0})


def test_ownership_tolerance_range():
    with pytest.raises(ValidationError):
        ValidationSettings(ownership_tolerance=5.0)


def test_settings_are_immutable():
    settings = GlobalSettings()
    with pytest.raises(ValidationError):
        settings.reporting.decimal_precision = 4
