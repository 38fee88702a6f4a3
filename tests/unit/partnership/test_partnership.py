# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the waterfall policy, ownership validation and the
partnership snapshot.
"""

import pytest
from pydantic import ValidationError

from partnerflow.core.primitives import (
    CompoundingMethod,
    DistributionFrequency,
    PartnerStatus,
)
from partnerflow.partnership import (
    PartnershipData,
    WaterfallConfig,
    validate_partnership_ownership,
)
from tests.conftest import make_gp, make_lp


class TestWaterfallConfig:
    def test_defaults(self):
        config = WaterfallConfig()
        assert config.return_of_capital_enabled
        assert config.preferred_return_rate == 0.08
        assert config.gp_promote_percent == 0.20
        assert config.split_by_ownership
        assert config.distribution_frequency == DistributionFrequency.AT_EXIT
        assert config.preferred_return_compounding == CompoundingMethod.SIMPLE

    def test_application_field_names(self):
        config = WaterfallConfig.model_validate(
            {
                "tier1_returnOfCapital": True,
                "tier2_preferredReturnRate": 0.10,
                "tier2_preferredReturnEnabled": True,
                "tier3_catchupEnabled": False,
                "tier3_gpPromotePercent": 0.30,
                "tier4_splitByOwnership": False,
                "distributionFrequency": "quarterly",
            }
        )
        assert config.preferred_return_rate == 0.10
        assert not config.catchup_enabled
        assert config.gp_promote_percent == 0.30
        assert not config.split_by_ownership
        assert config.distribution_frequency == DistributionFrequency.QUARTERLY
        assert config.to_record()["tier3_gpPromotePercent"] == 0.30

    def test_promote_percent_is_a_fraction(self):
        with pytest.raises(ValidationError):
            WaterfallConfig(gp_promote_percent=20)

    def test_zero_rate_does_not_accrue(self):
        assert not WaterfallConfig(preferred_return_rate=0.0).accrues_preferred_return
        assert not WaterfallConfig(preferred_return_enabled=False).accrues_preferred_return

    def test_str(self):
        assert str(WaterfallConfig()) == (
            "Waterfall: ROC -> 8.0% pref -> 20% catch-up -> ownership split"
        )


class TestOwnershipValidation:
    def test_valid(self):
        result = validate_partnership_ownership([make_gp(), make_lp()])
        assert result.is_valid
        assert result.total_ownership == pytest.approx(100)
        assert result.warnings == []

    def test_total_off_by_more_than_tolerance(self):
        result = validate_partnership_ownership([make_gp(ownership=20), make_lp(ownership=79)])
        assert not result.is_valid
        assert "99.00%" in result.errors[0]

    def test_within_tolerance(self):
        result = validate_partnership_ownership(
            [make_gp(ownership=20), make_lp(ownership=79.995)]
        )
        assert result.is_valid

    def test_inactive_partners_do_not_count(self):
        exited = make_lp("Old LP", 30, status=PartnerStatus.EXITED)
        result = validate_partnership_ownership([make_gp(), make_lp(), exited])
        assert result.is_valid
        assert any("Old LP" in warning for warning in result.warnings)

    def test_no_general_partner_warning(self):
        result = validate_partnership_ownership([make_lp("A", 50), make_lp("B", 50)])
        assert result.is_valid
        assert any("General Partner" in warning for warning in result.warnings)

    def test_no_active_partners(self):
        result = validate_partnership_ownership([])
        assert not result.is_valid
        assert result.errors == ["Partnership has no active partners"]

    def test_duplicate_ids(self):
        result = validate_partnership_ownership(
            [make_lp("A", 50, id="x"), make_lp("B", 50, id="x")]
        )
        assert not result.is_valid


class TestPartnershipData:
    def test_duplicate_partner_ids_rejected(self):
        with pytest.raises(ValidationError):
            PartnershipData(partners=[make_lp("A", 50, id="x"), make_lp("B", 50, id="x")])

    def test_groups(self):
        gp, lp = make_gp(), make_lp()
        data = PartnershipData(property_id="prop-1", partners=[gp, lp])
        assert data.gp_partners == [gp]
        assert data.lp_partners == [lp]
        assert data.get_partner(lp.id) == lp
        assert data.get_partner("missing") is None
        assert data.validate_ownership().is_valid
        assert str(data) == "Partnership prop-1: 1 GP(s), 1 other partner(s)"

    def test_application_snapshot_with_milestones(self):
        data = PartnershipData.model_validate(
            {
                "propertyId": "prop-1",
                "partners": [],
                "capitalContributions": [],
                "waterfallConfig": {},
                "distributions": [],
                "milestones": [{"id": "m1", "milestoneName": "Closing", "isCompleted": True}],
                "cashFlowEntries": [],
                "lastUpdated": "2025-12-31T00:00:00Z",
            }
        )
        assert data.property_id == "prop-1"
        assert "milestones" not in data.to_record()

    def test_other_unknown_keys_still_rejected(self):
        with pytest.raises(ValidationError):
            PartnershipData.model_validate({"propertyId": "prop-1", "documents": []})
