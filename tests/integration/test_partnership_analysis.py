# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
End-to-end analysis of a partnership snapshot.

Builds the snapshot from application-shaped (camelCase) records, allocates
a distribution, records it and re-analyzes a year later.
"""

import logging
from datetime import date

import pytest

from partnerflow.core.exceptions import InvalidInputError, InvalidStateError
from partnerflow.core.ledger import CapitalLedger
from partnerflow.core.primitives import DistributionType, WaterfallTierEnum
from partnerflow.partnership import PartnershipData, analyze, build_distribution


@pytest.fixture
def records():
    return {
        "propertyId": "maple-court",
        "partners": [
            {
                "id": "gp",
                "name": "Maple Sponsor",
                "ownershipPercent": 10,
                "initialCapital": 10_000,
                "role": "General Partner",
                "status": "active",
                "joinDate": "2025-01-01",
            },
            {
                "id": "lp",
                "name": "Harbor Capital",
                "ownershipPercent": 90,
                "initialCapital": 90_000,
                "role": "Limited Partner",
                "status": "active",
                "joinDate": "2025-01-01",
            },
        ],
        "capitalContributions": [
            {
                "id": "c1",
                "partnerId": "gp",
                "partnerName": "Maple Sponsor",
                "contributionDate": "2025-01-01",
                "type": "Initial Capital",
                "amount": 10_000,
                "status": "received",
            },
            {
                "id": "c2",
                "partnerId": "lp",
                "partnerName": "Harbor Capital",
                "contributionDate": "2025-01-01",
                "type": "Initial Capital",
                "amount": 90_000,
                "status": "verified",
            },
            {
                "id": "c3",
                "partnerId": "lp",
                "partnerName": "Harbor Capital",
                "contributionDate": "2025-06-01",
                "type": "Additional Capital",
                "amount": 50_000,
                "status": "pending",
            },
        ],
        "waterfallConfig": {
            "tier1_returnOfCapital": True,
            "tier2_preferredReturnRate": 0.08,
            "tier2_preferredReturnEnabled": True,
            "tier3_catchupEnabled": True,
            "tier3_gpPromotePercent": 0.20,
            "tier4_splitByOwnership": True,
            "distributionFrequency": "annually",
        },
        "distributions": [],
        "milestones": [
            {
                "id": "m1",
                "milestoneName": "Certificate of occupancy",
                "type": "Construction",
                "description": "",
                "targetDate": "2025-09-01",
                "actualDate": "",
                "isCompleted": False,
                "financialImpact": 0,
                "notes": "",
            }
        ],
        "cashFlowEntries": [],
        "lastUpdated": "2025-12-31T00:00:00Z",
    }


@pytest.fixture
def data(records) -> PartnershipData:
    return PartnershipData.model_validate(records)


class TestFirstDistribution:
    def test_allocation(self, data):
        results = analyze(data, 118_000, "2026-01-01")

        gp_line = results.allocation.for_partner("gp")
        lp_line = results.allocation.for_partner("lp")
        assert gp_line.total_distribution == pytest.approx(12_700)
        assert lp_line.total_distribution == pytest.approx(105_300)
        assert results.allocation.total_allocated == pytest.approx(118_000)

        totals = results.allocation.tier_totals
        assert totals[WaterfallTierEnum.RETURN_OF_CAPITAL] == pytest.approx(100_000)
        assert totals[WaterfallTierEnum.PREFERRED_RETURN] == pytest.approx(8_000)
        assert totals[WaterfallTierEnum.CATCHUP] == pytest.approx(1_000)
        assert totals[WaterfallTierEnum.RESIDUAL] == pytest.approx(9_000)

    def test_performance_before_recording(self, data):
        """The pending distribution is not part of the history yet."""
        results = analyze(data, 118_000, "2026-01-01")
        frame = results.performance_frame()
        assert frame.loc["lp", "total_contributions"] == pytest.approx(90_000)
        assert frame.loc["lp", "total_distributions"] == 0.0
        assert frame.loc["lp", "current_equity"] == pytest.approx(90_000 + 7_200)
        assert results.summary.average_irr is None
        assert results.summary.ownership.is_valid

    def test_idempotent(self, data):
        assert analyze(data, 118_000, "2026-01-01") == analyze(data, 118_000, date(2026, 1, 1))

    def test_records_out(self, data):
        results = analyze(data, 118_000, "2026-01-01")
        record = results.partner_distributions[0].to_record()
        assert record["partnerId"] == "gp"
        assert record["totalDistribution"] == pytest.approx(12_700)
        assert record["catchup"] == pytest.approx(1_000)

    def test_logs_run(self, data, caplog):
        with caplog.at_level(logging.INFO, logger="partnerflow"):
            analyze(data, 118_000, "2026-01-01")
        assert "Analyzing partnership maple-court" in caplog.text


class TestRecordedHistory:
    @pytest.fixture
    def after_first(self, data):
        first = analyze(data, 118_000, "2026-01-01")
        distribution = build_distribution(
            first.allocation, distribution_type=DistributionType.ANNUAL_DISTRIBUTION
        )
        return data.model_copy(update={"distributions": [distribution]})

    def test_performance_after_recording(self, after_first):
        results = analyze(after_first, 0, "2026-01-01")
        by_id = {p.partner_id: p for p in results.performance}

        assert by_id["gp"].irr == pytest.approx(0.27, abs=1e-4)
        assert by_id["lp"].irr == pytest.approx(0.17, abs=1e-4)
        assert by_id["lp"].moic == pytest.approx(105_300 / 90_000)
        assert by_id["gp"].current_equity == pytest.approx(0.0, abs=1e-6)
        assert by_id["gp"].holding_period_months == 12
        assert results.summary.net_cash_flow == pytest.approx(18_000)

    def test_capital_is_fully_returned(self, after_first):
        ledger = CapitalLedger(
            after_first.partners,
            after_first.capital_contributions,
            after_first.distributions,
        )
        assert ledger.unreturned_capital("2026-01-01") == pytest.approx({"gp": 0.0, "lp": 0.0})

    def test_second_distribution_keeps_promote_target(self, after_first):
        second = analyze(after_first, 20_000, "2027-01-01")
        allocation = second.allocation
        assert allocation.total_allocated == pytest.approx(20_000)
        # Capital returned and pref paid: nothing in tiers 1 and 2
        assert allocation.tier_totals[WaterfallTierEnum.RETURN_OF_CAPITAL] == 0
        assert allocation.tier_totals[WaterfallTierEnum.PREFERRED_RETURN] == 0

        recorded = after_first.model_copy(
            update={"distributions": after_first.distributions + [build_distribution(allocation)]}
        )
        paid = CapitalLedger(
            recorded.partners, recorded.capital_contributions, recorded.distributions
        ).paid_by_tier()
        gp_profit = paid.loc["gp", ["preferred_return", "catchup"]].sum()
        profit_through_catchup = (
            paid[["preferred_return", "catchup"]].to_numpy().sum()
            + 9_000  # first distribution's residual
        )
        assert gp_profit / profit_through_catchup == pytest.approx(0.20, abs=1e-6)


class TestInvalidRequests:
    def test_negative_amount(self, data):
        with pytest.raises(InvalidInputError):
            analyze(data, -1, "2026-01-01")

    def test_no_partners(self):
        with pytest.raises(InvalidStateError):
            analyze(PartnershipData(), 1_000, "2026-01-01")
