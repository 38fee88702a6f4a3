# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class PartnerRole(str, Enum):
    """
    Role of a partner within the partnership.

    Only GENERAL_PARTNER is promote-designated: it receives the GP catch-up
    and, under a promote split, the promote share of residual profit.
    """

    GENERAL_PARTNER = "General Partner"
    LIMITED_PARTNER = "Limited Partner"
    OPERATING_PARTNER = "Operating Partner"
    INVESTOR = "Investor"


class PartnerStatus(str, Enum):
    """Participation status; only ACTIVE partners take part in new distributions."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXITED = "exited"


class ContributionType(str, Enum):
    INITIAL_CAPITAL = "Initial Capital"
    ADDITIONAL_CAPITAL = "Additional Capital"
    LOAN = "Loan"
    IN_KIND = "In-Kind"
    SWEAT_EQUITY = "Sweat Equity"


class ContributionStatus(str, Enum):
    """
    Lifecycle of a capital contribution.

    Attributes:
        PENDING: Promised but not yet received (does not affect basis)
        VERIFIED: Confirmed by the sponsor (counts toward basis)
        RECEIVED: Funds in hand (counts toward basis)
        REJECTED: Declined or reversed (does not affect basis)
    """

    PENDING = "pending"
    VERIFIED = "verified"
    RECEIVED = "received"
    REJECTED = "rejected"

    @property
    def counts_toward_basis(self) -> bool:
        return self in (ContributionStatus.VERIFIED, ContributionStatus.RECEIVED)


class DistributionType(str, Enum):
    QUARTERLY_CASH_FLOW = "Quarterly Cash Flow"
    ANNUAL_DISTRIBUTION = "Annual Distribution"
    REFINANCE_PROCEEDS = "Refinance Proceeds"
    SALE_PROCEEDS = "Sale Proceeds"
    SPECIAL_DISTRIBUTION = "Special Distribution"


class DistributionStatus(str, Enum):
    PROJECTED = "projected"
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DistributionFrequency(str, Enum):
    """How often distributions are made. Informational; does not change the math."""

    AT_EXIT = "at-exit"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class CompoundingMethod(str, Enum):
    """
    Preferred return accrual policy.

    SIMPLE accrues on the unreturned balance in force during each interval.
    COMPOUND additionally capitalises unpaid accrued preferred return into
    the accrual base each time the unreturned balance changes.
    """

    SIMPLE = "simple"
    COMPOUND = "compound"


class WaterfallTierEnum(int, Enum):
    """Fixed processing order of the distribution waterfall."""

    RETURN_OF_CAPITAL = 1
    PREFERRED_RETURN = 2
    CATCHUP = 3
    RESIDUAL = 4


class LedgerEventKind(str, Enum):
    """
    Kinds of events held by the capital ledger.

    The declaration order is also the same-day processing order:
    contributions land before any same-day return of capital.
    """

    CONTRIBUTION = "contribution"
    RETURN_OF_CAPITAL = "return_of_capital"
    PREFERRED_RETURN = "preferred_return"
    CATCHUP = "catchup"
    RESIDUAL = "residual"

    @property
    def sequence(self) -> int:
        return list(LedgerEventKind).index(self)
