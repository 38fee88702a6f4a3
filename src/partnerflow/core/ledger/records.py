# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Core record structure for the capital ledger.

Events are immutable dataclasses; the ledger builds its DataFrame directly
from them and never edits an event once recorded.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from partnerflow.core.primitives import LedgerEventKind


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    """
    Immutable record of one capital movement for one partner.

    Attributes:
        date: Event date
        partner_id: Partner the capital belongs to
        kind: Contribution or the waterfall tier a distribution was paid from
        amount: Positive magnitude of the movement
        source_id: Id of the originating contribution or distribution
    """

    date: datetime.date
    partner_id: str
    kind: LedgerEventKind
    amount: float
    source_id: str
