# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Preferred return accrual.

Accrual is time-weighted over the intervals during which each unreturned
balance was in force:

    accrued = sum(balance_i * rate * days_i / 365) - preferred return paid

Under ``CompoundingMethod.COMPOUND`` the unpaid accrual is added to the
accrual base whenever the unreturned balance changes; between balance
changes accrual is always simple. Values keep full float precision; only
allocator output is rounded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ..core.ledger import CapitalLedger
from ..core.primitives import (
    CalculationSettings,
    CompoundingMethod,
    LedgerEventKind,
    coerce_date,
)
from .partnership import WaterfallConfig

logger = logging.getLogger(__name__)


@dataclass
class PreferredReturnAccrual:
    """
    Computes accrued-but-unpaid preferred return from the capital ledger.

    Attributes:
        ledger: Capital ledger providing balance and payment history
        config: Waterfall policy (rate, enablement, compounding)
        settings: Calculation settings (day count basis)
    """

    ledger: CapitalLedger
    config: WaterfallConfig
    settings: CalculationSettings = field(default_factory=CalculationSettings)

    def _intervals(
        self, partner_id: str, as_of: pd.Timestamp
    ) -> List[Tuple[pd.Timestamp, pd.Timestamp, float]]:
        history = self.ledger.balance_history(partner_id, as_of)
        dates = list(history.index)
        intervals = []
        for i, start in enumerate(dates):
            end = dates[i + 1] if i + 1 < len(dates) else as_of
            intervals.append((start, end, float(history.iloc[i])))
        return intervals

    def gross_accrual(self, partner_id: str, as_of: object) -> float:
        """
        Total preferred return earned through ``as_of``, before payments.

        Returns 0.0 when the preferred tier is disabled.
        """
        if not self.config.accrues_preferred_return:
            return 0.0

        cutoff = pd.Timestamp(coerce_date(as_of, "as_of"))
        rate = self.config.preferred_return_rate
        basis = self.settings.day_count_basis
        compound = self.config.preferred_return_compounding == CompoundingMethod.COMPOUND

        accrued = 0.0
        for start, end, balance in self._intervals(partner_id, cutoff):
            days = (end - start).days
            base = balance
            if compound:
                paid = self.ledger.paid_total(
                    partner_id, LedgerEventKind.PREFERRED_RETURN, start
                )
                base += max(0.0, accrued - paid)
            accrued += base * rate * days / basis
        return accrued

    def accrued(self, partner_id: str, as_of: object) -> float:
        """Accrued preferred return not yet paid through realized tier-2 allocations."""
        gross = self.gross_accrual(partner_id, as_of)
        if gross == 0.0:
            return 0.0
        paid = self.ledger.paid_total(
            partner_id, LedgerEventKind.PREFERRED_RETURN, as_of
        )
        return max(0.0, gross - paid)

    def outstanding(
        self, as_of: object, partner_ids: Optional[List[str]] = None
    ) -> Dict[str, float]:
        """Unpaid accrued preferred return per partner."""
        ids = partner_ids if partner_ids is not None else self.ledger.partner_ids
        outstanding = {pid: self.accrued(pid, as_of) for pid in ids}
        logger.debug("Outstanding preferred return as of %s: %s", as_of, outstanding)
        return outstanding
