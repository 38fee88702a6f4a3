# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital ledger: the read model behind every waterfall and performance figure.

The ledger turns the append-only history of capital contributions and
realized distributions into per-partner balances as of any date. It is a
pure derivation: it never allocates, never mutates its inputs and holds no
cache that could drift from the history it was built from.
"""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..exceptions import InvalidStateError
from ..primitives import LedgerEventKind, coerce_date
from .records import LedgerEvent

if TYPE_CHECKING:
    from partnerflow.partnership.entities import (
        CapitalContribution,
        CashFlowEntry,
        Distribution,
        Partner,
    )

logger = logging.getLogger(__name__)

LEDGER_COLUMNS = ["date", "partner_id", "kind", "amount", "source_id", "sequence"]

_TIER_FIELDS = (
    (LedgerEventKind.RETURN_OF_CAPITAL, "return_of_capital"),
    (LedgerEventKind.PREFERRED_RETURN, "preferred_return"),
    (LedgerEventKind.CATCHUP, "catchup"),
    (LedgerEventKind.RESIDUAL, "remaining_profit"),
)


class CapitalLedger:
    """
    Per-partner capital history built from contributions and distributions.

    Only contributions with status verified/received enter the ledger, and
    only realized (non-projected, completed) distributions do. Every query
    takes an ``as_of`` cutoff and includes events dated on that day.

    Args:
        partners: Partners the history may reference
        contributions: Capital contributions in any order
        distributions: Distribution history in any order
        restrict_to_partners: If True, records for other partners are
            skipped instead of rejected (used for single-partner views)

    Raises:
        InvalidStateError: A contribution or distribution line references an
            unknown partner id (unless ``restrict_to_partners``)

    Example:
        ```python
        ledger = CapitalLedger(partners, contributions, distributions)
        balances = ledger.unreturned_capital("2025-06-30")
        ```
    """

    def __init__(
        self,
        partners: Sequence["Partner"],
        contributions: Iterable["CapitalContribution"] = (),
        distributions: Iterable["Distribution"] = (),
        restrict_to_partners: bool = False,
    ):
        self._partner_ids: List[str] = [p.id for p in partners]
        known = set(self._partner_ids)

        events: List[LedgerEvent] = []
        for contribution in contributions:
            if contribution.partner_id not in known:
                if restrict_to_partners:
                    continue
                raise InvalidStateError(
                    "Capital contribution references an unknown partner",
                    details={
                        "partner_id": contribution.partner_id,
                        "contribution_id": contribution.id,
                        "amount": contribution.amount,
                    },
                )
            if not contribution.counts_toward_basis:
                continue
            events.append(
                LedgerEvent(
                    date=contribution.contribution_date,
                    partner_id=contribution.partner_id,
                    kind=LedgerEventKind.CONTRIBUTION,
                    amount=float(contribution.amount),
                    source_id=contribution.id,
                )
            )

        for distribution in distributions:
            if not distribution.is_realized:
                continue
            for line in distribution.partner_distributions:
                if line.partner_id not in known:
                    if restrict_to_partners:
                        continue
                    raise InvalidStateError(
                        "Distribution references an unknown partner",
                        details={
                            "partner_id": line.partner_id,
                            "distribution_id": distribution.id,
                            "amount": line.total_distribution,
                        },
                    )
                for kind, attr in _TIER_FIELDS:
                    amount = float(getattr(line, attr))
                    if amount > 0:
                        events.append(
                            LedgerEvent(
                                date=distribution.distribution_date,
                                partner_id=line.partner_id,
                                kind=kind,
                                amount=amount,
                                source_id=distribution.id,
                            )
                        )

        self._events = tuple(events)
        self._frame = self._build_frame(self._events)
        logger.debug(
            "Built capital ledger: %d partners, %d events", len(known), len(events)
        )

    @staticmethod
    def _build_frame(events: Sequence[LedgerEvent]) -> pd.DataFrame:
        if not events:
            frame = pd.DataFrame(columns=LEDGER_COLUMNS)
            frame["date"] = pd.to_datetime(frame["date"])
            frame["amount"] = frame["amount"].astype(float)
            return frame

        frame = pd.DataFrame(
            {
                "date": pd.to_datetime([e.date for e in events]),
                "partner_id": [e.partner_id for e in events],
                "kind": [e.kind.value for e in events],
                "amount": [e.amount for e in events],
                "source_id": [e.source_id for e in events],
                "sequence": [e.kind.sequence for e in events],
            }
        )
        # Same-day contributions land before same-day returns of capital
        return frame.sort_values(["date", "sequence"], kind="mergesort").reset_index(
            drop=True
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def partner_ids(self) -> List[str]:
        return list(self._partner_ids)

    @property
    def events(self) -> tuple:
        return self._events

    def to_dataframe(self) -> pd.DataFrame:
        """Copy of the ordered event table."""
        return self._frame.copy()

    def _upto(self, as_of: Optional[object]) -> pd.DataFrame:
        if as_of is None:
            return self._frame
        cutoff = pd.Timestamp(coerce_date(as_of, "as_of"))
        return self._frame[self._frame["date"] <= cutoff]

    def _sum_by_partner(self, frame: pd.DataFrame, kinds: Iterable[LedgerEventKind]) -> Dict[str, float]:
        subset = frame[frame["kind"].isin([kind.value for kind in kinds])]
        totals = subset.groupby("partner_id")["amount"].sum()
        return {pid: float(totals.get(pid, 0.0)) for pid in self._partner_ids}

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def contributed_capital(self, as_of: Optional[object] = None) -> Dict[str, float]:
        """Cumulative verified/received contributions per partner."""
        return self._sum_by_partner(self._upto(as_of), [LedgerEventKind.CONTRIBUTION])

    def returned_capital(self, as_of: Optional[object] = None) -> Dict[str, float]:
        """Cumulative realized tier-1 return of capital per partner."""
        return self._sum_by_partner(
            self._upto(as_of), [LedgerEventKind.RETURN_OF_CAPITAL]
        )

    def unreturned_capital(self, as_of: Optional[object] = None) -> Dict[str, float]:
        """
        Unreturned capital per partner as of a date.

        balance = contributions - returned capital, clamped at zero so a
        balance never goes negative and never exceeds contributions.
        """
        contributed = self.contributed_capital(as_of)
        returned = self.returned_capital(as_of)
        return {
            pid: max(0.0, contributed[pid] - returned[pid])
            for pid in self._partner_ids
        }

    def balance_history(self, partner_id: str, as_of: Optional[object] = None) -> pd.Series:
        """
        Unreturned balance after each event date for one partner.

        Returns:
            Series indexed by event date (Timestamp); empty when the partner
            has no capital activity before ``as_of``
        """
        frame = self._upto(as_of)
        basis_kinds = [
            LedgerEventKind.CONTRIBUTION.value,
            LedgerEventKind.RETURN_OF_CAPITAL.value,
        ]
        subset = frame[
            (frame["partner_id"] == partner_id) & (frame["kind"].isin(basis_kinds))
        ]
        if subset.empty:
            return pd.Series(dtype=float, name="unreturned_capital")

        signed = subset["amount"].where(
            subset["kind"] == LedgerEventKind.CONTRIBUTION.value, -subset["amount"]
        )
        history = signed.groupby(subset["date"]).sum().cumsum().clip(lower=0.0)
        history.name = "unreturned_capital"
        return history

    # ------------------------------------------------------------------
    # Distribution history
    # ------------------------------------------------------------------

    def paid_by_tier(self, as_of: Optional[object] = None) -> pd.DataFrame:
        """
        Cumulative realized distributions per partner and tier.

        Returns:
            DataFrame indexed by partner id with one column per distribution
            kind (return_of_capital, preferred_return, catchup, residual)
        """
        frame = self._upto(as_of)
        frame = frame[frame["kind"] != LedgerEventKind.CONTRIBUTION.value]
        columns = [kind.value for kind, _ in _TIER_FIELDS]
        if frame.empty:
            return pd.DataFrame(0.0, index=self._partner_ids, columns=columns)

        table = frame.pivot_table(
            index="partner_id", columns="kind", values="amount", aggfunc="sum"
        )
        return table.reindex(index=self._partner_ids, columns=columns).fillna(0.0)

    def paid_total(
        self, partner_id: str, kind: LedgerEventKind, as_of: Optional[object] = None
    ) -> float:
        frame = self._upto(as_of)
        mask = (frame["partner_id"] == partner_id) & (
            frame["kind"] == LedgerEventKind(kind).value
        )
        return float(frame.loc[mask, "amount"].sum())

    def total_distributed(self, partner_id: str, as_of: Optional[object] = None) -> float:
        """All realized distributions paid to a partner, every tier."""
        frame = self._upto(as_of)
        mask = (frame["partner_id"] == partner_id) & (
            frame["kind"] != LedgerEventKind.CONTRIBUTION.value
        )
        return float(frame.loc[mask, "amount"].sum())

    def distributions_between(
        self, partner_id: str, start: object, end: object
    ) -> float:
        """Realized distributions to a partner dated in (start, end]."""
        start_ts = pd.Timestamp(coerce_date(start, "start"))
        end_ts = pd.Timestamp(coerce_date(end, "end"))
        frame = self._frame
        mask = (
            (frame["partner_id"] == partner_id)
            & (frame["kind"] != LedgerEventKind.CONTRIBUTION.value)
            & (frame["date"] > start_ts)
            & (frame["date"] <= end_ts)
        )
        return float(frame.loc[mask, "amount"].sum())

    def first_contribution_date(self, partner_id: str) -> Optional[datetime.date]:
        frame = self._frame
        mask = (frame["partner_id"] == partner_id) & (
            frame["kind"] == LedgerEventKind.CONTRIBUTION.value
        )
        if not mask.any():
            return None
        return frame.loc[mask, "date"].min().date()

    def derived_cash_flows(
        self, partner_id: str, as_of: Optional[object] = None
    ) -> List["CashFlowEntry"]:
        """
        Partner cash flows implied by the ledger.

        Contributions become negative entries and realized distributions
        positive entries, one per date and direction.
        """
        from partnerflow.partnership.entities import CashFlowEntry

        frame = self._upto(as_of)
        frame = frame[frame["partner_id"] == partner_id]
        if frame.empty:
            return []

        is_contribution = frame["kind"] == LedgerEventKind.CONTRIBUTION.value
        entries = []
        for contributed, direction, label in (
            (True, -1.0, "Capital contribution"),
            (False, 1.0, "Distribution"),
        ):
            subset = frame[is_contribution == contributed]
            for ts, amount in subset.groupby("date")["amount"].sum().items():
                entries.append(
                    CashFlowEntry(
                        partner_id=partner_id,
                        date=ts.date(),
                        amount=direction * float(amount),
                        description=label,
                    )
                )
        entries.sort(key=lambda entry: (entry.date, entry.amount))
        return entries
