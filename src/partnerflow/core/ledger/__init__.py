# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital ledger backend.

Exposes the pandas-backed capital ledger and its event record as the
single source of per-partner basis.
"""

from .ledger import CapitalLedger
from .records import LedgerEvent

__all__ = [
    "CapitalLedger",
    "LedgerEvent",
]
