# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnerflow Core Framework

Foundational building blocks for partnership accounting: primitives, the
capital ledger, the IRR solver, pure return calculations and the
exception hierarchy.
"""

from . import ledger, primitives
from .calculations import FinancialCalculations
from .exceptions import (
    InvalidInputError,
    InvalidStateError,
    NoConvergenceError,
    NoSolutionError,
    PartnerflowError,
)
from .irr import IRRSolver, normalize_cash_flows, solve_irr
from .ledger import CapitalLedger, LedgerEvent

__all__ = [
    # Submodules
    "ledger",
    "primitives",
    # Ledger
    "CapitalLedger",
    "LedgerEvent",
    # Calculations
    "FinancialCalculations",
    "IRRSolver",
    "normalize_cash_flows",
    "solve_irr",
    # Exceptions
    "PartnerflowError",
    "InvalidInputError",
    "InvalidStateError",
    "NoSolutionError",
    "NoConvergenceError",
]
