# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnerflow exception hierarchy.

Every error carries a human-readable message plus a ``details`` mapping
(partner id, tier, amount, ...) so callers can diagnose without parsing
the message. Nothing is retried internally; retry policy belongs to the
caller (for example re-seeding the IRR solver with another guess).

Usage:
    from partnerflow.core.exceptions import InvalidInputError

    raise InvalidInputError(
        "Distribution amount cannot be negative", field="total_amount", value=-10
    )
"""

from typing import Any, Dict, Optional


class PartnerflowError(Exception):
    """
    Base exception for all Partnerflow errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "INVALID_INPUT")
        details: Additional context for debugging
    """

    error_code: str = "PARTNERFLOW_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for the calling application."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidInputError(PartnerflowError, ValueError):
    """Raised for negative amounts, malformed dates or an invalid ownership sum."""

    error_code = "INVALID_INPUT"

    def __init__(
        self,
        message: str = "Invalid input",
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details)


class InvalidStateError(PartnerflowError):
    """Raised when the record set cannot support the operation (e.g. no eligible partners)."""

    error_code = "INVALID_STATE"


class NoSolutionError(PartnerflowError):
    """Raised when a cash-flow series cannot have an IRR (all flows share one sign)."""

    error_code = "NO_SOLUTION"


class NoConvergenceError(PartnerflowError):
    """Raised when neither Newton-Raphson nor the bracketed search locates an IRR."""

    error_code = "NO_CONVERGENCE"


__all__ = [
    "PartnerflowError",
    "InvalidInputError",
    "InvalidStateError",
    "NoSolutionError",
    "NoConvergenceError",
]
