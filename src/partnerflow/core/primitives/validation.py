# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Boundary coercion helpers.

Operations accept dates as ``datetime.date`` / ``datetime.datetime`` /
ISO-8601 strings and amounts as plain numbers. These helpers normalize
them and raise ``InvalidInputError`` (never a bare ``ValueError``) so the
caller receives the field name and offending value.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse

from ..exceptions import InvalidInputError


def coerce_date(value: Any, field: str = "date") -> date:
    """
    Normalize a date-like value to ``datetime.date``.

    Raises:
        InvalidInputError: If the value is missing or not an ISO-8601 date
            (a trailing time part is accepted, anything else is rejected)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value.strip()).date()
        except ValueError:
            raise InvalidInputError(
                f"Malformed ISO-8601 date for {field}", field=field, value=value
            ) from None
    raise InvalidInputError(f"Missing or unsupported date for {field}", field=field, value=value)


def coerce_amount(
    value: Any, field: str = "amount", allow_negative: bool = True
) -> float:
    """
    Normalize a monetary amount to a finite float.

    Raises:
        InvalidInputError: If the value is not a finite number, or is
            negative when ``allow_negative`` is False
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number", field=field, value=value)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number", field=field, value=value) from None
    if not math.isfinite(amount):
        raise InvalidInputError(f"{field} must be finite", field=field, value=value)
    if not allow_negative and amount < 0:
        raise InvalidInputError(f"{field} cannot be negative", field=field, value=value)
    return amount

