# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable models; derived values are recomputed rather than stored.
    Fields are snake_case in Python and also accept the camelCase names
    used by the surrounding application (``ownershipPercent``,
    ``totalAmount``), so raw records can be validated directly.
    """

    model_config = ConfigDict(
        frozen=True,  # Records are snapshots; corrections arrive as new records
        extra="forbid",  # Catches typos and missing field definitions immediately
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the camelCase, JSON-compatible record shape."""
        return self.model_dump(by_alias=True, mode="json")
