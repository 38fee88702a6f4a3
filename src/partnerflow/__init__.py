# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnerflow - Waterfall Distribution & Partner Performance Engine

Allocates distributable cash across the partners of a real estate
partnership through a four-tier waterfall and reports each partner's
returns from the capital history.

Key Entry Points:
- partnerflow.partnership.analyze() - Allocation plus performance for a snapshot
- partnerflow.partnership.DistributionCalculator - The waterfall itself
- partnerflow.core.solve_irr() - IRR of dated cash flows

Example Usage:
    ```python
    from partnerflow.partnership import PartnershipData, analyze

    data = PartnershipData.model_validate(records)
    results = analyze(data, total_amount=50_000, as_of="2025-12-31")
    for line in results.partner_distributions:
        print(line.partner_name, line.total_distribution)
    ```
"""

import importlib
import logging

# Libraries add a NullHandler so applications that don't configure logging
# see no "No handlers could be found" warnings.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "core",
    "partnership",
]


_LAZY_MODULES = {
    "core": "partnerflow.core",
    "partnership": "partnerflow.partnership",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'partnerflow' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
