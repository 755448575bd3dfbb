"""Single-period revenue growth methods and seasonal monthly distribution."""

from __future__ import annotations

from typing import Sequence

import numpy as np


CONFIDENCE_FACTORS = {"low": 0.8, "medium": 1.0, "high": 1.2}
PERIOD_FACTORS = {"monthly": 1 / 12, "quarterly": 1 / 4, "annual": 1.0}
GROWTH_METHODS = {"linear", "compound", "historical", "custom"}


def projected_revenue(
    base_revenue: float,
    growth_rate_percent: float,
    period_type: str = "annual",
    confidence: str = "medium",
    method: str = "linear",
    historical: Sequence[float] | None = None,
) -> float:
    """Grow ``base_revenue`` over one period using the chosen method.

    ``historical`` holds past growth percentages; recent values weigh more.
    Unknown methods return the base revenue unchanged.
    """
    if confidence not in CONFIDENCE_FACTORS:
        raise ValueError(f"confidence must be one of {sorted(CONFIDENCE_FACTORS)}.")
    factor = CONFIDENCE_FACTORS[confidence]
    rate = float(growth_rate_percent) / 100
    base = float(base_revenue)

    if method == "linear":
        return base * (1 + rate * factor)
    if method == "compound":
        if period_type not in PERIOD_FACTORS:
            raise ValueError(f"period_type must be one of {sorted(PERIOD_FACTORS)}.")
        return base * (1 + rate * factor) ** PERIOD_FACTORS[period_type]
    if method == "historical":
        if not historical:
            return base * (1 + rate * factor)
        values = np.asarray(historical, dtype=float)
        weights = np.arange(1, len(values) + 1, dtype=float)
        weighted_growth = float(np.sum(values * weights) / np.sum(weights))
        return base * (1 + weighted_growth / 100 * factor)
    if method == "custom":
        return base * (1 + rate) * factor
    return base


def monthly_distribution(annual_revenue: float, seasonality_factors: Sequence[float] | None = None) -> np.ndarray:
    """Split annual revenue over 12 months; factors are normalized to sum to 12."""
    if seasonality_factors is not None and len(seasonality_factors) == 12:
        factors = np.asarray(seasonality_factors, dtype=float)
    else:
        factors = np.ones(12, dtype=float)
    factor_sum = float(factors.sum())
    if factor_sum <= 0:
        factors = np.ones(12, dtype=float)
        factor_sum = 12.0
    adjusted = factors * 12 / factor_sum
    return float(annual_revenue) * adjusted / 12
