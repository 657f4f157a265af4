# floodcast/risk.py
import math
from dataclasses import dataclass
from numbers import Real

import numpy as np


class InvalidScore(ValueError):
    """Raised when a risk score is NaN or not a number at all."""


@dataclass(frozen=True)
class RiskTier:
    name: str
    color: str


GREEN = "#22c55e"
YELLOW = "#eab308"
ORANGE = "#f97316"
RED = "#ef4444"
DARK_RED = "#991b1b"

LOW = RiskTier("Low", GREEN)
MODERATE = RiskTier("Moderate", YELLOW)
HIGH = RiskTier("High", ORANGE)
SEVERE = RiskTier("Severe", RED)
CRITICAL = RiskTier("Critical", DARK_RED)


class ThresholdTable:
    """
    Ordered boundaries with one tier per band.
      tiers[0]   : score < boundaries[0]
      tiers[i]   : boundaries[i-1] <= score < boundaries[i]
      tiers[-1]  : score >= boundaries[-1]
    """

    def __init__(self, name, boundaries, tiers):
        boundaries = [float(b) for b in boundaries]
        tiers = list(tiers)
        if len(tiers) != len(boundaries) + 1:
            raise ValueError(
                f"Threshold table '{name}' needs {len(boundaries) + 1} tiers, got {len(tiers)}"
            )
        if any(b2 <= b1 for b1, b2 in zip(boundaries, boundaries[1:])):
            raise ValueError(f"Threshold table '{name}' boundaries must be strictly increasing")
        self.name = name
        self.boundaries = tuple(boundaries)
        self.tiers = tuple(tiers)

    def __repr__(self):
        return f"ThresholdTable({self.name!r}, {list(self.boundaries)})"


# Call sites disagree on boundaries; keep each one as observed.
SCORE_THRESHOLDS = ThresholdTable("score", [5, 10, 15], [LOW, MODERATE, HIGH, SEVERE])
SURFACE_RUNOFF_THRESHOLDS = ThresholdTable("surface_runoff", [10, 20, 30], [LOW, MODERATE, HIGH, SEVERE])
PRECIPITATION_THRESHOLDS = ThresholdTable("precipitation", [30, 45, 65], [LOW, MODERATE, HIGH, CRITICAL])

THRESHOLD_TABLES = {
    SCORE_THRESHOLDS.name: SCORE_THRESHOLDS,
    SURFACE_RUNOFF_THRESHOLDS.name: SURFACE_RUNOFF_THRESHOLDS,
    PRECIPITATION_THRESHOLDS.name: PRECIPITATION_THRESHOLDS,
}

METRIC_THRESHOLDS = {
    "maximum_surface_runoff": SURFACE_RUNOFF_THRESHOLDS,
    "total_precipitation": PRECIPITATION_THRESHOLDS,
}


def thresholds_for(metric: str) -> ThresholdTable:
    return METRIC_THRESHOLDS.get(metric, SCORE_THRESHOLDS)


def _as_score(score) -> float:
    # bool is a Real subclass but never a meaningful score
    if isinstance(score, bool) or not isinstance(score, (Real, np.number)):
        raise InvalidScore(f"Risk score must be numeric, got {type(score).__name__}")
    value = float(score)
    if math.isnan(value):
        raise InvalidScore("Risk score is NaN")
    return value


def classify(score, table: ThresholdTable = SCORE_THRESHOLDS) -> RiskTier:
    """
    Tier of the smallest boundary strictly greater than the score.
    Scores at or above the last boundary get the highest tier; negatives fall in the lowest.
    """
    value = _as_score(score)
    for boundary, tier in zip(table.boundaries, table.tiers):
        if value < boundary:
            return tier
    return table.tiers[-1]


def risk_legend(table: ThresholdTable) -> list:
    rows = []
    bounds = table.boundaries
    for i, tier in enumerate(table.tiers):
        if i == 0:
            rng = f"< {bounds[0]:g}"
        elif i == len(bounds):
            rng = f">= {bounds[-1]:g}"
        else:
            rng = f"{bounds[i - 1]:g} – {bounds[i]:g}"
        rows.append({"Level": tier.name, "Range": rng, "Color": tier.color})
    return rows
