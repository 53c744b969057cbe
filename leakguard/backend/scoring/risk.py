"""
scoring/risk.py

Toy linear risk model.

    score = unusual·w_unusual + level(tier)·w_sensitivity
          + external·w_external + phishing·w_phishing

A record is anomalous when score > threshold (strict). A score exactly at
the threshold is NOT anomalous; ThreatModel uses the same comparison.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import settings
from .features import FeatureVector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskWeights:
    unusual_activity: float = 0.3
    data_sensitivity: float = 0.4
    external_access: float = 0.2
    phishing_indicators: float = 0.3


def exceeds(score: float, threshold: float) -> bool:
    """The single threshold comparison used by every model in the package."""
    return score > threshold


class RiskScorer:
    def __init__(
        self,
        weights: RiskWeights | None = None,
        threshold: float | None = None,
    ) -> None:
        self.weights = weights or RiskWeights()
        self.threshold = settings.RISK_THRESHOLD if threshold is None else threshold

    def score(self, features: FeatureVector) -> float:
        w = self.weights
        return (
            float(features.unusual_activity) * w.unusual_activity
            + features.data_sensitivity.level * w.data_sensitivity
            + float(features.external_access) * w.external_access
            + float(features.phishing_indicators) * w.phishing_indicators
        )

    def is_anomalous(self, features: FeatureVector) -> bool:
        return exceeds(self.score(features), self.threshold)

    def __repr__(self) -> str:
        return f"RiskScorer(threshold={self.threshold} weights={self.weights})"
