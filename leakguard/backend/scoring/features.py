"""
scoring/features.py

Feature extraction for the risk scorer.

FeatureVector:      the four inputs of the toy linear model
SensitivityTier:    4-level data classification with its numeric level
FeatureExtractor:   interface: (row, headers, classification) → FeatureVector

Two implementations:
  ContentFeatureExtractor:       deterministic, derived from what the rules
                                  matched in the row (default)
  SeededRandomFeatureExtractor:  placeholder pipeline: most features drawn
                                  from a seeded random.Random, unrelated to
                                  row content. Kept for dashboards that want
                                  the historical "noisy" look; reproducible
                                  because the generator is always seeded.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..detection.models import ClassificationResult, ThreatCategory
from ..detection.patterns import PERSONAL_HEADER_RE, is_external_reference


class SensitivityTier(str, Enum):
    PUBLIC              = "Public"
    INTERNAL            = "Internal"
    CONFIDENTIAL        = "Confidential"
    HIGHLY_CONFIDENTIAL = "Highly Confidential"

    @property
    def level(self) -> float:
        return _TIER_LEVELS[self]


_TIER_LEVELS: dict[SensitivityTier, float] = {
    SensitivityTier.PUBLIC:              0.1,
    SensitivityTier.INTERNAL:            0.4,
    SensitivityTier.CONFIDENTIAL:        0.7,
    SensitivityTier.HIGHLY_CONFIDENTIAL: 0.9,
}

_HIGHLY_CONFIDENTIAL_KINDS = frozenset({"credit_card", "ssn", "secret"})

_UNUSUAL_CATEGORIES = frozenset({
    ThreatCategory.UNAUTHORIZED_ACCESS,
    ThreatCategory.DATA_EXFILTRATION,
    ThreatCategory.SUSPICIOUS_FILE_ACCESS,
})


@dataclass(frozen=True, slots=True)
class FeatureVector:
    unusual_activity: bool = False
    data_sensitivity: SensitivityTier = SensitivityTier.PUBLIC
    external_access: bool = False
    phishing_indicators: bool = False


class FeatureExtractor(ABC):
    name: str = ""

    @abstractmethod
    def extract(
        self,
        row: Sequence[str],
        headers: Sequence[str],
        classification: ClassificationResult,
    ) -> FeatureVector:
        ...


class ContentFeatureExtractor(FeatureExtractor):
    """Every feature is a pure function of the row and its rule matches."""

    name = "content"

    def extract(
        self,
        row: Sequence[str],
        headers: Sequence[str],
        classification: ClassificationResult,
    ) -> FeatureVector:
        categories = classification.matched_categories()
        return FeatureVector(
            unusual_activity=bool(categories & _UNUSUAL_CATEGORIES),
            data_sensitivity=self._tier(headers, classification),
            external_access=any(is_external_reference(cell) for cell in row),
            phishing_indicators=ThreatCategory.PHISHING_ATTEMPT in categories,
        )

    @staticmethod
    def _tier(headers: Sequence[str], classification: ClassificationResult) -> SensitivityTier:
        kinds = {
            m.evidence.get("kind")
            for m in classification.matches
            if m.category is ThreatCategory.SENSITIVE_DATA
        }
        if kinds & _HIGHLY_CONFIDENTIAL_KINDS:
            return SensitivityTier.HIGHLY_CONFIDENTIAL
        if "email" in kinds:
            return SensitivityTier.CONFIDENTIAL
        if any(PERSONAL_HEADER_RE.search(h or "") for h in headers):
            return SensitivityTier.INTERNAL
        return SensitivityTier.PUBLIC


class SeededRandomFeatureExtractor(FeatureExtractor):
    """
    Synthetic features: activity, sensitivity and external access are sampled,
    only the phishing flag is taken from the row. Same seed → same sequence.
    """

    name = "seeded_random"

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def reset(self) -> None:
        self._rng = random.Random(self.seed)

    def extract(
        self,
        row: Sequence[str],
        headers: Sequence[str],
        classification: ClassificationResult,
    ) -> FeatureVector:
        return FeatureVector(
            unusual_activity=self._rng.random() > 0.7,
            data_sensitivity=self._rng.choice(list(SensitivityTier)),
            external_access=self._rng.random() > 0.8,
            phishing_indicators=ThreatCategory.PHISHING_ATTEMPT in classification.matched_categories(),
        )


def build_feature_extractor(name: str, seed: int) -> FeatureExtractor:
    if name == ContentFeatureExtractor.name:
        return ContentFeatureExtractor()
    if name == SeededRandomFeatureExtractor.name:
        return SeededRandomFeatureExtractor(seed)
    raise ValueError(f"unknown feature extractor {name!r}")
