"""
scoring/__init__.py

Public API for the scoring sub-package.
"""

from .features import (
    ContentFeatureExtractor,
    FeatureExtractor,
    FeatureVector,
    SeededRandomFeatureExtractor,
    SensitivityTier,
    build_feature_extractor,
)
from .risk import RiskScorer, RiskWeights
from .trainer import ConfusionMatrix, ModelState, ThreatModel

__all__ = [
    "ConfusionMatrix",
    "ContentFeatureExtractor",
    "FeatureExtractor",
    "FeatureVector",
    "ModelState",
    "RiskScorer",
    "RiskWeights",
    "SeededRandomFeatureExtractor",
    "SensitivityTier",
    "ThreatModel",
    "build_feature_extractor",
]
