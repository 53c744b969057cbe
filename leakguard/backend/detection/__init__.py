"""detection/__init__.py"""
from .classifier import RowClassifier
from .models import ClassificationResult, Feature, RuleResult, ThreatCategory

__all__ = ["RowClassifier", "ClassificationResult", "Feature", "RuleResult", "ThreatCategory"]
