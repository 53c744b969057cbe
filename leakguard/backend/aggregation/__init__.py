"""
aggregation/__init__.py

Public API for the aggregation sub-package.
"""

from .aggregator import Aggregator
from .alerts import build_alerts, severity_for
from .fallback import FallbackSample
from .series import anomaly_distribution, weekly_traffic

__all__ = [
    "Aggregator",
    "FallbackSample",
    "anomaly_distribution",
    "build_alerts",
    "severity_for",
    "weekly_traffic",
]
