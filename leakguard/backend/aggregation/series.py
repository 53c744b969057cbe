"""
aggregation/series.py

Synthetic chart series for the dashboard.

The traffic series is scaled from the dataset's row count with a weekday /
weekend multiplier and jitter; it is a placeholder, not measured traffic.
Callers pass a seeded random.Random so identical input yields identical
output.
"""

from __future__ import annotations

import math
import random

from ..detection.models import ThreatCategory
from ..models import DistributionSlice, TrafficPoint

WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

WEEKDAY_FACTOR = 1.5
WEEKEND_FACTOR = 0.7

# Chart label → threat category
DISTRIBUTION_LABELS: tuple[tuple[str, ThreatCategory], ...] = (
    ("Unauthorized Access", ThreatCategory.UNAUTHORIZED_ACCESS),
    ("Phishing",            ThreatCategory.PHISHING_ATTEMPT),
    ("Data Exposure",       ThreatCategory.SENSITIVE_DATA),
    ("Data Exfiltration",   ThreatCategory.DATA_EXFILTRATION),
)


def weekly_traffic(row_count: int, rng: random.Random) -> list[TrafficPoint]:
    base = row_count // 10 + 50
    points: list[TrafficPoint] = []
    for index, day in enumerate(WEEKDAYS):
        factor = WEEKDAY_FACTOR if index < 5 else WEEKEND_FACTOR
        traffic = math.floor(base * factor * (1 + rng.random() * 0.5))
        alerts = math.floor((traffic / 20) * (0.5 + rng.random()))
        points.append(TrafficPoint(name=day, traffic=traffic, alerts=alerts))
    return points


def anomaly_distribution(threat_types: dict[str, int]) -> list[DistributionSlice]:
    return [
        DistributionSlice(name=label, value=threat_types.get(category.value, 0))
        for label, category in DISTRIBUTION_LABELS
    ]
