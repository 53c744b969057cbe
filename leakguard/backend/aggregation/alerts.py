"""
aggregation/alerts.py

Dashboard alert cards built from the aggregate counts.

One card per category with a non-zero count, then up to three cards for
unauthorized users and three for phishing URLs. Alert type and the
"Nm ago" label are cosmetic and drawn from the caller's seeded generator.
"""

from __future__ import annotations

import random

from ..detection.models import ThreatCategory
from ..models import DashboardAlert

ALERT_TYPES: tuple[str, ...] = ("network", "database", "file", "user")

MAX_IDENTIFIER_ALERTS = 3
URL_PREVIEW_CHARS = 30

ALERT_TITLES: dict[ThreatCategory, str] = {
    ThreatCategory.UNAUTHORIZED_ACCESS:    "Unauthorized Access Detected",
    ThreatCategory.PHISHING_ATTEMPT:       "Phishing Attempt Identified",
    ThreatCategory.SENSITIVE_DATA:         "Sensitive Data Exposure Risk",
    ThreatCategory.DATA_EXFILTRATION:      "Potential Data Exfiltration",
    ThreatCategory.SUSPICIOUS_FILE_ACCESS: "Suspicious File Access Pattern",
}

ALERT_DESCRIPTIONS: dict[ThreatCategory, str] = {
    ThreatCategory.UNAUTHORIZED_ACCESS:    "Unusual access pattern detected from unverified source",
    ThreatCategory.PHISHING_ATTEMPT:       "Suspicious URL or email pattern identified in communications",
    ThreatCategory.SENSITIVE_DATA:         "Potential exposure of sensitive information detected",
    ThreatCategory.DATA_EXFILTRATION:      "Unusual data transfer pattern suggests possible exfiltration",
    ThreatCategory.SUSPICIOUS_FILE_ACCESS: "Abnormal file access pattern detected in system",
}


def severity_for(category: ThreatCategory) -> str:
    if category in (ThreatCategory.UNAUTHORIZED_ACCESS, ThreatCategory.PHISHING_ATTEMPT):
        return "high"
    if category is ThreatCategory.SENSITIVE_DATA:
        return "medium"
    return "low"


def build_alerts(
    threat_types: dict[str, int],
    unauthorized_users: list[str],
    phishing_attempts: list[str],
    rng: random.Random,
) -> list[DashboardAlert]:
    alerts: list[DashboardAlert] = []

    for category in ThreatCategory:
        if threat_types.get(category.value, 0) <= 0:
            continue
        alerts.append(DashboardAlert(
            type=rng.choice(ALERT_TYPES),
            title=ALERT_TITLES[category],
            description=ALERT_DESCRIPTIONS[category],
            time=f"{rng.randint(1, 60)}m ago",
            severity=severity_for(category),
        ))

    for user in unauthorized_users[:MAX_IDENTIFIER_ALERTS]:
        alerts.append(DashboardAlert(
            type="user",
            title="Unauthorized Access Attempt",
            description=f'User "{user}" attempted to access restricted resources',
            time=f"{rng.randint(1, 30)}m ago",
            severity="high",
        ))

    for url in phishing_attempts[:MAX_IDENTIFIER_ALERTS]:
        preview = url if len(url) <= URL_PREVIEW_CHARS else url[:URL_PREVIEW_CHARS] + "..."
        alerts.append(DashboardAlert(
            type="network",
            title="Phishing URL Detected",
            description=f"Suspicious URL detected: {preview}",
            time=f"{rng.randint(1, 45)}m ago",
            severity="high",
        ))

    return alerts
