"""
aggregation/fallback.py

FallbackSample: what the dashboard shows when the rules found nothing.

When no row is flagged (an empty dataset included) the aggregator injects a
fixed minimum of sample threats and sample identifiers so the charts never
render an all-empty state. This is intentional demo behaviour; the result
carries fallback_applied=True so callers can tell it from real detections.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from ..detection.models import ThreatCategory

logger = logging.getLogger(__name__)

SAMPLE_UNAUTHORIZED_USERS: tuple[str, ...] = (
    "suspicious.user@example.com",
    "unauthorized@malicious-domain.com",
    "external.actor@data-theft.net",
)

SAMPLE_PHISHING_URLS: tuple[str, ...] = (
    "http://login-secure-verify.tk/account",
    "http://bit.ly/3xF1lTr",
    "http://verify-account-secure.pw/login",
)

MINIMUM_COUNTS: dict[ThreatCategory, int] = {
    ThreatCategory.UNAUTHORIZED_ACCESS: 3,
    ThreatCategory.PHISHING_ATTEMPT:    5,
    ThreatCategory.SENSITIVE_DATA:      4,
    ThreatCategory.DATA_EXFILTRATION:   2,
}

FLAG_RATIO = 0.1
MAX_FLAGGED_ROWS = 20


@dataclass
class FallbackSample:
    rng: random.Random

    @staticmethod
    def needed(predictions: list[int]) -> bool:
        return not any(predictions)

    def apply(
        self,
        predictions: list[int],
        threat_types: dict[str, int],
        unauthorized_users: list[str],
        phishing_attempts: list[str],
    ) -> None:
        """Fill the (caller-owned, freshly built) containers in place."""
        if not unauthorized_users:
            unauthorized_users.extend(SAMPLE_UNAUTHORIZED_USERS)
        if not phishing_attempts:
            phishing_attempts.extend(SAMPLE_PHISHING_URLS)

        for category, minimum in MINIMUM_COUNTS.items():
            threat_types[category.value] = max(minimum, threat_types.get(category.value, 0))

        total = len(predictions)
        to_flag = min(math.floor(total * FLAG_RATIO), MAX_FLAGGED_ROWS)
        for _ in range(to_flag):
            predictions[self.rng.randrange(total)] = 1

        logger.warning(
            "No threats detected in %d row(s): injected fallback sample (%d row(s) flagged)",
            total, sum(predictions),
        )
