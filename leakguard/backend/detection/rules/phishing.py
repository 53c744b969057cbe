"""
detection/rules/phishing.py

Phishing Attempt rule: URL shorteners, lure keywords and throwaway TLDs.
The matching cell itself is recorded as the phishing indicator.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import match_phishing
from .base import BaseRule

logger = logging.getLogger(__name__)


class PhishingRule(BaseRule):
    name = "phishing"
    category = ThreatCategory.PHISHING_ATTEMPT
    feature = Feature.PHISHING_PATTERN
    order = 20
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("PhishingRule.analyze() raised: %s", exc)
            return self.no_match("internal error in phishing rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        kind = match_phishing(cell.value)
        if kind is None:
            return self.no_match("no phishing indicator")

        return RuleResult(
            triggered=True,
            evidence={"kind": kind, "column": cell.column_key},
            description=f"phishing {kind} in column {cell.column_key!r}",
            indicator=cell.value,
        )
