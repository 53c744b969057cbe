"""
detection/rules/access_failure.py

Failed-access rule.

A status-like cell whose whole value is 'failed', 'denied', 'forbidden', …
marks the row as Unauthorized Access. The identifier recorded is the row's
user (first column whose header names a principal); if the row has no such
column nothing is recorded, but the row is still flagged.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import find_principal, is_access_failure
from .base import BaseRule

logger = logging.getLogger(__name__)


class AccessFailureRule(BaseRule):
    name = "access_failure"
    category = ThreatCategory.UNAUTHORIZED_ACCESS
    feature = Feature.UNAUTHORIZED_ACCESS
    order = 35
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("AccessFailureRule.analyze() raised: %s", exc)
            return self.no_match("internal error in access_failure rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        if not is_access_failure(cell.value):
            return self.no_match("no access failure")

        principal = find_principal(cell.row, cell.headers)
        return RuleResult(
            triggered=True,
            evidence={
                "status": cell.value.strip(),
                "column": cell.column_key,
                "principal": principal,
            },
            description=(
                f"access {cell.value.strip().lower()} for {principal or 'unknown principal'}"
            ),
            indicator=principal,
        )
