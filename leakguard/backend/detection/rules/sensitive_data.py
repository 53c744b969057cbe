"""
detection/rules/sensitive_data.py

Sensitive Data Exposure rule.

Fires when a cell holds something that looks like a card number, an email
address, an SSN, or a password/secret keyword. The column is recorded in
the sensitivity map as 'high'.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import match_sensitive
from .base import BaseRule

logger = logging.getLogger(__name__)


class SensitiveDataRule(BaseRule):
    name = "sensitive_data"
    category = ThreatCategory.SENSITIVE_DATA
    feature = Feature.SENSITIVE_DATA
    order = 10
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("SensitiveDataRule.analyze() raised: %s", exc)
            return self.no_match("internal error in sensitive_data rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        kind = match_sensitive(cell.value)
        if kind is None:
            return self.no_match("no sensitive data")

        return RuleResult(
            triggered=True,
            evidence={"kind": kind, "column": cell.column_key, "sensitivity": "high"},
            description=f"{kind} found in column {cell.column_key!r}",
            indicator=cell.column_key,
        )
