"""
detection/rules/exfiltration.py

Data Exfiltration rule: header/cell heuristics for bulk movement of data:
a 'file' column mentioning a transfer, a 'data' column mentioning a
download, or any cell talking about exporting data.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import is_potential_exfiltration
from .base import BaseRule

logger = logging.getLogger(__name__)


class ExfiltrationRule(BaseRule):
    name = "exfiltration"
    category = ThreatCategory.DATA_EXFILTRATION
    feature = Feature.DATA_EXFILTRATION
    order = 40
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("ExfiltrationRule.analyze() raised: %s", exc)
            return self.no_match("internal error in exfiltration rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        if not is_potential_exfiltration(cell.value, cell.header):
            return self.no_match("no exfiltration pattern")

        return RuleResult(
            triggered=True,
            evidence={"column": cell.column_key, "value": cell.value[:120]},
            description=f"possible data exfiltration in column {cell.column_key!r}",
        )
