"""
detection/rules/file_access.py

Suspicious File Access rule: a file/path column pointing at key material
or a credential store. Counts towards the exfiltration feature.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import is_suspicious_file_access
from .base import BaseRule

logger = logging.getLogger(__name__)


class SuspiciousFileAccessRule(BaseRule):
    name = "file_access"
    category = ThreatCategory.SUSPICIOUS_FILE_ACCESS
    feature = Feature.DATA_EXFILTRATION
    order = 50
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("SuspiciousFileAccessRule.analyze() raised: %s", exc)
            return self.no_match("internal error in file_access rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        if not is_suspicious_file_access(cell.value, cell.header):
            return self.no_match("no suspicious file access")

        return RuleResult(
            triggered=True,
            evidence={"column": cell.column_key, "path": cell.value[:120]},
            description=f"credential or key file touched: {cell.value[:60]}",
        )
