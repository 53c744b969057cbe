"""
detection/rules/unauthorized_domain.py

Unauthorized Access rule: a cell references one of the blocked domains.
The cell is recorded as the unauthorized identifier.
"""

from __future__ import annotations

import logging

from ..models import CellContext, Feature, RuleResult, ThreatCategory
from ..patterns import match_unauthorized_domain
from .base import BaseRule

logger = logging.getLogger(__name__)


class UnauthorizedDomainRule(BaseRule):
    name = "unauthorized_domain"
    category = ThreatCategory.UNAUTHORIZED_ACCESS
    feature = Feature.UNAUTHORIZED_ACCESS
    order = 30
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        try:
            return self._analyze(cell)
        except Exception as exc:
            logger.exception("UnauthorizedDomainRule.analyze() raised: %s", exc)
            return self.no_match("internal error in unauthorized_domain rule")

    def _analyze(self, cell: CellContext) -> RuleResult:
        domain = match_unauthorized_domain(cell.value)
        if domain is None:
            return self.no_match("no blocked domain")

        return RuleResult(
            triggered=True,
            evidence={"domain": domain, "column": cell.column_key},
            description=f"blocked domain {domain} in column {cell.column_key!r}",
            indicator=cell.value,
        )
