"""
detection/rules/base.py

Abstract base class that all row-classification rules must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import CellContext, Feature, RuleResult, ThreatCategory


class BaseRule(ABC):
    """
    Contract that every detection rule must satisfy.

    Class-level attributes:
        name:     unique snake_case identifier used in RuleMatch.rule_name
        category: ThreatCategory assigned to the row when the rule fires
        feature:  model feature the match counts towards during training
        order:    evaluation order within one cell (lower runs first)
        enabled:  False for rules switched off

    The analyze() method MUST:
        - Never raise an exception (catch internally, return non-triggered result)
        - Treat the cell as untrusted text of any length
        - Return only JSON-serializable types in evidence
    """

    name: str = ""
    category: ThreatCategory = ThreatCategory.SENSITIVE_DATA
    feature: Feature = Feature.SENSITIVE_DATA
    order: int = 100
    enabled: bool = True

    @abstractmethod
    def analyze(self, cell: CellContext) -> RuleResult:
        """
        Inspect one cell and return a RuleResult.

        Must never raise: catch all exceptions internally.
        """
        ...

    @staticmethod
    def no_match(description: str) -> RuleResult:
        return RuleResult(triggered=False, evidence={}, description=description)

    def __repr__(self) -> str:
        return f"<Rule:{self.name} order={self.order} enabled={self.enabled}>"
