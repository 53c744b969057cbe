"""
detection/models.py

Data models for the detection layer.

ThreatCategory:       closed set of labels a flagged row can carry
Feature:              model feature each rule contributes to
CellContext:          one cell plus its header and row, handed to every rule
RuleResult:           returned by every rule's analyze() method
RuleMatch:            a triggered RuleResult pinned to a column
ClassificationResult: per-row verdict returned by RowClassifier.classify()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ThreatCategory(str, Enum):
    UNAUTHORIZED_ACCESS    = "Unauthorized Access"
    PHISHING_ATTEMPT       = "Phishing Attempt"
    SENSITIVE_DATA         = "Sensitive Data Exposure"
    DATA_EXFILTRATION      = "Data Exfiltration"
    SUSPICIOUS_FILE_ACCESS = "Suspicious File Access"


class Feature(str, Enum):
    SENSITIVE_DATA      = "sensitiveData"
    PHISHING_PATTERN    = "phishingPattern"
    UNAUTHORIZED_ACCESS = "unauthorizedAccess"
    DATA_EXFILTRATION   = "dataExfiltration"


# ---------------------------------------------------------------------------
# CellContext: the unit every rule inspects
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CellContext:
    index: int
    value: str
    header: str
    """Lower-cased, stripped header name; '' when the column has no header."""

    row: Sequence[str]
    headers: Sequence[str]

    @property
    def column_key(self) -> str:
        """Stable key for the sensitivity map."""
        return self.header or f"column_{self.index + 1}"


# ---------------------------------------------------------------------------
# RuleResult: lightweight return value from every rule.analyze() call
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class RuleResult:
    """
    Return value of BaseRule.analyze().

    Rules must NEVER raise: catch internally and return a non-triggered result.
    Evidence must contain only JSON-serializable types (str, int, float, list, dict).
    """

    triggered: bool
    evidence: dict[str, Any]
    description: str
    indicator: str | None = None
    """Literal the caller should record: a URL, a user, or a column key."""

    def __repr__(self) -> str:
        return (
            f"RuleResult(triggered={self.triggered} "
            f"indicator={self.indicator!r} desc={self.description!r})"
        )


@dataclass(slots=True)
class RuleMatch:
    index: int
    column_key: str
    rule_name: str
    category: ThreatCategory
    feature: Feature
    indicator: str | None
    evidence: dict[str, Any]


# ---------------------------------------------------------------------------
# ClassificationResult: one per data row
# ---------------------------------------------------------------------------

@dataclass
class ClassificationResult:
    """
    Verdict for one row.

    `category` is the last match in cell order (then rule order); the full
    list of matches is kept so the caller can accumulate identifiers and
    per-feature counts without the classifier mutating shared state.
    """

    is_threat: bool = False
    category: ThreatCategory | None = None
    matches: list[RuleMatch] = field(default_factory=list)

    @property
    def label(self) -> int:
        return 1 if self.is_threat else 0

    def indicators_for(self, category: ThreatCategory) -> list[str]:
        return [
            m.indicator for m in self.matches
            if m.category is category and m.indicator is not None
        ]

    @property
    def phishing_indicators(self) -> list[str]:
        return self.indicators_for(ThreatCategory.PHISHING_ATTEMPT)

    @property
    def unauthorized_identifiers(self) -> list[str]:
        return self.indicators_for(ThreatCategory.UNAUTHORIZED_ACCESS)

    @property
    def sensitive_columns(self) -> dict[str, str]:
        """column key → sensitivity tier string."""
        return {
            m.column_key: str(m.evidence.get("sensitivity", "high"))
            for m in self.matches
            if m.category is ThreatCategory.SENSITIVE_DATA
        }

    def feature_counts(self) -> dict[Feature, int]:
        """Matching cells per model feature (a cell may count for several)."""
        counts = {f: 0 for f in Feature}
        for m in self.matches:
            counts[m.feature] += 1
        return counts

    def matched_categories(self) -> set[ThreatCategory]:
        return {m.category for m in self.matches}
