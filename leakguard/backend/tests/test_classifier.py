"""
tests/test_classifier.py

Tests for the RowClassifier orchestrator.
Verifies plugin loading, last-match precedence, ragged rows and error isolation.
"""

from __future__ import annotations

from leakguard.backend.detection.classifier import RowClassifier
from leakguard.backend.detection.models import CellContext, Feature, RuleResult, ThreatCategory
from leakguard.backend.detection.rules.base import BaseRule


# ---------------------------------------------------------------------------
# Inline test rules (bypass plugin discovery)
# ---------------------------------------------------------------------------

class ValueRule(BaseRule):
    """Fires on cells equal to `needle`."""

    def __init__(self, name: str, needle: str, category: ThreatCategory) -> None:
        self.name = name
        self.needle = needle
        self.category = category
        self.feature = Feature.SENSITIVE_DATA

    def analyze(self, cell: CellContext) -> RuleResult:
        if cell.value == self.needle:
            return RuleResult(triggered=True, evidence={}, description="hit", indicator=cell.value)
        return self.no_match("miss")


class CrashingRule(BaseRule):
    name = "crashing"
    enabled = True

    def analyze(self, cell: CellContext) -> RuleResult:
        raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Plugin loading
# ---------------------------------------------------------------------------

class TestRuleLoading:

    def test_loads_all_builtin_rules_in_order(self):
        names = [r.name for r in RowClassifier().rules]
        assert names == [
            "sensitive_data",
            "phishing",
            "unauthorized_domain",
            "access_failure",
            "exfiltration",
            "file_access",
        ]

    def test_explicit_rules_bypass_discovery(self):
        rule = ValueRule("only", "x", ThreatCategory.PHISHING_ATTEMPT)
        assert RowClassifier(rules=[rule]).rules == [rule]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:

    def setup_method(self):
        self.classifier = RowClassifier()

    def test_failed_login_is_unauthorized_access(self):
        result = self.classifier.classify(["alice", "login", "failed"], ["user", "action", "status"])
        assert result.is_threat
        assert result.category is ThreatCategory.UNAUTHORIZED_ACCESS
        assert result.unauthorized_identifiers == ["alice"]

    def test_card_number_is_sensitive(self):
        result = self.classifier.classify(["1", "4111111111111111"], ["id", "whatever"])
        assert result.category is ThreatCategory.SENSITIVE_DATA
        assert result.sensitive_columns == {"whatever": "high"}

    def test_shortened_url_is_phishing(self):
        result = self.classifier.classify(["http://bit.ly/abc123"], ["link"])
        assert result.category is ThreatCategory.PHISHING_ATTEMPT
        assert result.phishing_indicators == ["http://bit.ly/abc123"]

    def test_blocked_domain_records_cell(self):
        result = self.classifier.classify(["mallory@not-authorized.net"], ["source"])
        assert result.category is ThreatCategory.UNAUTHORIZED_ACCESS
        assert result.unauthorized_identifiers == ["mallory@not-authorized.net"]

    def test_exfiltration(self):
        result = self.classifier.classify(["nightly transfer"], ["file"])
        assert result.category is ThreatCategory.DATA_EXFILTRATION

    def test_file_access(self):
        result = self.classifier.classify(["/root/.aws/credentials"], ["file_path"])
        assert result.category is ThreatCategory.SUSPICIOUS_FILE_ACCESS
        assert result.feature_counts()[Feature.DATA_EXFILTRATION] == 1

    def test_clean_row(self):
        result = self.classifier.classify(["7", "sales", "view"], ["id", "department", "action"])
        assert not result.is_threat
        assert result.category is None
        assert result.label == 0
        assert result.matches == []


# ---------------------------------------------------------------------------
# Precedence and edge cases
# ---------------------------------------------------------------------------

class TestPrecedence:

    def test_last_cell_wins(self):
        classifier = RowClassifier(rules=[
            ValueRule("a", "first", ThreatCategory.PHISHING_ATTEMPT),
            ValueRule("b", "second", ThreatCategory.DATA_EXFILTRATION),
        ])
        result = classifier.classify(["second", "first"], ["h1", "h2"])
        assert result.category is ThreatCategory.PHISHING_ATTEMPT
        assert len(result.matches) == 2

    def test_later_rule_wins_within_cell(self):
        classifier = RowClassifier(rules=[
            ValueRule("a", "same", ThreatCategory.PHISHING_ATTEMPT),
            ValueRule("b", "same", ThreatCategory.DATA_EXFILTRATION),
        ])
        result = classifier.classify(["same"], ["h"])
        assert result.category is ThreatCategory.DATA_EXFILTRATION

    def test_identifiers_are_not_shared_between_rows(self):
        classifier = RowClassifier()
        first = classifier.classify(["http://bit.ly/one"], ["link"])
        second = classifier.classify(["quiet"], ["link"])
        assert first.phishing_indicators == ["http://bit.ly/one"]
        assert second.phishing_indicators == []


class TestEdgeCases:

    def test_short_row_does_not_raise(self):
        result = RowClassifier().classify(["alice"], ["user", "action", "status"])
        assert not result.is_threat

    def test_extra_cells_use_positional_key(self):
        result = RowClassifier().classify(["x", "4111111111111111"], ["id"])
        assert result.sensitive_columns == {"column_2": "high"}

    def test_empty_dataset_yields_empty_sequence(self):
        assert RowClassifier().classify_all([], ["user", "action"]) == []

    def test_crashing_rule_is_isolated(self):
        good = ValueRule("good", "hit", ThreatCategory.PHISHING_ATTEMPT)
        classifier = RowClassifier(rules=[CrashingRule(), good])
        result = classifier.classify(["hit"], ["h"])
        assert result.category is ThreatCategory.PHISHING_ATTEMPT
        assert classifier.stats["rule_errors"] == 1

    def test_stats(self):
        classifier = RowClassifier()
        classifier.classify_all([["4111111111111111"], ["ok"]], ["card"])
        assert classifier.stats["rows_classified"] == 2
        assert classifier.stats["rows_flagged"] == 1
