"""
tests/test_aggregator.py

Tests for the Aggregator: predictions, category counts, de-duplication,
the fallback sample path, training eligibility and determinism.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from leakguard.backend.aggregation import Aggregator, FallbackSample
from leakguard.backend.aggregation.fallback import (
    MINIMUM_COUNTS,
    SAMPLE_PHISHING_URLS,
    SAMPLE_UNAUTHORIZED_USERS,
)
from leakguard.backend.aggregation.series import WEEKDAYS
from leakguard.backend.detection.models import ThreatCategory
from leakguard.backend.models import Dataset
from leakguard.backend.scoring.features import SeededRandomFeatureExtractor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
HEADERS = ["user", "action", "status"]


def make_aggregator(**kwargs) -> Aggregator:
    kwargs.setdefault("seed", 42)
    kwargs.setdefault("clock", lambda: FIXED_NOW)
    return Aggregator(**kwargs)


def failures(n: int, clean: int = 0) -> Dataset:
    rows = [[f"u{i}", "view", "failed"] for i in range(n)]
    rows += [[f"c{i}", "view", "ok"] for i in range(clean)]
    return Dataset(headers=HEADERS, rows=rows)


def clean(n: int) -> Dataset:
    return Dataset(headers=["id", "department"], rows=[[str(i), "sales"] for i in range(n)])


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:

    def test_failed_login_row(self):
        data = Dataset(headers=HEADERS, rows=[["alice", "login", "failed"]])
        m = make_aggregator().aggregate(data)
        assert m.threat_types[ThreatCategory.UNAUTHORIZED_ACCESS.value] == 1
        assert m.unauthorized_users == ["alice"]
        assert m.predictions == [1]
        assert not m.fallback_applied

    def test_card_number(self):
        data = Dataset(headers=["id", "note"], rows=[["1", "4111111111111111"]])
        m = make_aggregator().aggregate(data)
        assert m.threat_types[ThreatCategory.SENSITIVE_DATA.value] == 1
        assert m.data_sensitivity == {"note": "high"}

    def test_shortened_url(self):
        data = Dataset(headers=["link"], rows=[["http://bit.ly/abc123"]])
        m = make_aggregator().aggregate(data)
        assert m.threat_types[ThreatCategory.PHISHING_ATTEMPT.value] == 1
        assert m.phishing_attempts == ["http://bit.ly/abc123"]

    def test_sixty_rows_trains_model(self):
        m = make_aggregator().aggregate(failures(20, clean=40))
        assert m.model_trained
        assert m.model_metrics is not None
        for value in (m.model_metrics.accuracy, m.model_metrics.precision, m.model_metrics.recall):
            assert 0.0 <= value <= 1.0

    def test_five_rows_skips_training(self):
        m = make_aggregator().aggregate(failures(2, clean=3))
        assert not m.model_trained
        assert m.model_metrics is None
        assert m.predictions == [1, 1, 0, 0, 0]

    def test_exactly_min_rows_skips_training(self):
        m = make_aggregator().aggregate(failures(5, clean=5))
        assert not m.model_trained

    def test_headers_only_applies_fallback(self):
        m = make_aggregator().aggregate(Dataset(headers=HEADERS, rows=[]))
        assert m.predictions == []
        assert m.records_analyzed == 0
        assert m.fallback_applied
        assert any(v > 0 for v in m.threat_types.values())
        assert m.unauthorized_users == list(SAMPLE_UNAUTHORIZED_USERS)
        assert m.phishing_attempts == list(SAMPLE_PHISHING_URLS)


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

class TestInvariants:

    @pytest.mark.parametrize("dataset", [
        clean(0), clean(7), clean(35), failures(3, clean=4), failures(12, clean=30),
    ])
    def test_predictions_length_matches_rows(self, dataset):
        m = make_aggregator().aggregate(dataset)
        assert len(m.predictions) == len(dataset.rows)
        assert set(m.predictions) <= {0, 1}

    @pytest.mark.parametrize("n", [0, 1, 9, 50, 400])
    def test_clean_data_always_gets_fallback(self, n):
        m = make_aggregator().aggregate(clean(n))
        assert m.fallback_applied
        for category, minimum in MINIMUM_COUNTS.items():
            assert m.threat_types[category.value] >= minimum
        assert m.unauthorized_users
        assert m.phishing_attempts

    def test_fallback_flips_bounded_predictions(self):
        m = make_aggregator().aggregate(clean(400))
        assert 1 <= sum(m.predictions) <= 20

    def test_fallback_can_be_disabled(self):
        agg = make_aggregator()
        agg.fallback_enabled = False
        m = agg.aggregate(clean(20))
        assert not m.fallback_applied
        assert sum(m.predictions) == 0
        assert m.unauthorized_users == []

    def test_lists_are_deduplicated(self):
        rows = [["http://bit.ly/same"]] * 4 + [["http://bit.ly/other"]]
        m = make_aggregator().aggregate(Dataset(headers=["link"], rows=rows))
        assert m.phishing_attempts == ["http://bit.ly/same", "http://bit.ly/other"]
        assert len(set(m.unauthorized_users)) == len(m.unauthorized_users)

    def test_every_category_is_counted(self):
        m = make_aggregator().aggregate(failures(1))
        assert list(m.threat_types) == [c.value for c in ThreatCategory]


# ---------------------------------------------------------------------------
# Derived figures
# ---------------------------------------------------------------------------

class TestDerivedFigures:

    def test_risk_tiers(self):
        m = make_aggregator().aggregate(failures(10))
        ls = m.leakage_stats
        assert ls.potential_incidents == 10
        assert (ls.critical_risk, ls.medium_risk, ls.low_risk, ls.mitigated) == (3, 5, 2, 4)

    def test_user_stats(self):
        m = make_aggregator().aggregate(failures(4, clean=16))
        us = m.user_stats
        assert (us.total, us.active, us.new, us.unapproved) == (20, 16, 3, 4)

    def test_weekly_series_shape(self):
        m = make_aggregator().aggregate(failures(3))
        assert [p.name for p in m.network_data] == list(WEEKDAYS)
        base = 3 // 10 + 50
        for point in m.network_data[:5]:
            assert base * 1.5 <= point.traffic <= base * 1.5 * 1.5
        for point in m.network_data[5:]:
            assert base * 0.7 - 1 <= point.traffic <= base * 0.7 * 1.5

    def test_anomaly_distribution(self):
        m = make_aggregator().aggregate(failures(3))
        slices = {s.name: s.value for s in m.anomaly_distribution}
        assert slices == {
            "Unauthorized Access": 3,
            "Phishing": 0,
            "Data Exposure": 0,
            "Data Exfiltration": 0,
        }

    def test_alerts(self):
        m = make_aggregator().aggregate(failures(5))
        titles = [a.title for a in m.alerts]
        assert titles[0] == "Unauthorized Access Detected"
        assert m.alerts[0].severity == "high"
        assert titles.count("Unauthorized Access Attempt") == 3

    def test_anomalous_records_counts_scored_rows(self):
        rows = [["4111111111111111", "http://bit.ly/x", "failed"], ["1", "", "ok"]]
        m = make_aggregator().aggregate(Dataset(headers=["card", "link", "status"], rows=rows))
        assert m.anomalous_records == 1

    def test_mitigation_tasks_attached(self):
        m = make_aggregator().aggregate(failures(1))
        assert len(m.mitigation_tasks) == 6

    def test_last_updated_from_clock(self):
        m = make_aggregator().aggregate(failures(1))
        assert m.last_updated == FIXED_NOW


# ---------------------------------------------------------------------------
# Determinism and state
# ---------------------------------------------------------------------------

class TestDeterminism:

    def test_same_input_same_output(self):
        data = failures(3, clean=5)
        a = make_aggregator().aggregate(data).to_dict()
        b = make_aggregator().aggregate(data).to_dict()
        assert a == b

    def test_repeat_calls_on_one_aggregator(self):
        agg = make_aggregator(feature_extractor=SeededRandomFeatureExtractor(5))
        data = clean(40)
        first = agg.aggregate(data)
        second = agg.aggregate(data)
        assert first.predictions == second.predictions
        assert first.network_data == second.network_data
        assert first.anomalous_records == second.anomalous_records

    def test_model_state_carries_over(self):
        agg = make_aggregator()
        agg.aggregate(failures(20, clean=40))
        assert agg.model.state.trained
        m = agg.aggregate(failures(2, clean=2))
        assert not m.model_trained
        assert agg.model.state.trained

    def test_stats(self):
        agg = make_aggregator()
        agg.aggregate(failures(2))
        agg.aggregate(clean(5))
        assert agg.stats["datasets_aggregated"] == 2
        assert agg.stats["rows_flagged"] == 2
        assert agg.stats["fallbacks_applied"] == 1

    def test_training_reuses_row_classifications(self):
        agg = make_aggregator()
        agg.aggregate(failures(20, clean=40))
        assert agg.model.state.trained
        assert agg.classifier.stats["rows_classified"] == 60


class TestFallbackSample:

    def test_needed(self):
        assert FallbackSample.needed([])
        assert FallbackSample.needed([0, 0])
        assert not FallbackSample.needed([0, 1])

    def test_keeps_existing_identifiers(self):
        users = ["real@corp.example"]
        urls: list[str] = []
        counts = {c.value: 0 for c in ThreatCategory}
        FallbackSample(random.Random(1)).apply([0] * 5, counts, users, urls)
        assert users == ["real@corp.example"]
        assert urls == list(SAMPLE_PHISHING_URLS)
        assert counts[ThreatCategory.PHISHING_ATTEMPT.value] == 5
        assert counts[ThreatCategory.SUSPICIOUS_FILE_ACCESS.value] == 0
