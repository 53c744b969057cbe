"""
tests/test_trainer.py

Tests for ThreatModel: weight adjustment, evaluation metrics and ModelState.
"""

from __future__ import annotations

import pytest

from leakguard.backend.detection.classifier import RowClassifier
from leakguard.backend.detection.models import Feature
from leakguard.backend.models import Dataset
from leakguard.backend.scoring.trainer import (
    DEFAULT_WEIGHTS,
    ConfusionMatrix,
    ModelState,
    ThreatModel,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

HEADERS = ["user", "action", "status", "link"]


def mixed_dataset(n: int) -> Dataset:
    """Every third row carries a threat indicator, the rest are clean."""
    rows = []
    for i in range(n):
        if i % 6 == 0:
            rows.append([f"user{i}", "view", "failed", ""])
        elif i % 6 == 3:
            rows.append([f"user{i}", "view", "ok", "http://bit.ly/x"])
        else:
            rows.append([f"user{i}", "view", "ok", ""])
    return Dataset(headers=HEADERS, rows=rows)


def clean_dataset(n: int) -> Dataset:
    return Dataset(headers=["id", "department"], rows=[[str(i), "sales"] for i in range(n)])


# ---------------------------------------------------------------------------
# ConfusionMatrix
# ---------------------------------------------------------------------------

class TestConfusionMatrix:

    def test_empty_matrix_is_all_zero(self):
        m = ConfusionMatrix()
        assert (m.accuracy, m.precision, m.recall) == (0.0, 0.0, 0.0)

    def test_counts(self):
        m = ConfusionMatrix()
        m.add(predicted=True, actual=True)
        m.add(predicted=True, actual=False)
        m.add(predicted=False, actual=True)
        m.add(predicted=False, actual=False)
        assert (m.tp, m.fp, m.fn, m.tn) == (1, 1, 1, 1)
        assert m.accuracy == 0.5
        assert m.precision == 0.5
        assert m.recall == 0.5


# ---------------------------------------------------------------------------
# ThreatModel
# ---------------------------------------------------------------------------

class TestThreatModel:

    def setup_method(self):
        self.classifier = RowClassifier()

    def test_fresh_state_uses_default_weights(self):
        model = ThreatModel(self.classifier)
        assert model.state.weights == DEFAULT_WEIGHTS
        assert not model.state.trained
        assert model.state.metrics is None

    def test_sixty_rows_produce_bounded_metrics(self):
        model = ThreatModel(self.classifier)
        metrics = model.train(mixed_dataset(60))
        assert model.state.trained
        assert model.state.metrics is metrics
        for value in (metrics.accuracy, metrics.precision, metrics.recall):
            assert 0.0 <= value <= 1.0
        assert metrics.training_time_ms >= 0.0

    def test_weights_respect_floor(self):
        model = ThreatModel(self.classifier)
        model.train(mixed_dataset(60))
        assert all(w >= 0.5 for w in model.state.weights.values())
        # Sensitive data never appears in the mixed dataset
        assert model.state.weights[Feature.SENSITIVE_DATA] == 0.5

    def test_retraining_same_data_is_stable(self):
        model = ThreatModel(self.classifier)
        data = mixed_dataset(60)
        model.train(data)
        first = dict(model.state.weights)
        model.train(data)
        assert model.state.weights == first

    def test_no_threat_rows_keeps_weights(self):
        model = ThreatModel(self.classifier)
        metrics = model.train(clean_dataset(30))
        assert model.state.weights == DEFAULT_WEIGHTS
        assert metrics.accuracy == 1.0
        assert metrics.precision == 0.0
        assert metrics.recall == 0.0

    def test_state_is_not_shared_between_models(self):
        a = ThreatModel(self.classifier)
        b = ThreatModel(self.classifier)
        a.train(mixed_dataset(60))
        assert b.state.weights == DEFAULT_WEIGHTS

    def test_continues_from_given_state(self):
        state = ModelState(weights={f: 2.0 for f in Feature})
        model = ThreatModel(self.classifier, state=state)
        assert model.state is state

    def test_given_classifications_are_not_reclassified(self):
        data = mixed_dataset(60)
        results = self.classifier.classify_all(data.rows, data.headers)
        before = self.classifier.stats["rows_classified"]
        model = ThreatModel(self.classifier)
        metrics = model.train(data, results)
        assert self.classifier.stats["rows_classified"] == before
        reference = ThreatModel(RowClassifier())
        assert metrics.accuracy == reference.train(data).accuracy
        assert model.state.weights == reference.state.weights

    def test_classification_count_must_match_rows(self):
        data = mixed_dataset(12)
        results = self.classifier.classify_all(data.rows[:5], data.headers)
        with pytest.raises(ValueError):
            ThreatModel(self.classifier).train(data, results)


class TestPrediction:

    def setup_method(self):
        self.classifier = RowClassifier()

    def test_unauthorized_cell_crosses_default_threshold(self):
        model = ThreatModel(self.classifier, threshold=0.6)
        result = self.classifier.classify(["bob", "failed"], ["user", "status"])
        assert model.score(result) == pytest.approx(0.9)
        assert model.predict(result)
        assert model.ground_truth(result)

    def test_clean_row_scores_zero(self):
        model = ThreatModel(self.classifier)
        result = self.classifier.classify(["1", "sales"], ["id", "department"])
        assert model.score(result) == 0.0
        assert not model.predict(result)
        assert not model.ground_truth(result)

    def test_score_at_threshold_is_not_a_threat(self):
        state = ModelState(weights={f: 0.5 for f in Feature})
        model = ThreatModel(self.classifier, state=state, threshold=0.5)
        result = self.classifier.classify(["http://bit.ly/x"], ["link"])
        assert model.score(result) == 0.5
        assert not model.predict(result)
