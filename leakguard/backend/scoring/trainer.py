"""
scoring/trainer.py

ThreatModel: the "adaptive" part of the detector.

Owns one ModelState (feature weights + last training metrics). train()
splits the dataset 80/20 in file order, re-derives the weights from how
often each feature appears among threat rows of the training partition,
and evaluates on the test partition against a rule-based ground truth.

Ground truth (synthetic): indicator points per matching cell,
    sensitiveData 2, phishingPattern 2, unauthorizedAccess 3, dataExfiltration 2
and a row is an actual threat when its points reach GROUND_TRUTH_CUTOFF.

Prediction: Σ count(feature) · weight(feature) > RISK_THRESHOLD.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Sequence

from ..config import settings
from ..detection.classifier import RowClassifier
from ..detection.models import ClassificationResult, Feature
from ..models import Dataset, ModelMetrics
from .risk import exceeds

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: dict[Feature, float] = {
    Feature.SENSITIVE_DATA:      0.7,
    Feature.PHISHING_PATTERN:    0.8,
    Feature.UNAUTHORIZED_ACCESS: 0.9,
    Feature.DATA_EXFILTRATION:   0.6,
}

GROUND_TRUTH_POINTS: dict[Feature, int] = {
    Feature.SENSITIVE_DATA:      2,
    Feature.PHISHING_PATTERN:    2,
    Feature.UNAUTHORIZED_ACCESS: 3,
    Feature.DATA_EXFILTRATION:   2,
}


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass
class ModelState:
    """Created at session start, mutated only by ThreatModel.train()."""

    weights: dict[Feature, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    trained: bool = False
    metrics: ModelMetrics | None = None

    def weights_dict(self) -> dict[str, float]:
        return {f.value: w for f, w in self.weights.items()}


@dataclass
class ConfusionMatrix:
    tp: int = 0
    fp: int = 0
    tn: int = 0
    fn: int = 0

    def add(self, predicted: bool, actual: bool) -> None:
        if predicted and actual:
            self.tp += 1
        elif predicted:
            self.fp += 1
        elif actual:
            self.fn += 1
        else:
            self.tn += 1

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def accuracy(self) -> float:
        return (self.tp + self.tn) / self.total if self.total else 0.0

    @property
    def precision(self) -> float:
        denom = self.tp + self.fp
        return self.tp / denom if denom else 0.0

    @property
    def recall(self) -> float:
        denom = self.tp + self.fn
        return self.tp / denom if denom else 0.0


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class ThreatModel:
    """
    Args:
        classifier: RowClassifier used to find indicators in each row.
        state:      existing ModelState to continue from (fresh one if None).
        threshold:  prediction threshold; defaults to settings.RISK_THRESHOLD.
    """

    def __init__(
        self,
        classifier: RowClassifier,
        state: ModelState | None = None,
        threshold: float | None = None,
    ) -> None:
        self._classifier = classifier
        self.state = state or ModelState()
        self.threshold = settings.RISK_THRESHOLD if threshold is None else threshold
        self.split_ratio = settings.TRAIN_SPLIT_RATIO
        self.weight_floor = settings.WEIGHT_FLOOR
        self.weight_scale = settings.WEIGHT_SCALE
        self.ground_truth_cutoff = settings.GROUND_TRUTH_CUTOFF

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, classification: ClassificationResult) -> float:
        counts = classification.feature_counts()
        return sum(counts[f] * self.state.weights[f] for f in Feature)

    def predict(self, classification: ClassificationResult) -> bool:
        return exceeds(self.score(classification), self.threshold)

    def ground_truth(self, classification: ClassificationResult) -> bool:
        counts = classification.feature_counts()
        points = sum(counts[f] * GROUND_TRUTH_POINTS[f] for f in Feature)
        return points >= self.ground_truth_cutoff

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(
        self,
        dataset: Dataset,
        classifications: Sequence[ClassificationResult] | None = None,
    ) -> ModelMetrics:
        """
        Re-derive the weights and evaluate. Pass the rows' classifications
        when the caller already has them; otherwise the rows are classified
        here.
        """
        t0 = time.perf_counter()
        if classifications is None:
            classifications = self._classifier.classify_all(dataset.rows, dataset.headers)
        elif len(classifications) != len(dataset.rows):
            raise ValueError(
                f"{len(classifications)} classification(s) for {len(dataset.rows)} row(s)"
            )

        cut = len(dataset.split(self.split_ratio)[0].rows)
        train_set, test_set = classifications[:cut], classifications[cut:]
        logger.info(
            "Training model: %d training rows, %d test rows",
            len(train_set), len(test_set),
        )

        self._adjust_weights(train_set)
        matrix = self._evaluate(test_set)

        metrics = ModelMetrics(
            accuracy=matrix.accuracy,
            precision=matrix.precision,
            recall=matrix.recall,
            training_time_ms=(time.perf_counter() - t0) * 1000,
        )
        self.state.metrics = metrics
        self.state.trained = True
        logger.info(
            "Model trained in %.1fms: accuracy=%.2f precision=%.2f recall=%.2f",
            metrics.training_time_ms, metrics.accuracy, metrics.precision, metrics.recall,
        )
        return metrics

    def _adjust_weights(self, train_set: Sequence[ClassificationResult]) -> None:
        feature_totals = {f: 0 for f in Feature}
        threat_rows = 0

        for result in train_set:
            if not result.matches:
                continue
            threat_rows += 1
            for feature, count in result.feature_counts().items():
                feature_totals[feature] += count

        if threat_rows == 0:
            logger.info("No threat rows in training partition: weights unchanged")
            return

        self.state.weights = {
            f: max(self.weight_floor, feature_totals[f] / threat_rows * self.weight_scale)
            for f in Feature
        }
        logger.debug("Updated feature weights: %s", self.state.weights_dict())

    def _evaluate(self, test_set: Sequence[ClassificationResult]) -> ConfusionMatrix:
        matrix = ConfusionMatrix()
        for result in test_set:
            matrix.add(predicted=self.predict(result), actual=self.ground_truth(result))
        logger.debug("Confusion matrix: %s", matrix)
        return matrix
