"""
aggregation/aggregator.py

Aggregator: turns one Dataset into the AggregateMetrics the dashboard and
the report consume.

Per call:
  1. classify every row (RowClassifier)
  2. train the ThreatModel when the dataset has more than MIN_TRAINING_ROWS rows
  3. score every row with the RiskScorer through the configured FeatureExtractor
  4. accumulate + de-duplicate identifiers, count categories, build tiers
  5. inject the FallbackSample when nothing was flagged
  6. build the synthetic chart series and alert cards

All randomness comes from random.Random(seed) created per call, so the same
dataset always produces the same metrics (apart from last_updated).

Stats dict (exposed on /health):
    datasets_aggregated: total aggregate() calls
    rows_flagged:        rows with prediction 1 (real detections only)
    fallbacks_applied:   calls that needed the fallback sample
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timezone
from typing import Callable

from ..config import settings
from ..detection.classifier import RowClassifier
from ..detection.models import ClassificationResult, ThreatCategory
from ..metrics import METRICS
from ..models import AggregateMetrics, Dataset, LeakageStats, UserStats
from ..report.formatter import MITIGATION_TASKS
from ..scoring.features import FeatureExtractor, SeededRandomFeatureExtractor, build_feature_extractor
from ..scoring.risk import RiskScorer
from ..scoring.trainer import ThreatModel
from .alerts import build_alerts
from .fallback import FallbackSample
from .series import anomaly_distribution, weekly_traffic

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Args:
        classifier:        shared RowClassifier (loads the rule plugins if None)
        model:             ThreatModel owning this session's weights
        scorer:            RiskScorer for the anomalous_records count
        feature_extractor: FeatureExtractor feeding the scorer
        seed:              seed for every synthetic value
        clock:             returns the last_updated timestamp (tests pin it)
    """

    def __init__(
        self,
        classifier: RowClassifier | None = None,
        model: ThreatModel | None = None,
        scorer: RiskScorer | None = None,
        feature_extractor: FeatureExtractor | None = None,
        seed: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.seed = settings.RANDOM_SEED if seed is None else seed
        self.classifier = classifier or RowClassifier()
        self.model = model or ThreatModel(self.classifier)
        self.scorer = scorer or RiskScorer()
        self.feature_extractor = feature_extractor or build_feature_extractor(
            settings.FEATURE_EXTRACTOR, self.seed
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.min_training_rows = settings.MIN_TRAINING_ROWS
        self.fallback_enabled = settings.FALLBACK_SAMPLE_ENABLED

        self.stats: dict[str, int] = {
            "datasets_aggregated": 0,
            "rows_flagged": 0,
            "fallbacks_applied": 0,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def aggregate(self, dataset: Dataset) -> AggregateMetrics:
        rng = random.Random(self.seed)
        if isinstance(self.feature_extractor, SeededRandomFeatureExtractor):
            self.feature_extractor.reset()

        headers, rows = dataset.headers, dataset.rows
        logger.info("Aggregating dataset: %d column(s), %d row(s)", len(headers), len(rows))

        # --- Classification ---
        classifications = self.classifier.classify_all(rows, headers)
        METRICS.rows_classified.inc(len(rows))

        # --- Model ---
        trained_now = len(rows) > self.min_training_rows
        if trained_now:
            self.model.train(dataset, classifications)
            METRICS.models_trained.inc()
        else:
            logger.info(
                "Dataset has %d row(s) (≤ %d): rule-based classification only",
                len(rows), self.min_training_rows,
            )

        predictions: list[int] = []
        threat_types: dict[str, int] = {c.value: 0 for c in ThreatCategory}
        unauthorized: list[str] = []
        phishing: list[str] = []
        sensitivity: dict[str, str] = {}
        anomalous = 0

        for row, result in zip(rows, classifications):
            label = self._predict(result, use_model=trained_now)
            predictions.append(label)
            if label and result.category is not None:
                threat_types[result.category.value] += 1

            unauthorized.extend(result.unauthorized_identifiers)
            phishing.extend(result.phishing_indicators)
            sensitivity.update(result.sensitive_columns)

            features = self.feature_extractor.extract(row, headers, result)
            if self.scorer.is_anomalous(features):
                anomalous += 1

        self.stats["rows_flagged"] += sum(predictions)

        # --- Fallback sample ---
        fallback_applied = False
        if self.fallback_enabled and FallbackSample.needed(predictions):
            FallbackSample(rng).apply(predictions, threat_types, unauthorized, phishing)
            fallback_applied = True
            self.stats["fallbacks_applied"] += 1
            METRICS.fallback_samples.inc()

        unauthorized = _dedupe(unauthorized)
        phishing = _dedupe(phishing)
        total_threats = sum(predictions)

        metrics = AggregateMetrics(
            records_analyzed=len(rows),
            user_stats=self._user_stats(len(rows), len(unauthorized)),
            leakage_stats=self._leakage_stats(total_threats),
            threat_types=threat_types,
            unauthorized_users=unauthorized,
            phishing_attempts=phishing,
            data_sensitivity=sensitivity,
            predictions=predictions,
            network_data=weekly_traffic(len(rows), rng),
            anomaly_distribution=anomaly_distribution(threat_types),
            alerts=build_alerts(threat_types, unauthorized, phishing, rng),
            anomalous_records=anomalous,
            model_trained=trained_now,
            model_metrics=self.model.state.metrics if trained_now else None,
            fallback_applied=fallback_applied,
            mitigation_tasks=list(MITIGATION_TASKS),
            last_updated=self._clock(),
        )

        self.stats["datasets_aggregated"] += 1
        logger.info(
            "Aggregation done: %d/%d row(s) flagged, %d anomalous, fallback=%s, trained=%s",
            total_threats, len(rows), anomalous, fallback_applied, trained_now,
        )
        return metrics

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _predict(self, result: ClassificationResult, use_model: bool) -> int:
        if result.is_threat:
            return 1
        if use_model and self.model.predict(result):
            return 1
        return 0

    @staticmethod
    def _user_stats(total: int, unapproved: int) -> UserStats:
        return UserStats(
            total=total,
            active=math.floor(total * settings.ACTIVE_USER_RATIO),
            new=math.floor(total * settings.NEW_USER_RATIO),
            unapproved=unapproved,
        )

    @staticmethod
    def _leakage_stats(total_threats: int) -> LeakageStats:
        critical = math.floor(total_threats * settings.CRITICAL_RISK_RATIO)
        medium = math.floor(total_threats * settings.MEDIUM_RISK_RATIO)
        return LeakageStats(
            potential_incidents=total_threats,
            critical_risk=critical,
            medium_risk=medium,
            low_risk=total_threats - critical - medium,
            mitigated=math.floor(total_threats * settings.MITIGATED_RATIO),
        )


def _dedupe(items: list[str]) -> list[str]:
    """Drop repeats, keep first-seen order."""
    return list(dict.fromkeys(items))
