"""
api/serializers.py

Response / request bodies for the REST routes.
Field names follow the AggregateMetrics dataclasses one-to-one.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..models import AggregateMetrics


class ModelMetricsResponse(BaseModel):
    accuracy: float
    precision: float
    recall: float
    training_time_ms: float


class UserStatsResponse(BaseModel):
    total: int
    active: int
    new: int
    unapproved: int


class LeakageStatsResponse(BaseModel):
    potential_incidents: int
    critical_risk: int
    medium_risk: int
    low_risk: int
    mitigated: int


class TrafficPointResponse(BaseModel):
    name: str
    traffic: int
    alerts: int


class DistributionSliceResponse(BaseModel):
    name: str
    value: int


class DashboardAlertResponse(BaseModel):
    type: str
    title: str
    description: str
    time: str
    severity: str


class MetricsResponse(BaseModel):
    records_analyzed: int
    threats_detected: int
    user_stats: UserStatsResponse
    leakage_stats: LeakageStatsResponse
    threat_types: dict[str, int]
    unauthorized_users: list[str]
    phishing_attempts: list[str]
    data_sensitivity: dict[str, str]
    predictions: list[int]
    network_data: list[TrafficPointResponse]
    anomaly_distribution: list[DistributionSliceResponse]
    alerts: list[DashboardAlertResponse]
    anomalous_records: int
    model_trained: bool
    model_metrics: ModelMetricsResponse | None = None
    fallback_applied: bool
    mitigation_tasks: list[str]
    last_updated: datetime

    model_config = {"protected_namespaces": ()}

    @classmethod
    def from_metrics(cls, metrics: AggregateMetrics) -> "MetricsResponse":
        return cls.model_validate(metrics.to_dict())


class ModelResponse(BaseModel):
    trained: bool
    weights: dict[str, float]
    threshold: float
    metrics: ModelMetricsResponse | None = None


class ConfigResponse(BaseModel):
    risk_threshold: float
    min_training_rows: int
    report_list_limit: int


class ConfigUpdateRequest(BaseModel):
    risk_threshold: float | None = Field(default=None, ge=0.0)
    min_training_rows: int | None = Field(default=None, ge=0)
    report_list_limit: int | None = Field(default=None, ge=1)
