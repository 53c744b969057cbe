"""
backend/models.py

Shared dataclasses for every stage of the analysis.
Defining them here locks the inter-stage contracts (ingest → detection →
scoring → aggregation → report) against one stable interface.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


# ---------------------------------------------------------------------------
# Stage 1: Ingest output
# ---------------------------------------------------------------------------

@dataclass
class Dataset:
    """A parsed CSV table: row 0 is the header, the rest are data records."""

    headers: list[str]
    """Column names in file order. Uniqueness is not enforced."""

    rows: list[list[str]] = field(default_factory=list)
    """Data records. Ragged rows are kept as-is."""

    @classmethod
    def from_table(cls, table: list[list[str]]) -> "Dataset":
        """Build from a raw table whose first row is the header."""
        if not table:
            return cls(headers=[], rows=[])
        return cls(headers=list(table[0]), rows=[list(r) for r in table[1:]])

    def split(self, ratio: float) -> tuple["Dataset", "Dataset"]:
        """Split data rows in original order; the header is shared."""
        index = int(len(self.rows) * ratio)
        return (
            Dataset(headers=self.headers, rows=self.rows[:index]),
            Dataset(headers=self.headers, rows=self.rows[index:]),
        )

    def __len__(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Stage 3: Training output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelMetrics:
    """Result of one training run. Read-only once produced."""

    accuracy: float
    precision: float
    recall: float
    training_time_ms: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Stage 4: Aggregation output
# ---------------------------------------------------------------------------

@dataclass
class UserStats:
    total: int = 0
    active: int = 0
    new: int = 0
    unapproved: int = 0


@dataclass
class LeakageStats:
    """Risk tiers. Ratios are dashboard placeholders, not severity analysis."""

    potential_incidents: int = 0
    critical_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0
    mitigated: int = 0


@dataclass
class TrafficPoint:
    name: str
    """Weekday label, 'Mon' … 'Sun'."""

    traffic: int
    alerts: int


@dataclass
class DistributionSlice:
    name: str
    value: int


@dataclass
class DashboardAlert:
    type: str
    """One of: 'network' | 'database' | 'file' | 'user'."""

    title: str
    description: str
    time: str
    """Relative time label, e.g. '12m ago'."""

    severity: str
    """One of: 'low' | 'medium' | 'high'."""


@dataclass
class AggregateMetrics:
    """
    Full structured summary consumed by the dashboard charts and the report.

    Created fresh for every upload and replaced wholesale by the session.
    """

    records_analyzed: int = 0
    user_stats: UserStats = field(default_factory=UserStats)
    leakage_stats: LeakageStats = field(default_factory=LeakageStats)
    threat_types: dict[str, int] = field(default_factory=dict)
    unauthorized_users: list[str] = field(default_factory=list)
    phishing_attempts: list[str] = field(default_factory=list)
    data_sensitivity: dict[str, str] = field(default_factory=dict)
    predictions: list[int] = field(default_factory=list)
    network_data: list[TrafficPoint] = field(default_factory=list)
    anomaly_distribution: list[DistributionSlice] = field(default_factory=list)
    alerts: list[DashboardAlert] = field(default_factory=list)
    anomalous_records: int = 0
    """Rows the risk scorer flagged as anomalous."""

    model_trained: bool = False
    model_metrics: ModelMetrics | None = None
    fallback_applied: bool = False
    """True when sample threats were injected because nothing was detected."""

    mitigation_tasks: list[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def threats_detected(self) -> int:
        return sum(self.predictions)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["last_updated"] = self.last_updated.isoformat()
        d["threats_detected"] = self.threats_detected
        return d
