"""
report/formatter.py

Renders AggregateMetrics into the downloadable plain-text report.

Pure: no I/O, no clock. The timestamp comes from metrics.last_updated, so
formatting the same metrics twice yields byte-identical text.

Section order:
  header, SUMMARY, MODEL PERFORMANCE (trained only), THREAT BREAKDOWN,
  UNAUTHORIZED ACCESS ATTEMPTS, PHISHING ATTEMPTS, DATA SENSITIVITY,
  MITIGATION TASKS, footer
"""

from __future__ import annotations

from ..config import settings
from ..models import AggregateMetrics

REPORT_TITLE = "ADAPTIVE DATA LEAKAGE DETECTION REPORT"
REPORT_FOOTER = "END OF REPORT"

MITIGATION_TASKS: tuple[str, ...] = (
    "Implement stricter access controls for sensitive data",
    "Provide additional security training for users",
    "Update phishing detection and prevention systems",
    "Monitor unusual data access patterns",
    "Review and update data leak prevention policies",
    "Rotate credentials exposed in analysed datasets",
)

_SAMPLE_NOTE = (
    "Note: no threats were detected; the figures below include sample data "
    "for demonstration."
)


def _section(title: str) -> list[str]:
    return [title, "-" * len(title)]


def _percent(value: float) -> str:
    return f"{value * 100:.2f}%"


def _bullets(items: list[str], limit: int) -> list[str]:
    lines = [f"- {item}" for item in items[:limit]]
    if len(items) > limit:
        lines.append(f"... and {len(items) - limit} more")
    return lines


def format_report(metrics: AggregateMetrics, list_limit: int | None = None) -> str:
    limit = settings.REPORT_LIST_LIMIT if list_limit is None else list_limit
    total = metrics.records_analyzed
    threats = metrics.threats_detected
    ratio = threats / total if total else 0.0

    lines: list[str] = [
        REPORT_TITLE,
        "=" * len(REPORT_TITLE),
        "",
        f"Generated on: {metrics.last_updated.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
        "",
    ]

    lines += _section("SUMMARY")
    lines += [
        f"Total records analyzed: {total}",
        f"Potential threats detected: {threats}",
        f"Threat percentage: {_percent(ratio)}",
    ]
    if metrics.fallback_applied:
        lines.append(_SAMPLE_NOTE)
    lines.append("")

    if metrics.model_trained and metrics.model_metrics is not None:
        m = metrics.model_metrics
        lines += _section("MODEL PERFORMANCE")
        lines += [
            "Model trained: Yes",
            f"Accuracy: {_percent(m.accuracy)}",
            f"Precision: {_percent(m.precision)}",
            f"Recall: {_percent(m.recall)}",
            f"Training time: {m.training_time_ms:.1f} ms",
            "",
        ]

    lines += _section("THREAT BREAKDOWN")
    for category, count in metrics.threat_types.items():
        if count > 0:
            lines.append(f"{category}: {count}")
    lines.append("")

    if metrics.unauthorized_users:
        lines += _section("UNAUTHORIZED ACCESS ATTEMPTS")
        lines += _bullets(metrics.unauthorized_users, limit)
        lines.append("")

    if metrics.phishing_attempts:
        lines += _section("PHISHING ATTEMPTS")
        lines += _bullets(metrics.phishing_attempts, limit)
        lines.append("")

    if metrics.data_sensitivity:
        lines += _section("DATA SENSITIVITY")
        for column, tier in metrics.data_sensitivity.items():
            lines.append(f"{column}: {tier}")
        lines.append("")

    lines += _section("MITIGATION TASKS")
    tasks = metrics.mitigation_tasks or list(MITIGATION_TASKS)
    lines += [f"{i}. {task}" for i, task in enumerate(tasks, start=1)]
    lines.append("")

    lines.append(REPORT_FOOTER)
    return "\n".join(lines)


def report_filename(metrics: AggregateMetrics) -> str:
    return f"data-leakage-report-{metrics.last_updated.strftime('%Y-%m-%d')}.txt"
