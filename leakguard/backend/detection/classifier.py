"""
detection/classifier.py

RowClassifier: runs every enabled rule over every cell of a row and folds
the matches into one ClassificationResult.

Precedence: the LAST match wins, in cell order and then rule order within a
cell. Ragged rows are tolerated: a header with no cell is skipped, a cell
with no header is paired with ''.

The classifier never touches shared lists; identifiers discovered in a row
travel back inside the result and the caller accumulates them.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from typing import Sequence

from .models import CellContext, ClassificationResult, RuleMatch, RuleResult
from .rules.base import BaseRule

logger = logging.getLogger(__name__)


class RowClassifier:
    def __init__(self, rules: list[BaseRule] | None = None) -> None:
        self.rules: list[BaseRule] = rules if rules is not None else self._load_rules()

        self.stats: dict[str, int] = {
            "rows_classified": 0,
            "rows_flagged": 0,
            "rule_errors": 0,
        }
        logger.info(
            "RowClassifier loaded %d rule(s): %s",
            len(self.rules),
            [r.name for r in self.rules],
        )

    def classify(self, row: Sequence[str], headers: Sequence[str]) -> ClassificationResult:
        self.stats["rows_classified"] += 1
        result = ClassificationResult()

        width = max(len(row), len(headers))
        for index in range(width):
            if index >= len(row):
                continue  # undefined cell never matches
            header = headers[index] if index < len(headers) else ""
            cell = CellContext(
                index=index,
                value=row[index] if isinstance(row[index], str) else str(row[index]),
                header=(header or "").strip().lower(),
                row=row,
                headers=headers,
            )
            for rule in self.rules:
                rule_result = self._safe_analyze(rule, cell)
                if not rule_result.triggered:
                    continue
                result.matches.append(
                    RuleMatch(
                        index=index,
                        column_key=cell.column_key,
                        rule_name=rule.name,
                        category=rule.category,
                        feature=rule.feature,
                        indicator=rule_result.indicator,
                        evidence=rule_result.evidence,
                    )
                )
                result.is_threat = True
                result.category = rule.category

        if result.is_threat:
            self.stats["rows_flagged"] += 1
            logger.debug(
                "Row flagged as %s (%d match(es))",
                result.category.value if result.category else None,
                len(result.matches),
            )
        return result

    def classify_all(
        self, rows: Sequence[Sequence[str]], headers: Sequence[str]
    ) -> list[ClassificationResult]:
        return [self.classify(row, headers) for row in rows]

    def _safe_analyze(self, rule: BaseRule, cell: CellContext) -> RuleResult:
        try:
            return rule.analyze(cell)
        except Exception as exc:
            self.stats["rule_errors"] += 1
            logger.exception("Rule %r raised an unhandled exception: %s", rule.name, exc)
            return RuleResult(triggered=False, evidence={}, description=f"rule error: {exc}")

    def _load_rules(self) -> list[BaseRule]:
        import leakguard.backend.detection.rules as rules_pkg
        rules: list[BaseRule] = []
        for _, module_name, _ in pkgutil.iter_modules(rules_pkg.__path__):
            if module_name == "base":
                continue
            try:
                module = importlib.import_module(
                    f"leakguard.backend.detection.rules.{module_name}"
                )
            except Exception as exc:
                logger.error("Failed to import rule module %r: %s", module_name, exc)
                continue
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, BaseRule)
                    and obj is not BaseRule
                    and obj.__module__ == module.__name__
                ):
                    try:
                        instance: BaseRule = obj()
                        if instance.enabled:
                            rules.append(instance)
                    except Exception as exc:
                        logger.error("Failed to instantiate rule %r: %s", obj, exc)
        rules.sort(key=lambda r: (r.order, r.name))
        return rules
