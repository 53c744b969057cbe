"""report/__init__.py"""
from .formatter import MITIGATION_TASKS, format_report, report_filename

__all__ = ["MITIGATION_TASKS", "format_report", "report_filename"]
