"""Report building package."""

from fintrack.reports.builder import ReportBuilder

__all__ = ["ReportBuilder"]
