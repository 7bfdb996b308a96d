"""Terminal user interface for AudioGuard."""

from .report_view import render_report, build_metrics_table, build_statistics_table

__all__ = ["render_report", "build_metrics_table", "build_statistics_table"]
