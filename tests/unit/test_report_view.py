"""Unit tests for the rich report view."""

import pytest
from rich.console import Console

from audioguard.models.audio import AudioMetrics, QualityIssue, QualityReport, RecordingStatistics
from audioguard.ui.report_view import render_report


@pytest.mark.unit
class TestReportView:
    """Test cases for render_report."""

    def test_renders_issues_and_recommendations(self):
        console = Console(record=True, width=100)
        report = QualityReport(
            overall_quality=42,
            audio_metrics=AudioMetrics.empty(),
            recording_statistics=RecordingStatistics(file_size=3200, total_buffers=1, clipping_occurrences=1),
            issues=[QualityIssue.CLIPPING],
            recommendations=["Reduce microphone gain or move further from the microphone"],
        )

        render_report(report, console)
        output = console.export_text()

        assert "42/100" in output
        assert "clipping" in output
        assert "Reduce microphone gain" in output

    def test_renders_clean_report(self):
        console = Console(record=True, width=100)
        report = QualityReport(
            overall_quality=90,
            audio_metrics=AudioMetrics.empty(),
            recording_statistics=RecordingStatistics(),
        )

        render_report(report, console)

        assert "No issues detected" in console.export_text()
