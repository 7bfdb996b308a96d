"""Terminal rendering of session quality reports."""

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.audio import AudioMetrics, QualityReport

logger = logging.getLogger(__name__)


def _quality_style(score: int) -> str:
    if score >= 70:
        return "bold green"
    if score >= 40:
        return "bold yellow"
    return "bold red"


def _level_bar(level: float, width: int = 20) -> str:
    filled = int(min(max(level, 0.0), 1.0) * width)
    return "█" * filled + "·" * (width - filled)


def build_statistics_table(report: QualityReport) -> Table:
    """Table of the session statistics."""
    stats = report.recording_statistics
    table = Table(title="Recording Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Duration", f"{stats.duration_seconds:.1f}s")
    table.add_row("File Size", f"{stats.file_size / 1024:.1f} KiB")
    table.add_row("Buffers", str(stats.total_buffers))
    table.add_row("Clipping Buffers", str(stats.clipping_occurrences))
    table.add_row("Silence", f"{stats.silence_percentage:.1f}%")
    table.add_row("Average Level", f"{_level_bar(stats.average_level)} {stats.average_level:.3f}")
    table.add_row("Peak Level", f"{_level_bar(stats.peak_level)} {stats.peak_level:.3f}")
    table.add_row("Remaining Time", f"{stats.remaining_time_seconds:.0f}s")
    return table


def build_metrics_table(title: str, metrics: AudioMetrics) -> Table:
    """Table of a single metrics snapshot."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("RMS Level", f"{metrics.rms_level:.4f} ({metrics.db_level:.1f} dBFS)")
    table.add_row("Peak Level", f"{metrics.peak_level:.4f}")
    table.add_row("Noise Floor", f"{metrics.noise_floor:.1f} dBFS")
    table.add_row("Signal/Noise", f"{metrics.signal_to_noise:.1f} dB")
    table.add_row("Clipping", "yes" if metrics.is_clipping else "no")
    table.add_row("Silent", "yes" if metrics.is_silent else "no")
    table.add_row("Quality", Text(str(metrics.quality_score), style=_quality_style(metrics.quality_score)))
    return table


def render_report(report: QualityReport, console: Optional[Console] = None) -> None:
    """Print ``report`` with rich panels and tables."""
    console = console or Console()

    header = Text.assemble(
        ("Overall Quality: ", "bold"),
        (f"{report.overall_quality}/100", _quality_style(report.overall_quality)),
    )
    console.print(Panel(header, title="AudioGuard Quality Report", border_style="bright_blue"))
    console.print(build_statistics_table(report))
    console.print(build_metrics_table("Session Averages", report.audio_metrics))

    if report.issues:
        issues = Text("\n".join(f"• {issue.value.replace('_', ' ')}" for issue in report.issues), style="yellow")
        console.print(Panel(issues, title="Issues", border_style="yellow"))
    else:
        console.print(Panel(Text("No issues detected", style="green"), title="Issues", border_style="green"))

    if report.recommendations:
        advice = Text("\n".join(f"→ {line}" for line in report.recommendations), style="white")
        console.print(Panel(advice, title="Recommendations", border_style="blue"))

    logger.debug(f"Rendered report with {len(report.issues)} issues")
