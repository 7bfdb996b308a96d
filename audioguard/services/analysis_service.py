"""Service that replays recorded audio through the monitor and processor."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..audio.buffer import SampleBuffer
from ..audio.metrics import MetricsCalculator
from ..audio.metrics_pub import MetricsPublisher
from ..audio.processor import AudioProcessor
from ..config import AudioGuardConfig
from ..config.constraints import DEFAULT_CONSTRAINTS, RecordingConstraints
from ..config.presets import MEDIUM, QualityPreset
from ..models.audio import AudioMetrics, QualityReport
from ..models.events import MetricsEvent
from ..storage.wav_file import read_wav, write_wav
from .quality_monitor import QualityMonitor

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Outcome of analysing one recording."""
    report: QualityReport
    processed: SampleBuffer
    original_metrics: AudioMetrics
    processed_metrics: AudioMetrics
    buffers_processed: int
    stopped_early: bool
    output_path: Optional[str] = None


class AnalysisService:
    """Feeds audio buffer by buffer into a QualityMonitor, then processes it."""

    def __init__(
        self,
        quality_preset: QualityPreset = MEDIUM,
        constraints: RecordingConstraints = DEFAULT_CONSTRAINTS,
        publisher: Optional[MetricsPublisher] = None,
        stop_on_excessive_silence: bool = False,
    ):
        """Initialize analysis service.

        Args:
            quality_preset: Preset for monitoring and processing
            constraints: Recording constraints
            publisher: Optional publisher for live per-buffer metrics
            stop_on_excessive_silence: Forwarded to the QualityMonitor
        """
        self.quality_preset = quality_preset
        self.constraints = constraints
        self.publisher = publisher

        # Session time follows the audio position rather than wall-clock time
        self._audio_position = 0.0
        self.monitor = QualityMonitor(
            quality_preset=quality_preset,
            constraints=constraints,
            stop_on_excessive_silence=stop_on_excessive_silence,
            clock=lambda: self._audio_position,
        )
        self.processor = AudioProcessor(quality_preset, constraints)
        self.calculator = MetricsCalculator(constraints)

        logger.info(f"AnalysisService ready with {quality_preset.quality.name} preset")

    @classmethod
    def from_config(cls, config: AudioGuardConfig,
                    publisher: Optional[MetricsPublisher] = None) -> "AnalysisService":
        """Create a service from YAML configuration."""
        return cls(
            quality_preset=config.get_quality_preset(),
            constraints=config.get_recording_constraints(),
            publisher=publisher,
            stop_on_excessive_silence=bool(config.get('monitoring.stop_on_excessive_silence', False)),
        )

    def analyze(self, recording: SampleBuffer, source: Optional[str] = None) -> AnalysisResult:
        """Monitor ``recording`` in capture-sized buffers, then process it.

        Args:
            recording: Complete recording to replay
            source: Optional label attached to published events

        Returns:
            AnalysisResult with the session report and processed audio
        """
        chunk_size = max(1, recording.sample_rate * self.constraints.buffer_duration_ms // 1000)
        self._audio_position = 0.0
        self.monitor.start_monitoring()

        consumed = 0
        buffers = 0
        stopped_early = False
        for offset in range(0, len(recording), chunk_size):
            chunk = recording.with_samples(recording.samples[offset:offset + chunk_size])
            self._audio_position += chunk.duration_seconds
            metrics = self.monitor.process_audio_buffer(chunk)
            consumed = offset + len(chunk)
            buffers += 1

            should_stop = self.monitor.should_stop_recording()
            if self.publisher:
                self.publisher.publish_metrics_event(MetricsEvent(
                    sequence_number=buffers,
                    metrics=metrics,
                    statistics=self.monitor.get_recording_statistics(),
                    should_stop=should_stop,
                    source=source,
                ))
            if should_stop:
                logger.warning(f"Stopping after {buffers} buffers ({consumed} samples): "
                               f"recording limit reached")
                stopped_early = consumed < len(recording)
                break

        captured = recording.with_samples(np.array(recording.samples[:consumed]))
        report = self.monitor.get_quality_report()
        processed = self.processor.process_audio(captured, self.quality_preset)

        return AnalysisResult(
            report=report,
            processed=processed,
            original_metrics=self.calculator.calculate(captured),
            processed_metrics=self.calculator.calculate(processed),
            buffers_processed=buffers,
            stopped_early=stopped_early,
        )

    def analyze_file(self, input_path: Union[str, Path],
                     output_path: Optional[Union[str, Path]] = None) -> AnalysisResult:
        """Analyse a WAV file and optionally write the processed audio.

        Args:
            input_path: 16-bit mono WAV file
            output_path: Where to write the processed WAV, if anywhere

        Returns:
            AnalysisResult for the file
        """
        recording = read_wav(input_path)
        result = self.analyze(recording, source=Path(input_path).name)

        if output_path:
            write_wav(output_path, result.processed)
            result.output_path = str(output_path)

        logger.info(f"Analysed {input_path}: quality {result.report.overall_quality}, "
                    f"{len(recording)} -> {len(result.processed)} samples")
        return result
