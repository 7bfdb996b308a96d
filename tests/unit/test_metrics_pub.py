"""Unit tests for MetricsPublisher."""

import pytest
from pubsub import pub

from audioguard.audio.metrics_pub import MetricsPublisher
from audioguard.models.audio import AudioMetrics, RecordingStatistics
from audioguard.models.events import MetricsEvent


@pytest.mark.unit
class TestMetricsPublisher:
    """Test cases for MetricsPublisher."""

    def test_publish_metrics_event(self):
        received = []

        def listener(event):
            received.append(event)

        pub.subscribe(listener, "test.metrics.publish")
        publisher = MetricsPublisher("test.metrics.publish")
        event = MetricsEvent(
            sequence_number=1,
            metrics=AudioMetrics.empty(),
            statistics=RecordingStatistics(),
        )

        publisher.publish_metrics_event(event)

        assert received == [event]
        assert publisher.published_events == 1
        pub.unsubscribe(listener, "test.metrics.publish")
