"""Metrics publisher for pub/sub live meter updates."""

import logging
from pubsub import pub
from ..models.events import MetricsEvent

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """Publishes per-buffer metrics events using pubsub.pub.

    Owned by the caller that drives the capture loop; the quality monitor
    itself stays synchronous and never publishes.
    """

    def __init__(self, topic: str = "audio.metrics"):
        """Initialize metrics publisher.

        Args:
            topic: Pub/sub topic name for metrics events
        """
        self.topic = topic
        self.published_events = 0
        logger.info(f"MetricsPublisher initialized with topic: {topic}")

    def publish_metrics_event(self, metrics_event: MetricsEvent) -> None:
        """Publish a metrics event to the pub/sub topic.

        Args:
            metrics_event: MetricsEvent to publish
        """
        pub.sendMessage(self.topic, event=metrics_event)
        self.published_events += 1
