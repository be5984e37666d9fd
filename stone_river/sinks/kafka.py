"""Kafka sink for publishing per-record audit events."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from stone_river.config import KafkaConfig
from stone_river.exceptions import SinkError
from stone_river.models.base import Event
from stone_river.sinks.serialization import to_dict_fast

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSink:
    """Publish audit events to ``<prefix>.<entity>`` topics.

    An event of type ``customer.status_changed`` goes to
    ``stone-river.audit.customer`` keyed by the policy number, so all
    decisions for one policy land on the same partition in order.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def topic_for(self, event: Event) -> str:
        entity = event.event_type.split(".", 1)[0]
        return f"{self.config.topic_prefix}.{entity}"

    def publish(self, event: Event) -> None:
        """Send a single audit event."""
        value = json.dumps(to_dict_fast(event), ensure_ascii=False, default=str).encode("utf-8")

        try:
            self.producer.produce(
                topic=self.topic_for(event),
                key=event.subject.encode("utf-8") if event.subject else None,
                value=value,
                callback=self._delivery_callback,
            )
        except (BufferError, KafkaException) as e:
            raise SinkError(f"Could not publish {event.event_type}: {e}") from e
        self.stats.sent += 1
        self.producer.poll(0)

    def publish_batch(self, events: list[Event]) -> None:
        """Send a batch of events and wait for delivery."""
        logger.info("Publishing %d audit events", len(events))

        for event in events:
            self.publish(event)

        self.flush()
        logger.info("Batch complete: sent=%d, delivered=%d, failed=%d",
                    self.stats.sent, self.stats.delivered, self.stats.failed)

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
