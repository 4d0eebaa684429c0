"""Kafka sink for publishing proof events."""

import json
import logging
from dataclasses import dataclass, is_dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from income_proof.config import KafkaConfig
from income_proof.exceptions import SinkError
from income_proof.sinks.serialization import to_dict

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
    """Publish proof events to a Kafka topic.

    Messages are JSON encoded and keyed by the event subject (the token
    id), so every event of one proof lands on the same partition.
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
        if not config.bootstrap_servers:
            raise SinkError("Kafka bootstrap servers are not configured")

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

    def _get_key(self, record: Any) -> str | None:
        if is_dataclass(record):
            return getattr(record, "subject", None)
        elif isinstance(record, dict):
            return record.get("subject")
        return None

    def send(self, record: Any, entity_type: str = "", key: str | None = None) -> None:
        """Send a single record to the configured topic."""
        value = json.dumps(to_dict(record), ensure_ascii=False, default=str).encode("utf-8")
        if key is None:
            key = self._get_key(record)

        kwargs: dict[str, Any] = {
            "topic": self.config.topic,
            "key": key.encode("utf-8") if key else None,
            "value": value,
            "callback": self._delivery_callback,
        }
        if entity_type:
            kwargs["headers"] = {"entity_type": entity_type}

        try:
            self.producer.produce(**kwargs)
        except (BufferError, KafkaException) as e:
            raise SinkError(f"Failed to produce to {self.config.topic}: {e}") from e

        self.stats.sent += 1
        self.producer.poll(0)

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records and wait for delivery."""
        for record in records:
            self.send(record, entity_type)
        self.flush()
        logger.debug(
            "Batch complete: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        remaining = self.producer.flush(timeout)
        if remaining:
            logger.warning("%d messages still queued after flush", remaining)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d (%.1f%% delivered)",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
            self.stats.success_rate * 100,
        )
