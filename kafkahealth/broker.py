"""
Broker metadata access for kafka-health.

Defines the metadata source interface the probe consumes and a Kafka
implementation backed by confluent-kafka's AdminClient.
"""

import logging
from collections.abc import Callable, Iterable
from types import TracebackType
from typing import Any, Protocol

from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import AdminClient

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "kafka-health"
DEFAULT_TIMEOUT_SECONDS = 10.0


class BrokerConnectionError(Exception):
    """Raised when a session with the broker cluster cannot be established."""


class MetadataError(Exception):
    """Raised when topic, partition or replica metadata cannot be resolved.

    Carries the topic and partition being looked up, when known, so the
    failure can be reported against them.
    """

    def __init__(
        self,
        message: str,
        topic: str | None = None,
        partition: int | None = None,
    ) -> None:
        super().__init__(message)
        self.topic = topic
        self.partition = partition


class BrokerMetadataSource(Protocol):
    """Read-only view of cluster metadata used by the probe."""

    def list_topics(self) -> list[str]:
        """Return every topic known to the cluster."""
        ...

    def list_partitions(self, topic: str) -> list[int]:
        """Return the partition ids of a topic in broker order."""
        ...

    def list_replicas(self, topic: str, partition: int) -> list[int]:
        """Return the broker ids holding a replica of a partition."""
        ...


def _describe_kafka_error(error: Any) -> str:
    """Render a KafkaError (or anything else) as a readable message."""
    if isinstance(error, KafkaError):
        return f"{error.name()}: {error.str()}"
    return str(error)


def _flush_client_logs(admin: Any) -> None:
    # librdkafka hands log lines to the configured logger only on poll
    admin.poll(0)


class KafkaMetadataClient:
    """BrokerMetadataSource backed by a confluent-kafka AdminClient.

    Partition and replica lookups for a topic are answered from a single
    metadata response: list_partitions() stores the topic's metadata and
    list_replicas() reads from it. Only the most recently listed topic is
    kept.
    """

    def __init__(
        self,
        brokers: Iterable[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client_id: str = DEFAULT_CLIENT_ID,
        admin_factory: Callable[[dict[str, Any]], Any] = AdminClient,
    ) -> None:
        self.brokers = list(brokers)
        self.timeout_seconds = timeout_seconds
        self.client_id = client_id
        self._admin_factory = admin_factory
        self._admin: Any | None = None
        self._snapshot: Any | None = None

    def admin_config(self) -> dict[str, Any]:
        """Build the librdkafka configuration for the admin client."""
        return {
            "bootstrap.servers": ",".join(self.brokers),
            "client.id": self.client_id,
            "socket.timeout.ms": int(self.timeout_seconds * 1000),
            "logger": logger,
        }

    def connect(self) -> None:
        """Create the admin client and verify the cluster answers.

        Raises:
            BrokerConnectionError: If no metadata could be fetched or the
                cluster reports no brokers
        """
        admin = None
        try:
            admin = self._admin_factory(self.admin_config())
            metadata = admin.list_topics(timeout=self.timeout_seconds)
        except KafkaException as e:
            raise BrokerConnectionError(
                f"Failed to connect to brokers {self.brokers}: "
                f"{_describe_kafka_error(e.args[0] if e.args else e)}"
            ) from e
        finally:
            if admin is not None:
                _flush_client_logs(admin)

        if not metadata.brokers:
            raise BrokerConnectionError(
                f"No brokers reported by cluster at {self.brokers}"
            )

        logger.debug(
            f"Connected to cluster {metadata.cluster_id} "
            f"with {len(metadata.brokers)} broker(s)"
        )
        self._admin = admin

    def close(self) -> None:
        """Release the admin client. Safe to call more than once."""
        if self._admin is not None:
            _flush_client_logs(self._admin)
        self._admin = None
        self._snapshot = None

    def __enter__(self) -> "KafkaMetadataClient":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _fetch_metadata(
        self,
        topic: str | None = None,
        partition: int | None = None,
    ) -> Any:
        if self._admin is None:
            raise MetadataError(
                "Broker client is not connected", topic=topic, partition=partition
            )
        try:
            return self._admin.list_topics(topic=topic, timeout=self.timeout_seconds)
        except KafkaException as e:
            raise MetadataError(
                _describe_kafka_error(e.args[0] if e.args else e),
                topic=topic,
                partition=partition,
            ) from e
        except (RuntimeError, ValueError) as e:
            # Arguments rejected before any request is sent, such as topic
            # names longer than librdkafka allows
            raise MetadataError(
                f"Metadata request rejected: {e}", topic=topic, partition=partition
            ) from e

    def _load_topic(self, topic: str, partition: int | None = None) -> Any:
        metadata = self._fetch_metadata(topic, partition)
        topic_metadata = metadata.topics.get(topic)
        if topic_metadata is None:
            raise MetadataError(
                f"Topic {topic!r} not found in cluster metadata",
                topic=topic,
                partition=partition,
            )
        if topic_metadata.error is not None:
            raise MetadataError(
                _describe_kafka_error(topic_metadata.error),
                topic=topic,
                partition=partition,
            )
        self._snapshot = topic_metadata
        return topic_metadata

    def list_topics(self) -> list[str]:
        metadata = self._fetch_metadata()
        return list(metadata.topics)

    def list_partitions(self, topic: str) -> list[int]:
        topic_metadata = self._load_topic(topic)
        return list(topic_metadata.partitions)

    def list_replicas(self, topic: str, partition: int) -> list[int]:
        topic_metadata = self._snapshot
        if topic_metadata is None or topic_metadata.topic != topic:
            topic_metadata = self._load_topic(topic, partition)

        partition_metadata = topic_metadata.partitions.get(partition)
        if partition_metadata is None:
            raise MetadataError(
                f"Partition {partition} not found for topic {topic!r}",
                topic=topic,
                partition=partition,
            )

        error = partition_metadata.error
        if error is not None:
            if error.code() == KafkaError.REPLICA_NOT_AVAILABLE:
                raise MetadataError(
                    _describe_kafka_error(error), topic=topic, partition=partition
                )
            logger.debug(
                f"Ignoring partition error for {topic}:{partition}: "
                f"{_describe_kafka_error(error)}"
            )

        return list(partition_metadata.replicas)
