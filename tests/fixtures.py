"""Common test helpers for kafka-health tests.

Fakes for the metadata source and for confluent-kafka's AdminClient, so no
broker is needed to exercise the probe.
"""

from typing import Any

from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import (
    BrokerMetadata,
    ClusterMetadata,
    PartitionMetadata,
    TopicMetadata,
)

from kafkahealth.broker import MetadataError

# topic -> partition id -> replica broker ids
TopicLayout = dict[str, dict[int, list[int]]]

# Longest topic name librdkafka accepts when creating a topic handle
MAX_CLIENT_TOPIC_LENGTH = 512


class FakeMetadataSource:
    """In-memory BrokerMetadataSource that records every query."""

    def __init__(
        self,
        layout: TopicLayout,
        fail_list_topics: bool = False,
        fail_partitions: set[str] | None = None,
        fail_replicas: set[tuple[str, int]] | None = None,
    ) -> None:
        self.layout = layout
        self.fail_list_topics = fail_list_topics
        self.fail_partitions = fail_partitions or set()
        self.fail_replicas = fail_replicas or set()
        self.calls: list[tuple[Any, ...]] = []

    def list_topics(self) -> list[str]:
        self.calls.append(("list_topics",))
        if self.fail_list_topics:
            raise MetadataError("cluster unreachable")
        return list(self.layout)

    def list_partitions(self, topic: str) -> list[int]:
        self.calls.append(("list_partitions", topic))
        if topic in self.fail_partitions or topic not in self.layout:
            raise MetadataError("Unknown topic or partition", topic=topic)
        return list(self.layout[topic])

    def list_replicas(self, topic: str, partition: int) -> list[int]:
        self.calls.append(("list_replicas", topic, partition))
        if (topic, partition) in self.fail_replicas:
            raise MetadataError(
                "Replica not available", topic=topic, partition=partition
            )
        return list(self.layout[topic][partition])

    def queried_topics(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "list_partitions"]


def make_topic_metadata(
    topic: str,
    partitions: dict[int, list[int]],
    error: KafkaError | None = None,
    partition_errors: dict[int, KafkaError] | None = None,
) -> TopicMetadata:
    topic_metadata = TopicMetadata()
    topic_metadata.topic = topic
    topic_metadata.error = error
    for partition_id, replicas in partitions.items():
        partition_metadata = PartitionMetadata()
        partition_metadata.id = partition_id
        partition_metadata.leader = replicas[0] if replicas else -1
        partition_metadata.replicas = list(replicas)
        partition_metadata.isrs = list(replicas)
        partition_metadata.error = (partition_errors or {}).get(partition_id)
        topic_metadata.partitions[partition_id] = partition_metadata
    return topic_metadata


def make_cluster_metadata(
    layout: TopicLayout,
    broker_ids: tuple[int, ...] = (1, 2, 3),
    partition_errors: dict[tuple[str, int], KafkaError] | None = None,
) -> ClusterMetadata:
    metadata = ClusterMetadata()
    metadata.cluster_id = "test-cluster"
    metadata.controller_id = broker_ids[0] if broker_ids else -1
    for broker_id in broker_ids:
        broker = BrokerMetadata()
        broker.id = broker_id
        broker.host = f"kafka-{broker_id}"
        broker.port = 9092
        metadata.brokers[broker_id] = broker
    for topic, partitions in layout.items():
        errors = {
            partition: error
            for (error_topic, partition), error in (partition_errors or {}).items()
            if error_topic == topic
        }
        metadata.topics[topic] = make_topic_metadata(
            topic, partitions, partition_errors=errors
        )
    return metadata


class FakeAdminClient:
    """Stands in for confluent_kafka.admin.AdminClient.list_topics()."""

    def __init__(
        self,
        conf: dict[str, Any],
        metadata: ClusterMetadata,
        fail_after: int | None = None,
    ) -> None:
        self.conf = conf
        self.metadata = metadata
        self.fail_after = fail_after
        self.requests: list[str | None] = []
        self.polls = 0

    def poll(self, timeout: float = -1) -> int:
        self.polls += 1
        return 0

    def list_topics(self, topic: str | None = None, timeout: float = -1) -> Any:
        if topic is not None and len(topic) > MAX_CLIENT_TOPIC_LENGTH:
            # librdkafka refuses to build a topic handle for such names
            raise RuntimeError(
                f"Unable to create topic object for \"{topic[:20]}...\": "
                "Invalid argument"
            )
        if self.fail_after is not None and len(self.requests) >= self.fail_after:
            raise KafkaException(KafkaError(KafkaError._TRANSPORT))
        self.requests.append(topic)
        if topic is None:
            return self.metadata

        scoped = ClusterMetadata()
        scoped.cluster_id = self.metadata.cluster_id
        scoped.brokers = self.metadata.brokers
        if topic in self.metadata.topics:
            scoped.topics[topic] = self.metadata.topics[topic]
        else:
            scoped.topics[topic] = make_topic_metadata(
                topic, {}, error=KafkaError(KafkaError.UNKNOWN_TOPIC_OR_PART)
            )
        return scoped
