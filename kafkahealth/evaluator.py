"""
Replication policy evaluation for kafka-health.

Walks topics and their partitions in order and stops at the first partition
whose replica count does not match the required replication level.
"""

import logging
from collections.abc import Sequence

from .broker import BrokerMetadataSource, MetadataError
from .types import EvaluationError, Healthy, Unhealthy, Verdict

# A replication level of zero only checks that replicas can be resolved
EXISTENCE_ONLY = 0


def is_replicated(replicas: Sequence[int], replica_level: int) -> bool:
    """Apply the replication policy to a single partition's replica set."""
    if replica_level == EXISTENCE_ONLY:
        return True
    return len(replicas) == replica_level


def evaluate_replication(
    topics: Sequence[str],
    replica_level: int,
    client: BrokerMetadataSource,
    log: logging.Logger,
) -> Verdict:
    """Check every partition of every topic against the replication level.

    Args:
        topics: Topics to check, in evaluation order
        replica_level: Exact replica count required, or 0 for existence only
        client: Metadata source to query
        log: Logger for per-partition diagnostics

    Returns:
        Healthy when every partition passes, otherwise the Unhealthy or
        EvaluationError verdict for the first partition that did not
    """
    if replica_level < 0:
        raise ValueError(f"replica_level must be >= 0, got {replica_level}")

    partitions_checked = 0
    for topic in topics:
        try:
            partitions = client.list_partitions(topic)
        except MetadataError as e:
            return EvaluationError(cause=e, topic=topic)

        for partition in partitions:
            try:
                replicas = client.list_replicas(topic, partition)
            except MetadataError as e:
                return EvaluationError(cause=e, topic=topic, partition=partition)

            log.debug(
                "found topic",
                extra={"topic": topic, "partition": partition, "replicas": replicas},
            )
            partitions_checked += 1

            if not is_replicated(replicas, replica_level):
                return Unhealthy(
                    topic=topic,
                    partition=partition,
                    expected=replica_level,
                    actual=len(replicas),
                    replicas=tuple(replicas),
                )

    return Healthy(topics_checked=len(topics), partitions_checked=partitions_checked)
