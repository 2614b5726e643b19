"""
Probe runner for kafka-health.

Owns the broker client for the duration of one check: connects it, resolves
the topics, evaluates replication and closes the client again.
"""

import logging
from collections.abc import Callable, Sequence

from . import __version__
from .broker import (
    BrokerConnectionError,
    KafkaMetadataClient,
    MetadataError,
)
from .evaluator import evaluate_replication
from .resolver import resolve_topics
from .schema import ProbeSettings
from .types import EvaluationError, Verdict

ClientFactory = Callable[..., KafkaMetadataClient]


def build_client(
    settings: ProbeSettings, client_factory: ClientFactory
) -> KafkaMetadataClient:
    return client_factory(
        settings.brokers,
        timeout_seconds=settings.timeout_seconds,
        client_id=settings.client_id,
    )


def run_probe(
    settings: ProbeSettings,
    log: logging.Logger,
    client_factory: ClientFactory = KafkaMetadataClient,
) -> Verdict:
    """Run one replication health check against the configured cluster.

    Args:
        settings: Validated probe settings
        log: Logger handed to the resolver and evaluator
        client_factory: Builds the metadata client; takes the broker list
            plus timeout_seconds and client_id keywords

    Returns:
        The verdict for the run. Connection and topic listing failures are
        returned as EvaluationError rather than raised.
    """
    log.info(
        "starting probe", extra={"version": __version__, "brokers": settings.brokers}
    )

    client = build_client(settings, client_factory)
    try:
        client.connect()
    except BrokerConnectionError as e:
        return EvaluationError(cause=e)

    try:
        try:
            topics: Sequence[str] = resolve_topics(settings.topics, client, log)
        except MetadataError as e:
            return EvaluationError(cause=e, topic=e.topic, partition=e.partition)
        return evaluate_replication(topics, settings.replica_level, client, log)
    finally:
        client.close()
