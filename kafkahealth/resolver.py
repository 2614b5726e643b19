"""Resolution of the working set of topics for a probe run."""

import logging
from collections.abc import Sequence

from .broker import BrokerMetadataSource

# Splitting an empty --topics value on commas yields this list
ALL_TOPICS: list[str] = [""]


def wants_all_topics(requested_topics: Sequence[str]) -> bool:
    """Return True when the topic filter was left unspecified."""
    return len(requested_topics) == 1 and requested_topics[0] == ""


def resolve_topics(
    requested_topics: Sequence[str],
    client: BrokerMetadataSource,
    log: logging.Logger,
) -> list[str]:
    """Determine which topics to evaluate.

    Args:
        requested_topics: The comma-split topic filter
        client: Metadata source used when no filter was given
        log: Logger for diagnostics

    Returns:
        The requested topics unchanged, or every topic in the cluster when
        the filter is unspecified

    Raises:
        MetadataError: If the cluster topic list cannot be fetched
    """
    if wants_all_topics(requested_topics):
        topics = client.list_topics()
    else:
        topics = list(requested_topics)

    log.debug("topic list generated", extra={"topics": topics, "len": len(topics)})
    return topics
