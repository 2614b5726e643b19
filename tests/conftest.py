"""
Fixtures for pytest.

This file contains fixtures that can be used across all tests.
"""

import logging
from collections.abc import Callable, Generator
from typing import Any

import pytest
from click.testing import CliRunner

from kafkahealth.broker import KafkaMetadataClient
from kafkahealth.schema import ProbeSettings
from tests.fixtures import (
    FakeAdminClient,
    FakeMetadataSource,
    TopicLayout,
    make_cluster_metadata,
)

PROBE_ENV_VARS = (
    "KAFKA_HEALTH_BROKER",
    "BROKER",
    "KAFKA_HEALTH_TOPICS",
    "TOPICS",
    "KAFKA_HEALTH_REPLICA_LEVEL",
    "REPLICALEVEL",
    "KAFKA_HEALTH_LOG_LEVEL",
    "LOGLEVEL",
    "KAFKA_HEALTH_LOG_FORMAT",
    "KAFKA_HEALTH_TIMEOUT",
    "KAFKA_HEALTH_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_probe_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from leaking into option parsing."""
    for name in PROBE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def probe_log() -> logging.Logger:
    """A logger that propagates to the root logger so caplog sees it."""
    log = logging.getLogger("tests.probe")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def orders_layout() -> TopicLayout:
    return {
        "orders": {0: [1, 2, 3], 1: [2, 3, 1], 2: [3, 1, 2]},
        "payments": {0: [1, 2, 3]},
    }


@pytest.fixture
def fake_source(orders_layout: TopicLayout) -> FakeMetadataSource:
    return FakeMetadataSource(orders_layout)


@pytest.fixture
def admin_factory() -> Callable[..., Callable[[dict[str, Any]], FakeAdminClient]]:
    """Build AdminClient factories serving a given topic layout.

    The created admin clients are collected on the factory's `created` list.
    """

    def build(
        layout: TopicLayout, **kwargs: Any
    ) -> Callable[[dict[str, Any]], FakeAdminClient]:
        metadata = make_cluster_metadata(
            layout,
            broker_ids=kwargs.pop("broker_ids", (1, 2, 3)),
            partition_errors=kwargs.pop("partition_errors", None),
        )
        created: list[FakeAdminClient] = []

        def factory(conf: dict[str, Any]) -> FakeAdminClient:
            admin = FakeAdminClient(conf, metadata, **kwargs)
            created.append(admin)
            return admin

        factory.created = created  # type: ignore[attr-defined]
        return factory

    return build


@pytest.fixture
def client_factory(
    admin_factory: Callable[..., Callable[[dict[str, Any]], FakeAdminClient]],
    orders_layout: TopicLayout,
) -> Generator[Callable[..., KafkaMetadataClient], None, None]:
    """A KafkaMetadataClient factory backed by a fake admin client."""
    factory = admin_factory(orders_layout)
    clients: list[KafkaMetadataClient] = []

    def build(brokers: list[str], **kwargs: Any) -> KafkaMetadataClient:
        client = KafkaMetadataClient(brokers, admin_factory=factory, **kwargs)
        clients.append(client)
        return client

    build.clients = clients  # type: ignore[attr-defined]
    yield build


@pytest.fixture
def settings() -> ProbeSettings:
    return ProbeSettings(brokers=["kafka-1:9092"], topics=[""], replica_level=3)


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
