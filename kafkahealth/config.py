"""
Configuration file handling for kafka-health.

The file is YAML with two sections: ``kafka`` for the cluster and the
replication policy, ``system`` for logging. Keys missing from the file keep
their defaults. The file is only ever read.
"""

import copy
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "kafka": {
        "brokers": "localhost:9092",  # comma separated, including port
        "topics": "",  # comma separated; empty checks every topic
        "replica_level": 2,  # 0 only checks that replicas resolve
        "timeout_seconds": 10.0,
        "client_id": "kafka-health",
    },
    "system": {
        "log_level": "warn",  # unknown names fall back to warn
        "log_format": "json",
    },
}

CONFIG_SCHEMA: dict[str, dict[str, type | tuple[type, ...]]] = {
    "kafka": {
        "brokers": str,
        "topics": str,
        "replica_level": int,
        "timeout_seconds": (float, int),
        "client_id": str,
    },
    "system": {
        "log_level": str,
        "log_format": str,
    },
}

# Keys restricted to a fixed set of lower-case values
CONFIG_VALID_VALUES: dict[str, list[str]] = {
    "system.log_format": ["json", "console"],
}

CONFIG_FILE_ENV = "KAFKA_HEALTH_CONFIG"


def _leaves(tree: dict[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    for name, value in tree.items():
        path = f"{prefix}.{name}" if prefix else str(name)
        if isinstance(value, dict):
            yield from _leaves(value, path)
        else:
            yield path, value


def expected_type(path: str) -> type | tuple[type, ...]:
    """Return the type accepted for a ``section.key`` path.

    Raises:
        ValueError: If the path does not name a known key
    """
    section, _, key = path.partition(".")
    if section not in CONFIG_SCHEMA:
        raise ValueError(
            f"Unknown config section '{section}', "
            f"expected one of: {', '.join(CONFIG_SCHEMA)}"
        )
    keys = CONFIG_SCHEMA[section]
    if not key:
        raise ValueError(f"'{path}' is a section, give one of its keys instead")
    if key not in keys:
        raise ValueError(
            f"Unknown key '{key}' in section '{section}', "
            f"expected one of: {', '.join(keys)}"
        )
    return keys[key]


def check_value(path: str, value: Any) -> None:
    """Raise ValueError unless value is acceptable for path."""
    accepted = expected_type(path)
    # bool passes isinstance(..., int)
    if isinstance(value, bool) or not isinstance(value, accepted):
        names = (
            " or ".join(t.__name__ for t in accepted)
            if isinstance(accepted, tuple)
            else accepted.__name__
        )
        raise ValueError(
            f"{path} must be of type {names}, got {type(value).__name__}"
        )

    allowed = CONFIG_VALID_VALUES.get(path)
    if allowed is not None and value.lower() not in allowed:
        raise ValueError(
            f"{path} must be one of: {', '.join(allowed)} (got '{value}')"
        )


class Config:
    """Probe configuration: defaults, overlaid by an optional YAML file.

    Command line and environment values are applied afterwards with set().
    """

    def __init__(self, config_file: Path | None = None) -> None:
        """Load defaults and, if given, the config file.

        Args:
            config_file: YAML file to read; when None the path in the
                KAFKA_HEALTH_CONFIG environment variable is used, if set

        Raises:
            ValueError: If the file is missing, unreadable or invalid
        """
        if config_file is None and os.environ.get(CONFIG_FILE_ENV):
            config_file = Path(os.environ[CONFIG_FILE_ENV])

        self.config_file = config_file
        self._values = copy.deepcopy(DEFAULT_CONFIG)

        if config_file is not None:
            self._read_file(config_file)

    def _read_file(self, path: Path) -> None:
        if not path.is_file():
            raise ValueError(f"Config file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Could not read config file {path}: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping of sections")

        for key, value in _leaves(data):
            # An empty key or section in YAML leaves the default alone
            if value is not None:
                self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a section or a ``section.key`` value."""
        node: Any = self._values
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Validate and store a ``section.key`` value in memory."""
        check_value(key, value)
        section, _, name = key.partition(".")
        self._values[section][name] = value
