"""
Command-line interface for kafka-health.

Checks that the partitions of a Kafka cluster's topics are replicated to the
required level and reports the result through the exit code, for use as a
container readiness or liveness probe.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from . import __version__
from .broker import BrokerConnectionError
from .config import CONFIG_FILE_ENV, CONFIG_VALID_VALUES, Config
from .console import console_manager
from .logutil import init_logging
from .probe import run_probe
from .schema import ProbeSettings
from .types import (
    EvaluationError,
    Healthy,
    ProbeExitCode,
    Unhealthy,
    Verdict,
    exit_code_for,
)
from .utils import handle_exception

# Command line parameter -> dotted config path
OPTION_CONFIG_PATHS: dict[str, str] = {
    "broker": "kafka.brokers",
    "topics": "kafka.topics",
    "replica_level": "kafka.replica_level",
    "timeout": "kafka.timeout_seconds",
    "log_level": "system.log_level",
    "log_format": "system.log_format",
}


def describe_failure(verdict: EvaluationError) -> str:
    """Name the stage of the check that failed."""
    if isinstance(verdict.cause, BrokerConnectionError):
        return "Error Connecting To Brokers"
    if verdict.partition is not None:
        return "Error Listing Replicas"
    if verdict.topic is not None:
        return "Error Listing Partitions"
    return "Error Listing Topics"


def handle_verdict(verdict: Verdict, log: logging.Logger) -> ProbeExitCode:
    """Log the verdict of a probe run and return the matching exit code."""
    if isinstance(verdict, Healthy):
        log.info(
            "all partitions replicated",
            extra={
                "topics": verdict.topics_checked,
                "partitions": verdict.partitions_checked,
            },
        )
    elif isinstance(verdict, Unhealthy):
        log.critical(
            f"topic {verdict.topic}:{verdict.partition} is not fully replicated",
            extra={
                "topic": verdict.topic,
                "partition": verdict.partition,
                "expected": verdict.expected,
                "actual": verdict.actual,
                "replicas": list(verdict.replicas),
            },
        )
    else:
        fields: dict[str, Any] = {"err": str(verdict.cause)}
        if verdict.topic is not None:
            fields["topic"] = verdict.topic
        if verdict.partition is not None:
            fields["partition"] = verdict.partition
        log.critical(describe_failure(verdict), extra=fields)

    exit_code = exit_code_for(verdict)
    log.debug(f"Final exit code: {exit_code.value}")
    return exit_code


def load_settings(config_file: Path | None, overrides: dict[str, Any]) -> ProbeSettings:
    """Merge defaults, config file and command line values into settings.

    Raises:
        ValueError: If the config file or an override is invalid
        ValidationError: If the merged settings are invalid
    """
    cfg = Config(config_file)
    for option, value in overrides.items():
        if value is not None:
            cfg.set(OPTION_CONFIG_PATHS[option], value)
    return ProbeSettings.from_config(cfg)


@click.command(context_settings={"help_option_names": ["-h", "-help", "--help"]})
@click.version_option(
    __version__, "-version", "--version", prog_name="kafka-health"
)
@click.option(
    "-broker",
    "--broker",
    "broker",
    envvar=["KAFKA_HEALTH_BROKER", "BROKER"],
    help="The comma separated list of brokers in the Kafka cluster including port"
    " [default: localhost:9092]",
)
@click.option(
    "-topics",
    "--topics",
    "topics",
    envvar=["KAFKA_HEALTH_TOPICS", "TOPICS"],
    help="Limit the list of topics to be checked for replication"
    " [default: all topics]",
)
@click.option(
    "-replicaLevel",
    "--replica-level",
    "replica_level",
    type=click.IntRange(min=0),
    envvar=["KAFKA_HEALTH_REPLICA_LEVEL", "REPLICALEVEL"],
    help="Replication level required to be OK; 0 only checks that replicas"
    " resolve [default: 2]",
)
@click.option(
    "-logLevel",
    "--log-level",
    "log_level",
    envvar=["KAFKA_HEALTH_LOG_LEVEL", "LOGLEVEL"],
    help="The log level to display: fatal, error, warn, info or debug;"
    " unknown names fall back to warn [default: warn]",
)
@click.option(
    "-logFormat",
    "--log-format",
    "log_format",
    type=click.Choice(CONFIG_VALID_VALUES["system.log_format"], case_sensitive=False),
    envvar="KAFKA_HEALTH_LOG_FORMAT",
    help="Render logs as JSON lines or for a terminal [default: json]",
)
@click.option(
    "-timeout",
    "--timeout",
    "timeout",
    type=click.FloatRange(min=0, min_open=True),
    envvar="KAFKA_HEALTH_TIMEOUT",
    help="Timeout in seconds for each metadata request [default: 10]",
)
@click.option(
    "-config",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_FILE_ENV,
    help="YAML configuration file",
)
@click.option(
    "-printConfig",
    "--print-config",
    "print_config",
    is_flag=True,
    help="Print the effective settings and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    broker: str | None,
    topics: str | None,
    replica_level: int | None,
    log_level: str | None,
    log_format: str | None,
    timeout: float | None,
    config_file: Path | None,
    print_config: bool,
) -> None:
    """kafka-health - check the replication level of Kafka topics"""
    overrides = {
        "broker": broker,
        "topics": topics,
        "replica_level": replica_level,
        "timeout": timeout,
        "log_level": log_level.lower() if log_level else None,
        "log_format": log_format.lower() if log_format else None,
    }
    try:
        settings = load_settings(config_file, overrides)
    except (ValueError, ValidationError) as e:
        console_manager.print_error(f"Invalid configuration: {e}")
        ctx.exit(ProbeExitCode.MISCONFIGURED.value)

    if print_config:
        console_manager.print_config_table(settings.model_dump())
        ctx.exit(ProbeExitCode.HEALTHY.value)

    log = init_logging(settings.log_level, settings.log_format)
    verdict = run_probe(settings, log)
    ctx.exit(handle_verdict(verdict, log).value)


def main() -> int:
    """Main entry point.

    Returns:
        int: Exit code (0 when healthy, non-zero otherwise)
    """
    try:
        result = cli.main(prog_name="kafka-health", standalone_mode=False)
        return int(result or 0)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        console_manager.print_error("Aborted")
        return ProbeExitCode.ERROR.value
    except Exception as e:
        return handle_exception(e)


if __name__ == "__main__":
    sys.exit(main())
