"""
Type definitions for kafka-health.

Contains the verdict types produced by a probe run and the exit codes they
map to.
"""

from dataclasses import dataclass
from enum import IntEnum


class ProbeExitCode(IntEnum):
    """Process exit codes for a probe run."""

    HEALTHY = 0
    UNHEALTHY = 1
    MISCONFIGURED = 2  # Same as click's usage error code
    ERROR = 3


# Structured verdict types for a probe run
@dataclass(frozen=True)
class Healthy:
    topics_checked: int = 0
    partitions_checked: int = 0


@dataclass(frozen=True)
class Unhealthy:
    topic: str
    partition: int
    expected: int
    actual: int
    replicas: tuple[int, ...] = ()


@dataclass(frozen=True)
class EvaluationError:
    cause: Exception
    topic: str | None = None
    partition: int | None = None


# Union type for probe verdicts
Verdict = Healthy | Unhealthy | EvaluationError


def exit_code_for(verdict: Verdict) -> ProbeExitCode:
    """Map a verdict to the process exit code."""
    if isinstance(verdict, Healthy):
        return ProbeExitCode.HEALTHY
    if isinstance(verdict, Unhealthy):
        return ProbeExitCode.UNHEALTHY
    return ProbeExitCode.ERROR
