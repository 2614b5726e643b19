"""Defines the Pydantic model for validated probe settings."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Config


def split_list(value: str) -> list[str]:
    """Split a comma separated value exactly as given, keeping empty items."""
    return value.split(",")


class ProbeSettings(BaseModel):
    """Effective settings for one probe run."""

    model_config = ConfigDict(frozen=True)

    brokers: list[str] = Field(
        default_factory=lambda: ["localhost:9092"],
        description="Bootstrap addresses of the Kafka cluster, including port.",
    )
    topics: list[str] = Field(
        default_factory=lambda: [""],
        description=(
            "Topics to check, split verbatim from the comma separated filter."
            " The single empty name [''] means every topic in the cluster."
        ),
    )
    replica_level: int = Field(
        2,
        ge=0,
        description="Exact replica count required per partition; 0 only checks"
        " that replicas can be resolved.",
    )
    log_level: str = Field(
        "warn", description="Logging verbosity; unknown names log at warn."
    )
    log_format: Literal["json", "console"] = Field(
        "json", description="How log records are rendered."
    )
    timeout_seconds: float = Field(
        10.0, gt=0, description="Timeout for each metadata request."
    )
    client_id: str = Field("kafka-health", min_length=1)

    @field_validator("brokers")
    @classmethod
    def check_brokers(cls, v: list[str]) -> list[str]:
        """Strip whitespace and require at least one broker address."""
        brokers = [broker.strip() for broker in v if broker.strip()]
        if not brokers:
            raise ValueError("At least one broker address is required")
        return brokers

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def lower_case(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_config(cls, config: Config) -> "ProbeSettings":
        """Build settings from a loaded Config."""
        return cls(
            brokers=split_list(config.get("kafka.brokers")),
            topics=split_list(config.get("kafka.topics")),
            replica_level=config.get("kafka.replica_level"),
            log_level=config.get("system.log_level"),
            log_format=config.get("system.log_format"),
            timeout_seconds=config.get("kafka.timeout_seconds"),
            client_id=config.get("kafka.client_id"),
        )
