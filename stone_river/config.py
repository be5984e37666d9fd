"""Configuration management for stone-river."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stone_river.exceptions import ConfigurationError
from stone_river.models.policy.enums import ComplianceModel


@dataclass
class KafkaConfig:
    """Kafka producer configuration for audit events."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "stone-river.audit"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str = ""
    url: str | None = None

    @property
    def connection_string(self) -> str:
        """Get connection string (an explicit URL wins)."""
        if self.url:
            return self.url
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"

    def validate(self) -> None:
        """Raise ConfigurationError when credentials are missing."""
        if self.url:
            return
        if not self.host or not self.user:
            raise ConfigurationError("Missing database host or user")
        if not self.password:
            raise ConfigurationError(
                "Missing database credentials: set DATABASE_URL or POSTGRES_PASSWORD"
            )


@dataclass
class OutputConfig:
    """Audit log output configuration."""

    log_dir: Path = field(default_factory=lambda: Path("logs"))
    pretty_json: bool = True


@dataclass
class ComplianceConfig:
    """Payment compliance rules configuration."""

    model: ComplianceModel = ComplianceModel.ARREARS
    report_limit: int = 10


@dataclass
class PortalConfig:
    """Main configuration for stone-river batch runs."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    compliance: ComplianceConfig = field(default_factory=ComplianceConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "PortalConfig":
        """Create config from environment variables."""
        import os

        try:
            port = int(os.getenv("POSTGRES_PORT", "5432"))
        except ValueError as e:
            raise ConfigurationError("POSTGRES_PORT must be an integer") from e

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=os.getenv("POSTGRES_DB", "postgres"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            url=os.getenv("DATABASE_URL") or None,
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "stone-river.audit"),
        )

        output = OutputConfig(
            log_dir=Path(os.getenv("OUTPUT_DIR", "logs")),
            pretty_json=os.getenv("PRETTY_JSON", "true").lower() == "true",
        )

        model_name = os.getenv("COMPLIANCE_MODEL", ComplianceModel.ARREARS.value)
        try:
            model = ComplianceModel(model_name.lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown compliance model: {model_name}") from e

        try:
            report_limit = int(os.getenv("REPORT_LIMIT", "10"))
        except ValueError as e:
            raise ConfigurationError("REPORT_LIMIT must be an integer") from e

        compliance = ComplianceConfig(model=model, report_limit=report_limit)

        return cls(
            postgres=postgres,
            kafka=kafka,
            output=output,
            compliance=compliance,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
