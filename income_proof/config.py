"""Configuration management for income-proof."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from income_proof.exceptions import ConfigurationError


@dataclass
class KafkaConfig:
    """Kafka producer configuration for proof events."""

    bootstrap_servers: str | None = None
    acks: str = "all"
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic: str = "income-proof.proofs"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "incomeproof"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class FeedConfig:
    """Transaction feed call policy."""

    timeout_seconds: float = 10.0
    retries: int = 2
    backoff_seconds: float = 0.5


@dataclass
class NetworkConfig:
    """Chain the wallet is expected to be connected to."""

    chain_id: int = 267
    name: str = "Neura Testnet"


@dataclass
class RegistryConfig:
    """Proof registry storage."""

    path: Path = field(default_factory=lambda: Path("proofs.json"))
    token_uri_prefix: str = "ipfs://QmNeuraProof"
    blocked_jurisdictions: list[str] = field(default_factory=list)
    lock_timeout: float = 10.0


@dataclass
class IncomeProofConfig:
    """Main configuration for income-proof."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "IncomeProofConfig":
        """Create config from environment variables."""
        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS") or None,
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic=os.getenv("KAFKA_TOPIC", "income-proof.proofs"),
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_env_int("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "incomeproof"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        feed = FeedConfig(
            timeout_seconds=_env_float("FEED_TIMEOUT", 10.0),
            retries=_env_int("FEED_RETRIES", 2),
            backoff_seconds=_env_float("FEED_BACKOFF", 0.5),
        )

        network = NetworkConfig(
            chain_id=_env_int("CHAIN_ID", 267),
            name=os.getenv("NETWORK_NAME", "Neura Testnet"),
        )

        blocked_str = os.getenv("BLOCKED_JURISDICTIONS")
        try:
            blocked = json.loads(blocked_str) if blocked_str else []
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"BLOCKED_JURISDICTIONS is not valid JSON: {e}") from e
        if not isinstance(blocked, list) or not all(isinstance(code, str) for code in blocked):
            raise ConfigurationError("BLOCKED_JURISDICTIONS must be a JSON list of codes")

        registry = RegistryConfig(
            path=Path(os.getenv("REGISTRY_PATH", "proofs.json")),
            token_uri_prefix=os.getenv("TOKEN_URI_PREFIX", "ipfs://QmNeuraProof"),
            blocked_jurisdictions=blocked,
            lock_timeout=_env_float("REGISTRY_LOCK_TIMEOUT", 10.0),
        )

        return cls(
            kafka=kafka,
            postgres=postgres,
            feed=feed,
            network=network,
            registry=registry,
            seed=_env_int("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _env_int(name: str, default: int | None) -> int | None:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
