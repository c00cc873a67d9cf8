"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings

from payrail.core.exceptions import ConfigurationError
from payrail.models.nacha import NachaFileHeader
from payrail.models.payout import ConversionMode, ConversionRule


class NachaConfig(BaseSettings):
    """Originator and file header data for generated NACHA files."""

    model_config = {"env_prefix": "PAYRAIL_NACHA_"}

    immediate_dest: str = ""  # " " + 9-digit routing, or bare routing
    immediate_origin: str = ""
    dest_name: str = ""
    origin_name: str = ""
    file_id_mod: str = "A"
    company_name: str = ""
    company_id: str = ""
    entry_desc: str = "PAYROLL"
    odfi_id8: str = ""
    effective_date_offset_days: int = 1

    def file_header(self) -> NachaFileHeader:
        """Build the file header, failing on any missing field."""
        self.require(
            "immediate_dest", "immediate_origin", "dest_name", "origin_name", "file_id_mod",
        )
        return NachaFileHeader(
            immediate_dest=self.immediate_dest,
            immediate_origin=self.immediate_origin,
            dest_name=self.dest_name,
            origin_name=self.origin_name,
            file_id_mod=self.file_id_mod,
        )

    def require(self, *fields: str) -> None:
        missing = [f for f in fields if not str(getattr(self, f)).strip()]
        if missing:
            raise ConfigurationError(
                "Missing NACHA configuration: "
                + ", ".join(f"PAYRAIL_NACHA_{f.upper()}" for f in missing)
            )


class ConversionConfig(BaseSettings):
    """Token valuation rules keyed by ERC-20 address."""

    model_config = {"env_prefix": "PAYRAIL_CONVERSION_"}

    default_decimals: int | None = 6  # None: unknown tokens are rejected
    default_mode: ConversionMode = ConversionMode.STABLE_1TO1
    rules: dict[str, ConversionRule] = {}

    def rule_for(self, token: str) -> ConversionRule:
        """Return the rule for a token address (case-insensitive)."""
        wanted = token.lower()
        for address, rule in self.rules.items():
            if address.lower() == wanted:
                return rule
        if self.default_decimals is None:
            raise ConfigurationError(f"No conversion rule for token {token!r}")
        return ConversionRule(token=token, decimals=self.default_decimals, mode=self.default_mode)


class LedgerConfig(BaseSettings):
    """General-ledger accounts used for payroll journal entries."""

    model_config = {"env_prefix": "PAYRAIL_LEDGER_"}

    expense_account: str = "6000-Payroll-Expense"
    clearing_account: str = "2100-ACH-Clearing"
    entity: Literal["LLC", "TRUST"] = "LLC"


class SchedulerConfig(BaseSettings):
    """Cutoff flush cadence."""

    model_config = {"env_prefix": "PAYRAIL_SCHEDULER_"}

    interval_seconds: float = 1800.0


class SubmissionConfig(BaseSettings):
    """Where rendered files are handed off."""

    model_config = {"env_prefix": "PAYRAIL_SUBMISSION_"}

    mode: Literal["local", "s3"] = "local"
    local_dir: str = "."
    s3_prefix: str = "outbound"
    dead_letter_dir: str | None = None


class RedisConfig(BaseSettings):
    """Redis configuration for the durable accumulator and trace counter."""

    model_config = {"env_prefix": "PAYRAIL_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "payrail"
    dedup_ttl_seconds: int = 7 * 24 * 3600


class S3Config(BaseSettings):
    """S3 submission bucket configuration."""

    model_config = {"env_prefix": "PAYRAIL_S3_"}

    bucket: str = "payrail-ach-files"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class DynamoDBConfig(BaseSettings):
    """DynamoDB bank profile table configuration."""

    model_config = {"env_prefix": "PAYRAIL_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class BankVaultConfig(BaseSettings):
    """Encryption key for the in-memory bank profile vault."""

    model_config = {"env_prefix": "PAYRAIL_VAULT_"}

    encryption_key: str = ""  # "<key id>:<base64 32-byte key>"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PAYRAIL_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    backend: Literal["memory", "redis"] = "memory"
    profile_store: Literal["memory", "encrypted", "dynamodb"] = "memory"

    nacha: NachaConfig = NachaConfig()
    conversion: ConversionConfig = ConversionConfig()
    ledger: LedgerConfig = LedgerConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    submission: SubmissionConfig = SubmissionConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    vault: BankVaultConfig = BankVaultConfig()
