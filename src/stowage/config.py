from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stowage.errors import ConfigurationError

# Payloads larger than this roll over from memory to a spool file
DEFAULT_SPOOL_THRESHOLD = 8 * 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOWAGE_", env_file=".env", extra="ignore", populate_by_name=True
    )

    # Staging
    spool_threshold: int = DEFAULT_SPOOL_THRESHOLD
    temp_dir: str | None = None
    keep_failed: bool = False
    compress: bool = False
    use_file_buffer: bool = False

    # Observability
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    # Local filesystem backend (file:// and bare paths)
    local_root: str = "."

    # S3-compatible backend (s3://)
    s3_endpoint_url: str | None = Field(default=None, validation_alias="S3_ENDPOINT_URL")
    s3_region: str = Field(default="us-east-1", validation_alias="S3_REGION")
    s3_access_key_id: str | None = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    s3_secret_access_key: str | None = Field(default=None, validation_alias="AWS_SECRET_ACCESS_KEY")

    # Google Cloud Storage backend (gs://)
    gcs_project: str | None = Field(default=None, validation_alias="GCS_PROJECT")
    gcs_credentials_path: str | None = Field(default=None, validation_alias="GCS_CREDENTIALS_PATH")

    # Azure Blob Storage backend (azure://)
    azure_connection_string: str | None = Field(
        default=None, validation_alias="AZURE_STORAGE_CONNECTION_STRING"
    )
    azure_account_url: str | None = Field(default=None, validation_alias="AZURE_ACCOUNT_URL")
    azure_account_key: str | None = Field(default=None, validation_alias="AZURE_ACCOUNT_KEY")
    azure_sas_token: str | None = Field(default=None, validation_alias="AZURE_SAS_TOKEN")


settings = Settings()


@dataclass
class WriterOptions:
    """Per-writer staging and commit options."""

    # Force gzip staging (also implied by a .gz destination)
    compress: bool = False

    # Keep the buffer when the transfer fails instead of deleting it
    keep_failed: bool = False

    # Spool to a temp file from the first byte
    use_file_buffer: bool = False

    # Spool directory (system default when None)
    temp_dir: str | Path | None = None

    # Bypasses extension-based content type inference
    content_type: str | None = None

    # Memory buffers roll over to a spool file past this many stored bytes
    spool_threshold: int = DEFAULT_SPOOL_THRESHOLD

    def __post_init__(self) -> None:
        if self.spool_threshold < 0:
            raise ConfigurationError(f"spool_threshold must be >= 0, got {self.spool_threshold}")
        if self.temp_dir is not None and not Path(self.temp_dir).is_dir():
            raise ConfigurationError(f"spool directory does not exist: {self.temp_dir}")

    @classmethod
    def from_settings(cls, source: Settings | None = None, **overrides: object) -> "WriterOptions":
        """Build options from Settings, with keyword overrides."""
        source = source or settings
        values: dict[str, object] = {
            "compress": source.compress,
            "keep_failed": source.keep_failed,
            "use_file_buffer": source.use_file_buffer,
            "temp_dir": source.temp_dir,
            "spool_threshold": source.spool_threshold,
        }
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
