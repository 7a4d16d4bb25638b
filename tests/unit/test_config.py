"""Tests for settings and writer options."""

from __future__ import annotations

from pathlib import Path

import pytest

from stowage.config import DEFAULT_SPOOL_THRESHOLD, Settings, WriterOptions
from stowage.errors import ConfigurationError


class TestSettings:
    """Tests for environment-driven Settings."""

    def test_defaults(self) -> None:
        """Settings default to in-memory staging with the standard threshold."""
        config = Settings(_env_file=None)

        assert config.spool_threshold == DEFAULT_SPOOL_THRESHOLD
        assert config.keep_failed is False
        assert config.local_root == "."

    def test_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """STOWAGE_ variables configure staging."""
        monkeypatch.setenv("STOWAGE_SPOOL_THRESHOLD", "1024")
        monkeypatch.setenv("STOWAGE_KEEP_FAILED", "true")

        config = Settings(_env_file=None)

        assert config.spool_threshold == 1024
        assert config.keep_failed is True

    def test_credential_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Backend credentials use their conventional variable names."""
        monkeypatch.setenv("S3_ENDPOINT_URL", "http://minio:9000")
        monkeypatch.setenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")

        config = Settings(_env_file=None)

        assert config.s3_endpoint_url == "http://minio:9000"
        assert config.azure_connection_string == "UseDevelopmentStorage=true"


class TestWriterOptions:
    """Tests for WriterOptions."""

    def test_negative_threshold_rejected(self) -> None:
        """A negative spool threshold is a configuration error."""
        with pytest.raises(ConfigurationError, match="spool_threshold"):
            WriterOptions(spool_threshold=-1)

    def test_missing_temp_dir_rejected(self, tmp_path: Path) -> None:
        """The spool directory must exist."""
        with pytest.raises(ConfigurationError, match="does not exist"):
            WriterOptions(temp_dir=tmp_path / "absent")

    def test_from_settings(self, tmp_path: Path) -> None:
        """Options take defaults from Settings."""
        config = Settings(_env_file=None, compress=True, temp_dir=str(tmp_path), spool_threshold=0)

        options = WriterOptions.from_settings(config)

        assert options.compress is True
        assert options.temp_dir == str(tmp_path)
        assert options.spool_threshold == 0
        assert options.content_type is None

    def test_overrides_win(self) -> None:
        """Keyword overrides replace settings values."""
        config = Settings(_env_file=None, keep_failed=False)

        options = WriterOptions.from_settings(config, keep_failed=True, content_type="text/csv")

        assert options.keep_failed is True
        assert options.content_type == "text/csv"
