"""Tests for destination parsing."""

from __future__ import annotations

import pytest

from stowage.core.destination import Destination, parse_destination
from stowage.errors import ConfigurationError


class TestParseDestination:
    """Tests for parse_destination."""

    def test_remote_uri(self) -> None:
        """scheme://container/key splits on the first slash."""
        dest = parse_destination("s3://bucket/2020/01/01/data.json.gz")

        assert dest == Destination(scheme="s3", container="bucket", key="2020/01/01/data.json.gz")
        assert dest.extension == ".gz"
        assert dest.uri == "s3://bucket/2020/01/01/data.json.gz"
        assert not dest.is_local

    def test_scheme_is_case_insensitive(self) -> None:
        """Schemes are normalized to lower case."""
        assert parse_destination("GS://bucket/key").scheme == "gs"

    def test_local_path(self) -> None:
        """Bare paths are local with an empty container."""
        dest = parse_destination("/var/data/out.CSV")

        assert dest.scheme == "file"
        assert dest.container == ""
        assert dest.key == "/var/data/out.CSV"
        assert dest.extension == ".csv"
        assert dest.is_local
        assert str(dest) == "/var/data/out.CSV"

    def test_file_uri(self) -> None:
        """file:// URIs are treated as local paths."""
        dest = parse_destination("file:///tmp/x.json")

        assert dest.scheme == "file"
        assert dest.key == "/tmp/x.json"

    def test_deterministic(self) -> None:
        """Parsing the same path twice gives equal results."""
        path = "azure://container/a/b/c.txt"
        assert parse_destination(path) == parse_destination(path)

    def test_no_extension(self) -> None:
        """Keys without a suffix have an empty extension."""
        assert parse_destination("mem://bucket/a/b").extension == ""

    @pytest.mark.parametrize(
        "path",
        [
            "",
            "   ",
            "s3://",
            "s3://bucket",
            "s3://bucket/",
            "s3:///key",
            "s3://bucket/dir/",
            "://bucket/key",
            "/var/data/",
            "file://",
        ],
    )
    def test_invalid(self, path: str) -> None:
        """Malformed destinations raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            parse_destination(path)
