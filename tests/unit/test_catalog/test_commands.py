"""Tests for the command catalog."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from crudd.catalog import DEFAULT_COMMANDS, CatalogError, CommandCatalog
from crudd.domain.models import CommandSpec, split_arguments


class TestSplitArguments:
    def test_empty_string_yields_no_arguments(self) -> None:
        assert split_arguments("") == []

    def test_blank_string_yields_no_arguments(self) -> None:
        assert split_arguments("   ") == []

    def test_splits_on_any_whitespace(self) -> None:
        assert split_arguments("-4  -c3\twww.google.com") == ["-4", "-c3", "www.google.com"]


class TestCommandSpec:
    def test_title_joins_path_and_args(self) -> None:
        spec = CommandSpec(name="df", path="/bin/df", args="-h")
        assert spec.title == "/bin/df -h"
        assert spec.arguments == ["-h"]

    def test_spec_is_frozen(self) -> None:
        spec = CommandSpec(name="df", path="/bin/df", args="-h")
        with pytest.raises(ValidationError):
            spec.exists = True  # type: ignore[misc]


class TestCommandCatalog:
    def test_default_catalog_sorted_by_name(self) -> None:
        catalog = CommandCatalog()
        names = [spec.name for spec in catalog]
        assert names == sorted(names)
        assert len(catalog) == len(DEFAULT_COMMANDS)
        assert "uptime" in catalog

    def test_unsorted_input_is_sorted(self, tmp_path: Path) -> None:
        catalog = CommandCatalog([("zz", "/bin/zz", ""), ("aa", "/bin/aa", "")], fs_root=str(tmp_path))
        assert [spec.name for spec in catalog] == ["aa", "zz"]

    def test_existence_probed_under_fs_root(self, tmp_path: Path, make_script) -> None:
        make_script("echo hi", path="/usr/bin/top", root=tmp_path)
        catalog = CommandCatalog(
            [("top", "/usr/bin/top", "-bn1"), ("free", "/usr/bin/free", "-hw")],
            fs_root=str(tmp_path),
        )
        assert [spec.name for spec in catalog.existing()] == ["top"]
        assert [spec.name for spec in catalog.missing()] == ["free"]
        assert catalog.get("top").exists is True

    def test_non_executable_file_is_missing(self, tmp_path: Path) -> None:
        target = tmp_path / "bin" / "plain"
        target.parent.mkdir()
        target.write_text("not a program")
        target.chmod(0o600)
        catalog = CommandCatalog([("plain", "/bin/plain", "")], fs_root=str(tmp_path))
        assert catalog.get("plain").exists is False

    def test_resolve_path_applies_fs_root(self, tmp_path: Path) -> None:
        catalog = CommandCatalog([("df", "/bin/df", "-h")], fs_root=str(tmp_path))
        assert catalog.resolve_path(catalog.get("df")) == f"{tmp_path}/bin/df"

    def test_resolve_path_without_fs_root(self) -> None:
        catalog = CommandCatalog([("df", "/bin/df", "-h")])
        assert catalog.resolve_path(catalog.get("df")) == "/bin/df"

    def test_accepts_mappings(self) -> None:
        catalog = CommandCatalog([{"name": "uptime", "path": "/usr/bin/uptime"}])
        assert catalog.get("uptime").args == ""

    def test_duplicate_name_rejected(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate"):
            CommandCatalog([("df", "/bin/df", "-h"), ("df", "/bin/df", "")])

    @pytest.mark.parametrize("name", ["", "has space", "a/b", "static"])
    def test_unroutable_name_rejected(self, name: str) -> None:
        with pytest.raises(CatalogError):
            CommandCatalog([(name, "/bin/true", "")])

    def test_get_unknown_command(self) -> None:
        catalog = CommandCatalog([("df", "/bin/df", "-h")])
        with pytest.raises(CatalogError, match="Unknown command"):
            catalog.get("nope")
