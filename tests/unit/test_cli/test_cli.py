"""Tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from crudd.cli import main, parse_args


class TestParseArgs:
    def test_serve_options(self) -> None:
        args = parse_args(["-v", "serve", "--port", "8000", "--fs-root", "/tmp/root"])
        assert args.command == "serve"
        assert args.verbose is True
        assert args.port == 8000
        assert args.fs_root == "/tmp/root"
        assert args.timeout is None

    def test_no_command(self) -> None:
        assert parse_args([]).command is None


class TestMain:
    def test_list_commands(
        self, tmp_path: Path, make_script, capsys: pytest.CaptureFixture[str]
    ) -> None:
        make_script("echo hi", path="/bin/hi", root=tmp_path)
        config = tmp_path / "crudd.yaml"
        config.write_text(
            f"runner:\n  fs_root: {tmp_path}\n"
            "commands:\n"
            "  - name: hi\n    path: /bin/hi\n"
            "  - name: gone\n    path: /bin/gone\n    args: -x\n"
        )
        with patch("crudd.utils.logging.setup_logging"):
            main(["-c", str(config), "list"])
        out = capsys.readouterr().out
        assert "hi    available" in out
        assert "gone  missing" in out
        assert "1 of 2 commands available" in out

    def test_serve_applies_overrides(self, tmp_path: Path) -> None:
        with patch("crudd.web.server.serve") as serve, patch("crudd.utils.logging.setup_logging"):
            main(["-c", str(tmp_path / "none.yaml"), "serve", "--port", "8123", "--timeout", "9"])
        settings = serve.call_args.args[0]
        assert settings.server.port == 8123
        assert settings.runner.request_timeout == 9.0
