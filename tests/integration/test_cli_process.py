"""Tests for ``python -m pubsuggest`` as a child process.

Covers:
- Wrong-type config values (exit before any command runs)
- Offline listing of installed packages
- Missing package manager executable
- Missing Dart file arguments
"""

from __future__ import annotations

import subprocess
import sys
from typing import TYPE_CHECKING

from fakes import SAMPLE_PUBSPEC

if TYPE_CHECKING:
    from pathlib import Path


def _run(
    env: dict[str, str], *argv: str, cwd: Path | None = None, timeout: int = 30
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "pubsuggest", *argv],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
        cwd=cwd,
    )


class TestBadConfig:
    def test_wrong_type_exits_non_zero(
        self, tmp_path: Path, subprocess_env: dict[str, str]
    ) -> None:
        env = {**subprocess_env, "PUBSUGGEST__SUGGESTIONS__DEBOUNCE_MS": "soon"}
        result = _run(env, "--project", str(tmp_path), "resync")
        assert result.returncode != 0

    def test_unknown_yaml_key_exits_non_zero(
        self, tmp_path: Path, subprocess_env: dict[str, str]
    ) -> None:
        (tmp_path / "pubsuggest.yaml").write_text(
            "suggestions:\n  debounce: 300\n", encoding="utf-8"
        )
        result = _run(subprocess_env, "search", "--installed", cwd=tmp_path)
        # Unknown nested key in the YAML file is rejected at startup.
        assert result.returncode != 0


class TestOfflineCommands:
    def test_search_installed(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        (tmp_path / "pubspec.yaml").write_text(SAMPLE_PUBSPEC, encoding="utf-8")
        env = {**subprocess_env, "PUBSUGGEST__SUGGESTIONS__ENABLE_SUGGESTIONS": "false"}
        result = _run(env, "--project", str(tmp_path), "search", "--installed")
        assert result.returncode == 0, result.stderr
        names = [line.split()[0] for line in result.stdout.splitlines()]
        assert names == ["flutter", "json_ext", "http", "provider"]

    def test_import_command(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        dart = tmp_path / "main.dart"
        dart.write_text("void main() {}\n", encoding="utf-8")
        result = _run(subprocess_env, "--project", str(tmp_path), "import", "dio", str(dart))
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "Imported 'dio'"
        assert dart.read_text(encoding="utf-8").startswith("import 'package:dio/dio.dart';\n")

    def test_missing_package_manager(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        (tmp_path / "pubspec.yaml").write_text(SAMPLE_PUBSPEC, encoding="utf-8")
        env = {
            **subprocess_env,
            "PUBSUGGEST__PACKAGE_MANAGER__EXECUTABLE": "no-such-flutter-binary",
        }
        result = _run(env, "--project", str(tmp_path), "add", "dio")
        assert result.returncode == 1
        assert "error: Failed to add dio" in result.stderr

    def test_missing_file_reports_without_traceback(
        self, tmp_path: Path, subprocess_env: dict[str, str]
    ) -> None:
        (tmp_path / "pubspec.yaml").write_text(SAMPLE_PUBSPEC, encoding="utf-8")
        env = {**subprocess_env, "PUBSUGGEST__SUGGESTIONS__ENABLE_SUGGESTIONS": "false"}
        missing = tmp_path / "nope.dart"
        result = _run(
            env, "--project", str(tmp_path), "search", "--installed", "--file", str(missing)
        )
        assert result.returncode == 1
        assert "Traceback" not in result.stderr
        assert f"error: Cannot read {missing}" in result.stderr
