"""Unit tests for the command-line host and logging setup."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx
import structlog
from fakes import REGISTRY, FakeRunner

from pubsuggest.cli import build_parser, format_record, run
from pubsuggest.config import LoggingSettings, Settings, SuggestionSettings
from pubsuggest.logging_config import configure_logging
from pubsuggest.models.package import PackageRecord
from pubsuggest.mutation import ProcessResult


@pytest.fixture()
def offline_settings() -> Settings:
    return Settings(suggestions=SuggestionSettings(enable_suggestions=False))


def parse(project: Path, *argv: str):
    return build_parser().parse_args(["--project", str(project), *argv])


class TestFormatRecord:
    def test_plain(self) -> None:
        assert format_record(PackageRecord(name="dio")) == "dio  No description available"

    def test_flags(self) -> None:
        record = PackageRecord(
            name="http",
            description="HTTP client",
            declared_version="^1.2.0",
            latest_version="1.2.1",
            is_installed=True,
            is_imported=True,
        )
        assert format_record(record) == (
            "http [installed ^1.2.0, imported, latest 1.2.1]  HTTP client"
        )


class TestParser:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_search_defaults(self, tmp_path: Path) -> None:
        args = parse(tmp_path, "search")
        assert args.query == ""
        assert args.installed is False
        assert args.project == tmp_path


class TestRun:
    async def test_search_installed_offline(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await run(parse(project, "search", "--installed"), offline_settings)
        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert [line.split()[0] for line in out] == ["flutter", "json_ext", "http", "provider"]

    async def test_search_all_disabled_fails(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await run(parse(project, "search", "http"), offline_settings)
        assert code == 1
        assert "disabled" in capsys.readouterr().err

    async def test_search_registry(
        self, project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with respx.mock:
            respx.get(f"{REGISTRY}/search").mock(
                return_value=httpx.Response(200, json={"packages": [{"package": "http"}]})
            )
            respx.get(f"{REGISTRY}/packages/http").mock(return_value=httpx.Response(404))
            code = await run(parse(project, "search", "http"), Settings())
        assert code == 0
        assert capsys.readouterr().out.startswith("http [installed ^1.2.0]")

    async def test_search_empty(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = await run(parse(project, "search", "zzz", "--installed"), offline_settings)
        assert code == 0
        assert capsys.readouterr().out.strip() == "No installed packages match"

    async def test_import_writes_file(self, project: Path, offline_settings: Settings) -> None:
        dart = project / "main.dart"
        dart.write_text("void main() {}\n", encoding="utf-8")
        code = await run(parse(project, "import", "dio", str(dart)), offline_settings)
        assert code == 0
        assert dart.read_text(encoding="utf-8").startswith("import 'package:dio/dio.dart';\n")

    async def test_add_failure_exit_code(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        runner = FakeRunner({"add": ProcessResult(1, "", "Could not find package nope_pkg")})
        code = await run(parse(project, "add", "nope_pkg"), offline_settings, runner)
        assert code == 1
        assert "error: Failed to add nope_pkg" in capsys.readouterr().err

    async def test_remove_drops_import(
        self, project: Path, offline_settings: Settings, runner: FakeRunner
    ) -> None:
        dart = project / "main.dart"
        dart.write_text("import 'package:http/http.dart';\nvoid main() {}\n", encoding="utf-8")
        args = parse(project, "remove", "http", "--file", str(dart))
        assert await run(args, offline_settings, runner) == 0
        assert runner.subcommands == ["remove", "get"]
        assert dart.read_text(encoding="utf-8") == "void main() {}\n"

    async def test_search_missing_file(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        missing = project / "nope.dart"
        args = parse(project, "search", "--installed", "--file", str(missing))
        assert await run(args, offline_settings) == 1
        err = capsys.readouterr().err.splitlines()
        assert err == [f"error: Cannot read {missing}: No such file or directory"]

    async def test_import_missing_file(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        args = parse(project, "import", "dio", str(project / "nope.dart"))
        assert await run(args, offline_settings) == 1
        assert "error: Cannot read" in capsys.readouterr().err

    async def test_remove_missing_file_leaves_manifest(
        self, project: Path, offline_settings: Settings, runner: FakeRunner
    ) -> None:
        args = parse(project, "remove", "http", "--file", str(project / "nope.dart"))
        assert await run(args, offline_settings, runner) == 1
        assert runner.calls == []

    async def test_import_invalid_name(
        self, project: Path, offline_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        dart = project / "main.dart"
        dart.write_text("void main() {}\n", encoding="utf-8")
        args = parse(project, "import", "bad-name", str(dart))
        assert await run(args, offline_settings) == 1
        assert dart.read_text(encoding="utf-8") == "void main() {}\n"
        assert "Invalid package name" in capsys.readouterr().err


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="INFO", format="json"))
        structlog.get_logger().info("catalog_built", records=3)
        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "catalog_built"
        assert event["records"] == 3
        assert event["level"] == "info"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="WARNING", format="text"))
        structlog.get_logger().info("hidden")
        structlog.get_logger().warning("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err
