"""Command-line host for the engine.

    pubsuggest search http                 # registry search, annotated
    pubsuggest search --installed          # manifest dependencies
    pubsuggest add dio
    pubsuggest remove dio --file lib/main.dart
    pubsuggest import dio lib/main.dart
    pubsuggest resync
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from pubsuggest import __version__
from pubsuggest.config import Settings
from pubsuggest.editor import InMemoryDocument
from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.logging_config import configure_logging
from pubsuggest.models.editor import Range
from pubsuggest.models.package import PackageRecord
from pubsuggest.models.session import ViewMode
from pubsuggest.mutation import ProcessRunner
from pubsuggest.session import EMPTY_MESSAGES
from pubsuggest.state import AppState, open_state


class ConsoleNotifier:
    def info(self, message: str) -> None:
        print(message)

    def error(self, message: str) -> None:
        print(f"error: {message}", file=sys.stderr)

    def progress(self, message: str) -> None:
        print(message)


def format_record(record: PackageRecord) -> str:
    flags = []
    if record.is_installed:
        flags.append(f"installed {record.declared_version}".rstrip())
    if record.is_imported:
        flags.append("imported")
    if record.latest_version:
        flags.append(f"latest {record.latest_version}")
    marker = f" [{', '.join(flags)}]" if flags else ""
    return f"{record.name}{marker}  {record.display_description}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pubsuggest", description=__doc__.splitlines()[0])
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--project",
        type=Path,
        default=Path.cwd(),
        help="project root containing the manifest (default: current directory)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="list packages for a query")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--installed", action="store_true", help="only installed packages")
    search.add_argument("--file", type=Path, help="Dart file used to mark imported packages")

    add = sub.add_parser("add", help="add a dependency and resync")
    add.add_argument("name")

    remove = sub.add_parser("remove", help="remove a dependency and resync")
    remove.add_argument("name")
    remove.add_argument("--file", type=Path, help="also drop the import line from this Dart file")

    imp = sub.add_parser("import", help="insert the canonical import line into a Dart file")
    imp.add_argument("name")
    imp.add_argument("file", type=Path)

    sub.add_parser("resync", help="run the package manager's resync step")
    return parser


def _read_document(state: AppState, path: Path) -> InMemoryDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Cannot read {path}: {getattr(exc, 'strerror', None) or exc}"
        state.notifier.error(message)
        raise PubSuggestError(ErrorCode.NO_ACTIVE_DOCUMENT, message) from exc
    return InMemoryDocument(text, uri=str(path))


def _write_document(state: AppState, path: Path, document: InMemoryDocument) -> None:
    try:
        path.write_text(document.get_text(), encoding="utf-8")
    except OSError as exc:
        message = f"Cannot write {path}: {exc.strerror or exc}"
        state.notifier.error(message)
        raise PubSuggestError(ErrorCode.EDIT_REJECTED, message) from exc


async def _search(state: AppState, args: argparse.Namespace) -> int:
    text = _read_document(state, args.file).get_text() if args.file else ""
    mode = ViewMode.INSTALLED_ONLY if args.installed else ViewMode.ALL
    try:
        records = await state.builder.build(args.query, text, mode)
    except PubSuggestError as exc:
        state.notifier.error(exc.message)
        return 1
    if not records:
        print(EMPTY_MESSAGES[mode])
    for record in records:
        print(format_record(record))
    return 0


async def _import(state: AppState, args: argparse.Namespace) -> int:
    document = _read_document(state, args.file)
    await state.import_editor.ensure_imported(args.name, document, Range.empty())
    _write_document(state, args.file, document)
    return 0


async def _remove(state: AppState, args: argparse.Namespace) -> int:
    # Read first so a bad path fails before the manifest changes.
    document = _read_document(state, args.file) if args.file is not None else None
    await state.executor.remove_package(args.name)
    if document is not None and await state.import_editor.remove_import(args.name, document):
        _write_document(state, args.file, document)
    return 0


async def run(
    args: argparse.Namespace, settings: Settings, runner: ProcessRunner | None = None
) -> int:
    async with open_state(settings, args.project.resolve(), ConsoleNotifier(), runner) as state:
        try:
            if args.command == "search":
                return await _search(state, args)
            if args.command == "add":
                await state.executor.add_package(args.name)
            elif args.command == "remove":
                return await _remove(state, args)
            elif args.command == "import":
                return await _import(state, args)
            elif args.command == "resync":
                await state.executor.resync()
        except PubSuggestError:
            # Already reported through the notifier.
            return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.logging)
    return asyncio.run(run(args, settings))
