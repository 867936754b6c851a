"""Manifest (pubspec.yaml) reading.

The structured parser loads the document with PyYAML's ``BaseLoader`` so
every scalar stays a string exactly as written; this keeps its output
identical to the line-oriented fallback, which is used when the file is not
valid YAML. Neither path raises: callers always get a ``ManifestState``.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog
import yaml

from pubsuggest.models.package import ManifestState

log = structlog.get_logger()

DEFAULT_MANIFEST_FILE = "pubspec.yaml"

_SECTION = "dependencies"
_SECTION_RE = re.compile(rf"^(\s*){_SECTION}:\s*(#.*)?$")
_ENTRY_RE = re.compile(r"^(\s*)([A-Za-z0-9_]+):\s*(.*)$")
_INLINE_COMMENT_RE = re.compile(r"\s+#.*$")


class ManifestParseError(Exception):
    """The manifest could not be read as a structured document."""


def parse_structured(text: str) -> dict[str, str]:
    """Parse ``dependencies`` as YAML. Raises ManifestParseError on bad structure."""
    try:
        doc = yaml.load(text, Loader=yaml.BaseLoader)  # noqa: S506 - BaseLoader builds no objects
    except yaml.YAMLError as exc:
        raise ManifestParseError(str(exc)) from exc

    if doc is None or doc == "":
        return {}
    if not isinstance(doc, dict):
        raise ManifestParseError("manifest root is not a mapping")

    section = doc.get(_SECTION)
    if section is None or section == "":
        return {}
    if not isinstance(section, dict):
        raise ManifestParseError(f"'{_SECTION}' is not a mapping")

    deps: dict[str, str] = {}
    for name, value in section.items():
        # Non-scalar entries (path/git/sdk sources) carry no version constraint.
        deps[str(name).lower()] = value.strip() if isinstance(value, str) else ""
    return deps


def parse_lines(text: str) -> dict[str, str]:
    """Heuristic parser for manifests that are not valid YAML.

    Only direct children of the top-level ``dependencies:`` block are read;
    the block ends at the first line indented no deeper than its header.
    """
    deps: dict[str, str] = {}
    section_indent: int | None = None
    child_indent: int | None = None

    for raw in text.splitlines():
        line = raw.rstrip()
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(line.lstrip())

        if section_indent is None:
            match = _SECTION_RE.match(line)
            if match and indent == 0:
                section_indent = indent
            continue

        if indent <= section_indent:
            break
        if child_indent is None:
            child_indent = indent
        if indent != child_indent:
            continue

        entry = _ENTRY_RE.match(line)
        if entry is None:
            continue
        rest = _INLINE_COMMENT_RE.sub("", entry.group(3)).strip()
        if rest.startswith(("{", "[")):
            rest = ""  # flow-style source mapping, no constraint
        deps[entry.group(2).lower()] = _unquote(rest)

    return deps


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_manifest(text: str) -> dict[str, str]:
    try:
        return parse_structured(text)
    except ManifestParseError as exc:
        log.warning("manifest_parse_fallback", reason=str(exc))
        return parse_lines(text)


class ManifestReader:
    """Reads the project's manifest fresh on every call. No caching."""

    def __init__(self, manifest_file: str = DEFAULT_MANIFEST_FILE) -> None:
        self.manifest_file = manifest_file

    def manifest_path(self, project_root: Path | str) -> Path:
        return Path(project_root) / self.manifest_file

    def exists(self, project_root: Path | str | None) -> bool:
        return project_root is not None and self.manifest_path(project_root).is_file()

    def read(self, project_root: Path | str | None) -> ManifestState:
        if project_root is None:
            return ManifestState()

        path = self.manifest_path(project_root)
        if not path.is_file():
            return ManifestState()

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            log.warning("manifest_read_error", path=str(path), exc_info=True)
            return ManifestState()

        return ManifestState(dependencies=parse_manifest(text))
