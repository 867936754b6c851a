"""Catalog building: merge manifest, document and registry into PackageRecords.

The manifest is re-read on every build. Output order is the source order
(manifest declaration order or registry relevance order); nothing here
re-sorts.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pubsuggest.capabilities import capabilities_for
from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.models.package import (
    NO_DESCRIPTION,
    PACKAGE_NAME_RE,
    ManifestState,
    PackageDetails,
    PackageRecord,
)
from pubsuggest.models.session import ViewMode
from pubsuggest.scanner import is_referenced

if TYPE_CHECKING:
    from pubsuggest.manifest import ManifestReader
    from pubsuggest.registry import RegistryClient

log = structlog.get_logger()


def actionable(records: list[PackageRecord]) -> list[PackageRecord]:
    """Drop records that are already both installed and imported."""
    return [r for r in records if not (r.is_installed and r.is_imported)]


def _matches(query: str, record: PackageRecord) -> bool:
    if query in record.name.lower():
        return True
    return record.description is not None and query in record.description.lower()


class PackageCatalogBuilder:
    def __init__(
        self,
        manifest_reader: ManifestReader,
        registry: RegistryClient,
        project_root: Path | str | None,
        *,
        strict_imports: bool = False,
        enable_registry: bool = True,
    ) -> None:
        self._manifest_reader = manifest_reader
        self._registry = registry
        self._project_root = Path(project_root) if project_root is not None else None
        self._strict_imports = strict_imports
        self._enable_registry = enable_registry

    async def build(self, query: str, document_text: str, mode: ViewMode) -> list[PackageRecord]:
        manifest = self._manifest_reader.read(self._project_root)

        if mode is ViewMode.INSTALLED_ONLY:
            records = await self._build_installed(query, document_text, manifest)
        else:
            records = await self._build_all(query, document_text, manifest)

        log.debug(
            "catalog_built",
            mode=str(mode),
            query=query,
            records=len(records),
            installed=len(manifest),
        )
        return records

    async def _build_installed(
        self, query: str, document_text: str, manifest: ManifestState
    ) -> list[PackageRecord]:
        names = []
        for name in manifest.dependencies:
            if PACKAGE_NAME_RE.match(name):
                names.append(name)
            else:
                log.debug("catalog_skip_dependency", name=name)

        if self._enable_registry:
            details = await asyncio.gather(*(self._registry.fetch_details(n) for n in names))
        else:
            details = [PackageDetails() for _ in names]

        records = [
            PackageRecord(
                name=name,
                description=detail.description,
                declared_version=manifest.constraint(name),
                latest_version=detail.latest_version,
                popularity=detail.popularity,
                capabilities=capabilities_for(name),
                is_installed=True,
                is_imported=is_referenced(document_text, name, strict=self._strict_imports),
            )
            for name, detail in zip(names, details, strict=True)
        ]

        if query:
            needle = query.lower()
            records = [r for r in records if _matches(needle, r)]
        return records

    async def _build_all(
        self, query: str, document_text: str, manifest: ManifestState
    ) -> list[PackageRecord]:
        if not self._enable_registry:
            raise PubSuggestError(
                ErrorCode.SUGGESTIONS_DISABLED,
                "Package suggestions are disabled in settings",
            )

        hits = await self._registry.search(query)

        records = []
        for hit in hits:
            installed = manifest.contains(hit.name)
            records.append(
                PackageRecord(
                    name=hit.name,
                    description=None if hit.description == NO_DESCRIPTION else hit.description,
                    declared_version=manifest.constraint(hit.name) if installed else None,
                    latest_version=hit.latest_version,
                    popularity=hit.popularity,
                    capabilities=capabilities_for(hit.name),
                    is_installed=installed,
                    is_imported=is_referenced(document_text, hit.name, strict=self._strict_imports),
                )
            )
        return records
