"""pub.dev registry client.

``search`` is the only call allowed to fail visibly: without it there is
nothing to show. ``fetch_details`` is enrichment and degrades to an empty
``PackageDetails`` on any network, status or payload problem.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any

import httpx
import structlog

from pubsuggest import __version__
from pubsuggest.config import RegistrySettings
from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.models.package import NO_DESCRIPTION, PACKAGE_NAME_RE, PackageDetails, SearchHit

log = structlog.get_logger()


def build_http_client(settings: RegistrySettings | None = None) -> httpx.AsyncClient:
    settings = settings or RegistrySettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={
            "User-Agent": f"pubsuggest/{__version__}",
            "Accept": "application/json",
        },
        follow_redirects=True,
    )


def _popularity(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        score = float(value)
    except OverflowError:
        return None
    return score if math.isfinite(score) else None


def _parse_details(payload: Any) -> PackageDetails:
    """Pull the fields we care about out of a /packages/<name> body.

    Every field is optional; wrong types are treated as missing.
    """
    if not isinstance(payload, dict):
        return PackageDetails()

    latest = payload.get("latest")
    latest = latest if isinstance(latest, dict) else {}
    pubspec = latest.get("pubspec")
    pubspec = pubspec if isinstance(pubspec, dict) else {}

    version = latest.get("version")
    description = pubspec.get("description")
    popularity = _popularity(payload.get("popularityScore"))

    return PackageDetails(
        description=description.strip() if isinstance(description, str) and description.strip() else None,
        latest_version=version if isinstance(version, str) and version else None,
        popularity=popularity,
    )


class RegistryClient:
    """Search and detail lookups against the registry's JSON API."""

    def __init__(self, client: httpx.AsyncClient, settings: RegistrySettings | None = None) -> None:
        self._client = client
        self._settings = settings or RegistrySettings()
        self._base_url = self._settings.base_url.rstrip("/")
        self._detail_slots = asyncio.Semaphore(self._settings.max_results)

    async def search(self, query: str) -> list[SearchHit]:
        """Return up to ``max_results`` hits in registry relevance order.

        Detail lookups for every hit run concurrently; the call returns once
        all of them have settled.
        """
        url = f"{self._base_url}/search"
        try:
            response = await self._client.get(url, params={"q": query})
        except httpx.HTTPError as exc:
            log.warning("registry_search_error", query=query, error=str(exc))
            raise PubSuggestError(
                ErrorCode.REGISTRY_UNAVAILABLE,
                f"Failed to search for packages: {exc}",
                recoverable=True,
            ) from exc

        if response.status_code != 200:
            log.warning("registry_search_status", query=query, status=response.status_code)
            raise PubSuggestError(
                ErrorCode.REGISTRY_UNAVAILABLE,
                f"Request failed with status code {response.status_code}",
                recoverable=True,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise PubSuggestError(
                ErrorCode.REGISTRY_UNAVAILABLE,
                "Registry returned a malformed search response",
                recoverable=True,
            ) from exc

        packages = payload.get("packages") if isinstance(payload, dict) else None
        if not isinstance(packages, list):
            raise PubSuggestError(
                ErrorCode.REGISTRY_UNAVAILABLE,
                "Registry search response has no package list",
                recoverable=True,
            )

        entries: list[tuple[str, str | None]] = []
        for entry in packages[: self._settings.max_results]:
            if not isinstance(entry, dict):
                continue
            name = entry.get("package")
            if not isinstance(name, str) or not PACKAGE_NAME_RE.match(name):
                log.debug("registry_search_skip_entry", entry=entry)
                continue
            description = entry.get("description")
            entries.append((name, description if isinstance(description, str) else None))

        details = await asyncio.gather(*(self.fetch_details(name) for name, _ in entries))

        hits = [
            SearchHit(
                name=name,
                description=description or detail.description or NO_DESCRIPTION,
                latest_version=detail.latest_version,
                popularity=detail.popularity,
            )
            for (name, description), detail in zip(entries, details, strict=True)
        ]
        log.debug("registry_search_complete", query=query, hits=len(hits))
        return hits

    async def fetch_details(self, name: str) -> PackageDetails:
        """Best-effort details for one package. Never raises."""
        url = f"{self._base_url}/packages/{name}"
        async with self._detail_slots:
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as exc:
                log.debug("registry_details_error", package=name, error=str(exc))
                return PackageDetails()

        if response.status_code != 200:
            log.debug("registry_details_status", package=name, status=response.status_code)
            return PackageDetails()

        try:
            payload = response.json()
        except ValueError:
            log.debug("registry_details_malformed", package=name)
            return PackageDetails()

        return _parse_details(payload)
