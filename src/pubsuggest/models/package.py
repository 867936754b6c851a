from __future__ import annotations

import math
import re

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

PACKAGE_NAME_RE = re.compile(r"^[A-Za-z0-9_]+\Z")

NO_DESCRIPTION = "No description available"


def _validate_package_name(v: str) -> str:
    if not PACKAGE_NAME_RE.match(v):
        raise ValueError(f"Invalid package name: {v!r}")
    return v


class PackageDetails(BaseModel):
    """Best-effort enrichment from the registry's package endpoint.

    An instance with every field ``None`` means "no data".
    """

    model_config = ConfigDict(frozen=True)

    description: str | None = None
    latest_version: str | None = None
    popularity: float | None = None

    @field_validator("popularity")
    @classmethod
    def clamp_popularity(cls, v: float | None) -> float | None:
        if v is None or not math.isfinite(v):
            return None
        return min(max(v, 0.0), 1.0)

    @property
    def is_empty(self) -> bool:
        return self.description is None and self.latest_version is None and self.popularity is None


class SearchHit(BaseModel):
    """Registry-only view of a package: no installed/imported annotation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = NO_DESCRIPTION
    latest_version: str | None = None
    popularity: float | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_package_name(v)


class PackageRecord(BaseModel):
    """Annotated catalog entry handed to the view layer. Never mutated."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    declared_version: str | None = None  # Raw constraint from the manifest
    latest_version: str | None = None
    popularity: float | None = None  # 0.0–1.0
    capabilities: tuple[str, ...] = ()
    is_installed: bool = False
    is_imported: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_package_name(v)

    @model_validator(mode="after")
    def declared_version_requires_install(self) -> PackageRecord:
        if self.declared_version is not None and not self.is_installed:
            raise ValueError("declared_version is only set for installed packages")
        return self

    @property
    def key(self) -> str:
        """Case-insensitive identity used for comparisons."""
        return self.name.lower()

    @property
    def display_description(self) -> str:
        return self.description or NO_DESCRIPTION


class ManifestState(BaseModel):
    """Parsed ``dependencies`` section of the manifest.

    Keys are lower-cased package names in declaration order, values are the
    raw version-constraint strings.
    """

    dependencies: dict[str, str] = {}

    def contains(self, name: str) -> bool:
        return name.lower() in self.dependencies

    def constraint(self, name: str) -> str | None:
        return self.dependencies.get(name.lower())

    def __len__(self) -> int:
        return len(self.dependencies)
