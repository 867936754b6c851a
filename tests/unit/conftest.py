"""Unit-specific fixtures (no network; HTTP is mocked with respx)."""

from __future__ import annotations

import httpx
import pytest

from pubsuggest.registry import RegistryClient


@pytest.fixture()
async def registry():
    """RegistryClient over a real AsyncClient; tests mock routes with respx."""
    async with httpx.AsyncClient() as client:
        yield RegistryClient(client)
