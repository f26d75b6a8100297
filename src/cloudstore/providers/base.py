"""Provider protocol: minimal interface for media-hosting APIs."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MediaProvider(Protocol):
    """Minimal provider protocol: upload, build_url, exists, destroy."""

    async def upload(self, path: str, options: dict[str, Any]) -> dict[str, Any]:
        """Upload a local file and return the provider's result payload."""
        ...

    def build_url(self, public_id: str, options: dict[str, Any]) -> str:
        """Derive a delivery URL for *public_id* without a network call."""
        ...

    async def exists(self, public_id: str) -> bool:
        """Whether an asset with *public_id* is stored."""
        ...

    async def destroy(self, public_id: str, options: dict[str, Any]) -> dict[str, Any]:
        """Delete the asset with *public_id* and return the provider's result."""
        ...
