"""Mock provider for testing and offline development."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any

_DELIVERY_HOST = "res.cloudinary.com"


class MockProvider:
    """In-memory provider that never touches the network.

    Uploaded assets are remembered so ``exists``/``destroy`` behave like the
    real service within one process. URLs follow Cloudinary's delivery layout.
    """

    def __init__(self, cloud_name: str = "mock") -> None:
        """Create an empty in-memory store for *cloud_name*."""
        self.cloud_name = cloud_name
        self.assets: dict[str, dict[str, Any]] = {}

    async def upload(self, path: str, options: dict[str, Any]) -> dict[str, Any]:
        """Record the upload and return a Cloudinary-shaped result."""
        source = PurePath(path)
        public_id = options.get("public_id") or source.stem
        folder = (options.get("folder") or "").strip("/")
        full_id = f"{folder}/{public_id}" if folder else public_id
        fmt = source.suffix.lstrip(".") or "jpg"
        path_part = f"image/upload/v1/{full_id}.{fmt}"
        result = {
            "public_id": full_id,
            "format": fmt,
            "tags": list(options.get("tags") or []),
            "url": f"http://{_DELIVERY_HOST}/{self.cloud_name}/{path_part}",
            "secure_url": f"https://{_DELIVERY_HOST}/{self.cloud_name}/{path_part}",
        }
        self.assets[full_id] = result
        return result

    def build_url(self, public_id: str, options: dict[str, Any]) -> str:
        """Return a Cloudinary-style delivery URL."""
        scheme = "https" if options.get("secure") else "http"
        transforms = []
        if options.get("fetch_format"):
            transforms.append(f"f_{options['fetch_format']}")
        if options.get("quality"):
            transforms.append(f"q_{options['quality']}")
        segment = f"{','.join(transforms)}/" if transforms else ""
        return (
            f"{scheme}://{_DELIVERY_HOST}/{self.cloud_name}/image/upload/"
            f"{segment}{public_id}"
        )

    async def exists(self, public_id: str) -> bool:
        """Whether *public_id* was uploaded to this mock."""
        return public_id in self.assets

    async def destroy(self, public_id: str, options: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        """Forget *public_id*; mirrors Cloudinary's ``not found`` result."""
        if self.assets.pop(public_id, None) is None:
            return {"result": "not found"}
        return {"result": "ok"}
