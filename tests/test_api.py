"""Live round trip against a real Cloudinary account.

Skipped unless ENABLE_API_TESTS=1 and CLOUDINARY_URL (or the split
CLOUDINARY_* variables) are set.
"""

from __future__ import annotations

import base64
import uuid

import pytest

from cloudstore import Config, ImageFile, UploadAdapter

pytestmark = pytest.mark.api

# 1x1 transparent PNG
_PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.mark.asyncio
async def test_save_exists_delete_round_trip(tmp_path) -> None:
    name = f"cloudstore test {uuid.uuid4().hex[:8]}.png"
    path = tmp_path / name
    path.write_bytes(_PIXEL_PNG)
    adapter = UploadAdapter(Config(folder="cloudstore-tests"))

    url = await adapter.save(ImageFile.from_path(path))
    try:
        assert "q_auto" in url
        assert await adapter.exists(name) is True
        assert await adapter.read(url)
    finally:
        await adapter.delete(name)
