"""UploadAdapter: store images on a media host and hand back delivery URLs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

import httpx

from cloudstore.errors import ConfigurationError, DeleteError, ReadError, UploadError
from cloudstore.naming import public_id_for, resolve_public_id
from cloudstore.plan import (
    build_delivery_options,
    build_retina_options,
    build_upload_options,
    delivery_id,
    target_folder,
)
from cloudstore.providers.cloudinary import CloudinaryProvider
from cloudstore.providers.mock import MockProvider

if TYPE_CHECKING:
    from cloudstore.config import Config
    from cloudstore.image import ImageFile
    from cloudstore.providers.base import MediaProvider

logger = logging.getLogger(__name__)


def _default_provider(config: Config) -> MediaProvider:
    if config.use_mock:
        return MockProvider(cloud_name=config.cloud_name or "mock")
    if not (config.cloud_name and config.api_key and config.api_secret):
        raise ConfigurationError(
            "Cloudinary credentials are incomplete",
            hint="Build the Config through its constructor or set use_mock=True.",
        )
    return CloudinaryProvider(
        cloud_name=config.cloud_name,
        api_key=config.api_key,
        api_secret=config.api_secret,
    )


class UploadAdapter:
    """Storage adapter backed by a remote media-hosting API.

    Example:
        adapter = UploadAdapter(Config(cloud_name="demo", api_key="k", api_secret="s"))
        url = await adapter.save(ImageFile.from_path("/tmp/favicon.png"))
    """

    def __init__(
        self,
        config: Config,
        *,
        provider: MediaProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Bind the adapter to *config*.

        *provider* overrides the default media client and *transport* the HTTP
        transport used by ``read``.
        """
        self.config = config
        self.provider = provider if provider is not None else _default_provider(config)
        self._transport = transport
        self._background: set[asyncio.Task[None]] = set()

    async def save(self, image: ImageFile) -> str:
        """Upload *image* and return its delivery URL.

        Raises:
            UploadError: If the primary upload fails. The retina variant never
                fails the save.
        """
        public_id = public_id_for(image.name)
        options = build_upload_options(self.config, public_id)

        logger.debug("Uploading %s as public_id=%s", image.path, public_id)
        result = await self._upload(image.path, options)

        if self.config.retina is not None:
            retina_options = build_retina_options(options, self.config.retina)
            if self.config.retina.fire_forget:
                task = asyncio.create_task(
                    self._upload_retina(image.path, retina_options)
                )
                self._background.add(task)
                task.add_done_callback(self._background.discard)
            else:
                await self._upload_retina(image.path, retina_options)

        url = self.provider.build_url(
            delivery_id(result, public_id), build_delivery_options(self.config)
        )
        logger.debug("Delivery URL for %s: %s", image.path, url)
        return url

    async def _upload(self, path: str, options: dict[str, Any]) -> dict[str, Any]:
        try:
            return await self.provider.upload(path, options)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise UploadError(f"Could not upload image {path}", path=path) from e

    async def _upload_retina(self, path: str, options: dict[str, Any]) -> None:
        try:
            await self._upload(path, options)
        except UploadError as e:
            logger.warning(
                "Retina upload of %s as %s failed: %s",
                path,
                options.get("public_id"),
                e.__cause__ or e,
            )
        else:
            logger.debug("Uploaded retina variant %s", options.get("public_id"))

    async def drain(self) -> None:
        """Wait for background retina uploads scheduled in fire-and-forget mode."""
        while self._background:
            await asyncio.gather(*list(self._background))

    def _stored_id(self, filename: str, target_dir: str | None) -> str:
        folder = target_folder(self.config) if target_dir is None else target_dir
        return resolve_public_id(filename, folder)

    async def exists(self, filename: str, target_dir: str | None = None) -> bool:
        """Whether *filename* is stored under *target_dir* (default: the upload folder)."""
        return await self.provider.exists(self._stored_id(filename, target_dir))

    async def delete(self, filename: str, target_dir: str | None = None) -> None:
        """Delete a stored image.

        Raises:
            DeleteError: If the provider rejects the request.
        """
        public_id = self._stored_id(filename, target_dir)
        try:
            result = await self.provider.destroy(public_id, {"invalidate": True})
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise DeleteError(
                f"Could not delete image {filename}", filename=filename
            ) from e
        if result.get("result") == "not found":
            logger.debug("Nothing to delete for %s", public_id)

    async def read(self, path: str) -> bytes:
        """Download a delivered image.

        Raises:
            ReadError: On transport failure or a non-success status.
        """
        try:
            async with httpx.AsyncClient(
                transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(path)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ReadError(
                f"Could not read image {path}",
                path=path,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ReadError(f"Could not read image {path}", path=path) from e
        return response.content

    def url_for(self, filename: str, target_dir: str | None = None) -> str:
        """Build the delivery URL of an already stored image without uploading."""
        public_id = self._stored_id(filename, target_dir)
        suffix = PurePosixPath(filename).suffix
        source = f"{public_id}{suffix}"
        return self.provider.build_url(source, build_delivery_options(self.config))
