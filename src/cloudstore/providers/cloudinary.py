"""Cloudinary provider implementation."""

from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace
from typing import Any

from cloudstore.errors import APIError
from cloudstore.providers._errors import extract_status_code, wrap_provider_error

logger = logging.getLogger(__name__)

PROVIDER_NAME = "cloudinary"


class CloudinaryProvider:
    """Cloudinary upload API provider.

    Credentials are held by the instance and passed on every SDK call, so
    ``cloudinary.config()`` is never mutated and several providers with
    different accounts can coexist in one process.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str) -> None:
        """Create provider for one Cloudinary account."""
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self._sdk_modules: Any = None

    def __repr__(self) -> str:
        return f"CloudinaryProvider(cloud_name={self.cloud_name!r})"

    def _sdk(self) -> Any:
        """Lazy-import the cloudinary SDK modules."""
        if self._sdk_modules is None:
            try:
                import cloudinary.api
                import cloudinary.exceptions
                import cloudinary.uploader
                import cloudinary.utils
            except ImportError as e:
                raise APIError(
                    "cloudinary package not installed",
                    hint="pip install cloudinary",
                    provider=PROVIDER_NAME,
                ) from e

            self._sdk_modules = SimpleNamespace(
                api=cloudinary.api,
                exceptions=cloudinary.exceptions,
                uploader=cloudinary.uploader,
                utils=cloudinary.utils,
            )
        return self._sdk_modules

    def _credentials(self) -> dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    async def upload(self, path: str, options: dict[str, Any]) -> dict[str, Any]:
        """Upload a local file to Cloudinary."""
        sdk = self._sdk()
        try:
            result = await asyncio.to_thread(
                sdk.uploader.upload, path, **options, **self._credentials()
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=PROVIDER_NAME,
                phase="upload",
                message="Cloudinary upload failed",
            ) from e

        if not isinstance(result, dict):
            raise APIError(
                "Cloudinary upload returned an unexpected payload",
                provider=PROVIDER_NAME,
                phase="upload",
            )
        # The REST API can also report failures in the payload itself.
        if result.get("error"):
            error = result["error"]
            detail = error.get("message") if isinstance(error, dict) else str(error)
            raise APIError(
                f"Cloudinary upload failed: {detail}",
                provider=PROVIDER_NAME,
                phase="upload",
            )
        return result

    def build_url(self, public_id: str, options: dict[str, Any]) -> str:
        """Build a delivery URL with ``cloudinary.utils.cloudinary_url``."""
        sdk = self._sdk()
        url, _unused = sdk.utils.cloudinary_url(
            public_id, cloud_name=self.cloud_name, **options
        )
        return url

    async def exists(self, public_id: str) -> bool:
        """Look the resource up via the Admin API; ``NotFound`` means absent."""
        sdk = self._sdk()
        try:
            await asyncio.to_thread(
                sdk.api.resource, public_id, **self._credentials()
            )
        except asyncio.CancelledError:
            raise
        except sdk.exceptions.NotFound:
            return False
        except Exception as e:
            if extract_status_code(e) == 404:
                return False
            raise wrap_provider_error(
                e,
                provider=PROVIDER_NAME,
                phase="exists",
                message="Cloudinary resource lookup failed",
            ) from e
        return True

    async def destroy(self, public_id: str, options: dict[str, Any]) -> dict[str, Any]:
        """Delete a resource with ``cloudinary.uploader.destroy``."""
        sdk = self._sdk()
        try:
            result = await asyncio.to_thread(
                sdk.uploader.destroy, public_id, **options, **self._credentials()
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=PROVIDER_NAME,
                phase="destroy",
                message="Cloudinary destroy failed",
            ) from e
        logger.debug("Cloudinary destroy %s -> %s", public_id, result)
        return result if isinstance(result, dict) else {"result": result}
