"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker handling,
test doubles and sample data. Isolation fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import Any

import pytest

from cloudstore.config import Config
from cloudstore.image import ImageFile

# =============================================================================
# Sample Data
# =============================================================================

CLOUD_NAME = "blog-mornati-net"
BASE_URL = f"http://res.cloudinary.com/{CLOUD_NAME}/image/upload"


def sample_api_result(**overrides: Any) -> dict[str, Any]:
    """Return an upload payload shaped like Cloudinary's response."""
    result: dict[str, Any] = {
        "public_id": "favicon",
        "version": 1505580646,
        "signature": "4b6e52c5aa8fdc0e33c1a4c1df3b3bd0e63a1b4c",
        "width": 48,
        "height": 48,
        "format": "png",
        "resource_type": "image",
        "created_at": "2017-09-16T16:50:46Z",
        "tags": [],
        "bytes": 1150,
        "type": "upload",
        "etag": "0a6bd2f1ab8ba6f6d9a1c2cda3f4dc9d",
        "placeholder": False,
        "url": f"{BASE_URL}/v1505580646/favicon.png",
        "secure_url": f"https://res.cloudinary.com/{CLOUD_NAME}/image/upload/v1505580646/favicon.png",
        "original_filename": "favicon",
    }
    result.update(overrides)
    return result


# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeProvider:
    """Provider test double that records calls and replays scripted results.

    ``upload_script`` items are consumed in order; exceptions are raised.
    Once the script is exhausted, ``sample_api_result()`` is returned.
    """

    url: str | None = None
    upload_script: list[dict[str, Any] | BaseException] = field(default_factory=list)
    upload_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    url_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    stored: set[str] = field(default_factory=set)
    destroy_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    destroy_result: dict[str, Any] | BaseException = field(
        default_factory=lambda: {"result": "ok"}
    )

    async def upload(self, path: str, options: dict[str, Any]) -> dict[str, Any]:
        self.upload_calls.append((path, options))
        if not self.upload_script:
            return sample_api_result()
        item = self.upload_script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def build_url(self, public_id: str, options: dict[str, Any]) -> str:
        self.url_calls.append((public_id, options))
        if self.url is not None:
            return self.url
        return f"{BASE_URL}/q_{options.get('quality')}/{public_id}"

    async def exists(self, public_id: str) -> bool:
        return public_id in self.stored

    async def destroy(self, public_id: str, options: dict[str, Any]) -> dict[str, Any]:
        self.destroy_calls.append((public_id, options))
        if isinstance(self.destroy_result, BaseException):
            raise self.destroy_result
        return self.destroy_result


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Return a fresh FakeProvider."""
    return FakeProvider()


@pytest.fixture
def sample_config() -> Config:
    """Modern (non-legacy) configuration with explicit credentials."""
    return Config(cloud_name=CLOUD_NAME, api_key="123456789012345", api_secret="secret")


@pytest.fixture
def legacy_config() -> Config:
    """Legacy configuration parsed from the flat settings shape."""
    return Config.from_mapping(
        {
            "cloud_name": CLOUD_NAME,
            "api_key": "123456789012345",
            "api_secret": "secret",
        }
    )


@pytest.fixture
def mock_image() -> ImageFile:
    return ImageFile(path="/tmp/favicon.png", name="favicon.png")


@pytest.fixture
def mock_image_with_spaces() -> ImageFile:
    return ImageFile(path="/tmp/favicon with spaces.png", name="favicon with spaces.png")


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    cloudstore.config already ran ``load_dotenv()`` when conftest imported it;
    any ``CLOUDINARY_*`` values it loaded are removed by
    ``isolate_provider_env``. This fixture stubs later calls, including the
    name bound in ``cloudstore.config``.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    stub = lambda *_args, **_kwargs: False  # noqa: E731
    with suppress(Exception):
        monkeypatch.setattr("dotenv.load_dotenv", stub, raising=False)
    monkeypatch.setattr("cloudstore.config.load_dotenv", stub)


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Clear CLOUDINARY_* variables so credentials only come from the test.

    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("CLOUDINARY_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)
