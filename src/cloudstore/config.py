"""Configuration: frozen adapter settings with environment-resolved credentials."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
import os
from typing import Any
from urllib.parse import urlparse

from dotenv import load_dotenv

from cloudstore.errors import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

_CREDENTIAL_ENV_VARS: dict[str, str] = {
    "cloud_name": "CLOUDINARY_CLOUD_NAME",
    "api_key": "CLOUDINARY_API_KEY",
    "api_secret": "CLOUDINARY_API_SECRET",
}
_CLOUDINARY_URL_ENV = "CLOUDINARY_URL"

_MODERN_KEYS = frozenset({"auth", "upload", "fetch", "rjs", "useDatedFolder", "legacy"})
_LEGACY_KEYS = frozenset(
    {"cloud_name", "api_key", "api_secret", "secure", "folder", "tags"}
)


@dataclass(frozen=True)
class RetinaOptions:
    """Settings for the extra high-density (``@2x``) upload.

    Attributes:
        base_width: Width in CSS pixels the image is displayed at; the retina
            variant is scaled to twice this width.
        fire_forget: Schedule the variant upload in the background instead of
            awaiting it inside ``save``.
    """

    base_width: int
    fire_forget: bool = False

    def __post_init__(self) -> None:
        """Reject widths that cannot produce a resize transformation."""
        if not isinstance(self.base_width, int) or isinstance(self.base_width, bool):
            raise ConfigurationError(
                f"retina base_width must be an integer, got {self.base_width!r}"
            )
        if self.base_width < 1:
            raise ConfigurationError(
                f"retina base_width must be ≥ 1, got {self.base_width}",
                hint="Set rjs.baseWidth to the display width of your images.",
            )


@dataclass(frozen=True)
class Config:
    """Immutable configuration for an ``UploadAdapter``.

    Credentials left as *None* are resolved from ``CLOUDINARY_CLOUD_NAME``,
    ``CLOUDINARY_API_KEY`` and ``CLOUDINARY_API_SECRET``, then from
    ``CLOUDINARY_URL``.

    Example:
        config = Config(cloud_name="demo", api_key="123", api_secret="s3cr3t")
        legacy = Config(cloud_name="demo", api_key="123", api_secret="s3cr3t", legacy=True)
    """

    cloud_name: str | None = None
    api_key: str | None = None
    api_secret: str | None = None
    folder: str = ""
    tags: tuple[str, ...] = ()
    legacy: bool = False
    retina: RetinaOptions | None = None
    #: Delivery quality; ``"auto"`` by default, ``"auto:good"`` in legacy mode.
    quality: str | None = None
    #: HTTPS delivery URLs; off by default, on in legacy mode.
    secure: bool | None = None
    fetch_format: str | None = None
    use_dated_folder: bool = False
    use_mock: bool = False

    def __post_init__(self) -> None:
        """Normalize collections, resolve credentials and validate."""
        if isinstance(self.tags, str):
            raise ConfigurationError(
                f"tags must be a sequence of strings, got {self.tags!r}",
                hint="Use tags=['blog', 'images'] rather than a single string.",
            )
        object.__setattr__(self, "tags", tuple(self.tags or ()))
        object.__setattr__(self, "folder", self.folder or "")

        if self.quality is None:
            object.__setattr__(self, "quality", "auto:good" if self.legacy else "auto")
        if self.secure is None:
            object.__setattr__(self, "secure", bool(self.legacy))

        if self.use_mock:
            return

        from_url = _credentials_from_url(os.environ.get(_CLOUDINARY_URL_ENV))
        for name, env_var in _CREDENTIAL_ENV_VARS.items():
            if getattr(self, name) is None:
                resolved = os.environ.get(env_var) or from_url.get(name)
                object.__setattr__(self, name, resolved)

        missing = [name for name in _CREDENTIAL_ENV_VARS if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing Cloudinary credentials: {', '.join(missing)}",
                hint=(
                    "Pass them explicitly, set CLOUDINARY_CLOUD_NAME/"
                    "CLOUDINARY_API_KEY/CLOUDINARY_API_SECRET, or set "
                    "CLOUDINARY_URL=cloudinary://<key>:<secret>@<cloud>."
                ),
            )

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any], **overrides: Any) -> Config:
        """Build a Config from Ghost-style storage settings.

        The modern shape nests credentials under ``auth`` and options under
        ``upload``/``fetch``/``rjs``. A mapping without ``auth`` but with
        top-level ``cloud_name``/``api_key``/``api_secret`` is the legacy
        shape and implies ``legacy=True``.
        """
        if not isinstance(settings, Mapping):
            raise ConfigurationError(
                f"storage settings must be a mapping, got {type(settings).__name__}"
            )

        if "auth" not in settings and any(k in settings for k in _CREDENTIAL_ENV_VARS):
            kwargs = _parse_legacy(settings)
        else:
            kwargs = _parse_modern(settings)
        kwargs.update(overrides)
        return cls(**kwargs)

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(cloud_name={self.cloud_name!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"api_secret={'[REDACTED]' if self.api_secret else None}, "
            f"folder={self.folder!r}, tags={self.tags!r}, legacy={self.legacy}, "
            f"retina={self.retina!r}, use_mock={self.use_mock})"
        )

    __repr__ = __str__


def _credentials_from_url(url: str | None) -> dict[str, str]:
    """Split ``cloudinary://<key>:<secret>@<cloud>`` into credential fields."""
    if not url:
        return {}
    parsed = urlparse(url)
    if parsed.scheme != "cloudinary" or not parsed.hostname:
        raise ConfigurationError(
            f"Invalid {_CLOUDINARY_URL_ENV}: expected cloudinary://<key>:<secret>@<cloud>"
        )
    creds = {"cloud_name": parsed.hostname}
    if parsed.username:
        creds["api_key"] = parsed.username
    if parsed.password:
        creds["api_secret"] = parsed.password
    return creds


def _section(settings: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = settings.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' settings must be a mapping")
    return value


def _retina_from(rjs: Mapping[str, Any]) -> RetinaOptions | None:
    if not rjs or rjs.get("baseWidth") is None:
        return None
    return RetinaOptions(
        base_width=rjs["baseWidth"], fire_forget=bool(rjs.get("fireForget", False))
    )


def _tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _log_ignored(keys: set[str], where: str) -> None:
    if keys:
        logger.debug("Ignoring unknown %s settings: %s", where, sorted(keys))


def _parse_modern(settings: Mapping[str, Any]) -> dict[str, Any]:
    _log_ignored(set(settings) - _MODERN_KEYS, "storage")
    auth = _section(settings, "auth")
    upload = _section(settings, "upload")
    fetch = _section(settings, "fetch")
    # Fixed upload flags are not configurable; anything besides folder/tags is dropped.
    _log_ignored(set(upload) - {"folder", "tags"}, "upload")

    kwargs: dict[str, Any] = {
        "cloud_name": auth.get("cloud_name"),
        "api_key": auth.get("api_key"),
        "api_secret": auth.get("api_secret"),
        "folder": upload.get("folder") or "",
        "tags": _tags(upload.get("tags")),
        "legacy": bool(settings.get("legacy", False)),
        "retina": _retina_from(_section(settings, "rjs")),
        "use_dated_folder": bool(settings.get("useDatedFolder", False)),
    }
    if fetch.get("quality") is not None:
        kwargs["quality"] = fetch["quality"]
    if fetch.get("secure") is not None:
        kwargs["secure"] = bool(fetch["secure"])
    if fetch.get("fetch_format") is not None:
        kwargs["fetch_format"] = fetch["fetch_format"]
    return kwargs


def _parse_legacy(settings: Mapping[str, Any]) -> dict[str, Any]:
    _log_ignored(set(settings) - _LEGACY_KEYS, "legacy storage")
    kwargs: dict[str, Any] = {
        "cloud_name": settings.get("cloud_name"),
        "api_key": settings.get("api_key"),
        "api_secret": settings.get("api_secret"),
        "folder": settings.get("folder") or "",
        "tags": _tags(settings.get("tags")),
        "legacy": True,
    }
    if settings.get("secure") is not None:
        kwargs["secure"] = bool(settings["secure"])
    return kwargs
