"""Pure derivation of provider options from a Config.

Every branch on legacy/default/retina configuration lives here so the
adapter's call sequence stays linear.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from cloudstore.naming import dated_folder

if TYPE_CHECKING:
    from cloudstore.config import Config, RetinaOptions

RETINA_SUFFIX = "@2x"
RETINA_SCALE = 2


def target_folder(config: Config, now: datetime | None = None) -> str:
    """Return the upload folder, with ``YYYY/MM`` appended when dated folders are on."""
    if config.use_dated_folder:
        return dated_folder(config.folder, now)
    return config.folder


def build_upload_options(
    config: Config, public_id: str, *, now: datetime | None = None
) -> dict[str, Any]:
    """Build the upload request options for one image.

    Default mode always sends ``folder`` and ``tags``, empty when unset.
    Legacy mode sends them only when configured, since the provider treats
    an absent field differently from an empty one.
    """
    options: dict[str, Any] = {
        "use_filename": True,
        "unique_filename": bool(config.legacy),
        "phash": True,
        "overwrite": False,
        "invalidate": True,
    }
    folder = target_folder(config, now)
    if not config.legacy or folder:
        options["folder"] = folder
    if not config.legacy or config.tags:
        options["tags"] = list(config.tags)
    options["public_id"] = public_id
    return options


def build_retina_options(
    upload_options: dict[str, Any], retina: RetinaOptions
) -> dict[str, Any]:
    """Derive the ``@2x`` variant's upload options from the primary ones."""
    options = dict(upload_options)
    if "tags" in options:
        options["tags"] = list(options["tags"])
    options["public_id"] = f"{upload_options['public_id']}{RETINA_SUFFIX}"
    options["transformation"] = [
        {"width": retina.base_width * RETINA_SCALE, "crop": "scale"}
    ]
    return options


def build_delivery_options(config: Config) -> dict[str, Any]:
    """Build URL-builder options (automatic quality, scheme, format)."""
    options: dict[str, Any] = {"quality": config.quality, "secure": bool(config.secure)}
    if config.fetch_format:
        options["fetch_format"] = config.fetch_format
    return options


def delivery_id(result: dict[str, Any], fallback: str) -> str:
    """Return the asset path to build a URL for from an upload result.

    The provider's ``public_id`` already includes the folder; the format is
    appended as the file extension when reported.
    """
    public_id = result.get("public_id") or fallback
    fmt = result.get("format")
    return f"{public_id}.{fmt}" if fmt else str(public_id)
