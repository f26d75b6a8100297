"""Filename normalization and target folder helpers."""

from __future__ import annotations

from datetime import datetime
from pathlib import PurePosixPath
import re

# Anything outside ASCII word characters, "@" and "." becomes a hyphen.
_UNSAFE_CHARS_RE = re.compile(r"[^\w@.]", re.ASCII)


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in a provider identifier with ``-``.

    The mapping is one character to one character, so the result is stable
    across calls and sanitizing twice is a no-op.

    Example:
        >>> sanitize_filename("favicon with spaces.png")
        'favicon-with-spaces.png'
    """
    return _UNSAFE_CHARS_RE.sub("-", name)


def public_id_for(name: str) -> str:
    """Return the provider ``public_id`` for an original filename.

    The name is sanitized and its final extension stripped.

    Example:
        >>> public_id_for("favicon with spaces.png")
        'favicon-with-spaces'
    """
    return PurePosixPath(sanitize_filename(name)).stem


def dated_folder(base: str, now: datetime | None = None) -> str:
    """Append ``YYYY/MM`` to *base*, dropping the separator when *base* is empty."""
    now = now or datetime.now()
    suffix = f"{now:%Y}/{now:%m}"
    base = base.rstrip("/")
    return f"{base}/{suffix}" if base else suffix


def resolve_public_id(filename: str, folder: str = "") -> str:
    """Return the full ``public_id`` of a stored file inside *folder*."""
    stem = public_id_for(PurePosixPath(filename).name)
    folder = folder.strip("/")
    return f"{folder}/{stem}" if folder else stem
