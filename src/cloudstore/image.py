"""ImageFile: the local image handed to ``UploadAdapter.save``."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ImageFile:
    """A local image awaiting upload.

    Attributes:
        path: Local filesystem path of the image.
        name: Original filename as provided by the user; may contain spaces
            or other characters unsafe for a provider identifier.
    """

    path: str
    name: str

    def __post_init__(self) -> None:
        """Fail fast on descriptors that cannot be uploaded."""
        if not self.path:
            raise ValueError("ImageFile.path must be a non-empty path")
        if not self.name:
            raise ValueError("ImageFile.name must be a non-empty filename")

    @classmethod
    def from_path(
        cls, path: str | os.PathLike[str], *, name: str | None = None
    ) -> ImageFile:
        """Create an ImageFile from a local path, defaulting *name* to its basename."""
        fspath = os.fspath(path)
        return cls(path=fspath, name=name or Path(fspath).name)
