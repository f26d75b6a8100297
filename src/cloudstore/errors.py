"""Exception hierarchy for cloudstore."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class CloudstoreError(Exception):
    """Base exception for all cloudstore errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(CloudstoreError):
    """Configuration validation or resolution failed."""


class UploadError(CloudstoreError):
    """An image could not be uploaded to the media host.

    The message only names the local path; the provider failure is kept as
    ``__cause__``.
    """

    def __init__(self, message: str, *, path: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class DeleteError(CloudstoreError):
    """A stored image could not be deleted."""

    def __init__(
        self, message: str, *, filename: str, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.filename = filename


class ReadError(CloudstoreError):
    """A delivered image could not be downloaded."""

    def __init__(
        self,
        message: str,
        *,
        path: str,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.path = path
        self.status_code = status_code


class APIError(CloudstoreError):
    """A call to the media-hosting API failed.

    Providers attach the HTTP status and the phase of the failing call so
    callers can branch without parsing messages.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.provider = provider
        self.phase = phase


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
