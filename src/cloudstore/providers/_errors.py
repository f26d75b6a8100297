"""Shared provider-side error helpers.

Providers map SDK exceptions into APIError so callers get a stable status
code and phase without matching on message text.
"""

from __future__ import annotations

import asyncio

from cloudstore.errors import APIError, _walk_exception_chain

# cloudinary.exceptions carry no status attribute; the class encodes it.
_SDK_STATUS_BY_CLASS: dict[str, int] = {
    "BadRequest": 400,
    "AuthorizationRequired": 401,
    "NotAllowed": 403,
    "NotFound": 404,
    "AlreadyExists": 409,
    "RateLimited": 420,
    "GeneralError": 500,
}


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("http_code", "status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
        for cls in type(e).__mro__:
            if cls.__name__ in _SDK_STATUS_BY_CLASS:
                return _SDK_STATUS_BY_CLASS[cls.__name__]
    return None


def _auth_hint(status_code: int | None) -> str | None:
    if status_code in {401, 403}:
        return (
            "Check credentials/permissions "
            "(try setting CLOUDINARY_URL or Config.api_key/api_secret)."
        )
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
    hint: str | None = None,
) -> APIError:
    """Map provider SDK exceptions into APIError with status metadata."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped — fill in missing context only.
    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = provider
        if exc.phase is None:
            exc.phase = phase
        if hint is not None and exc.hint is None:
            exc.hint = hint
        return exc

    status_code = extract_status_code(exc)
    msg = message or f"{provider} {phase} failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return APIError(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=hint if hint is not None else _auth_hint(status_code),
        status_code=status_code,
        provider=provider,
        phase=phase,
    )
