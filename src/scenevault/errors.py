"""
errors.py

Typed exception hierarchy for SceneVault.

Every error carries:
- code          provider-style code string (e.g. QUOTA_EXCEEDED)
- user_message  short, actionable text safe to show to the user

Provider and store modules translate transport errors into these at
their seam; orchestration code lets them propagate.
"""

from __future__ import annotations

from typing import Optional


class SceneVaultError(Exception):
    """Base exception for all SceneVault operations."""

    default_code = "UNKNOWN"
    default_message = "Something went wrong. Please try again."

    def __init__(
        self,
        user_message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.user_message = user_message or self.default_message
        self.code = code or self.default_code
        self.detail = detail
        super().__init__(self.user_message)

    # Credential errors override this to point the user at settings.
    settings_hint = False


class ValidationError(SceneVaultError):
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid input."


class CredentialError(SceneVaultError):
    default_code = "INVALID_API_KEY"
    default_message = "Invalid YouTube API key. Please check your API key in Settings."
    settings_hint = True


class QuotaError(SceneVaultError):
    default_code = "QUOTA_EXCEEDED"
    default_message = "YouTube API quota exceeded. Please try again tomorrow."


class NotFoundError(SceneVaultError):
    default_code = "PLAYLIST_NOT_FOUND"
    default_message = "Playlist not found or is private. Please check the URL."


class SizeLimitError(SceneVaultError):
    default_code = "PLAYLIST_TOO_LARGE"
    default_message = (
        "Playlist is too large (500+ videos). Please select a smaller playlist."
    )


class NetworkError(SceneVaultError):
    default_code = "NETWORK_ERROR"
    default_message = (
        "Network error while fetching playlist. "
        "Please check your connection and try again."
    )


class PersistenceError(SceneVaultError):
    default_code = "PERSISTENCE_ERROR"
    default_message = "Failed to save changes. Please try again."


class ParseError(SceneVaultError):
    default_code = "PARSE_ERROR"
    default_message = "Invalid import file."


# Classified provider error code -> exception class
_CODE_TO_ERROR = {
    "INVALID_API_KEY": CredentialError,
    "MISSING_API_KEY": CredentialError,
    "QUOTA_EXCEEDED": QuotaError,
    "PLAYLIST_NOT_FOUND": NotFoundError,
    "NO_VIDEOS_FOUND": NotFoundError,
    "PLAYLIST_TOO_LARGE": SizeLimitError,
    "NETWORK_ERROR": NetworkError,
}


def error_for_code(
    code: str, user_message: Optional[str] = None, detail: Optional[str] = None
) -> SceneVaultError:
    cls = _CODE_TO_ERROR.get(code, SceneVaultError)
    return cls(user_message, code=code, detail=detail)


__all__ = [
    "SceneVaultError",
    "ValidationError",
    "CredentialError",
    "QuotaError",
    "NotFoundError",
    "SizeLimitError",
    "NetworkError",
    "PersistenceError",
    "ParseError",
    "error_for_code",
]
