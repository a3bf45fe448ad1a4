"""Error taxonomy for the hidden gems pipeline."""
from typing import Optional

import httpx


class HiddenGemsError(Exception):
    """Base class for pipeline errors.

    `user_message` is the text shown to the user when the error is surfaced.
    """

    user_message = "Something went wrong"

    def __init__(self, detail: Optional[str] = None, user_message: Optional[str] = None):
        super().__init__(detail or user_message or self.user_message)
        self.detail = detail
        if user_message:
            self.user_message = user_message


class ListFetchFailed(HiddenGemsError):
    """The gem list could not be fetched. Prior store content is kept."""

    user_message = "Failed to load hidden gems"


class AuthRequired(HiddenGemsError):
    """Submission attempted without an authenticated session."""

    user_message = "Please sign in to share a hidden gem"


class InvalidSubmission(HiddenGemsError):
    """The submitted form is rejected before any network call."""

    user_message = "Invalid submission"


class UploadFailed(HiddenGemsError):
    """The attached image could not be stored."""

    user_message = "Failed to upload image. Please try again."


class CreateFailed(HiddenGemsError):
    """The backend refused or failed to persist the gem."""

    user_message = "Failed to share hidden gem"


class GeocodeUnresolved(HiddenGemsError):
    """An address could not be geocoded. Never escapes the resolver."""

    user_message = "Could not locate that address"


class PhotoResolutionFailed(HiddenGemsError):
    """No fallback photo could be found. Never escapes the resolver."""

    user_message = "No photo available"


def describe_lookup_failure(exc: Exception) -> str:
    """Short reason for a failed third-party lookup.

    httpx errors stringify with the request URL, which carries the API key,
    so only the status code or the exception type is reported for them.
    """
    if isinstance(exc, HiddenGemsError):
        return str(exc)
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return type(exc).__name__
