"""Error taxonomy shared by services and form endpoints.

Every error carries a message that is safe to show to the person submitting
the form. Form endpoints turn these into a redirect back to the page the form
came from with the message in the ``error`` query parameter.
"""

from __future__ import annotations

from urllib.parse import quote

SERVER_ERROR_MESSAGE = "Server error"


class ForumError(Exception):
    """Base exception for all user-facing forum errors."""

    default_message = SERVER_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ForumError):
    """A submitted field is empty, oversized or malformed."""

    default_message = "Invalid input"


class AuthorizationError(ForumError):
    """The viewer's role or ownership does not allow the action."""

    default_message = "You are not allowed to do that"


class ConfirmationMismatchError(ForumError):
    """The echoed confirmation string differs from the stored value."""

    default_message = "Confirmation string does not match"


class NotFoundError(ForumError):
    """A referenced entity does not exist."""

    default_message = "Not found"


class ConflictError(ForumError):
    """A unique value (username, email) is already taken."""

    default_message = "Already taken"


class ExternalServiceError(ForumError):
    """Mail delivery or image processing failed."""

    default_message = "External service failure"


class ServerError(ForumError):
    """Catch-all for storage faults; never reveals internals."""

    default_message = SERVER_ERROR_MESSAGE


class FormRedirect(Exception):
    """Raised by form endpoints to send the browser back with an error."""

    def __init__(self, location: str, message: str) -> None:
        super().__init__(message)
        self.location = location
        self.message = message

    @property
    def url(self) -> str:
        """Return the redirect target with the ``error`` parameter appended.

        A ``#fragment`` on the location is kept at the end of the URL.
        """
        base, hash_sign, fragment = self.location.partition("#")
        separator = "&" if "?" in base else "?"
        url = f"{base}{separator}error={quote(self.message)}"
        if hash_sign:
            url = f"{url}#{fragment}"
        return url
