"""Error kinds raised by the contact book services.

Each error carries the HTTP status and the plain-text body clients see. Client
messages stay generic on purpose; the exception type and ``detail`` keep the
real cause for logs and tests.
"""

from __future__ import annotations


class ContactBookError(Exception):
    status_code: int = 500
    public_message: str = "Internal Server Error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail


class SignupFailed(ContactBookError):
    status_code = 500
    public_message = "Signup Failed"


class DuplicateEmail(SignupFailed):
    """Signup for an email that is already registered."""


class UserNotFound(ContactBookError):
    status_code = 401
    public_message = "User not found"


class WrongPassword(ContactBookError):
    status_code = 401
    public_message = "Wrong password"


class InvalidToken(ContactBookError):
    status_code = 403
    public_message = "Invalid Token"


class ContactOwnerNotFound(ContactBookError):
    """A valid token whose user id no longer resolves to a stored user."""

    status_code = 404
    public_message = "User not found"


class BadRequest(ContactBookError):
    """A request body that does not have the expected JSON shape."""

    status_code = 400
    public_message = "Bad Request"
