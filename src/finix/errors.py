from abc import ABC
from typing import ClassVar


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """

    error_type: ClassVar[str] = "bad_request"
    retryable: ClassVar[bool] = False
    requires_auth: ClassVar[bool] = False


class IdentityError(UserError):
    """Raised when the caller's identity is missing."""

    error_type = "identity_error"

    def __init__(self, message: str = "User identity required") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""

    error_type = "validation_error"


class InvalidInputError(ValidationError):
    """Raised when a phone number, passcode or tool argument is malformed."""

    error_type = "invalid_input"


class InvalidPasscodeError(InvalidInputError):
    """Raised when a passcode is malformed or rejected by the provider."""

    error_type = "invalid_passcode"

    def __init__(self, message: str = "Passcode must be a 6-digit number") -> None:
        super().__init__(message)


class SessionStateError(UserError):
    """Raised when the authentication handshake is used out of order."""

    requires_auth = True


class NoPendingSessionError(SessionStateError):
    error_type = "no_pending_session"

    def __init__(
        self, message: str = "No pending authentication session found. Please initiate authentication first."
    ) -> None:
        super().__init__(message)


class SessionExpiredError(SessionStateError):
    error_type = "session_expired"

    def __init__(self, message: str = "Authentication session expired. Please start again.") -> None:
        super().__init__(message)


class AuthenticationRequiredError(UserError):
    """Raised when financial data is requested without a valid provider session."""

    error_type = "authentication_required"
    requires_auth = True

    def __init__(
        self, message: str = "Fi Money authentication required. Please connect your account first."
    ) -> None:
        super().__init__(message)


class RemoteUnavailableError(UserError):
    """Raised when the data provider times out or cannot be reached."""

    error_type = "remote_unavailable"
    retryable = True

    def __init__(self, message: str = "Financial data provider is unavailable. Please try again.") -> None:
        super().__init__(message)


class RemoteError(UserError):
    """Raised when the data provider returns a domain error."""

    error_type = "remote_error"


class UnknownFunctionError(UserError):
    error_type = "unknown_function"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown function: {name}")


class ChatUnavailableError(UserError):
    """Raised when the language model cannot be reached or misbehaves."""

    error_type = "chat_unavailable"
    retryable = True
