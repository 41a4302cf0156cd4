from authcore.core.exceptions.base import AppException

# =============================================================================
# Token Exceptions (raised by the Codec and TokenService)
# =============================================================================


class TokenError(AppException):
    """Presented token cannot be accepted. Terminal, never retried."""

    def __init__(self, message: str = "Invalid token", exception: Exception | None = None):
        super().__init__(message, exception)


class MalformedTokenError(TokenError):
    """Token structure or claims cannot be parsed."""

    def __init__(self, message: str = "Malformed token", exception: Exception | None = None):
        super().__init__(message, exception)


class InvalidSignatureError(MalformedTokenError):
    """Token is well-formed but its MAC does not verify."""

    def __init__(
        self, message: str = "Token signature verification failed", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class TokenExpiredError(TokenError):
    """Token is authentic but outside its validity window."""

    def __init__(self, message: str = "Token has expired", exception: Exception | None = None):
        super().__init__(message, exception)


class TokenRevokedError(TokenError):
    """Token was blacklisted, or a refresh token was superseded."""

    def __init__(self, message: str = "Token has been revoked", exception: Exception | None = None):
        super().__init__(message, exception)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class StoreUnavailableError(AppException):
    """Revocation store could not complete the operation."""

    def __init__(
        self, message: str = "Revocation store unavailable", exception: Exception | None = None
    ):
        super().__init__(message, exception)
