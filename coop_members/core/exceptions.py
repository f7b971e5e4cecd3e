"""Typed failures raised by the auth services; routes map them to HTTP errors."""


class AuthError(Exception):
    """Base class for registration, login, token and policy failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInput(AuthError):
    """Missing or malformed registration/login fields. Raised before any storage access."""


class DuplicateEmail(AuthError):
    """A member with this email already exists."""

    def __init__(self, message: str = "A member with this email already exists") -> None:
        super().__init__(message)


class AuthenticationFailed(AuthError):
    """Unknown email or wrong password; the two cases are deliberately indistinguishable."""

    def __init__(self, message: str = "Invalid email or password.") -> None:
        super().__init__(message)


class InvalidToken(AuthError):
    """Expired, tampered or malformed capability token. Carries no detail about which."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class DataIntegrityError(AuthError):
    """A stored password hash could not be parsed. Fatal; never treated as a login failure."""
