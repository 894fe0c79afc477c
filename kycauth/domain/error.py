"""Domain layer errors."""

from datetime import datetime


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error (malformed input)."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class DuplicateEmailError(DomainError):
    """Raised when an email (case-folded) is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("User with this email already exists")


class InvalidCredentialsError(DomainError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    def __init__(self):
        super().__init__("Invalid email or password")


class AccountLockedError(DomainError):
    """Raised while the account is inside its lock window."""

    def __init__(self, locked_until: datetime):
        self.locked_until = locked_until
        super().__init__(
            "Account is temporarily locked due to too many failed login attempts"
        )


class AccountInactiveError(DomainError):
    """Raised when a deactivated account attempts to authenticate."""

    def __init__(self):
        super().__init__("Account is deactivated")


class LastAuthMethodError(DomainError):
    """Raised when a change would leave a user with no way to sign in."""

    def __init__(self):
        super().__init__(
            "Cannot disconnect the last authentication method. Set a password first."
        )


class AuthenticationRequiredError(DomainError):
    """Raised when a protected operation is called without credentials."""

    def __init__(self, message: str = "Access token is required"):
        super().__init__(message)


class PermissionDeniedError(DomainError):
    """Raised when an authenticated user may not perform an action."""

    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN"):
        self.code = code
        super().__init__(message)


class RateLimitedError(DomainError):
    """Raised when a client exceeds the attempt budget for an endpoint."""

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__("Too many attempts, please try again later")


class StoreUnavailableError(DomainError):
    """Raised when the credential store times out or fails.

    Callers must fail closed: this is never "not found" and never "success".
    """

    pass
