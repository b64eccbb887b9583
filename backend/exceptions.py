from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def name(self) -> str:
        return type(self).__name__


class NotFoundError(AppError):
    """Raised when a resource is not found."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(AppError):
    """Raised when input validation fails."""
    def __init__(self, message: str = "Validation failed", details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, status_code=400)
        self.details = details or []


class InvalidIdError(ValidationError):
    """Raised when a path id is not a well-formed identifier."""
    def __init__(self, resource: str = "resource"):
        super().__init__(
            f"Invalid {resource} ID format",
            details=[{"field": "id", "message": f"Invalid {resource} ID format"}]
        )


class DuplicateError(AppError):
    """Raised when a unique constraint would be violated."""
    def __init__(self, message: str = "Duplicate field value"):
        super().__init__(message, status_code=400)


class ServerError(AppError):
    """Raised for unexpected store or server failures."""
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status_code=500)


##### AUTH EXCEPTIONS #####

class AuthenticationError(AppError):
    """Raised when authentication fails."""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class UnauthenticatedError(AuthenticationError):
    """No credential was presented."""
    def __init__(self, message: str = "Not authorized to access this route. Please login."):
        super().__init__(message)


class ExpiredTokenError(AuthenticationError):
    """A credential was presented but its expiry has passed."""
    def __init__(self):
        super().__init__("Token has expired. Please login again.")


class InvalidTokenError(AuthenticationError):
    """A credential was presented but is malformed or badly signed."""
    def __init__(self):
        super().__init__("Invalid token. Please login again.")


class UserNotFoundError(AuthenticationError):
    """A valid token references a user that no longer exists."""
    def __init__(self):
        super().__init__("User not found. Token may be invalid.")


class InvalidCredentialsError(AuthenticationError):
    """Login failed. Same message for unknown email and wrong password."""
    def __init__(self):
        super().__init__("Invalid credentials")


class AuthorizationError(AppError):
    """Raised when user is not authorized to perform an action."""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, status_code=403)


class ForbiddenError(AuthorizationError):
    """Authenticated, but the role is not in the allowed set."""
    def __init__(self, role: str, path: str):
        super().__init__(f"User role '{role}' is not authorized to access {path}")
        self.role = role
        self.path = path


##### TOKEN EXCEPTIONS #####

class TokenError(Exception):
    """Base exception for token verification failures."""
    pass


class InvalidSignatureError(TokenError):
    """Token signature does not match, or the token is malformed."""
    pass


class TokenExpiredError(TokenError):
    """Token signature is fine but the current time is at or past its expiry."""
    pass


##### BUG EXCEPTIONS #####

class BugNotFoundError(NotFoundError):
    """Raised when a bug is not found."""
    def __init__(self, bug_id: str):
        super().__init__(f"Bug {bug_id} not found")
        self.bug_id = bug_id
