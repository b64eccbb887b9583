from .auth_service import validate_token
from .bug_service import BugService

__all__ = [
    'BugService',
    'validate_token'
]
