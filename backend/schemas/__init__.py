"""
Schemas package for the bug tracker API.

Core types are in schemas/user.py and schemas/bug.py.
"""

from .user import (
    User,
    UserSummary,
    SignupRequest,
    LoginRequest,
    ProfileUpdateRequest,
    AuthData,
)

from .bug import (
    BugSchema,
    BugStats,
)
