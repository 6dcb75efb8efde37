"""Auth feature module"""

from app.features.auth.api import router
from app.features.auth.session import AuthenticationFailed, NotAuthenticated, SessionContext

__all__ = [
    "router",
    "AuthenticationFailed",
    "NotAuthenticated",
    "SessionContext",
]
