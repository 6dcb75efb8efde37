"""
Session context

Holds the authenticated identity for one client session. Controllers receive
a SessionContext at construction instead of looking the user up globally.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from supabase import AuthError  # type: ignore

from app.models.user import SessionUser

logger = logging.getLogger(__name__)


class NotAuthenticated(Exception):
    """Raised when an operation needs a user but no session is active"""


class AuthenticationFailed(Exception):
    """Raised when the identity service rejects a sign-in or sign-up"""


def _display_name(email: Optional[str], metadata: Optional[Dict[str, Any]]) -> Optional[str]:
    metadata = metadata or {}
    return metadata.get("full_name") or metadata.get("name") or email


class SessionContext:
    """Authenticated identity with an explicit begin/end lifecycle"""

    def __init__(self, auth=None):
        """
        Args:
            auth: Supabase auth client (``client.auth``). Only needed for
                login, register and logout.
        """
        self._auth = auth
        self._user: Optional[SessionUser] = None
        self._access_token: Optional[str] = None

    @classmethod
    def from_claims(
        cls,
        claims: Dict[str, Any],
        auth=None,
        access_token: Optional[str] = None
    ) -> "SessionContext":
        """Build an active session from verified JWT claims"""
        user_id = claims.get("sub")
        if not user_id:
            raise NotAuthenticated("Token has no subject")

        email = claims.get("email")
        session = cls(auth)
        session.begin(SessionUser(
            id=user_id,
            email=email,
            display_name=_display_name(email, claims.get("user_metadata")),
        ), access_token=access_token)
        return session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def begin(self, user: SessionUser, access_token: Optional[str] = None) -> None:
        self._user = user
        self._access_token = access_token
        logger.info(f"Session started for user {user.id}")

    def end(self) -> None:
        if self._user is not None:
            logger.info(f"Session ended for user {self._user.id}")
        self._user = None
        self._access_token = None

    @property
    def is_active(self) -> bool:
        return self._user is not None

    @property
    def current_user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def user_id(self) -> str:
        if self._user is None:
            raise NotAuthenticated("No active session")
        return self._user.id

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    # ------------------------------------------------------------------
    # Identity service
    # ------------------------------------------------------------------

    def _require_auth(self):
        if self._auth is None:
            raise RuntimeError("SessionContext has no auth client")
        return self._auth

    async def login(self, email: str, password: str) -> SessionUser:
        """Sign in with email and password and begin the session"""
        auth = self._require_auth()
        try:
            response = auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise AuthenticationFailed(str(e)) from e

        return self._begin_from_response(response)

    async def register(self, email: str, password: str, display_name: Optional[str] = None) -> SessionUser:
        """
        Create an account and begin a session for it. The access token is
        None while the project still requires email confirmation.
        """
        auth = self._require_auth()
        options = {"data": {"full_name": display_name}} if display_name else {}
        try:
            response = auth.sign_up({"email": email, "password": password, "options": options})
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign-up failed for {email}: {e}")
            raise AuthenticationFailed(str(e)) from e

        return self._begin_from_response(response)

    async def logout(self) -> None:
        """
        Sign out remotely, then discard the local session regardless.

        With a known access token the token is revoked through the admin
        API; otherwise the auth client's own session is signed out.
        """
        if self._auth is not None:
            try:
                if self._access_token:
                    self._auth.admin.sign_out(self._access_token)
                else:
                    self._auth.sign_out()
            except (AuthError, httpx.HTTPError) as e:
                logger.warning(f"Remote sign-out failed: {e}")
        self.end()

    def _begin_from_response(self, response) -> SessionUser:
        if response.user is None:
            raise AuthenticationFailed("Identity service returned no user")

        user = SessionUser(
            id=str(response.user.id),
            email=response.user.email,
            display_name=_display_name(response.user.email, response.user.user_metadata),
        )
        token = response.session.access_token if response.session else None
        self.begin(user, access_token=token)
        return user
