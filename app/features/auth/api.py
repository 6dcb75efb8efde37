"""Auth API endpoints"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.features.auth.dependencies import get_session
from app.features.auth.schemas import LoginRequest, RegisterRequest, SessionResponse
from app.features.auth.session import AuthenticationFailed, SessionContext
from app.infra.supabase.client import create_auth_client
from app.models.user import SessionUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_auth_session() -> SessionContext:
    """Empty session bound to a fresh auth client"""
    return SessionContext(create_auth_client().auth)


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(
    request: RegisterRequest,
    session: SessionContext = Depends(get_auth_session)
):
    """Create an account and return its session"""
    try:
        user = await session.register(request.email, request.password, request.display_name)
    except AuthenticationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SessionResponse(user=user, access_token=session.access_token)


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    session: SessionContext = Depends(get_auth_session)
):
    """Sign in with email and password"""
    try:
        user = await session.login(request.email, request.password)
    except AuthenticationFailed:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return SessionResponse(user=user, access_token=session.access_token)


@router.post("/logout", status_code=204)
async def logout(session: SessionContext = Depends(get_session)):
    """Revoke the caller's token"""
    await session.logout()


@router.get("/me", response_model=SessionUser)
async def me(session: SessionContext = Depends(get_session)):
    return session.current_user
