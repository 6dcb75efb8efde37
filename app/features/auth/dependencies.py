"""FastAPI dependencies shared by the feature routers"""
from typing import Any, Dict, Optional

from fastapi import Depends, Header

from app.features.auth.session import SessionContext
from app.infra.supabase.client import get_supabase_client
from app.infra.supabase.repositories import RepositoryFactory
from app.middleware.auth import extract_bearer_token, get_current_claims


def get_repositories() -> RepositoryFactory:
    return RepositoryFactory(get_supabase_client())


async def get_session(
    claims: Dict[str, Any] = Depends(get_current_claims),
    authorization: Optional[str] = Header(None),
    repos: RepositoryFactory = Depends(get_repositories),
) -> SessionContext:
    """Session for the bearer of the request's token"""
    return SessionContext.from_claims(
        claims,
        auth=repos.client.auth,
        access_token=extract_bearer_token(authorization),
    )
