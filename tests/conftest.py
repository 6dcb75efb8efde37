import pytest
from fastapi import Header
from fastapi.testclient import TestClient

from app.features.auth.api import get_auth_session
from app.features.auth.dependencies import get_repositories, get_session
from app.features.auth.session import SessionContext
from app.infra.supabase.repositories import RepositoryFactory
from app.main import app
from app.models.user import SessionUser

from .fakes import FakeSupabase

USER_1 = "11111111-1111-1111-1111-111111111111"
USER_2 = "22222222-2222-2222-2222-222222222222"


@pytest.fixture()
def fake_supabase():
    return FakeSupabase()


@pytest.fixture()
def repos(fake_supabase):
    return RepositoryFactory(fake_supabase)


@pytest.fixture()
def make_session(fake_supabase):
    def _make(user_id: str = USER_1) -> SessionContext:
        session = SessionContext(fake_supabase.auth)
        session.begin(SessionUser(id=user_id, email=f"{user_id[:4]}@example.com", display_name="User"))
        return session
    return _make


@pytest.fixture()
def session(make_session):
    return make_session(USER_1)


@pytest.fixture()
def client(fake_supabase):
    """HTTP client whose caller is picked with the X-Test-User header"""

    def override_session(x_test_user: str = Header(USER_1)) -> SessionContext:
        return SessionContext.from_claims(
            {"sub": x_test_user, "email": "someone@example.com"},
            auth=fake_supabase.auth,
            access_token=f"token-{x_test_user}",
        )

    app.dependency_overrides[get_repositories] = lambda: RepositoryFactory(fake_supabase)
    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_auth_session] = lambda: SessionContext(fake_supabase.auth)

    yield TestClient(app)

    app.dependency_overrides.clear()
