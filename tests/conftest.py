"""
Shared fixtures: an app wired to the in-memory Supabase fake and a few users.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.main import create_app
from fake_supabase import FakeSupabaseFactory


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://fake.supabase.co",
        supabase_key="anon-key",
        supabase_service_role_key="service-key",
        environment="test",
        _env_file=None,
    )


@pytest.fixture
def factory():
    return FakeSupabaseFactory()


@pytest.fixture
def db(factory):
    return factory.db


@pytest.fixture
def client(settings, factory):
    app = create_app(settings, client_factory=factory)
    with TestClient(app) as test_client:
        yield test_client


def _user(factory, email, username):
    user_id, token = factory.add_user(email, username)
    return SimpleNamespace(
        id=user_id,
        email=email,
        username=username,
        token=token,
        headers={"Authorization": f"Bearer {token}"},
        supabase=factory.for_token(token),
    )


@pytest.fixture
def alice(factory):
    return _user(factory, "alice@example.com", "alice")


@pytest.fixture
def bob(factory):
    return _user(factory, "bob@example.com", "bob")


@pytest.fixture
def carol(factory):
    return _user(factory, "carol@example.com", "carol")


@pytest.fixture
def make_project(client):
    """Create a project over HTTP as ``user``; returns the response JSON"""
    def _make(user, title="Groceries", description=None):
        response = client.post(
            "/api/v1/projects",
            json={"title": title, "description": description},
            headers=user.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def add_member(client):
    """Invite ``member`` into ``project_id`` as ``role``, acting as ``inviter``"""
    def _add(inviter, project_id, member, role="editor"):
        response = client.post(
            f"/api/v1/projects/{project_id}/members",
            json={"email": member.email, "role": role},
            headers=inviter.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _add
