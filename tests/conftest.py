"""Shared fixtures: an in-memory database per test and a signed-in user."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from adihunt.database import init_db, get_session_factory
from adihunt.schemas import SessionUser
from adihunt.state.auth import AuthStore
from adihunt.state.content import ContentStore
from adihunt.services.collaboration import CollaborationService


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def user():
    return SessionUser(id="user-1", email="owner@example.com")


@pytest.fixture
def auth_store(session_factory, user):
    """Auth store with the test user signed in and a profile created."""
    store = AuthStore(session_factory, default_usage_limit=10)
    store.set_user(user)
    store.load_profile(full_name="Olivia Owner")
    return store


@pytest.fixture
def content_store(session_factory, user, auth_store):
    return ContentStore(session_factory, user=user)


@pytest.fixture
def collaboration(session_factory, user, auth_store):
    return CollaborationService(session_factory, user=user)


@pytest.fixture
def project(content_store):
    return content_store.create_project("Notary Blog", "Articles about notarization")


@pytest.fixture
def article(content_store, project):
    return content_store.create_article(
        project.id,
        title="How Apostilles Work",
        content="<h1>Apostille basics</h1><p>An apostille certifies a document.</p>",
        target_keywords=["apostille"],
    )
