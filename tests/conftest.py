"""
Test configuration and fixtures for Inkwell tests.
"""
import os

# Read at import time by the application modules
os.environ.setdefault("INKWELL_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("INKWELL_LOG_TO_FILE", "false")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inkwell.core.db.session import get_db, SESSION_COOKIE
from inkwell.core.db.tables.base import Base
from inkwell.core.db.tables.comment import Comment, CommentStatus
from inkwell.core.db.tables.post import Post, PostStatus
from inkwell.core.db.tables.sessionkey import SessionKey
from inkwell.core.db.tables.user import User, UserRole
from inkwell.core.security import extract_key_id, hash_key, new_sk


@pytest.fixture(scope="function")
def db_session():
    """Create an isolated test database session for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client_factory():
    """Factory to create test clients with a specific db session."""

    def create_client(session, user_sk=None):
        from inkwell.app import app

        def override_get_db():
            yield session

        app.dependency_overrides[get_db] = override_get_db

        client = TestClient(app)
        if user_sk:
            client.cookies.set(SESSION_COOKIE, user_sk)
        return client

    yield create_client

    from inkwell.app import app

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory creating a user with a session key; returns {"user", "sk"}."""

    def create(email, full_name=None, role=UserRole.USER, avatar_url=None):
        user = User(email=email, full_name=full_name, role=role, avatar_url=avatar_url)
        db_session.add(user)
        db_session.flush()

        sk = new_sk()
        # Low bcrypt cost keeps the suite fast
        db_session.add(SessionKey(sk_id=extract_key_id(sk), sk_hash=hash_key(sk, rounds=4), user_id=user.id))
        db_session.commit()

        return {"user": user, "sk": sk}

    return create


@pytest.fixture
def test_user_data(make_user):
    """A regular reader with a full name in their profile."""
    return make_user("reader@example.com", full_name="Ada Reader")


@pytest.fixture
def moderator_data(make_user):
    """An editor, allowed to moderate comments."""
    return make_user("editor@example.com", full_name="Eddie Editor", role=UserRole.EDITOR)


@pytest.fixture
def test_post(db_session):
    """A published post with the id used throughout the comment examples."""
    post = Post(
        id="P1",
        title="Hello World",
        slug="hello-world",
        content="First post",
        status=PostStatus.PUBLISHED,
        published_at=datetime.now(timezone.utc),
    )
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture
def other_post(db_session):
    post = Post(
        id="P2",
        title="Second",
        slug="second",
        content="Another post",
        status=PostStatus.PUBLISHED,
        published_at=datetime.now(timezone.utc),
    )
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture
def add_comment(db_session):
    """
    Factory inserting a comment row directly, bypassing the API.

    age_minutes moves created_at into the past so ordering is deterministic;
    created_at pins the exact timestamp.
    """

    def create(post, content, status=CommentStatus.APPROVED, parent=None, age_minutes=0, author_name="Seeded", created_at=None):
        created = created_at or datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
        comment = Comment(
            post_id=post.id,
            content=content,
            author_name=author_name,
            author_email="seeded@example.com",
            parent_id=parent.id if parent else None,
            status=status,
            created_at=created,
            updated_at=created,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return create
