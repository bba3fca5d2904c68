import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.users.models import Users
from experience_hub.core.models import Base
from experience_hub.core.security import create_user_token
from experience_hub.core.utils import serialize_tags
from experience_hub.database.session import SessionLocal, engine, get_db
from experience_hub.main import app

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)

_sequence = count(1)


@pytest.fixture()
def db():
    """Fresh schema and a session shared with the app for each test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    """TestClient fixture for integration tests."""

    def override_get_db():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def factory(**overrides) -> Users:
        n = next(_sequence)
        fields = {
            "github_id": str(1000 + n),
            "github_username": f"octo{n}",
            "username": f"octo{n}",
            "email": f"octo{n}@example.com",
        }
        fields.update(overrides)

        user = Users(**fields)
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture()
def make_experience(db):
    def factory(
        user: Users,
        title: str = "Refactoring with an assistant",
        ai_assistant_type: str = "claude",
        tags=None,
        prompts: int = 1,
        created_offset: int = 0,
        **overrides,
    ) -> Experiences:
        overrides.setdefault("description", "A walk through a refactor done with help.")
        experience = Experiences(
            user_id=user.id,
            title=title,
            ai_assistant_type=ai_assistant_type,
            tags=serialize_tags(tags or []),
            github_urls=["https://github.com/octo/repo"],
            created_at=BASE_TIME + timedelta(minutes=created_offset),
            prompt_count=prompts,
            **overrides,
        )
        db.add(experience)
        db.flush()

        for index in range(prompts):
            db.add(
                Prompts(
                    experience_id=experience.id,
                    content=f"Prompt number {index} with enough text",
                    order_index=index,
                )
            )

        db.commit()
        return experience

    return factory


@pytest.fixture()
def auth_headers():
    def factory(user: Users) -> dict:
        token = create_user_token(user.id, user.username)
        return {"Authorization": f"Bearer {token}"}

    return factory
