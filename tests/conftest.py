import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import uuid
import pytest
from typing import Dict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

import main
from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.models.user import User
from app.services.transcript import TranscriptGenerator
from app.utils import deps as deps_utils
from tests.helpers.factories import Actor, FakeMediaStorage

test_db_url = settings.TEST_DATABASE_URL or "sqlite://"
DEFAULT_PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    else:
        engine = create_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def media_storage():
    return FakeMediaStorage()


@pytest.fixture
def transcript_generator():
    # No service URL: transcripts are drafted from the video duration.
    return TranscriptGenerator(service_url="")


@pytest.fixture(scope="function")
def client(db_session, media_storage, transcript_generator):
    def _override_db():
        yield db_session

    main.app.dependency_overrides[get_db] = _override_db
    main.app.dependency_overrides[deps_utils.get_db] = _override_db
    main.app.dependency_overrides[deps_utils.get_transactional_db] = _override_db
    main.app.dependency_overrides[deps_utils.get_media_storage] = lambda: media_storage
    main.app.dependency_overrides[deps_utils.get_transcript_generator] = lambda: transcript_generator
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db_session):
    def _user_factory(email=None, password=DEFAULT_PASSWORD, role=RoleEnum.LEARNER, name=None, is_active=True):
        user = User(
            name=name or f"Test {role.value.title()}",
            email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@microcourse.io",
            hashed_password=get_password_hash(password),
            role=role,
            is_active=is_active,
            is_creator_approved=role == RoleEnum.CREATOR,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _user_factory


@pytest.fixture
def login(client):
    def _login(email: str, password: str = DEFAULT_PASSWORD) -> Dict[str, str]:
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["data"]["token"]["access_token"]
        return {"Authorization": f"Bearer {token}"}
    return _login


@pytest.fixture
def actor_factory(user_factory, login):
    """Creates a user with the given role and logs it in through /auth/login."""
    def _actor_factory(role: RoleEnum = RoleEnum.LEARNER, name=None) -> Actor:
        user = user_factory(role=role, name=name)
        return Actor(user=user, headers=login(user.email))
    return _actor_factory


@pytest.fixture
def admin(actor_factory) -> Actor:
    return actor_factory(RoleEnum.ADMIN, name="Ada Admin")


@pytest.fixture
def creator(actor_factory) -> Actor:
    return actor_factory(RoleEnum.CREATOR, name="Chris Creator")


@pytest.fixture
def learner(actor_factory) -> Actor:
    return actor_factory(RoleEnum.LEARNER, name="Lee Learner")
