import pytest
from fastapi.testclient import TestClient

from school_backend.auth import jwt_handler
from school_backend.core.config import Settings
from school_backend.database import build_engine, build_session_factory, init_schema
from school_backend.main import create_app

TEST_SECRET = 'test-secret-key-that-is-long-enough-for-hs256'


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        jwt_secret_key=TEST_SECRET,
        database_url=f"sqlite:///{tmp_path / 'school.db'}",
        upload_dir=tmp_path / 'uploads',
        max_upload_bytes=1024,
    )


@pytest.fixture
def db_session(settings):
    engine = build_engine(settings.database_url)
    init_schema(engine)
    db = build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token(settings):
    def _make_token(email: str, role: str, **kwargs) -> str:
        return jwt_handler.create_access_token(settings, email=email, role=role, **kwargs)

    return _make_token
