"""Pytest configuration and fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base, get_db
from app.errors import UploadError
from app.models.course import Course, Lecture  # noqa: F401
from app.models.user import Role, User  # noqa: F401
from app.repositories.users import UserDirectory
from app.services.auth import AuthService, get_auth_service
from app.services.course import CourseService, get_course_service
from app.services.email import EmailService
from app.services.jwt import get_jwt_service
from app.services.media import MediaService, UploadResult, get_media_service


class FakeMediaService(MediaService):
    """MediaService that stages files for real but never talks to Cloudinary."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings=settings)
        self.uploads: list[dict] = []
        self.destroyed: list[str] = []
        self.fail_upload = False

    def _upload(self, local_path: Path, options: dict) -> UploadResult:
        self.uploads.append({"path": local_path, "existed": local_path.exists(), **options})
        folder = options["folder"]
        if self.fail_upload:
            raise UploadError("File not uploaded, please try again")
        return UploadResult(
            public_id=f"{folder}/{local_path.stem}",
            secure_url=f"https://media.test/{folder}/{local_path.name}",
        )

    def destroy(self, public_id: str, resource_type: str = "image") -> None:
        self.destroyed.append(public_id)


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="test_settings")
def test_settings_fixture(tmp_path: Path) -> Settings:
    """Settings pointing uploads at a temp dir and reset links at a fake frontend."""
    settings = Settings()
    settings.UPLOAD_DIR = str(tmp_path / "uploads")
    settings.FRONTEND_URL = "http://frontend.test"
    settings.APP_ENV = "development"
    return settings


@pytest.fixture(name="email_service")
def email_service_fixture() -> MagicMock:
    return MagicMock(spec=EmailService)


@pytest.fixture(name="media_service")
def media_service_fixture(test_settings: Settings) -> FakeMediaService:
    return FakeMediaService(test_settings)


@pytest.fixture(name="auth_service")
def auth_service_fixture(test_settings: Settings, email_service: MagicMock, media_service: FakeMediaService):
    return AuthService(settings=test_settings, email_service=email_service, media_service=media_service)


@pytest.fixture(name="client")
def client_fixture(db_session: Session, auth_service: AuthService, media_service: FakeMediaService):
    """Create a test client with overridden DB and collaborators, and rate limiting disabled."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    course_service = CourseService(media_service=media_service)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_media_service] = lambda: media_service
    app.dependency_overrides[get_course_service] = lambda: course_service
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, auth_service: AuthService):
    """Create a test user and return its data and session token."""
    result = auth_service.register(db_session, "Test User", "test@example.com", "password123")
    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "full_name": result.user.full_name,
        "token": result.token,
    }


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """Create an ADMIN user and return its data and session token."""
    user = UserDirectory(db_session).create(
        full_name="Admin User",
        email="admin@example.com",
        password="adminpass123",
        role=Role.ADMIN,
    )
    token = get_jwt_service().create_token(user_id=user.id, email=user.email, role=user.role.value)
    return {"user_id": user.id, "email": user.email, "token": token}


@pytest.fixture(name="sent_reset_token")
def sent_reset_token_fixture(email_service: MagicMock):
    """Return a callable pulling the plaintext token out of the last reset email sent."""

    def _sent_reset_token() -> str:
        _, reset_url = email_service.send_password_reset.call_args.args
        return reset_url.rsplit("/", 1)[1]

    return _sent_reset_token
