import io
import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ORPHAN_SWEEP_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from modules.auth.services.auth_service import AuthService
from modules.documents.models import DocumentStatus
from modules.documents.services.document_service import DocumentService
from modules.documents.services.storage import LocalBlobStore, get_blob_store

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture
def client(store):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_pdf_bytes(text="PDF for tests"):
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.drawString(50, 750, text)
    c.save()
    return buf.getvalue()


@pytest.fixture(scope="session")
def example_pdf():
    return make_pdf_bytes()


def register(session, email, name="Test User", password="secret123"):
    _, user = AuthService.register(session, email, password, name)
    return user


@pytest.fixture
def admin(session):
    return register(session, "admin@example.com", "Admin User")


@pytest.fixture
def user_b(session, admin):
    return register(session, "bob@example.com", "Bob")


@pytest.fixture
def user_c(session, admin):
    return register(session, "carol@example.com", "Carol")


def upload(session, store, actor, filename="contract.pdf", content=None, **kwargs):
    return DocumentService.upload_document(
        session, store, actor, content or make_pdf_bytes(), filename, "application/pdf", **kwargs
    )


def activate(session, actor, document):
    return DocumentService.update_document(
        session, actor, document.id, {"status": DocumentStatus.ACTIVE}
    )


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
