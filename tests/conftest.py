import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from claimflow import models  # noqa: F401
from claimflow.database import Base, get_db
from claimflow.main import app
from claimflow.routers.claims import get_workflow_service
from claimflow.services.claims import ClaimWorkflowService
from claimflow.storage.memory import InMemoryStorage

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def service(storage):
    return ClaimWorkflowService(storage=storage)


@pytest.fixture
def client(service):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_workflow_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
