"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before any module builds the engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bilty_ledger.api.main import create_app
from bilty_ledger.infrastructure.database.models import Base
from bilty_ledger.infrastructure.database.session import get_db
from bilty_ledger.domain.models import TransportRecord
from bilty_ledger.services.payments import PaymentService
from bilty_ledger.services.records import RecordService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def record_service(db: Session) -> RecordService:
    return RecordService(db)


@pytest.fixture
def payment_service(db: Session) -> PaymentService:
    return PaymentService(db)


@pytest.fixture
def make_record(record_service: RecordService) -> Callable[..., TransportRecord]:
    """Persist a record with a hand-entered total; net amount equals the total unless deductions are given"""

    def _make(company: str = "SHREE GANESH ROADWAYS", total: str = "5000", **fields) -> TransportRecord:
        data = {
            "transport_company_name": company,
            "truck_number": "MH12AB1234",
            "destination": "PUNE",
            "rate": "FIX",
            "total": total,
        }
        data.update(fields)
        return record_service.create(data)

    return _make

