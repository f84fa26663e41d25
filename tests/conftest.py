"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all DoseTrack tests.
Fixtures include database sessions, the test client and sample records.
"""

import os
import sys
from datetime import datetime, timezone
from typing import Generator, Dict, Any

import pytest

# Keep the application engine off disk before any project module is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, get_db
from models import User, Medication, Schedule, Intake, IntakeStatus, RecurrenceType
from app import app


UTC = timezone.utc


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== SAMPLE DATA FIXTURES ====================

@pytest.fixture
def sample_user_data() -> Dict[str, Any]:
    """Sample user data for creating test users"""
    return {
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "timezone": "UTC",
    }


@pytest.fixture
def test_user(db_session: Session, sample_user_data: Dict) -> User:
    """Create and return a test user"""
    user = User(**sample_user_data)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session: Session) -> User:
    """A second user for ownership checks"""
    user = User(name="Sam Roe", email="sam.roe@example.com", timezone="UTC")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_medication(db_session: Session, test_user: User) -> Medication:
    """Create and return a test medication"""
    medication = Medication(
        user_id=test_user.id,
        name="Metformin",
        dosage="500mg",
        is_active=True
    )
    db_session.add(medication)
    db_session.commit()
    db_session.refresh(medication)
    return medication


@pytest.fixture
def daily_schedule(db_session: Session, test_medication: Medication) -> Schedule:
    """Daily schedule at 08:00 and 20:00"""
    schedule = Schedule(
        medication_id=test_medication.id,
        recurrence_type=RecurrenceType.DAILY.value,
        times=["08:00", "20:00"],
        is_active=True
    )
    db_session.add(schedule)
    db_session.commit()
    db_session.refresh(schedule)
    return schedule


@pytest.fixture
def make_intake(db_session: Session):
    """Factory for intakes stored the way the write path stores them"""
    def _make(schedule: Schedule, taken_at: datetime, status: IntakeStatus = IntakeStatus.TAKEN) -> Intake:
        intake = Intake(
            schedule_id=schedule.id,
            medication_id=schedule.medication_id,
            user_id=schedule.medication.user_id,
            status=status.value,
            taken_at=taken_at.astimezone(UTC).replace(tzinfo=None)
        )
        db_session.add(intake)
        db_session.commit()
        db_session.refresh(intake)
        return intake

    return _make


# ==================== PYTEST CONFIGURATION ====================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "database: mark test as requiring database")
