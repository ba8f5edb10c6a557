import pytest
import os
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from faculty_appraisal.database import Base, get_db
from faculty_appraisal.main import app
from faculty_appraisal.models import AuditLog, StoredCollection  # noqa: F401
from faculty_appraisal.schemas.appraisal import AttendanceSummary
from faculty_appraisal.schemas.identity import Identity, Role
from faculty_appraisal.schemas.workflow import CycleCreate
from faculty_appraisal.services.appraisal_service import AppraisalService
from faculty_appraisal.services.audit import InMemoryAuditSink
from faculty_appraisal.services.collaborators import FixedAttendanceSource, FixedFeedbackSource
from faculty_appraisal.services.cycle_service import CycleService
from faculty_appraisal.services.rollup import RollupService
from faculty_appraisal.services.seeds import month_period
from faculty_appraisal.services.store import APPRAISALS_KEY, CYCLES_KEY, InMemoryCollectionStore
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FROZEN_NOW = datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc)

ADMIN_HEADERS = {
    "X-Employee-Id": "HR001",
    "X-Employee-Name": "Hira Rashid",
    "X-Employee-Department": "Human Resources",
    "X-Employee-Role": "Admin",
}
FACULTY_HEADERS = {
    "X-Employee-Id": "EMP001",
    "X-Employee-Name": "Dr. Ayesha Khan",
    "X-Employee-Department": "Computer Science",
    "X-Employee-Role": "Faculty",
}


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Use sessionmaker with the active connection
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def faculty_headers():
    return dict(FACULTY_HEADERS)


# --- Service-level fixtures (no database) ---

@pytest.fixture
def admin():
    return Identity(id="HR001", name="Hira Rashid", department="Human Resources", role=Role.ADMIN)


@pytest.fixture
def faculty():
    return Identity(id="EMP001", name="Dr. Ayesha Khan", department="Computer Science", role=Role.FACULTY)


@pytest.fixture
def other_faculty():
    return Identity(id="EMP002", name="Dr. Bilal Ahmed", department="Mathematics", role=Role.FACULTY)


@pytest.fixture
def clock():
    return lambda: FROZEN_NOW


@pytest.fixture
def perfect_attendance():
    return AttendanceSummary(
        total_working_days=22, present_days=21, absent_days=0,
        leave_days=1, late_count=1, attendance_percentage=95,
    )


@pytest.fixture
def store():
    # No seed cycle: each test creates the cycles it needs
    return InMemoryCollectionStore(seeds={CYCLES_KEY: list, APPRAISALS_KEY: list})


@pytest.fixture
def audit():
    return InMemoryAuditSink()


@pytest.fixture
def cycle_service(store, audit, clock):
    return CycleService(store, audit, clock)


@pytest.fixture
def appraisal_service(store, audit, clock, perfect_attendance):
    return AppraisalService(
        store,
        audit,
        clock,
        attendance_source=FixedAttendanceSource(default=perfect_attendance),
        feedback_source=FixedFeedbackSource(score=8.0),
    )


@pytest.fixture
def rollup_service(store, audit, clock):
    return RollupService(store, audit, clock)


@pytest.fixture
def make_cycle(cycle_service, admin):
    """Create an Active monthly cycle with the default criteria."""
    def _make_cycle(year=2025, month=1, status="Active", criteria=None):
        start, end = month_period(year, month)
        return cycle_service.create_cycle(admin, CycleCreate(
            name=f"Cycle {year}-{month:02d}",
            start_date=start,
            end_date=end,
            status=status,
            criteria=criteria,
        ))
    return _make_cycle
