"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from contract_health.api.main import create_app
from contract_health.infrastructure.database.models import Base
from contract_health.infrastructure.database.session import get_db
from contract_health.domain.models import (
    ContractSnapshot,
    ContractStatus,
    EventStatus,
    EventType,
    InvoiceSummary,
    ScheduleEvent,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed reference day so scores never depend on when the suite runs
AS_OF = date(2025, 6, 1)


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


def make_contract(
    status: ContractStatus = ContractStatus.ACTIVE,
    start_date: date = date(2025, 1, 1),
    end_date: date | None = date(2025, 12, 31),
    created_at: datetime = datetime(2024, 12, 20, 9, 0),
    updated_at: datetime | None = None,
) -> ContractSnapshot:
    return ContractSnapshot(
        status=status,
        start_date=start_date,
        end_date=end_date,
        total_value=Decimal("120000.00"),
        currency="INR",
        created_at=created_at,
        updated_at=updated_at or created_at,
    )


def make_summary(
    total_invoiced: str = "0",
    total_collected: str = "0",
    total_outstanding: str = "0",
    overdue_count: int = 0,
) -> InvoiceSummary:
    return InvoiceSummary(
        total_invoiced=Decimal(total_invoiced),
        total_collected=Decimal(total_collected),
        total_outstanding=Decimal(total_outstanding),
        overdue_count=overdue_count,
    )


def service_event(days_ago: int, status: EventStatus) -> ScheduleEvent:
    return ScheduleEvent(
        event_type=EventType.SERVICE,
        scheduled_date=AS_OF - timedelta(days=days_ago),
        status=status,
    )


@pytest.fixture
def active_contract() -> ContractSnapshot:
    return make_contract()


@pytest.fixture
def empty_summary() -> InvoiceSummary:
    return make_summary()


@pytest.fixture
def collected_summary() -> InvoiceSummary:
    """Everything invoiced has been collected"""
    return make_summary(total_invoiced="50000", total_collected="50000")


@pytest.fixture
def mostly_delivered_events() -> list[ScheduleEvent]:
    """5 past service visits: 4 completed, 1 overdue"""
    return [
        service_event(50, EventStatus.COMPLETED),
        service_event(40, EventStatus.COMPLETED),
        service_event(30, EventStatus.COMPLETED),
        service_event(20, EventStatus.COMPLETED),
        service_event(10, EventStatus.OVERDUE),
    ]


@pytest.fixture
def contract_payload() -> dict:
    """JSON contract record as the contracts API returns it"""
    return {
        "status": "active",
        "start_date": "2025-01-01",
        "end_date": "2025-12-31",
        "total_value": 120000,
        "currency": "INR",
        "created_at": "2024-12-20T09:00:00",
        "updated_at": "2025-01-02T10:30:00",
    }


@pytest.fixture
def events_payload() -> list[dict]:
    return [
        {"event_type": "service", "scheduled_date": "2025-04-15", "status": "completed"},
        {"event_type": "service", "scheduled_date": "2025-05-15", "status": "completed"},
        {"event_type": "service", "scheduled_date": "2025-06-15", "status": "pending"},
        {
            "event_type": "billing",
            "scheduled_date": "2025-05-01",
            "status": "completed",
            "amount": "10000.00",
            "currency": "INR",
        },
    ]


@pytest.fixture
def invoice_summary_payload() -> dict:
    return {
        "total_invoiced": "20000.00",
        "total_collected": "20000.00",
        "total_outstanding": "0",
        "overdue_count": 0,
    }
