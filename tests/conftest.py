"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database built from the ORM
metadata; the FastAPI app's get_db dependency is pointed at the same session.
"""

import os

# Set test database URL BEFORE any imports from membership
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from membership.api.app import app  # noqa: E402
from membership.models import Base, Center, Member, MemberStatus  # noqa: E402
from membership.services import get_db  # noqa: E402

AUTH_HEADERS = {"X-Identity": "staff-1", "X-Role": "admin"}


@pytest.fixture
def db_session():
    """Provide a test database session with all tables created."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(db_session):
    """Provide a FastAPI test client bound to the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    test_client.headers.update(AUTH_HEADERS)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_center(db_session):
    """Factory for persisted centers."""

    def _make(name: str = "Downtown Gym", monthly_dues: str = "150.00", **kwargs) -> Center:
        center = Center(
            name=name,
            address=kwargs.pop("address", f"{name} street 1"),
            monthly_dues=Decimal(monthly_dues),
            **kwargs,
        )
        db_session.add(center)
        db_session.commit()
        return center

    return _make


@pytest.fixture
def make_member(db_session, make_center):
    """Factory for persisted members (creates a center when none is given)."""
    counter = {"n": 0}

    def _make(
        name: str | None = None,
        center: Center | None = None,
        status: MemberStatus = MemberStatus.ACTIVE,
        registered_at: datetime | None = None,
        last_payment_date: date | None = None,
        **kwargs,
    ) -> Member:
        counter["n"] += 1
        n = counter["n"]
        center = center or make_center(name=f"Center {n}")
        member = Member(
            name=name or f"Member {n}",
            email=kwargs.pop("email", f"member{n}@example.com"),
            phone=kwargs.pop("phone", f"+5511999{n:05d}"),
            address=kwargs.pop("address", f"Street {n}"),
            center_id=center.id,
            status=status,
            registered_at=registered_at or datetime.now(timezone.utc),
            last_payment_date=last_payment_date,
            **kwargs,
        )
        db_session.add(member)
        db_session.commit()
        return member

    return _make
