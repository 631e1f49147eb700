"""Pytest configuration and fixtures."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from checkin_watchdog.escalation.contacts import ContactDirectory
from checkin_watchdog.escalation.engine import EscalationEngine
from checkin_watchdog.escalation.profiles import ProfileDirectory
from checkin_watchdog.models.contact import EmergencyContact
from checkin_watchdog.models.database import Base
from checkin_watchdog.models.profile import Profile
from checkin_watchdog.models.watchdog_state import WatchdogState, WatchdogStatus


T0 = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def session_factory():
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def factory():
        async with maker() as session:
            yield session

    yield factory

    await engine.dispose()


def make_state(
    user_id: str = "user-1",
    interval_hours: float = 24,
    last_check_in: Optional[datetime] = T0,
    template: str = "{user_name} missed check-in ({interval}h)",
    status: WatchdogStatus = WatchdogStatus.ARMED
) -> WatchdogState:
    return WatchdogState(
        user_id=user_id,
        check_in_interval_hours=interval_hours,
        alert_message=template,
        last_check_in=last_check_in,
        status=status,
    )


def make_contact(user_id: str, name: str, phone: str, priority: int) -> EmergencyContact:
    return EmergencyContact(user_id=user_id, name=name, phone_number=phone, priority=priority)


class FakeTransport:
    """Records sends; numbers in ``failing`` return False, in ``raising`` raise."""

    def __init__(self, failing=(), raising=()):
        self.failing = set(failing)
        self.raising = set(raising)
        self.sent: List[tuple] = []

    async def send(self, to_number: str, body: str) -> bool:
        self.sent.append((to_number, body))
        if to_number in self.raising:
            raise ConnectionError(f"transport down for {to_number}")
        return to_number not in self.failing


class FakeStateStore:
    def __init__(self, states: Optional[List[WatchdogState]] = None, error: Optional[Exception] = None):
        self.states = states or []
        self.error = error
        self.alerted: List[str] = []

    async def query_unalerted_with_check_in(self) -> List[WatchdogState]:
        if self.error:
            raise self.error
        return [s for s in self.states if not s.alert_sent and s.last_check_in is not None]

    async def set_alerted(self, subject_id: str, at: Optional[datetime] = None) -> None:
        self.alerted.append(subject_id)


class FakeProfileDirectory(ProfileDirectory):
    def __init__(self, profiles: Optional[Dict[str, Profile]] = None, broken=()):
        super().__init__(default_name="A user")
        self.profiles = profiles or {}
        self.broken = set(broken)

    async def get_profile(self, subject_id: str) -> Optional[Profile]:
        if subject_id in self.broken:
            raise RuntimeError(f"profile lookup failed for {subject_id}")
        return self.profiles.get(subject_id)


class FakeContactDirectory(ContactDirectory):
    def __init__(self, contacts: Optional[Dict[str, List[EmergencyContact]]] = None):
        super().__init__()
        self.contacts = contacts or {}

    async def get_contacts_ordered_by_priority(self, subject_id: str) -> List[EmergencyContact]:
        return sorted(self.contacts.get(subject_id, []), key=lambda c: c.priority)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sample_profiles():
    return {
        "user-1": Profile(id="user-1", full_name="Alex", email="alex@example.com"),
        "user-2": Profile(id="user-2", full_name=None, email="sam@example.com"),
    }


@pytest.fixture
def sample_contacts():
    return {
        "user-1": [
            make_contact("user-1", "Jordan", "+15550000002", 2),
            make_contact("user-1", "Casey", "+15550000001", 1),
        ],
        "user-2": [
            make_contact("user-2", "Riley", "+15550000003", 1),
        ],
    }


@pytest.fixture
def build_engine(transport, sample_profiles, sample_contacts):
    """Build an engine over in-memory fakes; keyword overrides replace the defaults."""
    def _build(states=None, transport=transport, profiles=None, contacts=None,
               broken_profiles=(), load_error=None):
        store = FakeStateStore(states, error=load_error)
        engine = EscalationEngine(
            state_store=store,
            profile_directory=FakeProfileDirectory(
                sample_profiles if profiles is None else profiles,
                broken=broken_profiles
            ),
            contact_directory=FakeContactDirectory(
                sample_contacts if contacts is None else contacts
            ),
            transport=transport,
        )
        return engine, store

    return _build
