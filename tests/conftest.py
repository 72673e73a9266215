from datetime import datetime, timedelta, timezone

import pytest

from donation_hub.config import Settings
from donation_hub.db.db import Database
from donation_hub.marketplace import Marketplace
from donation_hub.utils.auth_helper import Actor


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def actor_of(result) -> Actor:
    assert result.success, result.message
    return Actor(id=result.user.id, role=result.user.role)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", jwt_secret="test-secret")


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_db_and_tables()
    yield db
    db.dispose()


@pytest.fixture
def hub(database, settings, clock):
    return Marketplace(database, settings, clock)


@pytest.fixture
def admin(hub):
    return actor_of(hub.register({
        "name": "Admin User", "email": "admin@example.com", "password": "admin123", "role": "admin",
    }))


@pytest.fixture
def donor(hub):
    return actor_of(hub.register({
        "name": "Amit Sharma", "email": "amit@example.com", "password": "donor123", "role": "donor",
    }))


@pytest.fixture
def other_donor(hub):
    return actor_of(hub.register({
        "name": "Jane Smith", "email": "jane@example.com", "password": "donor456", "role": "donor",
    }))


@pytest.fixture
def receiver(hub):
    return actor_of(hub.register({
        "name": "Sneha Patel", "email": "sneha@example.com", "password": "receiver123", "role": "receiver",
    }))


@pytest.fixture
def add_donation(hub, donor, admin, clock):
    """Create a donation one minute after the previous one, optionally approving it."""

    def _add(approve=False, owner=None, **fields):
        data = {"item_name": "Rice", "category": "food", "description": "Bag of rice", "quantity": 5}
        data.update(fields)
        clock.advance(minutes=1)
        result = hub.add_donation(owner or donor, data)
        assert result.success, result.message
        if approve:
            decided = hub.decide_donation(admin, result.donation.id, "approve")
            assert decided.success, decided.message
            return decided.donation
        return result.donation

    return _add


@pytest.fixture
def add_request(hub, receiver, admin, clock):
    def _add(approve=False, owner=None, **fields):
        data = {
            "item_needed": "Rice",
            "category": "food",
            "description": "Rice for a shelter kitchen",
            "quantity": 10,
            "urgency": "normal",
        }
        data.update(fields)
        clock.advance(minutes=1)
        result = hub.add_request(owner or receiver, data)
        assert result.success, result.message
        if approve:
            decided = hub.decide_request(admin, result.request.id, "approve")
            assert decided.success, decided.message
            return decided.request
        return result.request

    return _add
