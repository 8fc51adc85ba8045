"""Root conftest for all tests.

Shared fixtures: a fixed clock, an in-memory store, settings that ignore the
local .env file, and services wired to that store.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from coachsync.config.settings import Settings
from coachsync.matches.service import MatchService
from coachsync.players.roster import RosterService
from coachsync.store import InMemoryDocumentStore
from coachsync.sync.manager import SyncManager

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

FOOTBALL_FIXTURE = {
    "goalsScored": 3,
    "assists": 0,
    "passesCompleted": 20,
    "tacklesMade": 0,
    "minutesPlayed": 90,
}


@pytest.fixture(autouse=True)
def reset_log_sinks():
    """Drop sinks bound to streams that a test (CliRunner, capture) closes."""
    yield
    logger.remove()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def test_settings():
    """Settings isolated from environment files."""
    return Settings(_env_file=None, store_backend="memory")


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def match_service(store, test_settings):
    return MatchService(store, settings=test_settings, clock=lambda: FIXED_NOW, rng=random.Random(7))


@pytest.fixture
def roster(store):
    return RosterService(store)


@pytest.fixture
def sync_manager(store, test_settings):
    manager = SyncManager(store, settings=test_settings)
    yield manager
    manager.unsubscribe_all()


@pytest.fixture
def player_profile():
    return {
        "name": "Ava Patel",
        "email": "ava@example.com",
        "role": "player",
        "sport": "football",
        "coachId": "coach-1",
    }


@pytest.fixture
async def seeded_users(store, player_profile):
    """Coach and player profiles in the users collection."""
    await store.create("users", {"name": "Coach Kim", "email": "kim@example.com", "role": "coach"}, doc_id="coach-1")
    await store.create("users", player_profile, doc_id="player-1")
    return store


@pytest.fixture
def make_match_input():
    """Factory for valid football submissions; keyword overrides replace fields."""

    def _make(**overrides):
        data = {
            "playerId": "player-1",
            "coachId": "coach-1",
            "sport": "football",
            "parameters": dict(FOOTBALL_FIXTURE),
            "date": FIXED_NOW - timedelta(days=1),
        }
        data.update(overrides)
        return data

    return _make
