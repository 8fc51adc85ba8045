"""Tests for the match write path, aggregates and read models.

Tests cover:
- Submission: scoring, persistence, aggregate creation and increments
- Trend input ordering and email-first recent-match lookup
- Atomicity on validation failure and recovery from a failed aggregate write
- Deletion and statistics recomputation
- Performance summary and team overview
"""

import random
from datetime import timedelta

import pytest

from coachsync.core.errors import NotFoundError, StoreError, ValidationError
from coachsync.matches.service import MatchService, compute_aggregate_stats, preview_score
from coachsync.store import InMemoryDocumentStore

BASKETBALL_FIXTURE = {"pointsScored": 35, "rebounds": 2, "assists": 1, "steals": 0, "minutesPlayed": 36}


async def seed_matches(store, fixed_now, scores, **fields):
    """Store scored matches, oldest first, one day apart ending a week ago."""
    ids = []
    count = len(scores)
    for index, score in enumerate(scores):
        document = {
            "playerId": "player-1",
            "coachId": "coach-1",
            "sport": "football",
            "parameters": {},
            "date": fixed_now - timedelta(days=7 + count - index),
            "calculatedScore": score,
        }
        document.update(fields)
        ids.append(await store.create("matches", document))
    return ids


class FailingPlayersStore(InMemoryDocumentStore):
    """Raises on writes to the players collection while ``failing`` is set."""

    def __init__(self):
        super().__init__()
        self.failing = True

    async def create(self, collection, data, doc_id=None):
        if collection == "players" and self.failing:
            raise StoreError("unavailable")
        return await super().create(collection, data, doc_id=doc_id)


class DeniedStore(InMemoryDocumentStore):
    async def query(self, collection, filters=(), order_by=None, direction="asc", limit=None):
        raise StoreError("permission-denied")


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_persists_scored_match(self, match_service, seeded_users, store, make_match_input, fixed_now):
        record = await match_service.submit(make_match_input())

        assert record.id
        assert record.calculated_score == 67
        assert record.player_email == "ava@example.com"
        assert 24 <= record.rest_recommendation.hours <= 47
        assert record.suggestions[0].startswith("Average performance.")
        assert record.created_at is not None

        stored = await store.read("matches", record.id)
        assert stored["calculatedScore"] == 67
        assert stored["sport"] == "football"
        assert stored["parameters"]["passesCompleted"] == 20
        assert stored["date"] == fixed_now - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_first_match_creates_aggregate(self, match_service, seeded_users, store, make_match_input, fixed_now):
        await match_service.submit(make_match_input())

        aggregate = await store.read("players", "player-1")
        assert aggregate["playerId"] == "player-1"
        assert aggregate["name"] == "Ava Patel"
        assert aggregate["coachId"] == "coach-1"
        assert aggregate["matchCount"] == 1
        assert aggregate["totalScore"] == 67
        assert aggregate["averageScore"] == 67
        assert aggregate["currentScore"] == 67
        assert aggregate["lastMatchDate"] == fixed_now

    @pytest.mark.asyncio
    async def test_second_match_increments_aggregate(self, match_service, seeded_users, store, make_match_input):
        await match_service.submit(make_match_input())
        await match_service.submit(make_match_input(sport="basketball", parameters=BASKETBALL_FIXTURE))

        aggregate = await store.read("players", "player-1")
        assert aggregate["matchCount"] == 2
        assert aggregate["totalScore"] == 117
        assert aggregate["averageScore"] == 58.5
        assert aggregate["currentScore"] == 50

    @pytest.mark.asyncio
    async def test_submit_without_profile(self, store, test_settings, make_match_input, fixed_now):
        service = MatchService(store, settings=test_settings, clock=lambda: fixed_now, rng=random.Random(1))
        record = await service.submit(make_match_input(playerId="walk-in", coachId="coach-9"))

        assert record.player_email is None
        aggregate = await store.read("players", "walk-in")
        assert aggregate["coachId"] == "coach-9"
        assert aggregate["sport"] == "football"
        assert aggregate["name"] is None

    @pytest.mark.asyncio
    async def test_recent_scores_feed_trend_oldest_first(
        self, match_service, seeded_users, store, make_match_input, fixed_now
    ):
        await seed_matches(store, fixed_now, [55, 60, 65, 75, 80, 85], playerEmail="ava@example.com")

        record = await match_service.submit(make_match_input())

        assert record.suggestions[-1].startswith("Excellent improvement trend!")

    @pytest.mark.asyncio
    async def test_validation_failure_writes_nothing(self, match_service, seeded_users, store, make_match_input):
        bad_parameters = {"goalsScored": 1, "assists": 0, "passesCompleted": 500, "tacklesMade": 0, "minutesPlayed": 90}

        with pytest.raises(ValidationError) as exc_info:
            await match_service.submit(make_match_input(parameters=bad_parameters))

        assert "parameters.passesCompleted" in exc_info.value.errors
        assert store.count("matches") == 0
        assert store.count("players") == 0

    @pytest.mark.asyncio
    async def test_structural_failure_writes_nothing(self, match_service, store, make_match_input, fixed_now):
        with pytest.raises(ValidationError):
            await match_service.submit(make_match_input(date=fixed_now + timedelta(hours=1)))
        assert store.count("matches") == 0

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, test_settings, make_match_input, fixed_now):
        service = MatchService(DeniedStore(), settings=test_settings, clock=lambda: fixed_now)
        with pytest.raises(StoreError) as exc_info:
            await service.submit(make_match_input())
        assert exc_info.value.code == "permission-denied"

    @pytest.mark.asyncio
    async def test_failed_aggregate_write_repaired_by_recompute(self, test_settings, make_match_input, fixed_now):
        store = FailingPlayersStore()
        service = MatchService(store, settings=test_settings, clock=lambda: fixed_now, rng=random.Random(2))

        with pytest.raises(StoreError):
            await service.submit(make_match_input())

        assert store.count("matches") == 1
        assert await store.read("players", "player-1") is None

        store.failing = False
        stats = await service.recalculate_player_statistics("player-1")

        assert stats.match_count == 1
        aggregate = await store.read("players", "player-1")
        assert aggregate["matchCount"] == 1
        assert aggregate["averageScore"] == 67


class TestRecentMatches:
    @pytest.mark.asyncio
    async def test_email_lookup_finds_placeholder_matches(self, match_service, store, fixed_now):
        await seed_matches(store, fixed_now, [40, 50], playerId="placeholder-7", playerEmail="ava@example.com")

        matches = await match_service.get_player_recent_matches("player-1", email="ava@example.com")

        assert [match.calculated_score for match in matches] == [50, 40]

    @pytest.mark.asyncio
    async def test_falls_back_to_player_id(self, match_service, store, fixed_now):
        await seed_matches(store, fixed_now, [40, 50, 60])

        matches = await match_service.get_player_recent_matches("player-1", email="nobody@example.com")

        assert [match.calculated_score for match in matches] == [60, 50, 40]

    @pytest.mark.asyncio
    async def test_limit(self, match_service, store, fixed_now):
        await seed_matches(store, fixed_now, list(range(40, 80, 3)))
        matches = await match_service.get_player_recent_matches("player-1", limit=4)
        assert len(matches) == 4

    @pytest.mark.asyncio
    async def test_player_matches_by_sport(self, match_service, store, fixed_now):
        await seed_matches(store, fixed_now, [40, 50])
        await seed_matches(store, fixed_now, [70], sport="cricket")

        cricket = await match_service.get_player_matches("player-1", sport="Cricket")
        everything = await match_service.get_player_matches("player-1")

        assert [match.sport for match in cricket] == ["cricket"]
        assert len(everything) == 3


class TestDeleteAndRecompute:
    @pytest.mark.asyncio
    async def test_delete_recomputes_aggregate(self, match_service, seeded_users, store, make_match_input):
        first = await match_service.submit(make_match_input())
        await match_service.submit(
            make_match_input(sport="basketball", parameters=BASKETBALL_FIXTURE, date=first.date - timedelta(days=3))
        )

        await match_service.delete_match(first.id)

        aggregate = await store.read("players", "player-1")
        assert aggregate["matchCount"] == 1
        assert aggregate["totalScore"] == 50
        assert aggregate["averageScore"] == 50
        assert aggregate["currentScore"] == 50
        assert await store.read("matches", first.id) is None

    @pytest.mark.asyncio
    async def test_delete_last_match_zeroes_aggregate(self, match_service, seeded_users, store, make_match_input):
        record = await match_service.submit(make_match_input())
        await match_service.delete_match(record.id)

        aggregate = await store.read("players", "player-1")
        assert aggregate["matchCount"] == 0
        assert aggregate["averageScore"] == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_match(self, match_service):
        with pytest.raises(NotFoundError, match="Match not found: missing"):
            await match_service.delete_match("missing")

    @pytest.mark.asyncio
    async def test_recompute_is_idempotent(self, match_service, seeded_users, store, make_match_input):
        await match_service.submit(make_match_input())
        await match_service.submit(make_match_input(sport="basketball", parameters=BASKETBALL_FIXTURE))
        await store.update("players", "player-1", {"matchCount": 99, "totalScore": 1, "averageScore": 3.3})

        first = await match_service.recalculate_player_statistics("player-1")
        second = await match_service.recalculate_player_statistics("player-1")

        assert first == second
        assert first.match_count == 2
        assert first.average_score == 58.5
        aggregate = await store.read("players", "player-1")
        assert aggregate["matchCount"] == 2

    def test_compute_stats_uses_latest_by_date(self, fixed_now):
        matches = [
            {"calculatedScore": 90, "date": fixed_now - timedelta(days=1)},
            {"calculatedScore": 40, "date": fixed_now - timedelta(days=5)},
            {"calculatedScore": 71, "date": fixed_now - timedelta(days=3)},
        ]
        stats = compute_aggregate_stats(matches)
        assert stats.current_score == 90
        assert stats.total_score == 201
        assert stats.average_score == 67
        assert stats.last_match_date == fixed_now - timedelta(days=1)

    def test_compute_stats_empty(self):
        assert compute_aggregate_stats([]).match_count == 0


class TestReadModels:
    @pytest.mark.asyncio
    async def test_get_match(self, match_service, seeded_users, make_match_input):
        record = await match_service.submit(make_match_input())
        fetched = await match_service.get_match(record.id)
        assert fetched.calculated_score == record.calculated_score

        with pytest.raises(NotFoundError):
            await match_service.get_match("nope")

    @pytest.mark.asyncio
    async def test_performance_summary(self, match_service, seeded_users, store, fixed_now):
        await seed_matches(store, fixed_now, [55, 60, 65, 75, 80, 85])
        await match_service.recalculate_player_statistics("player-1")

        summary = await match_service.player_performance_summary("player-1")

        assert summary.total_matches == 6
        assert summary.average_score == 70
        assert summary.current_score == 85
        assert summary.recent_scores == [85, 80, 75, 65, 60]
        assert summary.trend == "improving"
        assert summary.category == "good"
        assert summary.history[0].score == 85

    @pytest.mark.asyncio
    async def test_summary_requires_profile(self, match_service):
        with pytest.raises(NotFoundError, match="Player not found"):
            await match_service.player_performance_summary("ghost")

    @pytest.mark.asyncio
    async def test_team_overview(self, match_service, store, fixed_now):
        for player_id, name, average in (("p-z", "Zed", 80), ("p-b", "Bob", 70), ("p-a", "Amy", 80)):
            await store.create(
                "players",
                {"playerId": player_id, "name": name, "coachId": "coach-1", "averageScore": average},
                doc_id=player_id,
            )
        await seed_matches(store, fixed_now, [70, 82], playerId="p-a")
        await seed_matches(store, fixed_now, [60], playerId="p-unknown")

        overview = await match_service.team_overview("coach-1")

        assert overview.total_players == 3
        assert overview.total_matches == 3
        assert overview.average_team_score == 76.67
        assert overview.top_performer.player_id == "p-a"
        assert overview.top_performer.name == "Amy"
        assert [activity.player_name for activity in overview.recent_activity] == ["Amy", "Unknown", "Amy"]

    @pytest.mark.asyncio
    async def test_team_overview_empty_roster(self, match_service):
        overview = await match_service.team_overview("coach-empty")
        assert overview.total_players == 0
        assert overview.average_team_score == 0
        assert overview.top_performer is None
        assert overview.recent_activity == []


class TestWatches:
    @pytest.mark.asyncio
    async def test_player_match_watch(self, match_service, seeded_users, make_match_input):
        deliveries = []
        unsubscribe = match_service.on_player_matches_change("player-1", lambda data, error: deliveries.append(data))

        await match_service.submit(make_match_input())
        unsubscribe()
        await match_service.submit(make_match_input())

        assert deliveries[0] == []
        assert len(deliveries) == 2
        assert deliveries[1][0]["calculatedScore"] == 67


def test_preview_score_does_not_need_store():
    preview = preview_score(
        "Football",
        {"goalsScored": 3, "assists": 0, "passesCompleted": 20, "tacklesMade": 0, "minutesPlayed": 90},
        rng=random.Random(0),
    )
    assert preview.sport == "football"
    assert preview.score == 67
    assert preview.category == "average"
    assert preview.motivational_message.startswith("Solid effort!")
    assert len(preview.suggestions) == 4
