"""Tests for coach/player roster management."""

from datetime import datetime, timedelta, timezone

import pytest

from coachsync.core.errors import NotFoundError

T0 = datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.fixture
async def profiles(store):
    users = [
        ("coach-1", {"name": "Coach Kim", "role": "coach"}),
        ("p-old", {"name": "Omar", "email": "omar@example.com", "role": "player", "sport": "cricket"}),
        ("p-new", {"name": "Nia", "email": "nia@example.com", "role": "player", "coachId": ""}),
        ("p-coached", {"name": "Cal", "role": "player", "coachId": "coach-1"}),
    ]
    for index, (user_id, data) in enumerate(users):
        await store.create("users", {**data, "createdAt": T0 + timedelta(days=index)}, doc_id=user_id)
    return store


class TestAssignment:
    @pytest.mark.asyncio
    async def test_assign_creates_aggregate(self, roster, profiles, store):
        aggregate = await roster.assign_player_to_coach("p-old", "coach-1")

        assert aggregate["id"] == "p-old"
        assert aggregate["coachId"] == "coach-1"
        assert aggregate["name"] == "Omar"
        assert aggregate["sport"] == "cricket"
        assert aggregate["matchCount"] == 0
        assert (await store.read("users", "p-old"))["coachId"] == "coach-1"

    @pytest.mark.asyncio
    async def test_reassign_keeps_statistics(self, roster, profiles, store):
        await roster.assign_player_to_coach("p-old", "coach-1")
        await store.update("players", "p-old", {"matchCount": 4, "averageScore": 72.5})

        aggregate = await roster.assign_player_to_coach("p-old", "coach-2")

        assert aggregate["coachId"] == "coach-2"
        assert aggregate["matchCount"] == 4
        assert aggregate["averageScore"] == 72.5

    @pytest.mark.asyncio
    async def test_assign_unknown_player(self, roster):
        with pytest.raises(NotFoundError):
            await roster.assign_player_to_coach("ghost", "coach-1")

    @pytest.mark.asyncio
    async def test_remove_player(self, roster, profiles, store):
        await roster.assign_player_to_coach("p-old", "coach-1")
        await roster.remove_player_from_coach("p-old")

        assert await store.read("players", "p-old") is None
        assert (await store.read("users", "p-old"))["coachId"] is None

    @pytest.mark.asyncio
    async def test_remove_requires_matching_coach(self, roster, profiles, store):
        await roster.assign_player_to_coach("p-old", "coach-1")

        with pytest.raises(NotFoundError):
            await roster.remove_player_from_coach("p-old", coach_id="coach-2")

        assert (await store.read("users", "p-old"))["coachId"] == "coach-1"
        assert await store.read("players", "p-old") is not None

        await roster.remove_player_from_coach("p-old", coach_id="coach-1")
        assert await store.read("players", "p-old") is None

    @pytest.mark.asyncio
    async def test_remove_checks_aggregate_without_profile(self, roster, store):
        await store.create("players", {"playerId": "walk-in", "coachId": "coach-1"}, doc_id="walk-in")

        with pytest.raises(NotFoundError):
            await roster.remove_player_from_coach("walk-in", coach_id="coach-2")
        await roster.remove_player_from_coach("walk-in", coach_id="coach-1")

        assert await store.read("players", "walk-in") is None


class TestLookups:
    @pytest.mark.asyncio
    async def test_players_by_coach_sorted_by_name(self, roster, profiles):
        await roster.assign_player_to_coach("p-old", "coach-1")
        await roster.assign_player_to_coach("p-new", "coach-1")
        await roster.assign_player_to_coach("p-coached", "coach-1")

        players = await roster.get_players_by_coach("coach-1")

        assert [player["name"] for player in players] == ["Cal", "Nia", "Omar"]

    @pytest.mark.asyncio
    async def test_unnamed_aggregates_sort_after_named(self, roster, store):
        for player_id, name in (("p-z", "Zed"), ("p-x", None), ("p-a", "Amy")):
            await store.create("players", {"playerId": player_id, "name": name, "coachId": "coach-1"}, doc_id=player_id)

        players = await roster.get_players_by_coach("coach-1")

        assert [player["id"] for player in players] == ["p-a", "p-z", "p-x"]

    @pytest.mark.asyncio
    async def test_unassigned_players_newest_first(self, roster, profiles):
        unassigned = await roster.get_unassigned_players()
        assert [user["id"] for user in unassigned] == ["p-new", "p-old"]

    @pytest.mark.asyncio
    async def test_player_details_include_coach(self, roster, profiles):
        await roster.assign_player_to_coach("p-old", "coach-1")

        details = await roster.get_player_details("p-old")

        assert details["coach"]["name"] == "Coach Kim"
        assert await roster.get_player_details("ghost") is None


class TestLinking:
    @pytest.mark.asyncio
    async def test_link_moves_placeholder_and_matches(self, roster, store):
        await store.create(
            "players",
            {"playerId": "placeholder-1", "email": "new@example.com", "matchCount": 2, "coachId": "coach-1"},
            doc_id="placeholder-1",
        )
        for match_id in ("m1", "m2"):
            await store.create("matches", {"playerId": "placeholder-1", "calculatedScore": 60}, doc_id=match_id)
        await store.create("matches", {"playerId": "someone-else", "calculatedScore": 60}, doc_id="m3")

        moved = await roster.link_player_to_user("new@example.com", "user-9")

        assert moved == 2
        assert await store.read("players", "placeholder-1") is None
        linked = await store.read("players", "user-9")
        assert linked["playerId"] == "user-9"
        assert linked["matchCount"] == 2
        assert linked["linkedFromPlaceholder"] == "placeholder-1"
        assert (await store.read("matches", "m1"))["playerId"] == "user-9"
        assert (await store.read("matches", "m3"))["playerId"] == "someone-else"

    @pytest.mark.asyncio
    async def test_link_without_placeholder(self, roster):
        assert await roster.link_player_to_user("nobody@example.com", "user-9") == 0
