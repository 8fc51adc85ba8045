"""Match write path and match-derived read models.

submit() is a fixed sequence: validate structure, validate sport parameters,
score, fetch recent scores, build recommendations, persist the match, then
update the player's aggregate. Persisting the match and updating the
aggregate are separate writes. If the second fails the aggregate is stale
until recalculate_player_statistics() rebuilds it from the matches.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from loguru import logger

from coachsync.config.settings import Settings
from coachsync.config.settings import settings as default_settings
from coachsync.core.errors import NotFoundError
from coachsync.core.ordering import sort_documents, utc_now
from coachsync.matches.types import (
    AggregateStats,
    MatchRecord,
    PerformanceSummary,
    PlayerAggregate,
    RecentActivity,
    ScoreHistoryEntry,
    ScorePreview,
    TeamOverview,
    TopPerformer,
)
from coachsync.matches.validators import validate_match_submission, validate_sport_parameters
from coachsync.recommendations import classify_trend, generate_comprehensive_suggestions, get_motivational_message
from coachsync.scoring import calculate_performance_score, get_performance_category
from coachsync.store import MATCHES, PLAYERS, USERS, DocumentStore, QueryFilter, Unsubscribe, WatchCallback

SUMMARY_SCORES = 5


def compute_aggregate_stats(matches: Sequence[Mapping[str, Any]]) -> AggregateStats:
    """Rebuild aggregate statistics from a complete set of matches.

    Independent of any prior aggregate state, so repeated calls on the same
    matches give the same result.

    Args:
        matches: Every match of one player, in any order

    Returns:
        AggregateStats (all zero for no scored matches)
    """
    scored = [match for match in matches if match.get("calculatedScore") is not None]
    if not scored:
        return AggregateStats()

    latest = sort_documents(scored, "date", "desc")[0]
    total = sum(match["calculatedScore"] for match in scored)
    return AggregateStats(
        match_count=len(scored),
        total_score=total,
        average_score=round(total / len(scored), 2),
        current_score=latest["calculatedScore"],
        last_match_date=latest.get("date"),
    )


def preview_score(
    sport: str,
    parameters: Mapping[str, Any],
    recent_scores: Sequence[float] | None = None,
    rng: random.Random | None = None,
) -> ScorePreview:
    """Score parameters and build recommendations without persisting anything.

    Raises:
        ValidationError: Unsupported sport or out-of-range parameters
    """
    normalized = validate_sport_parameters(sport, parameters)
    score = calculate_performance_score(sport, normalized)
    package = generate_comprehensive_suggestions(score, sport.lower(), normalized, recent_scores, rng=rng)
    category = get_performance_category(score)
    return ScorePreview(
        sport=sport.lower(),
        score=score,
        category=category["category"],
        category_description=category["description"],
        motivational_message=get_motivational_message(score),
        rest_recommendation=package.rest_recommendation,
        suggestions=package.suggestions,
    )


class MatchService:
    """Orchestrates match submission, deletion and aggregate maintenance.

    Args:
        store: Document store
        settings: Limits for recent-match queries
        clock: Returns the current UTC time (validation and lastMatchDate)
        rng: Random source for rest-hour draws
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ):
        self._store = store
        self._settings = settings or default_settings
        self._clock = clock
        self._rng = rng

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def submit(self, match_input: Mapping[str, Any]) -> MatchRecord:
        """Validate, score and persist a match, then update the player's aggregate.

        Args:
            match_input: playerId, coachId, sport, parameters, date and optional playerEmail

        Returns:
            The persisted MatchRecord

        Raises:
            ValidationError: Structural or parameter violations (nothing written)
            StoreError: Persistence failure (remaining steps aborted)
        """
        now = self._clock()
        submission = validate_match_submission(match_input, now=now)
        parameters = validate_sport_parameters(submission.sport, submission.parameters)

        score = calculate_performance_score(submission.sport, parameters)
        logger.info(f"[MATCHES] Scored {submission.sport} match for player_id={submission.player_id}: {score}")

        profile = await self._store.read(USERS, submission.player_id)
        email = submission.player_email or (profile or {}).get("email")

        recent_matches = await self.get_player_recent_matches(submission.player_id, email=email or "")
        # Fetched newest first; trend analysis wants oldest first
        recent_scores = [match.calculated_score for match in reversed(recent_matches)]

        package = generate_comprehensive_suggestions(
            score,
            submission.sport,
            parameters,
            recent_scores,
            rng=self._rng,
        )

        record = MatchRecord(
            player_id=submission.player_id,
            coach_id=submission.coach_id,
            player_email=email,
            sport=submission.sport,
            parameters=parameters,
            date=submission.date,
            calculated_score=score,
            suggestions=package.messages,
            rest_recommendation=package.rest_recommendation,
        )
        document = record.to_document()
        document.pop("id")
        match_id = await self._store.create(MATCHES, document)
        logger.info(f"[MATCHES] Persisted match_id={match_id} for player_id={submission.player_id}")

        await self._apply_match_to_aggregate(submission.player_id, score, now, profile, submission.sport, submission.coach_id)

        stored = await self._store.read(MATCHES, match_id)
        return MatchRecord.model_validate(stored or {**document, "id": match_id})

    async def _apply_match_to_aggregate(
        self,
        player_id: str,
        score: int,
        now: datetime,
        profile: Mapping[str, Any] | None,
        sport: str,
        coach_id: str,
    ) -> None:
        aggregate = await self._store.read(PLAYERS, player_id)
        if aggregate is None:
            profile = profile or {}
            created = PlayerAggregate(
                player_id=player_id,
                name=profile.get("name"),
                email=profile.get("email"),
                sport=profile.get("sport") or sport,
                coach_id=profile.get("coachId") or coach_id,
                current_score=score,
                match_count=1,
                total_score=score,
                average_score=round(float(score), 2),
                last_match_date=now,
            )
            await self._store.create(PLAYERS, created.to_document(), doc_id=player_id)
            logger.info(f"[MATCHES] Created aggregate for player_id={player_id}")
            return

        match_count = (aggregate.get("matchCount") or 0) + 1
        total_score = (aggregate.get("totalScore") or 0) + score
        await self._store.update(
            PLAYERS,
            player_id,
            {
                "matchCount": match_count,
                "totalScore": total_score,
                "averageScore": round(total_score / match_count, 2),
                "currentScore": score,
                "lastMatchDate": now,
            },
        )
        logger.debug(f"[MATCHES] Aggregate updated for player_id={player_id}: match_count={match_count}")

    async def delete_match(self, match_id: str) -> None:
        """Delete a match and rebuild its player's aggregate from the remaining matches.

        Raises:
            NotFoundError: No match with this id
        """
        match = await self._store.read(MATCHES, match_id)
        if match is None:
            raise NotFoundError("Match", match_id)

        await self._store.delete(MATCHES, match_id)
        logger.info(f"[MATCHES] Deleted match_id={match_id}, recomputing player_id={match['playerId']}")
        await self.recalculate_player_statistics(match["playerId"])

    async def recalculate_player_statistics(self, player_id: str) -> AggregateStats:
        """Rebuild a player's aggregate from every stored match."""
        matches = await self._store.query(MATCHES, [QueryFilter("playerId", "==", player_id)])
        stats = compute_aggregate_stats(matches)

        if await self._store.read(PLAYERS, player_id) is not None:
            await self._store.update(PLAYERS, player_id, stats.to_document())
        elif stats.match_count:
            profile = await self._store.read(USERS, player_id) or {}
            aggregate = PlayerAggregate(
                player_id=player_id,
                name=profile.get("name"),
                email=profile.get("email"),
                sport=profile.get("sport") or matches[0].get("sport"),
                coach_id=profile.get("coachId") or matches[0].get("coachId"),
                **stats.model_dump(),
            )
            await self._store.create(PLAYERS, aggregate.to_document(), doc_id=player_id)

        logger.info(
            f"[MATCHES] Recomputed player_id={player_id}: match_count={stats.match_count}, average={stats.average_score}"
        )
        return stats

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_match(self, match_id: str) -> MatchRecord:
        match = await self._store.read(MATCHES, match_id)
        if match is None:
            raise NotFoundError("Match", match_id)
        return MatchRecord.model_validate(match)

    async def get_player_matches(self, player_id: str, sport: str | None = None) -> list[MatchRecord]:
        """All of a player's matches, newest first, optionally for one sport."""
        filters = [QueryFilter("playerId", "==", player_id)]
        if sport:
            filters.append(QueryFilter("sport", "==", sport.lower()))
        matches = await self._store.query(MATCHES, filters, order_by="date", direction="desc")
        return [MatchRecord.model_validate(match) for match in matches]

    async def get_player_recent_matches(
        self,
        player_id: str,
        limit: int | None = None,
        email: str | None = None,
    ) -> list[MatchRecord]:
        """Most recent matches, newest first.

        Matches are looked up by email first since it survives account
        linking; the player id is used when the email finds nothing.
        """
        limit = limit or self._settings.recent_matches_limit
        if email is None:
            profile = await self._store.read(USERS, player_id)
            email = (profile or {}).get("email")

        matches: list[dict[str, Any]] = []
        if email:
            matches = await self._store.query(
                MATCHES, [QueryFilter("playerEmail", "==", email)], order_by="date", direction="desc", limit=limit
            )
        if not matches:
            matches = await self._store.query(
                MATCHES, [QueryFilter("playerId", "==", player_id)], order_by="date", direction="desc", limit=limit
            )
        return [MatchRecord.model_validate(match) for match in matches]

    async def get_coach_matches(self, coach_id: str, limit: int | None = None) -> list[MatchRecord]:
        matches = await self._store.query(
            MATCHES, [QueryFilter("coachId", "==", coach_id)], order_by="date", direction="desc", limit=limit
        )
        return [MatchRecord.model_validate(match) for match in matches]

    async def player_performance_summary(self, player_id: str) -> PerformanceSummary:
        """Aggregate, recent scores and trend for a player's dashboard.

        Raises:
            NotFoundError: No user profile for this player
        """
        profile = await self._store.read(USERS, player_id)
        if profile is None:
            raise NotFoundError("Player", player_id)

        aggregate = await self._store.read(PLAYERS, player_id) or {}
        recent = await self.get_player_recent_matches(player_id, email=profile.get("email"))
        chronological = [match.calculated_score for match in reversed(recent)]

        summary = PerformanceSummary(
            player_id=player_id,
            name=aggregate.get("name") or profile.get("name"),
            sport=aggregate.get("sport") or profile.get("sport"),
            total_matches=aggregate.get("matchCount") or 0,
            average_score=aggregate.get("averageScore") or 0,
            current_score=aggregate.get("currentScore") or 0,
            last_match_date=aggregate.get("lastMatchDate"),
            recent_scores=[match.calculated_score for match in recent[:SUMMARY_SCORES]],
            trend=classify_trend(chronological),
            history=[
                ScoreHistoryEntry(match_id=match.id, date=match.date, score=match.calculated_score, sport=match.sport)
                for match in recent[:SUMMARY_SCORES]
            ],
        )
        summary.category = get_performance_category(summary.average_score)["category"]
        return summary

    async def team_overview(self, coach_id: str) -> TeamOverview:
        """Team mean, top performer and recent activity for a coach."""
        players = await self._store.query(PLAYERS, [QueryFilter("coachId", "==", coach_id)])
        players = sort_documents(players, "name", "asc")
        matches = await self.get_coach_matches(coach_id, limit=self._settings.coach_matches_limit)

        overview = TeamOverview(coach_id=coach_id, total_players=len(players), total_matches=len(matches))
        if not players:
            return overview

        averages = [player.get("averageScore") or 0 for player in players]
        overview.average_team_score = round(sum(averages) / len(players), 2)

        top = players[0]
        for player in players[1:]:
            if (player.get("averageScore") or 0) > (top.get("averageScore") or 0):
                top = player
        overview.top_performer = TopPerformer(
            player_id=top.get("playerId") or top["id"],
            name=top.get("name"),
            average_score=top.get("averageScore") or 0,
        )

        names = {player.get("playerId") or player["id"]: player.get("name") for player in players}
        overview.recent_activity = [
            RecentActivity(
                match_id=match.id,
                player_id=match.player_id,
                player_name=names.get(match.player_id) or "Unknown",
                sport=match.sport,
                score=match.calculated_score,
                date=match.date,
            )
            for match in matches[: self._settings.recent_activity_limit]
        ]
        return overview

    # ------------------------------------------------------------------
    # Raw watches
    # ------------------------------------------------------------------

    def on_player_matches_change(self, player_id: str, callback: WatchCallback) -> Unsubscribe:
        return self._store.watch_query(
            MATCHES, [QueryFilter("playerId", "==", player_id)], callback, order_by="date", direction="desc"
        )

    def on_coach_matches_change(self, coach_id: str, callback: WatchCallback) -> Unsubscribe:
        return self._store.watch_query(
            MATCHES, [QueryFilter("coachId", "==", coach_id)], callback, order_by="date", direction="desc"
        )
