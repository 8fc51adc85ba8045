"""Coach/player roster management.

A player's user profile carries the coachId assignment; the aggregate in the
players collection mirrors it and holds the running statistics.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from coachsync.core.errors import NotFoundError
from coachsync.core.ordering import sort_documents
from coachsync.matches.types import PlayerAggregate
from coachsync.store import MATCHES, PLAYERS, USERS, DocumentStore, QueryFilter

_STAT_FIELDS = ("currentScore", "matchCount", "totalScore", "averageScore", "lastMatchDate")


class RosterService:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def assign_player_to_coach(self, player_id: str, coach_id: str) -> dict[str, Any]:
        """Assign a player to a coach and create or refresh the player's aggregate.

        Existing statistics are kept when the aggregate already exists.

        Returns:
            The stored aggregate document

        Raises:
            NotFoundError: No user profile for the player
        """
        profile = await self._store.read(USERS, player_id)
        if profile is None:
            raise NotFoundError("Player", player_id)

        await self._store.update(USERS, player_id, {"coachId": coach_id})

        aggregate = PlayerAggregate(
            player_id=player_id,
            name=profile.get("name"),
            email=profile.get("email"),
            sport=profile.get("sport"),
            coach_id=coach_id,
        ).to_document()

        existing = await self._store.read(PLAYERS, player_id)
        if existing is not None:
            for field in _STAT_FIELDS:
                if field in existing:
                    aggregate[field] = existing[field]

        await self._store.create(PLAYERS, aggregate, doc_id=player_id)
        logger.info(f"[ROSTER] Assigned player_id={player_id} to coach_id={coach_id}")
        return await self._store.read(PLAYERS, player_id)

    async def remove_player_from_coach(self, player_id: str, coach_id: str | None = None) -> None:
        """Clear the player's coach assignment and drop the aggregate.

        Args:
            player_id: Player to release
            coach_id: When given, the player must currently be assigned to this coach

        Raises:
            NotFoundError: The player is not on ``coach_id``'s roster
        """
        profile = await self._store.read(USERS, player_id)
        if coach_id is not None:
            assignment = profile or await self._store.read(PLAYERS, player_id) or {}
            if assignment.get("coachId") != coach_id:
                raise NotFoundError("Player", f"{player_id} (coach {coach_id})")

        if profile is not None:
            await self._store.update(USERS, player_id, {"coachId": None})
        await self._store.delete(PLAYERS, player_id)
        logger.info(f"[ROSTER] Removed player_id={player_id} from their coach")

    async def get_players_by_coach(self, coach_id: str) -> list[dict[str, Any]]:
        """Aggregates of a coach's players, ordered by name."""
        players = await self._store.query(PLAYERS, [QueryFilter("coachId", "==", coach_id)])
        return sort_documents(players, "name", "asc")

    async def get_unassigned_players(self) -> list[dict[str, Any]]:
        """Player profiles without a coach, newest first.

        The coach filter runs in memory so None, "" and a missing field all
        count as unassigned.
        """
        users = await self._store.query(USERS, [QueryFilter("role", "==", "player")])
        unassigned = [user for user in users if not user.get("coachId")]
        return sort_documents(unassigned, "createdAt", "desc")

    async def get_player_details(self, player_id: str) -> dict[str, Any] | None:
        """Aggregate with the assigned coach's profile under ``coach``."""
        player = await self._store.read(PLAYERS, player_id)
        if player is None:
            return None
        if player.get("coachId"):
            player["coach"] = await self._store.read(USERS, player["coachId"])
        return player

    async def link_player_to_user(self, email: str, user_id: str) -> int:
        """Move a placeholder aggregate registered under ``email`` to ``user_id``.

        Matches of the placeholder are re-pointed to the new id and the
        placeholder aggregate is deleted.

        Returns:
            Number of matches moved (0 when there was nothing to link)
        """
        records = await self._store.query(PLAYERS, [QueryFilter("email", "==", email)])
        if not records:
            return 0

        placeholder = records[0]
        placeholder_id = placeholder["id"]
        if placeholder_id == user_id:
            return 0

        logger.info(f"[ROSTER] Linking player record {placeholder_id} to user {user_id}")
        linked = {key: value for key, value in placeholder.items() if key != "id"}
        linked["playerId"] = user_id
        linked["linkedFromPlaceholder"] = placeholder_id
        await self._store.create(PLAYERS, linked, doc_id=user_id)

        matches = await self._store.query(MATCHES, [QueryFilter("playerId", "==", placeholder_id)])
        for match in matches:
            await self._store.update(MATCHES, match["id"], {"playerId": user_id})

        await self._store.delete(PLAYERS, placeholder_id)
        logger.info(f"[ROSTER] Linked {len(matches)} matches to user {user_id}")
        return len(matches)
