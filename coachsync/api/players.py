from __future__ import annotations

from fastapi import APIRouter, Depends

from coachsync.api.dependencies import get_match_service
from coachsync.matches.service import MatchService
from coachsync.matches.types import MatchRecord, PerformanceSummary

router = APIRouter(prefix="/players", tags=["players"])


@router.get("/{player_id}/matches")
async def list_player_matches(
    player_id: str,
    sport: str | None = None,
    service: MatchService = Depends(get_match_service),
) -> list[MatchRecord]:
    """A player's matches, newest first, optionally filtered by sport."""
    return await service.get_player_matches(player_id, sport=sport)


@router.get("/{player_id}/summary")
async def player_summary(player_id: str, service: MatchService = Depends(get_match_service)) -> PerformanceSummary:
    return await service.player_performance_summary(player_id)
