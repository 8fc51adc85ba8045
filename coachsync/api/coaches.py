from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from loguru import logger

from coachsync.api.dependencies import get_match_service, get_roster_service
from coachsync.matches.service import MatchService
from coachsync.matches.types import TeamOverview
from coachsync.players.roster import RosterService

router = APIRouter(prefix="/coaches", tags=["coaches"])


@router.get("/{coach_id}/players")
async def list_players(coach_id: str, roster: RosterService = Depends(get_roster_service)) -> list[dict[str, Any]]:
    return await roster.get_players_by_coach(coach_id)


@router.put("/{coach_id}/players/{player_id}")
async def assign_player(
    coach_id: str,
    player_id: str,
    roster: RosterService = Depends(get_roster_service),
) -> dict[str, Any]:
    logger.info(f"[API] Assigning player_id={player_id} to coach_id={coach_id}")
    return await roster.assign_player_to_coach(player_id, coach_id)


@router.delete("/{coach_id}/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_player(
    coach_id: str,
    player_id: str,
    roster: RosterService = Depends(get_roster_service),
) -> Response:
    logger.info(f"[API] Removing player_id={player_id} from coach_id={coach_id}")
    await roster.remove_player_from_coach(player_id, coach_id=coach_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{coach_id}/overview")
async def team_overview(coach_id: str, service: MatchService = Depends(get_match_service)) -> TeamOverview:
    """Team mean, top performer and recent activity."""
    return await service.team_overview(coach_id)
