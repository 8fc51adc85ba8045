from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from loguru import logger

from coachsync.api.dependencies import get_match_service
from coachsync.matches.service import MatchService
from coachsync.matches.types import MatchRecord

router = APIRouter(prefix="/matches", tags=["matches"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_match(
    payload: dict[str, Any] = Body(...),
    service: MatchService = Depends(get_match_service),
) -> MatchRecord:
    """Validate, score and persist a match; returns the stored record."""
    logger.info(f"[API] Match submission for player_id={payload.get('playerId')}")
    return await service.submit(payload)


@router.get("/{match_id}")
async def get_match(match_id: str, service: MatchService = Depends(get_match_service)) -> MatchRecord:
    return await service.get_match(match_id)


@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match(match_id: str, service: MatchService = Depends(get_match_service)) -> Response:
    await service.delete_match(match_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
