from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import Field

from coachsync.core.schema import CamelModel
from coachsync.matches.service import preview_score
from coachsync.matches.types import ScorePreview

router = APIRouter(prefix="/scores", tags=["scores"])


class ScorePreviewRequest(CamelModel):
    sport: str
    parameters: dict[str, Any]
    recent_scores: list[float] = Field(default_factory=list)


@router.post("/preview")
def score_preview(request: ScorePreviewRequest) -> ScorePreview:
    """Score parameters and return recommendations without saving a match."""
    return preview_score(request.sport, request.parameters, request.recent_scores)
