"""Service dependencies resolved from application state."""

from __future__ import annotations

from fastapi import Request

from coachsync.matches.service import MatchService
from coachsync.players.roster import RosterService


def get_match_service(request: Request) -> MatchService:
    return request.app.state.match_service


def get_roster_service(request: Request) -> RosterService:
    return request.app.state.roster_service
