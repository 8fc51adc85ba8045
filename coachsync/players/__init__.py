from coachsync.players.roster import RosterService

__all__ = ["RosterService"]
