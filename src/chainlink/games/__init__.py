from .tournament_runtime import Match, RoundResult, TournamentEvent, TournamentRuntime

__all__ = [
    "Match",
    "RoundResult",
    "TournamentEvent",
    "TournamentRuntime",
]
