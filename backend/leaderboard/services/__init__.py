"""Point-claim and leaderboard rules.

Views and CLI commands build a `LeaderboardService` around a store and
call it; nothing in here touches the request or the response.
"""

from .leaderboard import (
    DEFAULT_PLAYERS,
    MAX_AWARD,
    MIN_AWARD,
    ClaimResult,
    LeaderboardService,
)

__all__ = [
    'DEFAULT_PLAYERS',
    'MAX_AWARD',
    'MIN_AWARD',
    'ClaimResult',
    'LeaderboardService',
]
