import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from leaderboard.errors import NotFoundError, ValidationError
from leaderboard.models import AwardRecord, Player
from leaderboard.repository import LeaderboardStore

MIN_AWARD = 1
MAX_AWARD = 10
USERNAME_MAX_LENGTH = 64
ID_MIN = -(2 ** 63)
ID_MAX = 2 ** 63 - 1

DEFAULT_PLAYERS = (
    'Rahul', 'Kamal', 'Sanak', 'Amit', 'Priya',
    'Neha', 'Vikas', 'Anjali', 'Rohit', 'Simran',
)


@dataclass
class ClaimResult:
    """Outcome of a successful claim."""

    points_awarded: int
    total_points: int

    def to_dict(self):
        return {'pointsAwarded': self.points_awarded, 'totalPoints': self.total_points}


class LeaderboardService:
    """Leaderboard queries and the point-claim transaction.

    The store is passed in rather than looked up, so the same rules run
    against the SQL store in the app and against doubles in tests.
    """

    def __init__(self, store: LeaderboardStore, rng=None, logger: Optional[logging.Logger] = None):
        self.store = store
        self.rng = rng or random
        self.logger = logger or logging.getLogger(__name__)

    def list_players(self) -> List[Player]:
        with self.store.transaction() as store:
            return store.list_players()

    def register_player(self, username) -> Player:
        username = self._clean_username(username)
        with self.store.transaction() as store:
            if store.find_player_by_username(username) is not None:
                raise ValidationError('Username already exists')
            player = store.add_player(username)
        self.logger.info(f"[register] player={player.id} username={player.username}")
        return player

    def claim_points(self, player_id) -> ClaimResult:
        """Award a random 1..10 points to a player and log the award.

        The increment and the history insert commit together; an unknown
        player raises NotFoundError and leaves the store untouched.
        """
        if player_id is None or player_id == '':
            raise ValidationError('userId is required')
        pid = self._coerce_id(player_id)
        if pid is None:
            raise NotFoundError('User not found')

        amount = self.rng.randint(MIN_AWARD, MAX_AWARD)
        with self.store.transaction() as store:
            total = store.increment_points(pid, amount)
            if total is None:
                raise NotFoundError('User not found')
            store.add_award(pid, amount)
        self.logger.info(f"[claim] player={pid} awarded={amount} total={total}")
        return ClaimResult(points_awarded=amount, total_points=total)

    def list_award_history(self) -> List[AwardRecord]:
        with self.store.transaction() as store:
            return store.list_awards()

    def ensure_seeded(self, usernames=DEFAULT_PLAYERS) -> int:
        """Insert the default players if there are none yet.

        Returns how many players were inserted (0 when already seeded).
        """
        with self.store.transaction() as store:
            if store.count_players() > 0:
                return 0
            inserted = store.add_players(usernames)
        self.logger.info(f"[seed] inserted {len(inserted)} players")
        return len(inserted)

    def ping(self) -> None:
        with self.store.transaction() as store:
            store.ping()

    @staticmethod
    def _clean_username(username) -> str:
        if not isinstance(username, str) or not username.strip():
            raise ValidationError('Username is required')
        username = username.strip()
        if len(username) > USERNAME_MAX_LENGTH:
            raise ValidationError(f'Username must be at most {USERNAME_MAX_LENGTH} characters')
        return username

    @staticmethod
    def _coerce_id(value) -> Optional[int]:
        # bool is an int subclass but never a valid id
        if isinstance(value, bool):
            return None
        if isinstance(value, float) and not value.is_integer():
            return None
        try:
            pid = int(value)
        except (TypeError, ValueError):
            return None
        # Ids are signed 64-bit in every supported store
        if not ID_MIN <= pid <= ID_MAX:
            return None
        return pid
