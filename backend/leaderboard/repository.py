from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterable, Iterator, List, Optional, Protocol

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from leaderboard.errors import StorageError, ValidationError
from leaderboard.models import AwardRecord, Player


class LeaderboardStore(Protocol):
    """
    Persistence operations needed by the leaderboard service.

    Implementations map store rows to `Player` / `AwardRecord` objects and
    translate driver failures into `StorageError` / `ValidationError`.
    """

    def transaction(self) -> ContextManager["LeaderboardStore"]:
        """Group the calls made inside the block into one unit of work."""

        ...

    def count_players(self) -> int:
        ...

    def list_players(self) -> List[Player]:
        """Return all players, highest points first, ties in insertion order."""

        ...

    def find_player_by_username(self, username: str) -> Optional[Player]:
        ...

    def add_player(self, username: str) -> Player:
        ...

    def add_players(self, usernames: Iterable[str]) -> List[Player]:
        ...

    def increment_points(self, player_id: int, amount: int) -> Optional[int]:
        """
        Add `amount` to the player's points in a single store operation.

        Returns the new total, or None when no player has that id.
        """

        ...

    def add_award(self, player_id: int, amount: int) -> AwardRecord:
        ...

    def list_awards(self) -> List[AwardRecord]:
        """Return all award records, newest first, with `player` loaded."""

        ...

    def ping(self) -> None:
        ...


class SqlAlchemyLeaderboardStore:
    """
    SQLAlchemy-backed `LeaderboardStore`.

    Works on the session it is given (normally `db.session`); it never
    opens connections of its own. Nothing is committed outside `transaction()`.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def transaction(self) -> Iterator["SqlAlchemyLeaderboardStore"]:
        try:
            yield self
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValidationError('Record rejected by the store: a constraint was violated') from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError('Storage operation failed') from exc
        except Exception:
            self.session.rollback()
            raise

    def count_players(self) -> int:
        return self.session.query(Player).count()

    def list_players(self) -> List[Player]:
        return (
            self.session.query(Player)
            .populate_existing()
            .order_by(Player.points.desc(), Player.id.asc())
            .all()
        )

    def find_player_by_username(self, username: str) -> Optional[Player]:
        return self.session.query(Player).filter_by(username=username).first()

    def add_player(self, username: str) -> Player:
        player = Player(username=username, points=0)
        self.session.add(player)
        # Flush so the generated id is available before commit
        self.session.flush()
        return player

    def add_players(self, usernames: Iterable[str]) -> List[Player]:
        players = [Player(username=name, points=0) for name in usernames]
        self.session.add_all(players)
        self.session.flush()
        return players

    def increment_points(self, player_id: int, amount: int) -> Optional[int]:
        result = self.session.execute(
            Player.__table__.update()
            .where(Player.__table__.c.id == player_id)
            .values(points=Player.__table__.c.points + amount)
        )
        if result.rowcount == 0:
            return None
        player = self.session.get(Player, player_id)
        if player is not None:
            # The UPDATE bypassed the identity map
            self.session.refresh(player)
            return player.points
        return None

    def add_award(self, player_id: int, amount: int) -> AwardRecord:
        record = AwardRecord(player_id=player_id, points_awarded=amount)
        self.session.add(record)
        self.session.flush()
        return record

    def list_awards(self) -> List[AwardRecord]:
        return (
            self.session.query(AwardRecord)
            .options(joinedload(AwardRecord.player))
            .populate_existing()
            .order_by(AwardRecord.timestamp.desc(), AwardRecord.id.desc())
            .all()
        )

    def ping(self) -> None:
        self.session.execute(text("SELECT 1"))
