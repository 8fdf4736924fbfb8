from datetime import datetime, timezone

from leaderboard import db


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    points = db.Column(db.Integer, nullable=False, default=0, server_default='0')
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'points': self.points or 0,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Player {self.id} {self.username!r} points={self.points}>'


class AwardRecord(db.Model):
    __tablename__ = 'award_record'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    points_awarded = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    player = db.relationship('Player')

    def to_dict(self):
        # Fall back to the raw id when the player can't be resolved
        if self.player is not None:
            user = {'id': self.player.id, 'username': self.player.username}
        else:
            user = self.player_id
        return {
            'id': self.id,
            'userId': user,
            'pointsAwarded': self.points_awarded,
            'timestamp': _isoformat(self.timestamp),
        }

    def __repr__(self):
        return f'<AwardRecord {self.id} player={self.player_id} +{self.points_awarded}>'
