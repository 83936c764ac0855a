from bingo import db
import json


class GameRecordRow(db.Model):
    """One game record, stored as a JSON document next to a write version."""
    __tablename__ = 'game_record'
    game_id = db.Column(db.String(128), primary_key=True)
    data = db.Column(db.Text, nullable=False, default='{}')
    # Bumped on every write; conditional updates compare against it
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.String(32), nullable=True, index=True)
    updated_at = db.Column(db.String(32), nullable=True)

    def to_record(self) -> dict:
        record = json.loads(self.data or '{}')
        if not isinstance(record, dict):
            raise ValueError(f'game_record {self.game_id} does not hold a JSON object')
        return record

    def set_record(self, record: dict) -> None:
        self.data = json.dumps(record)
        self.created_at = record.get('createdAt')
        self.updated_at = record.get('updatedAt')

