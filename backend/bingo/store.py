"""Game store backends.

Both backends hold a mapping of ``gameId -> game record`` and expose the same
interface, so the services never care which one is configured:

- ``load_all()`` / ``save_all()`` move the whole collection. Reads never fail:
  a missing or unreadable store comes back as an empty mapping (and is logged).
  ``save_all`` reports durability as a boolean.
- ``get`` / ``put`` / ``modify`` work on one record. Write failures raise
  ``StorageError``.

``JsonFileGameStore`` keeps everything in one JSON file and updates it with a
whole-blob read-modify-write. A per-store lock serializes writers inside one
process; two processes sharing the file can still overwrite each other
(last writer wins for the whole blob).

``SqlGameStore`` keeps one row per game with a version column and applies
``modify`` as a conditional update, retrying when another writer got there
first.
"""
import json
import os
import tempfile
import threading
from typing import Callable, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from bingo import db
from bingo.errors import ConflictError, StorageError
from bingo.models import GameRecordRow

Mutator = Callable[[dict], None]


class GameStore:
    backend = ''

    def __init__(self, logger):
        self.logger = logger
        self._lock = threading.Lock()

    def load_all(self) -> Dict[str, dict]:
        raise NotImplementedError

    def save_all(self, games: Dict[str, dict]) -> bool:
        raise NotImplementedError

    def get(self, game_id: str) -> Optional[dict]:
        return self.load_all().get(game_id)

    def put(self, game_id: str, record: dict, error: str = 'Failed to save game') -> None:
        with self._lock:
            games = self.load_all()
            games[game_id] = record
            if not self.save_all(games):
                raise StorageError(error)

    def modify(self, game_id: str, mutate: Mutator, error: str = 'Failed to save game') -> Optional[dict]:
        """Apply ``mutate`` to the stored record in place and persist it.

        Returns the updated record, or None (without writing) when the game
        does not exist.
        """
        with self._lock:
            games = self.load_all()
            record = games.get(game_id)
            if record is None:
                return None
            mutate(record)
            if not self.save_all(games):
                raise StorageError(error)
            return record


class JsonFileGameStore(GameStore):
    backend = 'file'

    def __init__(self, path: str, logger):
        super().__init__(logger)
        self.path = path
        if not os.path.exists(self.path):
            self.save_all({})

    def load_all(self) -> Dict[str, dict]:
        if not os.path.exists(self.path):
            self.logger.info(f"[store-read] file={self.path} missing, treating as empty")
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                games = json.load(fh)
        except (OSError, ValueError) as exc:
            self.logger.error(f"[store-read] file={self.path} unreadable, treating as empty: {exc}")
            return {}
        if not isinstance(games, dict):
            self.logger.error(f"[store-read] file={self.path} does not hold a JSON object, treating as empty")
            return {}
        return games

    def save_all(self, games: Dict[str, dict]) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=directory, prefix='.games-', suffix='.tmp', delete=False
            ) as fh:
                tmp_path = fh.name
                json.dump(games, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            self.logger.error(f"[store-write] file={self.path} failed: {exc}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False
        return True


class SqlGameStore(GameStore):
    backend = 'sql'

    def __init__(self, logger, max_retries: int = 3):
        super().__init__(logger)
        self.max_retries = max_retries

    def _decode(self, row: GameRecordRow) -> Optional[dict]:
        try:
            return row.to_record()
        except ValueError as exc:
            self.logger.error(f"[store-read] game={row.game_id} corrupt row skipped: {exc}")
            return None

    def load_all(self) -> Dict[str, dict]:
        try:
            rows = (
                GameRecordRow.query.execution_options(populate_existing=True)
                .order_by(GameRecordRow.created_at, GameRecordRow.game_id)
                .all()
            )
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.logger.error(f"[store-read] sql load failed, treating as empty: {exc}")
            return {}
        games = {}
        for row in rows:
            record = self._decode(row)
            if record is not None:
                games[row.game_id] = record
        return games

    def save_all(self, games: Dict[str, dict]) -> bool:
        try:
            for row in GameRecordRow.query.all():
                if row.game_id not in games:
                    db.session.delete(row)
            for game_id, record in games.items():
                row = db.session.get(GameRecordRow, game_id, populate_existing=True)
                if row is None:
                    row = GameRecordRow(game_id=game_id, version=1)
                    db.session.add(row)
                else:
                    row.version += 1
                row.set_record(record)
            db.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            db.session.rollback()
            self.logger.error(f"[store-write] sql save_all failed: {exc}")
            return False
        return True

    def get(self, game_id: str) -> Optional[dict]:
        try:
            row = db.session.get(GameRecordRow, game_id, populate_existing=True)
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.logger.error(f"[store-read] game={game_id} sql read failed: {exc}")
            return None
        return self._decode(row) if row is not None else None

    def put(self, game_id: str, record: dict, error: str = 'Failed to save game') -> None:
        try:
            row = db.session.get(GameRecordRow, game_id, populate_existing=True)
            if row is None:
                row = GameRecordRow(game_id=game_id, version=1)
                db.session.add(row)
            else:
                row.version += 1
            row.set_record(record)
            db.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            db.session.rollback()
            self.logger.error(f"[store-write] game={game_id} sql put failed: {exc}")
            raise StorageError(error) from exc

    def modify(self, game_id: str, mutate: Mutator, error: str = 'Failed to save game') -> Optional[dict]:
        for attempt in range(self.max_retries + 1):
            try:
                row = db.session.get(GameRecordRow, game_id, populate_existing=True)
                if row is None:
                    return None
                record = self._decode(row)
                if record is None:
                    return None
                seen_version = row.version
                mutate(record)
                result = db.session.execute(
                    update(GameRecordRow)
                    .where(GameRecordRow.game_id == game_id, GameRecordRow.version == seen_version)
                    .values(
                        data=json.dumps(record),
                        version=seen_version + 1,
                        created_at=record.get('createdAt'),
                        updated_at=record.get('updatedAt'),
                    )
                )
                if result.rowcount == 1:
                    db.session.commit()
                    return record
                db.session.rollback()
            except (SQLAlchemyError, TypeError, ValueError) as exc:
                db.session.rollback()
                self.logger.error(f"[store-write] game={game_id} sql modify failed: {exc}")
                raise StorageError(error) from exc
            except Exception:
                db.session.rollback()
                raise
            self.logger.warning(f"[store-conflict] game={game_id} version={seen_version} attempt={attempt + 1}")
        raise ConflictError('Game was modified concurrently, please retry')


def create_store(app) -> GameStore:
    backend = app.config.get('GAME_STORE_BACKEND', 'file')
    if backend == 'file':
        store = JsonFileGameStore(app.config.get('GAMES_FILE', 'games.json'), app.logger)
    elif backend == 'sql':
        store = SqlGameStore(app.logger, max_retries=int(app.config.get('STORE_CONFLICT_RETRIES', 3)))
    else:
        raise ValueError(f'Unknown GAME_STORE_BACKEND: {backend}')
    app.logger.info(f"[store-init] backend={store.backend}")
    return store
