import hmac
from typing import List
from urllib.parse import quote

from flask import current_app

from bingo import bcrypt
from bingo.errors import NotFoundError, ValidationError
from . import get_store, utc_now_iso
from .teams import Team

PASSWORD_KEY = 'adminPassword'
PASSWORD_HASH_KEY = 'adminPasswordHash'
# Set by the server only; client data never overwrites them
SERVER_OWNED_KEYS = ('createdAt', 'updatedAt', PASSWORD_HASH_KEY)


def empty_team_state(now: str = None) -> dict:
    return {'markedTiles': {}, 'lastUpdated': now or utc_now_iso()}


def _hash_passwords() -> bool:
    return bool(current_app.config.get('HASH_ADMIN_PASSWORDS'))


def _client_fields(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in SERVER_OWNED_KEYS}


def _protect_password(data: dict, updating: bool = False) -> None:
    if not _hash_passwords() or PASSWORD_KEY not in data:
        return
    password = data.pop(PASSWORD_KEY)
    if password:
        data[PASSWORD_HASH_KEY] = bcrypt.generate_password_hash(str(password)).decode('utf-8')
    elif updating:
        raise ValidationError('Admin password cannot be blank')


def _public_view(record: dict) -> dict:
    hidden = {PASSWORD_HASH_KEY, PASSWORD_KEY} if _hash_passwords() else {PASSWORD_HASH_KEY}
    return {k: v for k, v in record.items() if k not in hidden}


def _require(game_id: str) -> dict:
    record = get_store().get(game_id)
    if record is None:
        raise NotFoundError('Game not found')
    return record


def create_game(game_id, game_data) -> str:
    """Create (or overwrite) the record stored under ``game_id``."""
    if not game_id or game_data is None:
        raise ValidationError('Game ID and data are required')
    if not isinstance(game_id, str):
        raise ValidationError('Game ID must be a string')
    if not isinstance(game_data, dict):
        raise ValidationError('Game data must be an object')

    now = utc_now_iso()
    record = _client_fields(game_data)
    for team in Team:
        name = record.get(team.name_key)
        if name is None or (isinstance(name, str) and not name.strip()):
            record[team.name_key] = team.default_name
    _protect_password(record)
    record.update({
        'createdAt': now,
        'updatedAt': now,
        Team.A.state_key: empty_team_state(now),
        Team.B.state_key: empty_team_state(now),
    })
    get_store().put(game_id, record, error='Failed to save game')
    current_app.logger.info(f"[game-create] game={game_id} grid_size={record.get('gridSize')}")
    return game_id


def fetch_game(game_id: str) -> dict:
    return _public_view(_require(game_id))


def update_game(game_id: str, game_data) -> dict:
    """Shallow-merge ``game_data`` over the stored record.

    Top-level keys replace the stored values wholesale; nested objects are
    not merged.
    """
    if game_data is None:
        game_data = {}
    if not isinstance(game_data, dict):
        raise ValidationError('Game data must be an object')
    changes = _client_fields(game_data)
    _protect_password(changes, updating=True)

    def _merge(record: dict) -> None:
        if PASSWORD_HASH_KEY in changes:
            record.pop(PASSWORD_KEY, None)
        record.update(changes)
        record['updatedAt'] = utc_now_iso()

    record = get_store().modify(game_id, _merge, error='Failed to update game')
    if record is None:
        raise NotFoundError('Game not found')
    current_app.logger.info(f"[game-update] game={game_id} keys={sorted(changes)}")
    return _public_view(record)


def list_games() -> List[dict]:
    games = get_store().load_all()
    summaries = [
        {
            'gameId': game_id,
            'createdAt': record.get('createdAt'),
            'updatedAt': record.get('updatedAt'),
            'gridSize': record.get('gridSize'),
        }
        for game_id, record in games.items()
    ]
    summaries.sort(key=lambda s: (str(s['createdAt'] or ''), s['gameId']))
    return summaries


def verify_admin_password(game_id: str, password) -> bool:
    if not password:
        raise ValidationError('Password is required')
    record = _require(game_id)
    hashed = record.get(PASSWORD_HASH_KEY)
    if hashed:
        try:
            return bcrypt.check_password_hash(hashed, str(password))
        except ValueError:
            current_app.logger.warning(f"[admin-verify] game={game_id} stored password hash is malformed")
            return False
    stored = record.get(PASSWORD_KEY)
    if stored is None:
        return False
    return hmac.compare_digest(str(stored).encode('utf-8'), str(password).encode('utf-8'))


def team_links(game_id: str, base_url: str) -> dict:
    """Share links for the two team pages of a game."""
    record = _require(game_id)
    base = base_url.rstrip('/')
    links = {'gameId': game_id}
    for team in Team:
        links[f'team{team.value}'] = {
            'name': record.get(team.name_key) or team.default_name,
            'url': f'{base}/{team.page}?gameId={quote(game_id, safe="")}',
        }
    return links
