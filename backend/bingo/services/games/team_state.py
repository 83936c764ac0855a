from flask import current_app

from bingo.errors import NotFoundError, ValidationError
from . import get_store, utc_now_iso
from .records import empty_team_state
from .teams import resolve_team


def _strict_team_ids() -> bool:
    return bool(current_app.config.get('STRICT_TEAM_IDS'))


def fetch_team_state(game_id: str, team_tag) -> dict:
    """Return one team's marking state.

    Records created before team state existed get a fresh empty state; the
    default is not written back.
    """
    team = resolve_team(team_tag, strict=_strict_team_ids())
    record = get_store().get(game_id)
    if record is None:
        raise NotFoundError('Game not found')
    state = record.get(team.state_key)
    if not isinstance(state, dict):
        return empty_team_state()
    return state


def replace_team_state(game_id: str, team_tag, marked_tiles) -> dict:
    """Replace one team's ``markedTiles`` wholesale and stamp ``lastUpdated``.

    The other team's state is left untouched.
    """
    team = resolve_team(team_tag, strict=_strict_team_ids())
    if marked_tiles is None:
        marked_tiles = {}
    if not isinstance(marked_tiles, dict):
        raise ValidationError('markedTiles must be an object')
    new_state = {}

    def _replace(record: dict) -> None:
        now = utc_now_iso()
        new_state.update(markedTiles=dict(marked_tiles), lastUpdated=now)
        record[team.state_key] = dict(new_state)
        record['updatedAt'] = now

    if get_store().modify(game_id, _replace, error='Failed to save team state') is None:
        raise NotFoundError('Game not found')
    marked = sum(1 for v in marked_tiles.values() if v)
    current_app.logger.info(f"[team-state] game={game_id} team={team.value} tiles={marked}")
    return new_state
