import re

import pytest

from bingo.errors import NotFoundError, ValidationError
from bingo.services.games import utc_now_iso
from bingo.services.games.records import (
    create_game,
    fetch_game,
    list_games,
    team_links,
    update_game,
    verify_admin_password,
)
from bingo.services.games.team_state import fetch_team_state, replace_team_state
from bingo.services.games.teams import Team, resolve_team


def test_resolve_team_lenient():
    assert resolve_team('A') is Team.A
    assert resolve_team('B') is Team.B
    # Anything that is not exactly "A" is team B
    assert resolve_team('a') is Team.B
    assert resolve_team('C') is Team.B
    assert resolve_team(None) is Team.B


def test_resolve_team_strict():
    assert resolve_team('a', strict=True) is Team.A
    assert resolve_team('B', strict=True) is Team.B
    with pytest.raises(ValidationError):
        resolve_team('C', strict=True)


def test_team_keys():
    assert Team.A.state_key == 'teamAState'
    assert Team.B.name_key == 'teamBName'
    assert Team.B.default_name == 'Team B'


def test_utc_now_iso_shape():
    assert re.match(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$', utc_now_iso())


def test_create_and_fetch(flask_app, game_data):
    assert create_game('g1', game_data) == 'g1'
    game = fetch_game('g1')
    for key, value in game_data.items():
        assert game[key] == value
    assert game['teamAState']['markedTiles'] == {}
    assert game['teamBState']['markedTiles'] == {}


def test_create_validation(flask_app, game_data):
    with pytest.raises(ValidationError):
        create_game('', game_data)
    with pytest.raises(ValidationError):
        create_game('g1', None)
    with pytest.raises(ValidationError):
        create_game(42, game_data)
    with pytest.raises(ValidationError):
        create_game('g1', ['not', 'an', 'object'])


def test_create_does_not_mutate_input(flask_app, game_data):
    original = dict(game_data)
    create_game('g1', game_data)
    assert game_data == original


def test_missing_game_raises_not_found(flask_app):
    with pytest.raises(NotFoundError):
        fetch_game('nope')
    with pytest.raises(NotFoundError):
        update_game('nope', {'gridSize': 2})
    with pytest.raises(NotFoundError):
        fetch_team_state('nope', 'A')
    with pytest.raises(NotFoundError):
        replace_team_state('nope', 'A', {})
    assert list_games() == []


def test_update_rejects_non_object(flask_app, game_data):
    create_game('g1', game_data)
    with pytest.raises(ValidationError):
        update_game('g1', 'gridSize=4')


def test_replace_team_state_returns_new_state(flask_app, game_data):
    create_game('g1', game_data)
    tiles = {'0-0': True}
    state = replace_team_state('g1', 'A', tiles)
    assert state['markedTiles'] == {'0-0': True}
    assert fetch_team_state('g1', 'A') == state
    # Later changes to the caller's mapping do not leak into the store
    tiles['0-1'] = True
    assert fetch_team_state('g1', 'A')['markedTiles'] == {'0-0': True}


def test_list_games_hides_private_fields(flask_app, game_data):
    create_game('g1', game_data)
    replace_team_state('g1', 'B', {'1-1': True})
    (summary,) = list_games()
    assert summary['gameId'] == 'g1'
    for hidden in ('adminPassword', 'grid', 'teamAState', 'teamBState'):
        assert hidden not in summary


def test_team_links_use_public_base_url(flask_app, game_data):
    flask_app.config['PUBLIC_BASE_URL'] = 'https://bingo.example.com/'
    create_game('game 1', game_data)
    links = team_links('game 1', flask_app.config['PUBLIC_BASE_URL'])
    assert links['teamA']['url'] == 'https://bingo.example.com/team-a?gameId=game%201'
    assert links['teamB']['name'] == 'Blue'


def test_hashed_password_never_returned(hashed_app, game_data):
    create_game('g1', game_data)
    game = fetch_game('g1')
    assert 'adminPassword' not in game
    assert 'adminPasswordHash' not in game
    stored = hashed_app.extensions['game_store'].get('g1')
    assert stored['adminPasswordHash'] != 'pass1'
    assert 'adminPassword' not in stored
    assert verify_admin_password('g1', 'pass1') is True
    assert verify_admin_password('g1', 'wrong') is False


def test_hashed_password_update(hashed_app, game_data):
    create_game('g1', game_data)
    update_game('g1', {'adminPassword': 'newpass'})
    assert verify_admin_password('g1', 'newpass') is True
    assert verify_admin_password('g1', 'pass1') is False
    assert 'adminPasswordHash' not in update_game('g1', {'gridSize': 3})


def test_hashed_mode_hides_legacy_plaintext(hashed_app, game_data):
    store = hashed_app.extensions['game_store']
    store.put('old', dict(game_data, createdAt='2024-01-01T00:00:00.000Z'))
    assert 'adminPassword' not in fetch_game('old')
    assert verify_admin_password('old', 'pass1') is True
    update_game('old', {'adminPassword': 'rotated'})
    assert 'adminPassword' not in store.get('old')
    assert verify_admin_password('old', 'rotated') is True


def test_verify_without_stored_password(flask_app):
    create_game('g1', {'gridSize': 1, 'grid': [[None]]})
    assert verify_admin_password('g1', 'anything') is False
    with pytest.raises(ValidationError):
        verify_admin_password('g1', '')


def test_hashed_mode_rejects_blank_password_update(hashed_app, game_data):
    create_game('g1', game_data)
    for blank in ('', None):
        with pytest.raises(ValidationError):
            update_game('g1', {'adminPassword': blank})
    assert verify_admin_password('g1', 'pass1') is True
    assert 'adminPassword' not in hashed_app.extensions['game_store'].get('g1')


def test_create_ignores_client_password_hash(hashed_app, game_data):
    create_game('g1', dict(game_data, adminPasswordHash='planted'))
    assert hashed_app.extensions['game_store'].get('g1')['adminPasswordHash'] != 'planted'
    assert verify_admin_password('g1', 'pass1') is True
