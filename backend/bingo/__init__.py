from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
import click
import json
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    migrate.init_app(flask_app, db)
    origins = [o.strip() for o in flask_app.config.get('CORS_ORIGINS', '*').split(',')]
    CORS(flask_app, origins=origins)

    from bingo.store import create_store
    flask_app.extensions['game_store'] = create_store(flask_app)

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    register_error_handlers(flask_app)
    register_commands(flask_app)

    return flask_app


def register_error_handlers(flask_app):
    from bingo.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {request.method} {request.path} -> {exc.status_code}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        # Routing redirects are not errors
        if exc.code is None or exc.code < 400:
            return exc
        return jsonify({'error': exc.description}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        flask_app.logger.exception(f"[error] unhandled exception in {request.method} {request.path}")
        return jsonify({'error': 'Internal server error'}), 500


def register_commands(flask_app):
    from bingo.services.games.records import list_games

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the game tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    @click.command('games-list')
    def games_list_command():
        """Prints id, timestamps and grid size of every stored game."""
        with flask_app.app_context():
            for summary in list_games():
                click.echo(
                    f"{summary['gameId']}\tsize={summary['gridSize']}\t"
                    f"created={summary['createdAt']}\tupdated={summary['updatedAt']}"
                )

    @click.command('games-export')
    @click.argument('path', type=click.Path(dir_okay=False, writable=True))
    def games_export_command(path):
        """Writes the whole game collection to a JSON file."""
        with flask_app.app_context():
            games = flask_app.extensions['game_store'].load_all()
            with open(path, 'w', encoding='utf-8') as fh:
                json.dump(games, fh, indent=2)
            click.echo(f'Exported {len(games)} game(s) to {path}')

    @click.command('games-import')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--replace', is_flag=True, help='Drop games that are not in the file.')
    def games_import_command(path, replace):
        """Loads games from a JSON file (e.g. an old games.json) into the store."""
        with open(path, 'r', encoding='utf-8') as fh:
            try:
                incoming = json.load(fh)
            except ValueError as exc:
                raise click.ClickException(f'{path} is not valid JSON: {exc}')
        if not isinstance(incoming, dict):
            raise click.ClickException(f'{path} must hold an object of gameId -> game')
        with flask_app.app_context():
            store = flask_app.extensions['game_store']
            games = {} if replace else store.load_all()
            games.update(incoming)
            if not store.save_all(games):
                raise click.ClickException('Failed to write game store')
            click.echo(f'Imported {len(incoming)} game(s); store now holds {len(games)}')

    for command in (db_reset_command, games_list_command, games_export_command, games_import_command):
        flask_app.cli.add_command(command)
