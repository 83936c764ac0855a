import os


def _flag(name, default='0'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Game store backend: 'file' (single JSON blob) or 'sql' (one row per game)
    GAME_STORE_BACKEND = os.environ.get('GAME_STORE_BACKEND', 'file')
    GAMES_FILE = os.environ.get('GAMES_FILE', 'games.json')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Optimistic-write retries before a conflict is reported (sql backend)
    STORE_CONFLICT_RETRIES = int(os.environ.get('STORE_CONFLICT_RETRIES', '3'))
    # Store admin passwords as bcrypt hashes and never echo them back
    HASH_ADMIN_PASSWORDS = _flag('HASH_ADMIN_PASSWORDS')
    # Reject team tags other than A/B instead of mapping them to team B
    STRICT_TEAM_IDS = _flag('STRICT_TEAM_IDS')
    # Base URL used for team share links; falls back to the request host
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', '')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
