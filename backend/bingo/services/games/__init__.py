"""Game domain services: game records and per-team marking state.

Routes and CLI commands go through these functions rather than touching the
store directly, so every backend shares one set of rules.
"""
from datetime import datetime, timezone

from flask import current_app


def get_store():
    return current_app.extensions['game_store']


def utc_now_iso() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

