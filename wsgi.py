"""
WSGI entry point for gunicorn (see gunicorn.conf.py).

Settings are read from config.toml at import time; a missing or malformed
file raises ConfigError and the worker never boots.
"""

from app import create_app
from config import load_settings
from store import CommentStore

settings = load_settings()
store = CommentStore(settings.db_path)
store.init_db()

app = create_app(settings, store=store)
