"""
Configuration for the Guestbook service
Loads config.toml for the core settings and environment variables for the rest
"""

import os
import tomllib
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CONFIG_PATH = 'config.toml'


class ConfigError(RuntimeError):
    """Raised when config.toml is missing or malformed."""


class Config:
    """Ambient configuration read from the environment"""

    CONFIG_PATH = os.environ.get('GUESTBOOK_CONFIG') or DEFAULT_CONFIG_PATH
    DEBUG = os.environ.get('FLASK_ENV') == 'development' or os.environ.get('FLASK_DEBUG') == '1'

    # Monitoring / logging
    SENTRY_DSN = os.environ.get('SENTRY_DSN')
    SENTRY_TRACES_SAMPLE_RATE = float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.1'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')


@dataclass(frozen=True)
class Settings:
    port: int
    db_path: str
    log_path: str


def _require(data, key, kind):
    if key not in data:
        raise ConfigError(f'missing required key "{key}"')
    value = data[key]
    # bool is an int subclass, but "port = true" is still a mistake
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ConfigError(f'"{key}" must be of type {kind.__name__}')
    return value


def load_settings(path=None):
    """Read port, db_path and log_path from a TOML file.

    No defaults are applied: a missing file, a parse error or a missing key
    raises ConfigError.
    """
    path = path or Config.CONFIG_PATH
    try:
        with open(path, 'rb') as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f'Error loading {path}: file not found') from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'Error loading {path}: {exc}') from exc

    return Settings(
        port=_require(data, 'port', int),
        db_path=_require(data, 'db_path', str),
        log_path=_require(data, 'log_path', str),
    )
