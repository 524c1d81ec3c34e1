"""Append-only request log, one line per created comment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


def format_entry(ip: str, location: str, data: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"[{ip}] [{when.isoformat(timespec='seconds')}] [{location}] [{data}]\n"


class RequestLog:
    def __init__(self, path: str):
        self.path = path
        self._fh = open(path, 'a', encoding='utf-8')

    def log_request(self, ip: str, location: str, data: str) -> None:
        entry = format_entry(ip, location, data)
        try:
            self._fh.write(entry)
            self._fh.flush()
        except (OSError, ValueError) as exc:
            # the HTTP caller never sees request-log failures
            logger.warning('Request log write to %s failed: %s', self.path, exc)

    def close(self) -> None:
        self._fh.close()
