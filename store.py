"""SQLite-backed storage for guestbook comments."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

SQLITE_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


class StoreError(Exception):
    """A storage operation failed; str() carries the driver's message."""


@dataclass(frozen=True)
class Comment:
    id: int
    name: str
    email: str
    text: str
    ip: str
    location: str
    created: str

    def to_dict(self) -> dict:
        return asdict(self)


def _format_created(raw) -> str:
    # CURRENT_TIMESTAMP is UTC with second resolution
    if raw is None:
        return ''
    try:
        parsed = datetime.strptime(str(raw), SQLITE_TIMESTAMP_FORMAT)
    except ValueError:
        return str(raw)
    return parsed.strftime('%Y-%m-%dT%H:%M:%SZ')


class CommentStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def db_connect(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Create the comments table if it does not exist yet."""
        try:
            conn = self.db_connect()
            try:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS comments (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT,
                        email TEXT,
                        text TEXT,
                        ip TEXT,
                        location TEXT,
                        created DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                ''')
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    def insert_comment(self, name: str, email: str, text: str, ip: str, location: str) -> int:
        try:
            conn = self.db_connect()
            try:
                c = conn.cursor()
                c.execute(
                    'INSERT INTO comments (name, email, text, ip, location) VALUES (?, ?, ?, ?, ?)',
                    (name, email, text, ip, location),
                )
                comment_id = c.lastrowid
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return comment_id

    def recent_comments(self, limit: Optional[int] = None) -> list[Comment]:
        """Return comments newest first.

        ``limit`` bounds the result when it is a positive integer; ``None``
        (or any non-positive value) returns every row.
        """
        query = '''
            SELECT id, name, email, text, ip, location, created
            FROM comments
            ORDER BY created DESC, id DESC
        '''
        params: tuple = ()
        if limit is not None and limit > 0:
            query += ' LIMIT ?'
            params = (limit,)

        try:
            conn = self.db_connect()
            try:
                rows = conn.execute(query, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

        return [
            Comment(
                id=row[0],
                name=row[1],
                email=row[2],
                text=row[3],
                ip=row[4],
                location=row[5],
                created=_format_created(row[6]),
            )
            for row in rows
        ]

    def count_comments(self) -> int:
        try:
            conn = self.db_connect()
            try:
                (total,) = conn.execute('SELECT COUNT(*) FROM comments').fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return total
