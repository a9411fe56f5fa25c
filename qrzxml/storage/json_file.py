"""JSON file session storage implementation"""

import asyncio
import json
import logging
import os
import time
from pathlib import Path

from ..core.types import Session

logger = logging.getLogger(__name__)

# Sessions older than this are treated as expired server-side
MAX_SESSION_AGE = 23 * 3600


def default_cache_path() -> Path:
    """$XDG_CACHE_HOME/qrzxml/sessions.json, falling back to ~/.cache"""
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "qrzxml" / "sessions.json"


class JsonFileSessionStore:
    """Store sessions in a JSON file keyed by username"""

    def __init__(self, path: str | Path | None = None, max_age: float = MAX_SESSION_AGE):
        self._path = Path(path) if path else default_cache_path()
        self._max_age = max_age
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def _read_file(self) -> dict[str, dict]:
        """Read sessions from file"""
        if not self._path.exists():
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable session cache {self._path}: {e}")
            return {}

    async def _write_file(self, data: dict[str, dict]) -> None:
        """Write sessions to file"""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.chmod(self._path, 0o600)

    async def load(self, username: str) -> Session | None:
        """Load session for username"""
        async with self._lock:
            entry = (await self._read_file()).get(username)

        if not entry or not entry.get("token"):
            return None

        obtained_at = float(entry.get("obtained_at", 0))
        if time.time() - obtained_at > self._max_age:
            logger.info("Cached session is stale")
            return None

        return Session(
            token=entry["token"],
            lookups_today=entry.get("lookups_today"),
            subscription_raw=entry.get("subscription_raw"),
            obtained_at=obtained_at,
        )

    async def save(self, username: str, session: Session) -> None:
        """Save session for username"""
        async with self._lock:
            data = await self._read_file()
            data[username] = {
                "token": session.token,
                "lookups_today": session.lookups_today,
                "subscription_raw": session.subscription_raw,
                "obtained_at": session.obtained_at,
            }
            await self._write_file(data)

    async def clear(self, username: str) -> None:
        """Remove session for username"""
        async with self._lock:
            data = await self._read_file()
            if data.pop(username, None) is not None:
                await self._write_file(data)
