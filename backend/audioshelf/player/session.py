"""
Session Identifier

Anonymous listener token: created once per device, persisted in a local
file and reused thereafter. It is the only correlator of "whose progress".
"""
import uuid
from pathlib import Path
from typing import Optional

from loguru import logger

from audioshelf.config import PLAYER_SESSION_FILE


class SessionIdStore:
    """File-backed session id, generated on first use."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or PLAYER_SESSION_FILE)
        self._session_id: Optional[str] = None

    def get(self) -> str:
        """
        Return the persisted session id, creating it on first call.

        Returns:
            str: Opaque session token
        """
        if self._session_id:
            return self._session_id

        if self.path.exists():
            stored = self.path.read_text(encoding="utf-8").strip()
            if stored:
                self._session_id = stored
                return stored

        self._session_id = uuid.uuid4().hex
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self._session_id, encoding="utf-8")
        logger.info(f"Created new listening session {self._session_id} at {self.path}")
        return self._session_id
