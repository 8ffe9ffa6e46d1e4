"""JSON-file persistence for session rows."""

import json
import logging
import os
from pathlib import Path

from ..models.session import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """Keyed session persistence backed by a single JSON file.

    Every call loads and saves the whole file without awaiting in between,
    so each update is atomic with respect to other requests on the event loop.
    """

    def __init__(self, data_path: Path, filename: str = "sessions.json"):
        self.data_path = Path(data_path)
        self.filename = filename

    @property
    def sessions_file(self) -> Path:
        return self.data_path / self.filename

    def _load(self) -> dict[str, dict]:
        """Load sessions from JSON file."""
        if not self.sessions_file.exists():
            return {}
        with open(self.sessions_file) as f:
            return json.load(f)

    def _save(self, sessions: dict[str, dict]) -> None:
        """Save sessions to JSON file, replacing it in one step."""
        self.data_path.mkdir(parents=True, exist_ok=True)
        tmp_file = self.sessions_file.with_suffix(".tmp")
        with open(tmp_file, "w") as f:
            json.dump(sessions, f, indent=2)
        os.replace(tmp_file, self.sessions_file)

    def get(self, session_id: str) -> SessionRecord | None:
        data = self._load().get(session_id)
        if data is None:
            return None
        return SessionRecord.model_validate(data)

    def create(self, record: SessionRecord) -> SessionRecord:
        sessions = self._load()
        if record.session_id in sessions:
            raise KeyError(f"Session {record.session_id} already exists")
        sessions[record.session_id] = record.model_dump(mode="json")
        self._save(sessions)
        return record

    def update(self, session_id: str, **changes) -> SessionRecord | None:
        """Merge ``changes`` into a stored row; returns ``None`` if absent."""
        sessions = self._load()
        if session_id not in sessions:
            return None
        if "owner" in changes:
            raise ValueError("Session owner is immutable")
        merged = SessionRecord.model_validate({**sessions[session_id], **changes})
        sessions[session_id] = merged.model_dump(mode="json")
        self._save(sessions)
        return merged

    def delete(self, session_id: str) -> bool:
        sessions = self._load()
        if session_id not in sessions:
            return False
        del sessions[session_id]
        self._save(sessions)
        return True

    def warm(self) -> bool:
        """Touch the backing file so the first real request does not pay for it."""
        self.data_path.mkdir(parents=True, exist_ok=True)
        count = len(self._load())
        logger.debug(f"Session store warmed ({count} sessions)")
        return True
