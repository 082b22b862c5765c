"""
Filesystem implementation of the session repository.

Provides durable storage so a restarted process recovers every session.
Active sessions live in sessions/, finished ones are moved to archive/.
Processes sharing one directory serialize per session through flock on
locks/<id>.lock.
"""

import fcntl
import json
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import jsonschema

from phasegate.domain.exceptions import CorruptSession, UnknownSession
from phasegate.domain.interfaces import SessionRepositoryInterface
from phasegate.domain.models import (
    FailureRecord,
    HandoffRecord,
    Phase,
    PhaseEvent,
    PhaseTransition,
    WorkflowSession,
)
from phasegate.schemas import validate_session

logger = logging.getLogger(__name__)


class FilesystemSessionRepository(SessionRepositoryInterface):
    """
    Durable session store.

    Each session is one JSON document, rewritten atomically on every save.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._sessions_dir = self._base_dir / "sessions"
        self._archive_dir = self._base_dir / "archive"
        self._locks_dir = self._base_dir / "locks"
        for directory in (self._sessions_dir, self._archive_dir, self._locks_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def _active_path(self, session_id: str) -> Path:
        return self._sessions_dir / f"{session_id}.json"

    def _archived_path(self, session_id: str) -> Path:
        return self._archive_dir / f"{session_id}.json"

    def _find(self, session_id: str) -> Path | None:
        for path in (self._active_path(session_id), self._archived_path(session_id)):
            if path.exists():
                return path
        return None

    def _write_atomic(self, path: Path, data: dict[str, Any]) -> None:
        """Write using write-to-temp + rename; each writer gets its own temp file."""
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f"{path.stem}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            json.dump(data, f, indent=2)
        os.replace(f.name, path)  # Atomic on POSIX

    def _read(self, session_id: str, path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)
            validate_session(data)
        except json.JSONDecodeError as e:
            raise CorruptSession(session_id, f"invalid JSON ({e})") from e
        except jsonschema.ValidationError as e:
            raise CorruptSession(session_id, e.message) from e
        return data

    def _session_to_dict(self, session: WorkflowSession) -> dict[str, Any]:
        """Serialize session to JSON-compatible dict."""
        return {
            "version": "1.0",
            "session_id": session.session_id,
            "phase": session.phase.value,
            "active_role": session.active_role,
            "created_at": session.created_at,
            "archived": session.archived,
            "transitions": [
                {
                    "sequence": t.sequence,
                    "event": t.event.value,
                    "from_phase": t.from_phase.value,
                    "to_phase": t.to_phase.value,
                    "at": t.at,
                }
                for t in session.transitions
            ],
            "handoffs": [
                {
                    "sequence": h.sequence,
                    "from_role": h.from_role,
                    "to_role": h.to_role,
                    "context": h.context,
                    "at": h.at,
                }
                for h in session.handoffs
            ],
            "failures": [
                {
                    "operation": f.operation,
                    "count": f.count,
                    "last_error": f.last_error,
                    "escalated": f.escalated,
                }
                for f in session.failures.values()
            ],
        }

    def _dict_to_session(self, data: dict[str, Any]) -> WorkflowSession:
        """Deserialize session from JSON dict."""
        return WorkflowSession(
            session_id=data["session_id"],
            phase=Phase(data["phase"]),
            active_role=data["active_role"],
            created_at=data["created_at"],
            archived=data.get("archived", False),
            transitions=[
                PhaseTransition(
                    sequence=t["sequence"],
                    event=PhaseEvent(t["event"]),
                    from_phase=Phase(t["from_phase"]),
                    to_phase=Phase(t["to_phase"]),
                    at=t["at"],
                )
                for t in data.get("transitions", [])
            ],
            handoffs=[
                HandoffRecord(
                    sequence=h["sequence"],
                    from_role=h["from_role"],
                    to_role=h["to_role"],
                    context=h.get("context", ""),
                    at=h["at"],
                )
                for h in data.get("handoffs", [])
            ],
            failures={
                f["operation"]: FailureRecord(
                    operation=f["operation"],
                    count=f["count"],
                    last_error=f.get("last_error", ""),
                    escalated=f.get("escalated", False),
                )
                for f in data.get("failures", [])
            },
        )

    def save(self, session: WorkflowSession) -> None:
        """Write the session to its current location (active or archived)."""
        path = self._find(session.session_id) or self._active_path(session.session_id)
        self._write_atomic(path, self._session_to_dict(session))
        logger.debug("Saved session %s to %s", session.session_id, path)

    def get(self, session_id: str) -> WorkflowSession:
        """
        Load a session.

        Raises:
            UnknownSession: If no file exists for the id
            CorruptSession: If the stored document is not valid JSON or
                violates the session schema
        """
        path = self._find(session_id)
        if path is None:
            raise UnknownSession(session_id)
        return self._dict_to_session(self._read(session_id, path))

    def list_ids(self, include_archived: bool = False) -> list[str]:
        dirs = [self._sessions_dir]
        if include_archived:
            dirs.append(self._archive_dir)

        created: list[tuple[str, str]] = []
        for directory in dirs:
            for path in directory.glob("*.json"):
                data = self._read(path.stem, path)
                created.append((data.get("created_at", ""), data["session_id"]))
        return [sid for _, sid in sorted(created)]

    def archive(self, session_id: str) -> None:
        """Move a session file into archive/ (idempotent)."""
        path = self._find(session_id)
        if path is None:
            raise UnknownSession(session_id)
        target = self._archived_path(session_id)
        if path != target:
            path.replace(target)
            logger.debug("Archived session %s", session_id)

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """Hold an exclusive flock on locks/<id>.lock for the duration."""
        if self._find(session_id) is None:
            raise UnknownSession(session_id)
        lock_path = self._locks_dir / f"{session_id}.lock"
        with lock_path.open("a+", encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
