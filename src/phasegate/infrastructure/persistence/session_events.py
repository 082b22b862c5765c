"""Session journal store implementations."""

import json
from pathlib import Path
from typing import Any

from phasegate.domain.interfaces import SessionEventStoreInterface
from phasegate.domain.session_event import SessionEvent, SessionEventType


class InMemorySessionEventStore(SessionEventStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self) -> None:
        self._events: list[SessionEvent] = []

    def store_event(self, event: SessionEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        session_id: str,
        event_type: SessionEventType | None = None,
    ) -> list[SessionEvent]:
        return sorted(
            [
                e
                for e in self._events
                if e.session_id == session_id
                and (event_type is None or e.event_type == event_type)
            ],
            key=lambda e: e.created_at,
        )

    def get_escalation_events(self, session_id: str) -> list[SessionEvent]:
        return self.get_events(session_id, SessionEventType.ESCALATE)


class FilesystemSessionEventStore(SessionEventStoreInterface):
    """Filesystem implementation storing events as JSONL, one file per session."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)
        self.events_dir = self.base_path / "events"
        self.events_dir.mkdir(parents=True, exist_ok=True)

    def _get_session_file(self, session_id: str) -> Path:
        return self.events_dir / f"{session_id}.jsonl"

    def store_event(self, event: SessionEvent) -> str:
        path = self._get_session_file(event.session_id)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(self._event_to_dict(event)) + "\n")
        return event.event_id

    def get_events(
        self,
        session_id: str,
        event_type: SessionEventType | None = None,
    ) -> list[SessionEvent]:
        path = self._get_session_file(session_id)
        if not path.exists():
            return []
        events: list[SessionEvent] = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                event = self._dict_to_event(json.loads(line))
                if event_type and event.event_type != event_type:
                    continue
                events.append(event)
        return sorted(events, key=lambda e: e.created_at)

    def get_escalation_events(self, session_id: str) -> list[SessionEvent]:
        return self.get_events(session_id, SessionEventType.ESCALATE)

    def _event_to_dict(self, event: SessionEvent) -> dict[str, Any]:
        """Serialize event to dict."""
        return {
            "event_id": event.event_id,
            "event_type": event.event_type.value,
            "session_id": event.session_id,
            "phase": event.phase,
            "role": event.role,
            "rule": event.rule,
            "operation": event.operation,
            "failure_count": event.failure_count,
            "summary": event.summary,
            "created_at": event.created_at,
        }

    def _dict_to_event(self, data: dict[str, Any]) -> SessionEvent:
        """Deserialize dict to event."""
        return SessionEvent(
            event_id=data["event_id"],
            event_type=SessionEventType(data["event_type"]),
            session_id=data["session_id"],
            phase=data.get("phase"),
            role=data.get("role"),
            rule=data.get("rule"),
            operation=data.get("operation"),
            failure_count=data.get("failure_count"),
            summary=data.get("summary", ""),
            created_at=data.get("created_at", ""),
        )
