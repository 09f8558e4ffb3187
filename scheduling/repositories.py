"""Repository interfaces the engine calls through, plus in-memory and JSON implementations.

The engine itself holds no global state: constraints, sessions and
interventionists are loaded through these repositories, which own persistence.
"""

import json
import uuid
from pathlib import Path
from typing import Optional, Protocol

from pydantic import TypeAdapter

from models.constraint import ScheduleConstraint, constraint_list_adapter
from models.interventionist import Interventionist
from models.session import Session, SessionPayload

_session_list_adapter = TypeAdapter(list[Session])
_interventionist_list_adapter = TypeAdapter(list[Interventionist])


class ConstraintRepository(Protocol):
    """Persistence of schedule constraints (loaded per institution)."""

    def load(self) -> list[ScheduleConstraint]: ...

    def save_all(self, constraints: list[ScheduleConstraint]) -> None: ...


class SessionRepository(Protocol):
    """The external session store."""

    def list_sessions(self) -> list[Session]: ...

    def create(self, payload: SessionPayload) -> Session: ...


def _new_id() -> str:
    return str(uuid.uuid4())


# ─── In memory ────────────────────────────────────────────────────────────────

class InMemoryConstraintRepository:
    def __init__(self, constraints: Optional[list[ScheduleConstraint]] = None) -> None:
        self._constraints = list(constraints or [])

    def load(self) -> list[ScheduleConstraint]:
        return list(self._constraints)

    def save_all(self, constraints: list[ScheduleConstraint]) -> None:
        self._constraints = list(constraints)


class InMemorySessionRepository:
    def __init__(self, sessions: Optional[list[Session]] = None) -> None:
        self._sessions = list(sessions or [])

    def list_sessions(self) -> list[Session]:
        return list(self._sessions)

    def create(self, payload: SessionPayload) -> Session:
        session = Session(id=_new_id(), **payload.model_dump(exclude={"id"}))
        self._sessions.append(session)
        return session

    def __len__(self) -> int:
        return len(self._sessions)


# ─── JSON files ───────────────────────────────────────────────────────────────

def _read_json_list(path: Path) -> list:
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list in {path}")
    return data


def _write_json(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "wb") as f:
        f.write(payload)
    tmp.replace(path)


class JsonConstraintRepository:
    """Constraints in one JSON file (list of objects, discriminated by ``scope``)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[ScheduleConstraint]:
        return constraint_list_adapter.validate_python(_read_json_list(self.path))

    def save_all(self, constraints: list[ScheduleConstraint]) -> None:
        _write_json(self.path, constraint_list_adapter.dump_json(constraints, indent=2))


class JsonSessionRepository:
    """Sessions in one JSON file; every ``create`` rewrites the file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def list_sessions(self) -> list[Session]:
        return _session_list_adapter.validate_python(_read_json_list(self.path))

    def create(self, payload: SessionPayload) -> Session:
        sessions = self.list_sessions()
        session = Session(id=_new_id(), **payload.model_dump(exclude={"id"}))
        sessions.append(session)
        _write_json(self.path, _session_list_adapter.dump_json(sessions, indent=2))
        return session

    def save_all(self, sessions: list[Session]) -> None:
        """Replaces the stored sessions (ids kept)."""
        _write_json(self.path, _session_list_adapter.dump_json(sessions, indent=2))


def load_interventionists(path: Path) -> list[Interventionist]:
    """Loads interventionists (with availability blocks) from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Interventionist file not found: {path}")
    return _interventionist_list_adapter.validate_python(_read_json_list(path))


def save_interventionists(path: Path, interventionists: list[Interventionist]) -> None:
    _write_json(Path(path), _interventionist_list_adapter.dump_json(interventionists, indent=2))
