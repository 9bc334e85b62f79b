from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from app.services.assignment import Assignment, Participant
from app.services.errors import NoAssignmentsAvailable


@dataclass(frozen=True)
class SessionSnapshot:
    roster: Tuple[Participant, ...]
    assignments: Tuple[Assignment, ...]
    generated_at: datetime.datetime


class SessionState:
    """Holds the most recent draw for the lifetime of the server process.

    The slot is replaced wholesale on every ``store``; readers get an immutable
    snapshot, so a dispatch already running keeps the assignments it captured.
    """

    def __init__(self) -> None:
        self._current: Optional[SessionSnapshot] = None

    @property
    def current(self) -> Optional[SessionSnapshot]:
        return self._current

    @property
    def has_assignments(self) -> bool:
        return self._current is not None

    def store(self, roster: Sequence[Participant], assignments: Sequence[Assignment]) -> SessionSnapshot:
        snapshot = SessionSnapshot(
            roster=tuple(roster),
            assignments=tuple(assignments),
            generated_at=datetime.datetime.now(tz=datetime.timezone.utc),
        )
        self._current = snapshot
        return snapshot

    def snapshot(self) -> SessionSnapshot:
        current = self._current
        if current is None:
            raise NoAssignmentsAvailable("No assignments available. Generate assignments first.")
        return current

    def clear(self) -> bool:
        cleared = self._current is not None
        self._current = None
        return cleared
