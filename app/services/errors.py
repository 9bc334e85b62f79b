from __future__ import annotations

from typing import Any, List, Optional


class SantaError(RuntimeError):
    pass


class AssignmentError(SantaError):
    pass


class InsufficientParticipants(AssignmentError):
    pass


class DuplicateParticipant(AssignmentError):
    pass


class InvalidRosterPayload(SantaError):
    def __init__(self, message: str, details: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.details = details or []


class GatewayNotConfigured(SantaError):
    pass


class NoAssignmentsAvailable(SantaError):
    pass


class GatewayError(SantaError):
    pass
