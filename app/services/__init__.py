from app.services.assignment import Assignment, Participant, generate_assignments
from app.services.dispatch import DispatchReport, dispatch
from app.services.errors import (
    AssignmentError,
    DuplicateParticipant,
    GatewayError,
    GatewayNotConfigured,
    InsufficientParticipants,
    InvalidRosterPayload,
    NoAssignmentsAvailable,
    SantaError,
)
from app.services.session import SessionState

__all__ = [
    "Assignment",
    "AssignmentError",
    "DispatchReport",
    "DuplicateParticipant",
    "GatewayError",
    "GatewayNotConfigured",
    "InsufficientParticipants",
    "InvalidRosterPayload",
    "NoAssignmentsAvailable",
    "Participant",
    "SantaError",
    "SessionState",
    "dispatch",
    "generate_assignments",
]
