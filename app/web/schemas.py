from __future__ import annotations

import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.services.assignment import Assignment, Participant
from app.services.errors import InvalidRosterPayload

PHONE_DIGITS = 9


class ParticipantIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    phone: Optional[str] = Field(default=None, alias="contact")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("phone")
    @classmethod
    def blank_phone_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class GenerateRequest(BaseModel):
    participants: List[ParticipantIn]


def phone_pattern(prefix: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(prefix)}\d{{{PHONE_DIGITS}}}$")


def _validation_details(exc: ValidationError) -> List[dict]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"]}
        for error in exc.errors(include_url=False)
    ]


def parse_roster(payload: Any, phone_prefix: str) -> List[Participant]:
    """Validate a generate request body and convert it to participants.

    The minimum roster size is enforced by the generator, not here.
    """
    try:
        request = GenerateRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRosterPayload("Invalid participants array", _validation_details(exc)) from exc

    pattern = phone_pattern(phone_prefix)
    seen = set()
    roster: List[Participant] = []
    for entry in request.participants:
        if entry.name in seen:
            raise InvalidRosterPayload(f"Duplicate participant name: {entry.name}")
        seen.add(entry.name)
        if entry.phone is not None and not pattern.match(entry.phone):
            raise InvalidRosterPayload(
                f"Phone number for {entry.name} must start with {phone_prefix} and have {PHONE_DIGITS} digits"
            )
        roster.append(Participant(name=entry.name, contact=entry.phone))
    return roster


def serialize_assignment(assignment: Assignment) -> dict:
    return {
        "giver": assignment.giver,
        "receiver": assignment.receiver,
        "phone": assignment.giver_contact,
    }
