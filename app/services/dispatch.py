from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import aiohttp
from loguru import logger

from app.services import audit
from app.services.assignment import Assignment
from app.services.errors import GatewayError, GatewayNotConfigured, NoAssignmentsAvailable
from app.services.gateway import GatewayCredentials, SmsGateway

SKIP_NO_PHONE = "No phone number"

MESSAGE_TEMPLATES: Dict[str, str] = {
    "en": "Hi {giver}! Secret Santa: you will buy a present for {receiver}. Merry Christmas!",
    "pl": "Cześć {giver}! Sekretny Mikołaj: kupujesz prezent dla {receiver}. Wesołych Świąt!",
}


class MessageSender(Protocol):
    async def send(self, contact: str, message: str) -> None: ...


@dataclass(frozen=True)
class Sent:
    giver: str
    receiver: str
    contact: str
    status: str = "sent"

    def to_dict(self) -> Dict[str, Any]:
        return {"giver": self.giver, "receiver": self.receiver, "phone": self.contact, "status": self.status}


@dataclass(frozen=True)
class Failed:
    giver: str
    receiver: str
    contact: str
    error: str
    status: str = "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "giver": self.giver,
            "receiver": self.receiver,
            "phone": self.contact,
            "status": self.status,
            "error": self.error,
        }


@dataclass(frozen=True)
class Skipped:
    giver: str
    receiver: str
    reason: str
    status: str = "skipped"

    def to_dict(self) -> Dict[str, Any]:
        return {"giver": self.giver, "receiver": self.receiver, "status": self.status, "reason": self.reason}


Outcome = Union[Sent, Failed, Skipped]


@dataclass(frozen=True)
class DispatchSummary:
    total: int
    sent: int
    failed: int
    skipped: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "sent": self.sent, "failed": self.failed, "skipped": self.skipped}


@dataclass(frozen=True)
class DispatchReport:
    outcomes: List[Outcome]
    summary: DispatchSummary

    @property
    def success(self) -> bool:
        return self.summary.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "summary": self.summary.to_dict(),
            "results": [outcome.to_dict() for outcome in self.outcomes],
        }


def summarize(outcomes: Sequence[Outcome]) -> DispatchSummary:
    total = len(outcomes)
    sent = sum(1 for outcome in outcomes if isinstance(outcome, Sent))
    failed = sum(1 for outcome in outcomes if isinstance(outcome, Failed))
    return DispatchSummary(total=total, sent=sent, failed=failed, skipped=total - sent - failed)


def format_message(assignment: Assignment, language: str = "en") -> str:
    template = MESSAGE_TEMPLATES.get(language, MESSAGE_TEMPLATES["en"])
    return template.format(giver=assignment.giver, receiver=assignment.receiver)


async def deliver(assignment: Assignment, sender: MessageSender, language: str = "en") -> Outcome:
    """Attempt one delivery; gateway errors become a ``Failed`` outcome."""
    contact = assignment.giver_contact
    if not contact:
        return Skipped(assignment.giver, assignment.receiver, SKIP_NO_PHONE)

    try:
        await sender.send(contact, format_message(assignment, language))
    except GatewayError as exc:
        logger.bind(giver=assignment.giver, contact=contact).warning(
            "Failed to send assignment SMS: {error}", error=str(exc)
        )
        return Failed(assignment.giver, assignment.receiver, contact, str(exc))

    logger.bind(giver=assignment.giver, contact=contact).info("Assignment SMS sent")
    return Sent(assignment.giver, assignment.receiver, contact)


async def dispatch(
    assignments: Optional[Sequence[Assignment]],
    credentials: Optional[GatewayCredentials],
    gateway: Optional[MessageSender] = None,
    http_session: Optional[aiohttp.ClientSession] = None,
    language: str = "en",
) -> DispatchReport:
    if credentials is None or not credentials.is_complete:
        raise GatewayNotConfigured("SMS gateway is not configured. Set SMS_API_KEY and SMS_DEVICE_ID.")
    if not assignments:
        raise NoAssignmentsAvailable("No assignments available. Generate assignments first.")

    batch = tuple(assignments)

    if gateway is None:
        if http_session is None:
            async with aiohttp.ClientSession() as session:
                return await _run(batch, SmsGateway(credentials, session), language)
        gateway = SmsGateway(credentials, http_session)

    return await _run(batch, gateway, language)


async def _run(batch: Sequence[Assignment], sender: MessageSender, language: str) -> DispatchReport:
    outcomes: List[Outcome] = []
    for assignment in batch:
        outcomes.append(await deliver(assignment, sender, language))

    report = DispatchReport(outcomes=outcomes, summary=summarize(outcomes))
    audit.record(audit.EVENT_DISPATCHED, **report.to_dict())
    return report
