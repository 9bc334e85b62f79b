from __future__ import annotations

from aiohttp import web
from loguru import logger

from app.services import audit
from app.services.assignment import generate_assignments
from app.services.dispatch import dispatch
from app.services.errors import (
    AssignmentError,
    GatewayNotConfigured,
    InvalidRosterPayload,
    NoAssignmentsAvailable,
)
from app.web.keys import HTTP_SESSION_KEY, SESSION_KEY, SETTINGS_KEY
from app.web.schemas import parse_roster, serialize_assignment
from app.web.utils import check_rate_limit, client_address, json_error

routes = web.RouteTableDef()


@routes.get("/health")
async def health_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


@routes.post("/api/generate")
async def generate_handler(request: web.Request) -> web.Response:
    limited = check_rate_limit(request, "generate")
    if limited is not None:
        return limited

    settings = request.app[SETTINGS_KEY]
    try:
        payload = await request.json()
    except ValueError:
        return json_error(400, "Invalid participants array", details=["Request body is not valid JSON"])

    try:
        roster = parse_roster(payload, settings.phone_prefix)
        assignments = generate_assignments(roster)
    except InvalidRosterPayload as exc:
        return json_error(400, str(exc), details=exc.details)
    except AssignmentError as exc:
        return json_error(400, str(exc))

    snapshot = request.app[SESSION_KEY].store(roster, assignments)
    audit.record(
        audit.EVENT_GENERATED,
        client=client_address(request),
        participants=[participant.name for participant in roster],
        with_phone=sum(1 for participant in roster if participant.contact),
    )
    logger.bind(participants=len(roster)).info("Assignments generated")

    return web.json_response(
        {
            "assignments": [serialize_assignment(item) for item in snapshot.assignments],
            "generated_at": snapshot.generated_at.isoformat(),
        }
    )


@routes.get("/api/assignments")
async def current_assignments_handler(request: web.Request) -> web.Response:
    try:
        snapshot = request.app[SESSION_KEY].snapshot()
    except NoAssignmentsAvailable as exc:
        return json_error(404, str(exc))

    return web.json_response(
        {
            "assignments": [serialize_assignment(item) for item in snapshot.assignments],
            "generated_at": snapshot.generated_at.isoformat(),
        }
    )


@routes.delete("/api/assignments")
async def reset_handler(request: web.Request) -> web.Response:
    limited = check_rate_limit(request, "reset")
    if limited is not None:
        return limited

    cleared = request.app[SESSION_KEY].clear()
    if cleared:
        audit.record(audit.EVENT_RESET, client=client_address(request))
    return web.json_response({"cleared": cleared})


@routes.post("/api/send-sms")
async def send_sms_handler(request: web.Request) -> web.Response:
    limited = check_rate_limit(request, "send_sms")
    if limited is not None:
        return limited

    settings = request.app[SETTINGS_KEY]
    snapshot = request.app[SESSION_KEY].current
    assignments = snapshot.assignments if snapshot is not None else None

    try:
        report = await dispatch(
            assignments,
            settings.gateway_credentials(),
            http_session=request.app[HTTP_SESSION_KEY],
            language=settings.sms_language,
        )
    except (GatewayNotConfigured, NoAssignmentsAvailable) as exc:
        return json_error(400, str(exc))

    logger.bind(**report.summary.to_dict()).info("SMS dispatch finished")
    return web.json_response(report.to_dict())
