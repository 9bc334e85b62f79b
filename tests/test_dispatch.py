import aiohttp
import pytest

from app.services.assignment import Assignment, Participant, generate_assignments
from app.services.dispatch import (
    SKIP_NO_PHONE,
    Failed,
    Sent,
    Skipped,
    dispatch,
    format_message,
    summarize,
)
from app.services.errors import GatewayNotConfigured, NoAssignmentsAvailable
from app.services.gateway import GatewayCredentials
from app.services.session import SessionState

CREDENTIALS = GatewayCredentials(api_key="key", device_id="device", base_url="http://gateway.test/api/v1")

ASSIGNMENTS = [
    Assignment("Alice", "Bob", "+48111111111"),
    Assignment("Bob", "Charlie", None),
    Assignment("Charlie", "Dave", "+48333333333"),
    Assignment("Dave", "Alice", "+48444444444"),
]


@pytest.mark.asyncio
async def test_dispatch_without_session_state_fails(fake_gateway):
    state = SessionState()
    with pytest.raises(NoAssignmentsAvailable):
        await dispatch(None, CREDENTIALS, gateway=fake_gateway)
    with pytest.raises(NoAssignmentsAvailable):
        state.snapshot()


@pytest.mark.asyncio
async def test_dispatch_with_empty_assignments_fails(fake_gateway):
    with pytest.raises(NoAssignmentsAvailable):
        await dispatch([], CREDENTIALS, gateway=fake_gateway)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "credentials",
    [None, GatewayCredentials(api_key="", device_id="device"), GatewayCredentials(api_key="key", device_id="")],
)
async def test_dispatch_without_credentials_fails_before_sending(credentials, fake_gateway):
    with pytest.raises(GatewayNotConfigured):
        await dispatch(ASSIGNMENTS, credentials, gateway=fake_gateway)
    assert fake_gateway.calls == []


@pytest.mark.asyncio
async def test_dispatch_skips_givers_without_phone(fake_gateway):
    report = await dispatch(ASSIGNMENTS, CREDENTIALS, gateway=fake_gateway)

    assert report.summary.total == 4
    assert report.summary.sent == 3
    assert report.summary.skipped == 1
    assert report.summary.failed == 0
    assert report.success
    assert [contact for contact, _ in fake_gateway.calls] == ["+48111111111", "+48333333333", "+48444444444"]
    skipped = [outcome for outcome in report.outcomes if isinstance(outcome, Skipped)]
    assert skipped == [Skipped("Bob", "Charlie", SKIP_NO_PHONE)]


@pytest.mark.asyncio
async def test_failing_delivery_does_not_stop_the_batch(make_gateway):
    gateway = make_gateway(failing={"+48111111111"})
    report = await dispatch(ASSIGNMENTS, CREDENTIALS, gateway=gateway)

    assert len(gateway.calls) == 3
    assert isinstance(report.outcomes[0], Failed)
    assert "cannot reach" in report.outcomes[0].error
    assert isinstance(report.outcomes[2], Sent)
    assert isinstance(report.outcomes[3], Sent)
    assert report.summary.failed == 1
    assert report.summary.sent + report.summary.failed + report.summary.skipped == report.summary.total
    assert not report.success


@pytest.mark.asyncio
async def test_outcomes_follow_assignment_order(fake_gateway):
    report = await dispatch(ASSIGNMENTS, CREDENTIALS, gateway=fake_gateway)
    assert [outcome.giver for outcome in report.outcomes] == ["Alice", "Bob", "Charlie", "Dave"]


@pytest.mark.asyncio
async def test_dispatch_keeps_snapshot_when_session_is_overwritten(make_gateway):
    state = SessionState()
    people = [Participant("Alice", "+48111111111"), Participant("Bob", "+48222222222")]
    state.store(people, generate_assignments(people, seed=1))
    captured = state.snapshot().assignments

    newcomers = [Participant("Xavier", "+48999999999"), Participant("Yvonne", "+48888888888")]

    def regenerate(_contact):
        state.store(newcomers, generate_assignments(newcomers, seed=2))

    gateway = make_gateway(on_send=regenerate)
    report = await dispatch(captured, CREDENTIALS, gateway=gateway)

    assert {outcome.giver for outcome in report.outcomes} == {"Alice", "Bob"}
    assert {contact for contact, _ in gateway.calls} == {"+48111111111", "+48222222222"}
    assert {a.giver for a in state.snapshot().assignments} == {"Xavier", "Yvonne"}


@pytest.mark.asyncio
async def test_message_names_giver_and_receiver(fake_gateway):
    await dispatch([Assignment("Alice", "Bob", "+48111111111")], CREDENTIALS, gateway=fake_gateway)
    _, message = fake_gateway.calls[0]
    assert "Alice" in message
    assert "Bob" in message


def test_format_message_languages():
    assignment = Assignment("Ola", "Kuba", "+48111111111")
    assert "kupujesz prezent dla Kuba" in format_message(assignment, "pl")
    assert format_message(assignment, "xx") == format_message(assignment, "en")


def test_summary_is_a_function_of_outcomes():
    outcomes = [
        Sent("A", "B", "+48111111111"),
        Failed("B", "C", "+48222222222", "boom"),
        Skipped("C", "D", SKIP_NO_PHONE),
        Skipped("D", "A", SKIP_NO_PHONE),
    ]
    summary = summarize(outcomes)
    assert summary.to_dict() == {"total": 4, "sent": 1, "failed": 1, "skipped": 2}
    assert summarize(list(outcomes)) == summary
    assert summarize([]).to_dict() == {"total": 0, "sent": 0, "failed": 0, "skipped": 0}


@pytest.mark.asyncio
async def test_report_serialization(fake_gateway):
    report = await dispatch(ASSIGNMENTS[:2], CREDENTIALS, gateway=fake_gateway)
    assert report.to_dict() == {
        "success": True,
        "summary": {"total": 2, "sent": 1, "failed": 0, "skipped": 1},
        "results": [
            {"giver": "Alice", "receiver": "Bob", "phone": "+48111111111", "status": "sent"},
            {"giver": "Bob", "receiver": "Charlie", "status": "skipped", "reason": SKIP_NO_PHONE},
        ],
    }


@pytest.mark.asyncio
async def test_unreadable_gateway_reply_is_recorded_as_failure(sms_gateway):
    sms_gateway.garbled.add("+48111111111")
    credentials = GatewayCredentials(
        api_key=sms_gateway.api_key,
        device_id=sms_gateway.device_id,
        base_url=sms_gateway.base_url,
    )
    batch = [
        Assignment("Alice", "Bob", "+48111111111"),
        Assignment("Bob", "Alice", "+48222222222"),
    ]

    async with aiohttp.ClientSession() as session:
        report = await dispatch(batch, credentials, http_session=session)

    assert [type(outcome) for outcome in report.outcomes] == [Failed, Sent]
    assert "502" in report.outcomes[0].error
    assert [call["recipients"] for call in sms_gateway.received] == [["+48111111111"], ["+48222222222"]]
    assert report.summary.to_dict() == {"total": 2, "sent": 1, "failed": 1, "skipped": 0}
