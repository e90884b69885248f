import json

import httpx
import pytest

from toolrpc.tools.outlook import AUTH_REQUIRED, OutlookTools
from toolrpc.tools.token_store import InMemoryTokenStore
from toolrpc.utils.exceptions import InvalidParamsError, RpcError, UpstreamError

MESSAGES = {
    "value": [
        {
            "id": "m1",
            "subject": "Quarterly report",
            "from": {"emailAddress": {"address": "bob@example.com", "name": "Bob"}},
            "receivedDateTime": "2026-10-18T09:00:00Z",
            "isRead": False,
            "bodyPreview": "Please find attached",
        }
    ]
}

EVENTS = {
    "value": [
        {
            "id": "e1",
            "subject": "Standup",
            "start": {"dateTime": "2026-10-20T09:00:00", "timeZone": "UTC"},
            "end": {"dateTime": "2026-10-20T09:15:00", "timeZone": "UTC"},
            "location": {"displayName": "Room 4"},
        }
    ]
}


def _tools(transport, tokens=None):
    store = InMemoryTokenStore(tokens if tokens is not None else {"alice": "alice-token"})
    return OutlookTools(store, transport=transport)


@pytest.mark.asyncio
async def test_list_emails_uses_users_token_and_reshapes(make_transport):
    transport = make_transport(lambda request: httpx.Response(200, json=MESSAGES))
    result = await _tools(transport).list_emails({"userId": "alice", "top": 5})
    assert result == {
        "emails": [
            {
                "id": "m1",
                "subject": "Quarterly report",
                "from": "bob@example.com",
                "receivedDateTime": "2026-10-18T09:00:00Z",
                "isRead": False,
                "preview": "Please find attached",
            }
        ]
    }
    request = transport.requests[0]
    assert request.headers["Authorization"] == "Bearer alice-token"
    assert request.url.path == "/v1.0/me/mailFolders/inbox/messages"
    assert request.url.params["$top"] == "5"


@pytest.mark.asyncio
async def test_unknown_user_requires_authentication(make_transport):
    transport = make_transport(lambda request: httpx.Response(200, json=MESSAGES))
    with pytest.raises(RpcError) as exc_info:
        await _tools(transport).list_emails({"userId": "mallory"})
    assert exc_info.value.code == AUTH_REQUIRED
    assert "mallory" in exc_info.value.message
    assert transport.requests == []


@pytest.mark.asyncio
async def test_graph_401_becomes_authentication_failed(make_transport):
    transport = make_transport(
        lambda request: httpx.Response(401, json={"error": {"code": "InvalidAuthenticationToken", "message": "expired"}})
    )
    with pytest.raises(RpcError) as exc_info:
        await _tools(transport).list_calendar_events({"userId": "alice"})
    assert exc_info.value.code == AUTH_REQUIRED
    assert "authentication failed" in exc_info.value.message


@pytest.mark.asyncio
async def test_graph_server_error_stays_upstream_error(make_transport):
    transport = make_transport(lambda request: httpx.Response(503, json={"error": {"message": "busy"}}))
    with pytest.raises(UpstreamError) as exc_info:
        await _tools(transport).list_emails({"userId": "alice"})
    assert exc_info.value.status_code == 503
    assert "busy" in exc_info.value.message


@pytest.mark.asyncio
async def test_send_email_posts_message(make_transport):
    transport = make_transport(lambda request: httpx.Response(202))
    result = await _tools(transport).send_email(
        {"userId": "alice", "to": "bob@example.com", "subject": "Hi", "body": "Hello Bob"}
    )
    assert result == {"sent": True}
    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1.0/me/sendMail"
    payload = json.loads(request.content)
    assert payload["saveToSentItems"] is True
    assert payload["message"]["subject"] == "Hi"
    assert payload["message"]["body"] == {"contentType": "Text", "content": "Hello Bob"}
    assert payload["message"]["toRecipients"] == [{"emailAddress": {"address": "bob@example.com"}}]


@pytest.mark.asyncio
@pytest.mark.parametrize("to", [[], [""], 42, ["ok@example.com", None]])
async def test_send_email_rejects_bad_recipients(to, make_transport):
    transport = make_transport(lambda request: httpx.Response(202))
    with pytest.raises(InvalidParamsError):
        await _tools(transport).send_email({"userId": "alice", "to": to, "subject": "s", "body": "b"})
    assert transport.requests == []


@pytest.mark.asyncio
async def test_list_calendar_events_reshapes(make_transport):
    transport = make_transport(lambda request: httpx.Response(200, json=EVENTS))
    result = await _tools(transport).list_calendar_events({"userId": "alice"})
    assert result == {
        "events": [
            {
                "id": "e1",
                "subject": "Standup",
                "start": "2026-10-20T09:00:00",
                "end": "2026-10-20T09:15:00",
                "location": "Room 4",
            }
        ]
    }
    assert transport.requests[0].url.params["$top"] == "10"


@pytest.mark.asyncio
@pytest.mark.parametrize("top", [0, 51, "5"])
async def test_top_out_of_range_rejected(top, make_transport):
    transport = make_transport(lambda request: httpx.Response(200, json=EVENTS))
    with pytest.raises(InvalidParamsError):
        await _tools(transport).list_calendar_events({"userId": "alice", "top": top})


def test_descriptors_required_fields():
    descriptors = {d.name: d for d in OutlookTools(InMemoryTokenStore()).descriptors()}
    assert descriptors["listEmails"].required == frozenset({"userId"})
    assert descriptors["sendEmail"].required == frozenset({"userId", "to", "subject", "body"})
    assert descriptors["listCalendarEvents"].required == frozenset({"userId"})


@pytest.mark.asyncio
async def test_list_emails_escapes_folder_in_path(make_transport):
    transport = make_transport(lambda request: httpx.Response(200, json={"value": []}))
    result = await _tools(transport).list_emails({"userId": "alice", "folder": "../users/bob"})
    assert result == {"emails": []}
    assert transport.requests[0].url.raw_path.startswith(b"/v1.0/me/mailFolders/..%2Fusers%2Fbob/messages")
