"""Outlook mail and calendar tools backed by Microsoft Graph."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from toolrpc.api.rpc.registry import MethodDescriptor
from toolrpc.tools.token_store import TokenStore
from toolrpc.tools.upstream import request_json
from toolrpc.utils.exceptions import InvalidParamsError, RpcError, UpstreamError

SERVICE = "Microsoft Graph"
AUTH_REQUIRED = -32001
_MAX_TOP = 50

_USER_ID_PROPERTY = {"type": "string", "description": "User whose mailbox/calendar is accessed"}


class OutlookTools:
    """Mail listing, sending and calendar listing for an authenticated user."""

    def __init__(
        self,
        token_store: TokenStore,
        *,
        graph_base_url: str = "https://graph.microsoft.com/v1.0",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_store = token_store
        self.graph_base_url = graph_base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def descriptors(self) -> list[MethodDescriptor]:
        return [
            MethodDescriptor(
                name="listEmails",
                description="List recent messages in a mail folder.",
                parameters={
                    "type": "object",
                    "properties": {
                        "userId": _USER_ID_PROPERTY,
                        "folder": {"type": "string", "description": "Mail folder (default inbox)"},
                        "top": {"type": "integer", "minimum": 1, "maximum": _MAX_TOP},
                    },
                    "required": ["userId"],
                },
                action=self.list_emails,
            ),
            MethodDescriptor(
                name="sendEmail",
                description="Send a plain-text email from the user's mailbox.",
                parameters={
                    "type": "object",
                    "properties": {
                        "userId": _USER_ID_PROPERTY,
                        "to": {
                            "description": "Recipient address or list of addresses",
                            "oneOf": [{"type": "string"}, {"type": "array", "items": {"type": "string"}}],
                        },
                        "subject": {"type": "string"},
                        "body": {"type": "string"},
                    },
                    "required": ["userId", "to", "subject", "body"],
                },
                action=self.send_email,
            ),
            MethodDescriptor(
                name="listCalendarEvents",
                description="List upcoming calendar events.",
                parameters={
                    "type": "object",
                    "properties": {
                        "userId": _USER_ID_PROPERTY,
                        "top": {"type": "integer", "minimum": 1, "maximum": _MAX_TOP},
                    },
                    "required": ["userId"],
                },
                action=self.list_calendar_events,
            ),
        ]

    async def list_emails(self, params: dict[str, Any]) -> dict[str, Any]:
        folder = str(params.get("folder") or "inbox")
        data = await self._graph(
            params,
            "GET",
            f"/me/mailFolders/{quote(folder, safe='')}/messages",
            params={
                "$top": _top(params),
                "$select": "id,subject,from,receivedDateTime,isRead,bodyPreview",
                "$orderby": "receivedDateTime desc",
            },
        )
        emails = [
            {
                "id": msg.get("id"),
                "subject": msg.get("subject"),
                "from": ((msg.get("from") or {}).get("emailAddress") or {}).get("address"),
                "receivedDateTime": msg.get("receivedDateTime"),
                "isRead": msg.get("isRead"),
                "preview": msg.get("bodyPreview"),
            }
            for msg in data.get("value") or []
        ]
        return {"emails": emails}

    async def send_email(self, params: dict[str, Any]) -> dict[str, Any]:
        recipients = params.get("to")
        if isinstance(recipients, str):
            recipients = [recipients]
        if not isinstance(recipients, list) or not recipients or not all(
            isinstance(r, str) and r.strip() for r in recipients
        ):
            raise InvalidParamsError("to must be an address or a non-empty list of addresses")
        message = {
            "subject": str(params.get("subject", "")),
            "body": {"contentType": "Text", "content": str(params.get("body", ""))},
            "toRecipients": [{"emailAddress": {"address": r.strip()}} for r in recipients],
        }
        await self._graph(
            params,
            "POST",
            "/me/sendMail",
            json={"message": message, "saveToSentItems": True},
        )
        return {"sent": True}

    async def list_calendar_events(self, params: dict[str, Any]) -> dict[str, Any]:
        data = await self._graph(
            params,
            "GET",
            "/me/events",
            params={
                "$top": _top(params),
                "$select": "id,subject,start,end,location",
                "$orderby": "start/dateTime",
            },
        )
        events = [
            {
                "id": ev.get("id"),
                "subject": ev.get("subject"),
                "start": (ev.get("start") or {}).get("dateTime"),
                "end": (ev.get("end") or {}).get("dateTime"),
                "location": (ev.get("location") or {}).get("displayName"),
            }
            for ev in data.get("value") or []
        ]
        return {"events": events}

    async def _graph(self, call_params: dict[str, Any], method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        user_id = call_params.get("userId")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidParamsError("userId must be a non-empty string")
        token = self.token_store.get(user_id)
        if not token:
            raise RpcError(AUTH_REQUIRED, f"authentication required for user {user_id}")
        try:
            data = await request_json(
                method,
                f"{self.graph_base_url}{path}",
                service=SERVICE,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
        except UpstreamError as e:
            if e.status_code == 401:
                logger.info("Graph rejected token for user {}", user_id)
                raise RpcError(AUTH_REQUIRED, f"authentication failed for user {user_id}") from e
            raise
        return data if isinstance(data, dict) else {}


def _top(params: dict[str, Any]) -> int:
    top = params.get("top", 10)
    if isinstance(top, bool) or not isinstance(top, int) or not 1 <= top <= _MAX_TOP:
        raise InvalidParamsError(f"top must be an integer between 1 and {_MAX_TOP}")
    return top
