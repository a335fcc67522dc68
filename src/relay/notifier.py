"""Post "user started working" notices to a chat webhook."""

from __future__ import annotations

import logging

import httpx

from src.common.errors import DownstreamError, NotFoundError
from src.monday.client import MondayClient

logger = logging.getLogger("relay.notifier")


def format_message(user_name: str, item_name: str) -> str:
    return f"User `{user_name}` started working on Item `{item_name}`"


async def post_webhook(
    webhook_url: str,
    text: str,
    *,
    timeout: float = 10,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """POST ``{"text": text}`` to the webhook. Returns the HTTP status."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as c:
            r = await c.post(webhook_url, json={"text": text})
            r.raise_for_status()
    except httpx.HTTPError as exc:
        raise DownstreamError("Failed to send Slack notification.", error=repr(exc)) from exc
    return r.status_code


async def notify_work_started(
    client: MondayClient,
    webhook_url: str | None,
    user_id: str,
    item_id: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, str]:
    try:
        item, user = await client.fetch_item_and_user(item_id, user_id)
    except DownstreamError as exc:
        raise DownstreamError("Failed to look up item and user.", **exc.context) from exc
    if not item:
        raise NotFoundError("No data was found for item.", item_id=item_id)
    if not user:
        raise NotFoundError("No data was found for user.", user_id=user_id)

    if not webhook_url:
        raise DownstreamError("Failed to send Slack notification.", error="webhook_url is not configured")

    text = format_message(user.get("name", ""), item.get("name", ""))
    await post_webhook(webhook_url, text, transport=transport)
    logger.info("Notified webhook: user %s started item %s", user_id, item_id)
    return {"message": "Notification sent successfully."}
