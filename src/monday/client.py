"""Minimal async client for the monday.com GraphQL API.

Every query is sent with GraphQL variables; ids and values are never spliced
into the query text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.common.errors import DownstreamError
from src.progress.models import Item

logger = logging.getLogger("relay.monday")

_ITEM_FIELDS = """
      id
      name
      board { id }
      parent_item { id }
      column_values {
        id
        text
        ... on StatusValue {
          label
          label_style { color }
        }
      }
"""

ITEM_QUERY = f"""
query ($ids: [ID!]) {{
  items(ids: $ids) {{
{_ITEM_FIELDS}
      subitems {{
{_ITEM_FIELDS}
      }}
  }}
}}
"""

ITEM_AND_USER_QUERY = """
query ($itemIds: [ID!], $userIds: [ID!]) {
  items(ids: $itemIds) {
    id
    name
  }
  users(ids: $userIds) {
    id
    name
  }
}
"""

CHANGE_SIMPLE_COLUMN_VALUE = """
mutation ($boardId: ID!, $itemId: ID, $columnId: String!, $value: String) {
  change_simple_column_value(board_id: $boardId, item_id: $itemId, column_id: $columnId, value: $value) {
    id
  }
}
"""


class MondayClient:
    """Thin wrapper over one ``httpx.AsyncClient`` per relay request.

    Use as ``async with MondayClient(...) as client:``.
    """

    def __init__(
        self,
        api_url: str,
        api_token: str | None,
        *,
        api_version: str | None = None,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        if api_version:
            headers["API-Version"] = api_version
        self.api_url = api_url
        self._http = httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport)

    async def __aenter__(self) -> MondayClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST a GraphQL document and return its ``data`` object."""
        try:
            resp = await self._http.post(self.api_url, json={"query": query, "variables": variables or {}})
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise DownstreamError(
                "monday API returned an error status",
                status=exc.response.status_code,
                body=exc.response.text[:500],
            ) from exc
        except httpx.HTTPError as exc:
            raise DownstreamError("monday API request failed", error=repr(exc)) from exc
        except ValueError as exc:
            raise DownstreamError("monday API returned invalid JSON", error=str(exc)) from exc

        if body.get("errors"):
            raise DownstreamError("monday API reported errors", errors=body["errors"])
        if body.get("error_message"):
            raise DownstreamError("monday API reported errors", errors=body["error_message"])
        return body.get("data") or {}

    async def fetch_item(self, item_id: str) -> Item | None:
        """Fetch one item with its board, parent, column values and subitems."""
        data = await self.execute(ITEM_QUERY, {"ids": [str(item_id)]})
        items = data.get("items") or []
        if not items:
            return None
        return Item.from_api(items[0])

    async def fetch_item_and_user(self, item_id: str, user_id: str) -> tuple[dict | None, dict | None]:
        """Return ``(item, user)`` raw dicts; either is None when the lookup is empty."""
        data = await self.execute(ITEM_AND_USER_QUERY, {"itemIds": [str(item_id)], "userIds": [str(user_id)]})
        items = data.get("items") or []
        users = data.get("users") or []
        return (items[0] if items else None, users[0] if users else None)

    async def change_simple_column_value(self, board_id: str, item_id: str, column_id: str, value: str) -> dict[str, Any]:
        data = await self.execute(
            CHANGE_SIMPLE_COLUMN_VALUE,
            {"boardId": str(board_id), "itemId": str(item_id), "columnId": column_id, "value": value},
        )
        logger.info("Set column %s on item %s (board %s) to %r", column_id, item_id, board_id, value)
        return data.get("change_simple_column_value") or {}
