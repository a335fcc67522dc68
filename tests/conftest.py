"""Shared fixtures: fake monday API + chat webhook behind httpx.MockTransport."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio

REPO_DIR = Path(__file__).resolve().parent.parent

API_URL = "https://api.monday.test/v2"
WEBHOOK_URL = "https://hooks.chat.test/services/T000/B000/XXXX"


def status_value(
    color: str | None,
    label: str | None,
    column_id: str | None = "status",
    text: str | None = None,
) -> dict[str, Any]:
    """Raw StatusValue as the GraphQL API returns it."""
    return {
        "id": column_id,
        "text": text if text is not None else label,
        "label": label,
        "label_style": {"color": color} if color else None,
    }


def raw_item(
    item_id: str,
    column_values: list[dict[str, Any]] | None = None,
    subitems: list[dict[str, Any]] | None = None,
    *,
    name: str | None = None,
    board_id: str = "100",
    parent_id: str | None = None,
) -> dict[str, Any]:
    return {
        "id": item_id,
        "name": name or f"Item {item_id}",
        "board": {"id": board_id},
        "parent_item": {"id": parent_id} if parent_id else None,
        "column_values": column_values or [],
        "subitems": subitems or [],
    }


class FakeUpstream:
    """Routes requests to the fake monday API or the fake webhook by host."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.api_calls: list[dict[str, Any]] = []
        self.mutations: list[dict[str, Any]] = []
        self.webhook_posts: list[dict[str, Any]] = []
        self.api_error: Exception | None = None
        self.api_graphql_errors: list[dict[str, Any]] | None = None
        self.webhook_error: Exception | None = None
        self.webhook_status = 200

    def add_item(self, item: dict[str, Any]) -> None:
        self.items[str(item["id"])] = item
        for sub in item.get("subitems") or []:
            self.items.setdefault(str(sub["id"]), {**sub, "parent_item": {"id": item["id"]}})

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.monday.test":
            return self._api(request)
        if request.url.host == "hooks.chat.test":
            return self._webhook(request)
        return httpx.Response(404)

    def _api(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.api_calls.append({"body": body, "headers": dict(request.headers)})
        if self.api_error is not None:
            raise self.api_error
        if self.api_graphql_errors is not None:
            return httpx.Response(200, json={"errors": self.api_graphql_errors})

        query, variables = body["query"], body.get("variables") or {}
        if "change_simple_column_value" in query:
            self.mutations.append(variables)
            return httpx.Response(200, json={"data": {"change_simple_column_value": {"id": variables["itemId"]}}})
        if "users(" in query:
            items = [self.items[i] for i in variables["itemIds"] if i in self.items]
            users = [self.users[u] for u in variables["userIds"] if u in self.users]
            return httpx.Response(200, json={"data": {"items": items, "users": users}})
        items = [self.items[i] for i in variables["ids"] if i in self.items]
        return httpx.Response(200, json={"data": {"items": items}})

    def _webhook(self, request: httpx.Request) -> httpx.Response:
        if self.webhook_error is not None:
            raise self.webhook_error
        self.webhook_posts.append(json.loads(request.content))
        return httpx.Response(self.webhook_status, text="ok")


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for var in (
        "MONDAY_API_URL", "MONDAY_API_KEY", "MONDAY_API_VERSION",
        "RELAY_WEBHOOK_URL", "RELAY_PROGRESS_STRATEGY", "RELAY_LOG_DIR", "PORT",
    ):
        monkeypatch.delenv(var, raising=False)

    config_content = f"""
monday:
  api_url: {API_URL}
  api_token: test-token
  timeout: 5
webhook_url: {WEBHOOK_URL}
progress:
  strategy: color_labels
log_dir: {tmp_path}/logs
"""
    path = tmp_path / "config.yaml"
    path.write_text(config_content)
    return path


@pytest_asyncio.fixture()
async def client(upstream: FakeUpstream, config_file: Path):
    """Async httpx client bound to the relay app, upstream served by ``upstream``."""
    with patch("src.relay.routes.CONFIG_PATH", config_file):
        from src.relay.app import create_app
        app = create_app(upstream_transport=httpx.MockTransport(upstream.handler))
        asgi = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=asgi, base_url="http://test") as c:
            yield c


def automation_body(**input_fields: Any) -> dict[str, Any]:
    return {"payload": {"inputFields": input_fields}}
