"""FastAPI router for the monday automation triggers."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from src.common.config import REPO_DIR, load_config
from src.common.errors import DownstreamError, RelayError, ValidationError
from src.monday.client import MondayClient
from src.progress.aggregator import validate_weights
from src.relay.notifier import notify_work_started
from src.relay.orchestrator import calculate_and_update_parent

logger = logging.getLogger("relay.routes")

CONFIG_PATH = REPO_DIR / "config" / "config.yaml"

router = APIRouter(prefix="/api", tags=["automations"])


def _cfg() -> dict[str, Any]:
    return load_config(CONFIG_PATH)


def _upstream_transport(request: Request) -> httpx.AsyncBaseTransport | None:
    """Transport for outbound calls, set on ``app.state`` by create_app; None means real network."""
    return getattr(request.app.state, "upstream_transport", None)


def _get_client(cfg: dict[str, Any], transport: httpx.AsyncBaseTransport | None) -> MondayClient:
    monday = cfg["monday"]
    return MondayClient(
        monday["api_url"],
        monday.get("api_token"),
        api_version=monday.get("api_version"),
        timeout=float(monday.get("timeout", 30)),
        transport=transport,
    )


async def _input_fields(request: Request) -> dict[str, Any]:
    """Return ``payload.inputFields`` from a monday automation body, or {}."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    payload = body.get("payload")
    if not isinstance(payload, dict):
        return {}
    fields = payload.get("inputFields")
    return fields if isinstance(fields, dict) else {}


def _weights(fields: dict[str, Any], cfg: dict[str, Any]) -> dict[str, int]:
    """Config weights with per-call ``inputFields.weights`` layered on top."""
    weights = dict(cfg["progress"].get("weights") or {})
    extra = fields.get("weights")
    if extra is None:
        return weights
    if not isinstance(extra, dict):
        raise ValidationError("weights must be an object of status text to weight.")
    try:
        weights.update(validate_weights(extra))
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    return weights


@router.get("/health")
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@router.post("/calculate-and-update-parent")
async def calculate_and_update(request: Request) -> JSONResponse:
    fields = await _input_fields(request)
    item_id = fields.get("itemId")
    if not item_id:
        raise HTTPException(400, "itemId is required.")

    cfg = _cfg()
    try:
        weights = _weights(fields, cfg)
        async with _get_client(cfg, _upstream_transport(request)) as client:
            result = await calculate_and_update_parent(
                client,
                str(item_id),
                strategy=cfg["progress"]["strategy"],
                weights=weights,
            )
    except DownstreamError as exc:
        logger.error("Error calculating and updating parent status: %s", exc.to_dict())
        raise HTTPException(500, "Error calculating and updating parent status") from exc
    except RelayError as exc:
        raise HTTPException(exc.status_code, exc.message) from exc
    return JSONResponse(result)


@router.post("/update-webhook")
async def update_webhook(request: Request) -> JSONResponse:
    fields = await _input_fields(request)
    user_id = fields.get("userId")
    item_id = fields.get("itemId")
    if not user_id or not item_id:
        raise HTTPException(400, "userId and itemId are required fields.")

    cfg = _cfg()
    transport = _upstream_transport(request)
    try:
        async with _get_client(cfg, transport) as client:
            result = await notify_work_started(
                client,
                cfg.get("webhook_url"),
                str(user_id),
                str(item_id),
                transport=transport,
            )
    except DownstreamError as exc:
        logger.error("Notification request failed: %s", exc.to_dict())
        raise HTTPException(500, exc.message) from exc
    except RelayError as exc:
        raise HTTPException(exc.status_code, exc.message) from exc
    return JSONResponse(result)
