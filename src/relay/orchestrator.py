"""Recompute a parent item's progress from its subitems and write the status back."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from src.common.errors import NotFoundError
from src.monday.client import MondayClient
from src.progress.aggregator import compute_progress
from src.progress.classifier import determine_parent_status
from src.progress.models import Item

logger = logging.getLogger("relay.orchestrator")


async def resolve_parent(client: MondayClient, item_id: str) -> Item:
    """Return the item that owns the subitems to aggregate.

    Automations fire with either the parent item or one of its subitems; a
    subitem is swapped for its parent so its siblings are counted too.
    """
    item = await client.fetch_item(item_id)
    if item is None:
        raise NotFoundError("No data was found in item.", item_id=item_id)

    if item.parent_id:
        parent = await client.fetch_item(item.parent_id)
        if parent is None:
            raise NotFoundError("No data was found in item.", item_id=item.parent_id)
        logger.debug("Item %s is a subitem of %s", item_id, parent.id)
        return parent
    return item


async def calculate_and_update_parent(
    client: MondayClient,
    item_id: str,
    *,
    strategy: str = "color_labels",
    weights: Mapping[str, int] | None = None,
) -> dict[str, Any]:
    parent = await resolve_parent(client, item_id)

    progress = compute_progress(parent.subitems, strategy, weights)
    status = determine_parent_status(progress)

    status_column = parent.first_colored_column(require_id=True)
    if status_column is None:
        raise NotFoundError("No status column found in the parent item.", item_id=parent.id)

    await client.change_simple_column_value(parent.board_id, parent.id, status_column.id, status.value)

    logger.info(
        "Parent %s: %d subitem(s), %s progress %d%% -> %s",
        parent.id, len(parent.subitems), strategy, progress, status.value,
    )
    return {
        "progress": progress,
        "parentStatus": status.value,
        "message": "Parent status updated successfully.",
    }
