"""Roll subitem statuses up into a single parent progress percentage.

Two policies are available:

``status_weights``
    Each subitem's ``status`` column text is looked up in a weight table
    (``Done`` = 100, ``Working On It`` = 50, ``Stuck`` = 0 unless overridden)
    and the weights are averaged.

``color_labels``
    Status options are labelled ``"<name>||<pct>%"``. The colour of every such
    label is mapped to its percentage, then each subitem contributes the
    percentage of its first coloured column. This survives renaming of status
    options as long as one subitem still shows the labelled option.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Mapping, Sequence

from src.progress.labels import has_percentage_label, parse_label
from src.progress.models import Item

logger = logging.getLogger("relay.progress")

DEFAULT_STATUS_WEIGHTS: dict[str, int] = {
    "Done": 100,
    "Working On It": 50,
    "Stuck": 0,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def validate_weights(weights: Mapping[str, object]) -> dict[str, int]:
    """Return ``weights`` as status text -> int, each in 0..100.

    Integer strings such as ``"50"`` are accepted. Raises ValueError otherwise.
    """
    out: dict[str, int] = {}
    for status, value in weights.items():
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"Weight for {status!r} must be an integer, got {value!r}")
        try:
            weight = int(value)
        except ValueError:
            raise ValueError(f"Weight for {status!r} must be an integer, got {value!r}") from None
        if not 0 <= weight <= 100:
            raise ValueError(f"Weight for {status!r} must be between 0 and 100, got {weight}")
        out[str(status)] = weight
    return out


def merge_weights(overrides: Mapping[str, object] | None = None) -> dict[str, int]:
    weights = dict(DEFAULT_STATUS_WEIGHTS)
    if overrides:
        weights.update(validate_weights(overrides))
    return weights


def calculate_weighted_progress(
    subitems: Sequence[Item],
    weights: Mapping[str, int] | None = None,
) -> int:
    if not subitems:
        return 0

    table = merge_weights(weights)
    total = 0
    for sub in subitems:
        status = sub.column("status")
        text = status.text if status else None
        total += table.get(text, 0) if text is not None else 0

    return round_half_up(total / (len(subitems) * 100) * 100)


def build_color_percentages(subitems: Iterable[Item]) -> dict[str, int]:
    """Map label colour -> percentage from every ``name||pct%`` label seen.

    A later label with the same colour replaces an earlier one.
    """
    table: dict[str, int] = {}
    for sub in subitems:
        for cv in sub.column_values:
            if not (cv.color and has_percentage_label(cv.label)):
                continue
            parsed = parse_label(cv.label)
            if parsed.percentage is None:
                logger.debug("Skipping label %r: no percentage after separator", cv.label)
                continue
            table[cv.color] = parsed.percentage
    return table


def calculate_color_progress(subitems: Sequence[Item]) -> int:
    table = build_color_percentages(subitems)

    total = 0
    counted = 0
    for sub in subitems:
        status = sub.first_colored_column()
        if status is not None:
            total += table.get(status.color, 0)
        counted += 1

    return round_half_up(total / counted) if counted else 0


STRATEGIES: dict[str, Callable[..., int]] = {
    "status_weights": calculate_weighted_progress,
    "color_labels": calculate_color_progress,
}


def compute_progress(
    subitems: Sequence[Item],
    strategy: str = "color_labels",
    weights: Mapping[str, int] | None = None,
) -> int:
    """Run the named policy over ``subitems``; ``weights`` only affects ``status_weights``."""
    try:
        fn = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown progress strategy: {strategy!r}") from None
    if strategy == "status_weights":
        return fn(subitems, weights)
    return fn(subitems)
