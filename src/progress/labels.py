"""Parse status labels that encode a percentage as ``"<name>||<pct>%"``."""

from __future__ import annotations

import re
from typing import NamedTuple

SEPARATOR = "||"

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


class ParsedLabel(NamedTuple):
    name: str
    percentage: int | None


def has_percentage_label(label: str | None) -> bool:
    return bool(label) and SEPARATOR in label


def parse_label(label: str) -> ParsedLabel:
    """Split ``"Done || 100%"`` into ``ParsedLabel("Done", 100)``.

    The percentage is the leading integer of the second part once ``%`` is
    removed (``"7 %"`` -> 7). It is ``None`` when the separator is missing or
    the second part does not start with a number, so callers should check
    :func:`has_percentage_label` before trusting it.
    """
    name, sep, rest = label.partition(SEPARATOR)
    if not sep:
        return ParsedLabel(name.strip(), None)

    # Only the first two segments matter: "a||b||c" reads as ("a", "b").
    pct_part = rest.split(SEPARATOR, 1)[0].strip().replace("%", "")
    m = _LEADING_INT_RE.match(pct_part)
    return ParsedLabel(name.strip(), int(m.group()) if m else None)
