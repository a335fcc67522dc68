"""Map a 0-100 progress value onto the parent item's status label."""

from __future__ import annotations

from enum import Enum


class ParentStatus(str, Enum):
    NOT_STARTED = "Not Started"
    STARTED = "Started"
    WORKING = "Working"
    MAKING_PROGRESS = "Making Progress"
    DONE = "Done"


def determine_parent_status(progress: int) -> ParentStatus:
    """Classify progress. The checks must stay in this order.

    0 -> Not Started, 1-25 -> Started, 26-74 -> Working,
    75-99 -> Making Progress, 100 -> Done.
    """
    if progress == 0:
        return ParentStatus.NOT_STARTED
    if progress <= 25:
        return ParentStatus.STARTED
    if progress < 75:
        return ParentStatus.WORKING
    if progress < 100:
        return ParentStatus.MAKING_PROGRESS
    return ParentStatus.DONE
