# =============================================================================
# Stack Position Calculation
# =============================================================================
# Given the active tab, find how many slots it can travel in the configured
# direction before reaching the nearest blocking tab (or the edge of the tab
# strip), less the configured padding.

from typing import Callable, Sequence

from loguru import logger

from .options import Direction, Options
from .tabs import Tab

IsBlocking = Callable[[Tab, Options], bool]


def blocking_tab_indexes(
    tabs: Sequence[Tab],
    is_blocking: IsBlocking,
    options: Options,
) -> list[int]:
    """Indexes of every blocking tab, in tab order."""
    if not tabs:
        return []
    return [index for index, tab in enumerate(tabs) if is_blocking(tab, options)]


def _nearest_blocking(
    tabs: Sequence[Tab],
    indexes: range,
    is_blocking: IsBlocking,
    options: Options,
) -> int | None:
    for index in indexes:
        if is_blocking(tabs[index], options):
            return index
    return None


def compute_position(
    active_index: int,
    tabs: Sequence[Tab],
    is_blocking: IsBlocking,
    options: Options,
) -> int | None:
    """
    Compute how far the active tab should move.

    Scans outward from the active tab and stops at the first blocking tab,
    which is the nearest element of the blocking set on that side.

    Args:
        active_index: Index of the tab to move
        tabs: Tabs of the focused group, in display order
        is_blocking: Predicate deciding whether a tab blocks movement
        options: Supplies direction (LEFT or RIGHT) and padding

    Returns:
        Number of slots to move (0 means stay), or None when the tab must
        not move at all
    """
    if not 0 <= active_index < len(tabs) or is_blocking(tabs[active_index], options):
        logger.debug(
            "Active tab is blocked from stacking or out of range",
            operation="compute_position",
            status="blocked",
            tab_index=active_index,
            filters=list(options.block_move_filters)
        )
        return None

    direction = options.direction
    if direction is Direction.LEFT:
        blocking_index = _nearest_blocking(
            tabs, range(active_index - 1, -1, -1), is_blocking, options
        )
        if blocking_index is None:
            move_delta = active_index
        else:
            move_delta = active_index - blocking_index - 1
    elif direction is Direction.RIGHT:
        blocking_index = _nearest_blocking(
            tabs, range(active_index + 1, len(tabs)), is_blocking, options
        )
        if blocking_index is None:
            move_delta = len(tabs) - active_index - 1
        else:
            move_delta = blocking_index - active_index - 1
    else:
        # AUTO must be resolved by the options layer before getting here
        blocking_index = None
        move_delta = -1

    if move_delta >= 0 and options.padding > 0:
        move_delta = max(0, move_delta - options.padding)

    if move_delta < 0:
        logger.debug(
            "No valid stack position found",
            operation="compute_position",
            status="no_position",
            tab_index=active_index,
            direction=direction.value,
            move_delta=move_delta,
            filters=list(options.block_move_filters)
        )
        return None

    logger.debug(
        "Stack position computed",
        operation="compute_position",
        status="success",
        tab_index=active_index,
        direction=direction.value,
        blocking_index=blocking_index,
        padding=options.padding,
        move_delta=move_delta
    )
    return move_delta
