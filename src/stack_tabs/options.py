# =============================================================================
# Options Resolution
# =============================================================================

import math
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from .config_loader import ConfigStore, get_cfg_value
from .errors import Error, ErrorReport, ErrorType

DEFAULT_BLOCK_MOVE_FILTERS: tuple[str, ...] = ("pinned",)


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    AUTO = "auto"


@dataclass(frozen=True)
class Options:
    block_move_filters: tuple[str, ...] = DEFAULT_BLOCK_MOVE_FILTERS
    direction: Direction = Direction.LEFT
    padding: int = 0
    enabled: bool = True
    debug: bool = False


def effective_filters(filters) -> tuple[str, ...]:
    """Apply the default-set rule to a configured filter list.

    The configured list is used only if it contains at least one default
    filter; otherwise the defaults replace it entirely (never merged).
    """
    configured = tuple(filters or ())
    if any(f in DEFAULT_BLOCK_MOVE_FILTERS for f in configured):
        return configured
    return DEFAULT_BLOCK_MOVE_FILTERS


def resolve_direction(value) -> Direction:
    """Map a configured direction to LEFT or RIGHT; ``auto`` means LEFT."""
    if value in (Direction.LEFT, Direction.RIGHT):
        return value
    if isinstance(value, str) and value.strip().lower() == Direction.RIGHT.value:
        return Direction.RIGHT
    return Direction.LEFT


@dataclass
class OptionsResolver:
    store: ConfigStore
    report: ErrorReport = field(default_factory=ErrorReport)

    def effective_options(self, scope: str | None = None) -> Options:
        """Build the Options in effect for ``scope``.

        Args:
            scope: Resource path of the active tab, or None for global settings

        Returns:
            Options with defaults applied and invalid values normalized
        """
        self.report = ErrorReport()
        cfg = self.store.get_configuration(scope)

        raw_filters = get_cfg_value("blockMoveFilters", None, cfg)
        if raw_filters is None:
            raw_filters = []
        elif isinstance(raw_filters, str):
            raw_filters = [raw_filters]
        elif not isinstance(raw_filters, (list, tuple)):
            self._warn("blockMoveFilters must be a list of filter strings", key="blockMoveFilters")
            raw_filters = []
        filters = effective_filters(str(f) for f in raw_filters)

        direction = get_cfg_value("direction", "string", cfg)
        if direction is not None and direction.strip().lower() not in {d.value for d in Direction}:
            self._warn("Unknown direction, using left", key="direction", value=direction)

        padding = get_cfg_value("padding", "number", cfg)
        if padding is None:
            padding = 0
        if not math.isfinite(padding) or padding != int(padding):
            self._warn("Padding must be a whole number, using 0", key="padding", value=repr(padding))
            padding = 0
        if padding < 0:
            self._warn("Negative padding, using 0", key="padding", value=padding)
            padding = 0

        enabled = get_cfg_value("enabled", "boolean", cfg)
        debug = get_cfg_value("debug", "boolean", cfg)

        options = Options(
            block_move_filters=filters,
            direction=resolve_direction(direction),
            padding=int(padding),
            enabled=True if enabled is None else enabled,
            debug=bool(debug),
        )
        logger.debug(
            "Options resolved",
            operation="effective_options",
            status="success",
            scope=scope,
            filters=list(options.block_move_filters),
            direction=options.direction.value,
            padding=options.padding,
            enabled=options.enabled
        )
        return options

    def _warn(self, message: str, **context):
        self.report.add_warning(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=message,
            context=context
        ))
