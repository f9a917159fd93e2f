# =============================================================================
# Pattern Matching
# =============================================================================

import sys

from loguru import logger
from wcmatch.glob import BRACE, FORCEUNIX, GLOBSTAR, globmatch

from .errors import Error, ErrorReport, ErrorType

# Separators are normalized to "/" before matching, so Unix rules always apply
GLOB_FLAGS = GLOBSTAR | BRACE | FORCEUNIX


def is_windows_path_style() -> bool:
    return sys.platform == "win32"


def matches(
    subject: str,
    pattern: str,
    windows: bool | None = None,
    report: ErrorReport | None = None,
) -> bool:
    """Glob-match ``subject`` against ``pattern``.

    ``*`` and ``?`` stay within one path segment, ``**`` spans any number
    of segments, ``{a,b}`` expands alternatives and ``[seq]`` matches a
    character class. Matching is case sensitive.

    Args:
        subject: Tab title, filesystem path or language id
        pattern: Glob pattern; an empty pattern never matches
        windows: Normalize backslash separators before matching.
            Defaults to the current platform.
        report: Collects a PATTERN_ERROR warning for patterns that fail
            to compile; logged directly when omitted

    Returns:
        True if the subject matches, False otherwise (including bad patterns)
    """
    if not pattern:
        return False

    if windows is None:
        windows = is_windows_path_style()
    if windows:
        subject = subject.replace("\\", "/")
        pattern = pattern.replace("\\", "/")

    try:
        return globmatch(subject, pattern, flags=GLOB_FLAGS)
    except Exception as e:
        # wcmatch raises its own PatternLimitException besides ValueError
        error = Error(
            error_type=ErrorType.PATTERN_ERROR,
            message="Invalid glob pattern - treating as no match",
            context={"pattern": pattern, "error": str(e)},
            original_exception=e
        )
        if report is not None:
            report.add_warning(error)
        else:
            logger.warning(
                error.message,
                operation="match_pattern",
                status="invalid",
                **error.context
            )
        return False
