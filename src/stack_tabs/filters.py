# =============================================================================
# Blocking Filters
# =============================================================================
# A filter token is either a bare keyword ("pinned", "dirty", "terminal", ...)
# or a prefixed glob ("title:*.md", "path:${workspaceFolder}/docs/*",
# "lang:python"). A tab matching any configured token is "blocking": the
# active tab is never moved past it.

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Callable, Union

from loguru import logger

from .documents import DocumentCache
from .errors import ErrorReport
from .host import FocusState
from .matcher import matches
from .options import Options
from .tabs import DOCUMENT_KINDS, ContentKind, Tab
from .variables import VariableContext, resolve_variables


class PatternKind(Enum):
    TITLE = "title:"
    PATH = "path:"
    LANG = "lang:"


@dataclass(frozen=True)
class Keyword:
    name: str


@dataclass(frozen=True)
class PrefixPattern:
    kind: PatternKind
    pattern: str


FilterToken = Union[Keyword, PrefixPattern]


@lru_cache(maxsize=512)
def parse_filter_token(token: str) -> FilterToken:
    """Parse a configured filter string into a Keyword or PrefixPattern."""
    for kind in PatternKind:
        if token.startswith(kind.value):
            return PrefixPattern(kind=kind, pattern=token[len(kind.value):].strip())
    if token not in FILTER_REGISTRY:
        logger.debug(
            "Unknown filter keyword - never blocks",
            operation="parse_filter_token",
            status="unknown",
            token=token
        )
    return Keyword(name=token)


@dataclass(frozen=True)
class FilterContext:
    """Per-call lookups shared by all filters."""

    documents: DocumentCache | None = None
    focus: FocusState | None = None
    windows: bool | None = None
    report: ErrorReport = field(default_factory=ErrorReport)

    def document(self, tab: Tab):
        if self.documents is None or tab.kind not in DOCUMENT_KINDS:
            return None
        return self.documents.get(tab.resource)


# =============================================================================
# Filter Registry (keyword filters)
# =============================================================================

def _is_untitled(tab: Tab, ctx: FilterContext) -> bool:
    document = ctx.document(tab)
    return bool(document is not None and document.is_untitled)


def _kind_filter(kind: ContentKind) -> Callable[[Tab, FilterContext], bool]:
    return lambda tab, ctx: tab.kind is kind


FILTER_REGISTRY: dict[str, Callable[[Tab, FilterContext], bool]] = {
    "pinned": lambda tab, ctx: tab.is_pinned,
    "dirty": lambda tab, ctx: tab.is_dirty,
    "preview": lambda tab, ctx: tab.is_preview,
    "untitled": _is_untitled,
    **{kind.value: _kind_filter(kind) for kind in ContentKind},
}


# =============================================================================
# Custom Filter Set (prefixed glob filters)
# =============================================================================

def _subject_matches(subject: str, pattern: str, ctx: FilterContext) -> bool:
    # A missing title/path/language never matches, even against "*"
    return bool(subject) and matches(subject, pattern, ctx.windows, ctx.report)


def _match_title(tab: Tab, pattern: str, ctx: FilterContext) -> bool:
    return _subject_matches(tab.label, pattern, ctx)


def _match_path(tab: Tab, pattern: str, ctx: FilterContext) -> bool:
    return _subject_matches(tab.resource_path or "", pattern, ctx)


def _match_lang(tab: Tab, pattern: str, ctx: FilterContext) -> bool:
    if tab.kind is not ContentKind.TEXT:
        return False
    document = ctx.document(tab)
    return _subject_matches(document.language_id if document else "", pattern, ctx)


CUSTOM_FILTERS: dict[PatternKind, Callable[[Tab, str, FilterContext], bool]] = {
    PatternKind.TITLE: _match_title,
    PatternKind.PATH: _match_path,
    PatternKind.LANG: _match_lang,
}


# =============================================================================
# Blocking Predicate
# =============================================================================

class BlockingPredicate:
    """Decides whether a tab is blocking under a set of Options.

    One instance belongs to one loaded configuration. It caches the
    variable expansion of each ``path:`` pattern for the latest focus state; rebuilding
    the predicate (on configuration reload) drops that cache.

    Args:
        documents: Document lookup used by the ``untitled`` and ``lang:`` filters
        focus: Callable returning the host's current focus state
        windows: Force Windows path-style matching (default: platform)
    """

    def __init__(
        self,
        documents: DocumentCache | None = None,
        focus: Callable[[], FocusState] | None = None,
        windows: bool | None = None,
    ):
        self.documents = documents
        self.focus = focus
        self.windows = windows
        # pattern -> (focus it was expanded for, expansion); one entry per pattern
        self._resolved_patterns: dict[str, tuple[FocusState | None, str]] = {}

    def context(self) -> FilterContext:
        return FilterContext(
            documents=self.documents,
            focus=self.focus() if self.focus else None,
            windows=self.windows,
        )

    def resolve_pattern(self, pattern: str, focus: FocusState | None) -> str:
        """Expand variables in a ``path:`` pattern, reusing the last expansion
        while the focus state is unchanged."""
        cached = self._resolved_patterns.get(pattern)
        if cached is not None and cached[0] == focus:
            return cached[1]
        resolved = resolve_variables(pattern, VariableContext(focus=focus))
        self._resolved_patterns[pattern] = (focus, resolved)
        return resolved

    def token_matches(self, tab: Tab, token: str, ctx: FilterContext) -> bool:
        parsed = parse_filter_token(token)
        if isinstance(parsed, Keyword):
            predicate = FILTER_REGISTRY.get(parsed.name)
            return bool(predicate and predicate(tab, ctx))

        pattern = parsed.pattern
        if parsed.kind is PatternKind.PATH:
            pattern = self.resolve_pattern(pattern, ctx.focus)
        return CUSTOM_FILTERS[parsed.kind](tab, pattern, ctx)

    def __call__(self, tab: Tab, options: Options, ctx: FilterContext | None = None) -> bool:
        ctx = ctx or self.context()
        for token in options.block_move_filters:
            try:
                if self.token_matches(tab, token, ctx):
                    return True
            except Exception:
                # Host lookups can fail in any way; one token must not sink the rest
                logger.exception(
                    "Filter evaluation failed - treating as non-blocking",
                    operation="is_blocking",
                    status="error",
                    token=token,
                    tab_label=tab.label
                )
        return False
