from __future__ import annotations

import pytest

from stack_tabs import matcher
from stack_tabs.documents import DocumentCache, DocumentInfo
from stack_tabs.filters import (
    BlockingPredicate,
    Keyword,
    PatternKind,
    PrefixPattern,
    parse_filter_token,
)
from stack_tabs.host import FocusState
from stack_tabs.options import Options
from stack_tabs.tabs import ContentKind, Tab


def _options(*filters: str) -> Options:
    return Options(block_move_filters=tuple(filters))


def _predicate(documents: dict[str, DocumentInfo] | None = None, focus: FocusState | None = None) -> BlockingPredicate:
    docs = documents or {}
    return BlockingPredicate(
        documents=DocumentCache(docs.get),
        focus=(lambda: focus) if focus else None,
        windows=False,
    )


def test_parse_keyword_and_prefixed_tokens() -> None:
    assert parse_filter_token("pinned") == Keyword("pinned")
    assert parse_filter_token("title: *.md ") == PrefixPattern(PatternKind.TITLE, "*.md")
    assert parse_filter_token("path:**/test/*.ts") == PrefixPattern(PatternKind.PATH, "**/test/*.ts")
    assert parse_filter_token("lang:python") == PrefixPattern(PatternKind.LANG, "python")


def test_builtin_state_filters() -> None:
    predicate = _predicate()
    assert predicate(Tab(label="a", is_pinned=True), _options("pinned"))
    assert predicate(Tab(label="a", is_dirty=True), _options("pinned", "dirty"))
    assert predicate(Tab(label="a", is_preview=True), _options("preview"))
    assert not predicate(Tab(label="a", is_dirty=True), _options("pinned"))


def test_content_kind_filters() -> None:
    predicate = _predicate()
    terminal = Tab(label="bash", kind=ContentKind.TERMINAL)
    assert predicate(terminal, _options("pinned", "terminal"))
    assert not predicate(terminal, _options("pinned", "webview"))
    assert predicate(Tab(label="x", kind=ContentKind.NOTEBOOK_DIFF), _options("notebook_diff"))


def test_untitled_filter_uses_document_lookup() -> None:
    documents = {
        "Untitled-1": DocumentInfo(uri="Untitled-1", is_untitled=True),
        "/w/a.py": DocumentInfo(uri="/w/a.py", language_id="python"),
    }
    predicate = _predicate(documents)
    assert predicate(Tab(label="Untitled-1", resource="Untitled-1"), _options("untitled"))
    assert not predicate(Tab(label="a.py", resource="/w/a.py"), _options("untitled"))
    # No document known for the resource
    assert not predicate(Tab(label="b.py", resource="/w/b.py"), _options("untitled"))


def test_title_filter() -> None:
    predicate = _predicate()
    assert predicate(Tab(label="README.md"), _options("title:*.md"))
    assert not predicate(Tab(label="main.py"), _options("title:*.md"))


def test_lang_filter_only_for_text_tabs() -> None:
    documents = {"/w/a.py": DocumentInfo(uri="/w/a.py", language_id="python")}
    predicate = _predicate(documents)
    assert predicate(Tab(label="a.py", resource="/w/a.py"), _options("lang:py*"))
    assert not predicate(Tab(label="a.py", resource="/w/a.py"), _options("lang:rust"))
    assert not predicate(
        Tab(label="a.py", resource="/w/a.py", kind=ContentKind.NOTEBOOK), _options("lang:python")
    )


def test_path_filter_glob() -> None:
    predicate = _predicate()
    inside = Tab(label="a.ts", resource="/home/u/proj/test/a.ts")
    outside = Tab(label="a.ts", resource="/home/u/proj/src/a.ts")
    assert predicate(inside, _options("path:**/test/*.ts"))
    assert not predicate(outside, _options("path:**/test/*.ts"))


def test_path_filter_ignores_tabs_without_resource() -> None:
    predicate = _predicate()
    terminal = Tab(label="bash", kind=ContentKind.TERMINAL, resource="/w/x")
    assert not predicate(terminal, _options("path:*"))
    assert not predicate(Tab(label="a"), _options("path:*"))


def test_path_filter_expands_variables_from_focus() -> None:
    focus = FocusState(active_file="/w/proj/src/a.py", workspace_folders=("/w/proj",))
    predicate = _predicate(focus=focus)
    options = _options("pinned", "path:${workspaceFolder}/docs/*")
    assert predicate(Tab(label="x.md", resource="/w/proj/docs/x.md"), options)
    assert not predicate(Tab(label="x.md", resource="/w/other/docs/x.md"), options)


def test_resolved_pattern_cache_is_stable() -> None:
    focus = FocusState(active_file="/w/proj/src/a.py", workspace_folders=("/w/proj",))
    predicate = _predicate(focus=focus)
    first = predicate.resolve_pattern("${fileDirname}/*", focus)
    second = predicate.resolve_pattern("${fileDirname}/*", focus)
    assert first == second == "/w/proj/src/*"
    assert len(predicate._resolved_patterns) == 1


def test_resolved_pattern_follows_focus_changes() -> None:
    predicate = _predicate()
    a = FocusState(active_file="/w/a/x.py")
    b = FocusState(active_file="/w/b/y.py")
    assert predicate.resolve_pattern("${fileDirname}/*", a) == "/w/a/*"
    assert predicate.resolve_pattern("${fileDirname}/*", b) == "/w/b/*"
    assert predicate.resolve_pattern("${fileDirname}/*", a) == "/w/a/*"


def test_resolved_pattern_cache_does_not_grow_with_focus_changes() -> None:
    predicate = _predicate()
    for i in range(50):
        predicate.resolve_pattern("${fileDirname}/*", FocusState(active_file=f"/w/d{i}/x.py"))
    assert len(predicate._resolved_patterns) == 1


def test_unknown_and_empty_tokens_never_block() -> None:
    predicate = _predicate()
    tab = Tab(label="anything", resource="/w/a")
    assert not predicate(tab, _options("bogus", "title:", "path:", "lang:"))


def test_failing_token_does_not_stop_other_tokens() -> None:
    def broken(resource: str) -> DocumentInfo | None:
        raise RuntimeError("editor closed")

    predicate = BlockingPredicate(documents=DocumentCache(broken), windows=False)
    tab = Tab(label="a.py", resource="/w/a.py", is_pinned=True)
    assert predicate(tab, _options("untitled", "pinned"))
    assert not predicate(Tab(label="b.py", resource="/w/b.py"), _options("untitled", "pinned"))


def test_duplicate_tokens_are_harmless() -> None:
    predicate = _predicate()
    assert predicate(Tab(label="a", is_pinned=True), _options("pinned", "pinned"))
    assert not predicate(Tab(label="a"), _options("pinned", "pinned"))


def test_path_filter_single_star_stays_in_folder() -> None:
    focus = FocusState(active_file="/w/proj/src/a.py", workspace_folders=("/w/proj",))
    predicate = _predicate(focus=focus)
    options = _options("pinned", "path:${workspaceFolder}/docs/*")
    assert not predicate(Tab(label="x.md", resource="/w/proj/docs/nested/x.md"), options)

    deep = Tab(label="a.ts", resource="/home/u/proj/test/sub/deep/a.ts")
    assert not predicate(deep, _options("pinned", "path:**/test/*.ts"))


def test_lang_filter_brace_alternatives() -> None:
    documents = {"/w/a.rs": DocumentInfo(uri="/w/a.rs", language_id="rust")}
    predicate = _predicate(documents)
    assert predicate(Tab(label="a.rs", resource="/w/a.rs"), _options("pinned", "lang:{python,rust}"))


def test_host_failure_of_any_kind_is_isolated() -> None:
    def broken(resource: str) -> DocumentInfo | None:
        raise AttributeError("document gone")

    predicate = BlockingPredicate(documents=DocumentCache(broken), windows=False)
    options = _options("lang:python", "untitled", "dirty")
    assert predicate(Tab(label="a.py", resource="/w/a.py", is_dirty=True), options)
    assert not predicate(Tab(label="b.py", resource="/w/b.py"), options)


def test_invalid_patterns_are_collected_in_context_report(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(*args, **kwargs):
        raise ValueError("bad pattern")

    monkeypatch.setattr(matcher, "globmatch", broken)
    predicate = _predicate()
    ctx = predicate.context()
    assert not predicate(Tab(label="a.md"), _options("pinned", "title:*.md"), ctx)
    assert [w.error_type.value for w in ctx.report.warnings] == ["pattern_error"]
