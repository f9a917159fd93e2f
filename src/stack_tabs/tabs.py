# =============================================================================
# Tab Descriptors
# =============================================================================
# Read-only records for one entry of the host's tab strip. The host builds a
# fresh sequence for every reposition pass; nothing here is cached.

from dataclasses import dataclass
from enum import Enum

from .config_loader import get_cfg_value


class ContentKind(Enum):
    """What a tab displays. Values double as filter keywords."""

    TEXT = "text"
    DIFF = "diff"
    NOTEBOOK = "notebook"
    NOTEBOOK_DIFF = "notebook_diff"
    WEBVIEW = "webview"
    TERMINAL = "terminal"
    CUSTOM = "custom"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "ContentKind":
        """Map a host-supplied kind name to a ContentKind, OTHER when unknown."""
        if not value:
            return cls.OTHER
        normalized = value.strip().lower()
        # camelCase spelling used by some hosts
        if normalized == "notebookdiff":
            normalized = "notebook_diff"
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER


# Kinds whose tab input carries a document resource
RESOURCE_KINDS = frozenset({ContentKind.TEXT, ContentKind.NOTEBOOK, ContentKind.CUSTOM})

# Kinds backed by a document that can be untitled
DOCUMENT_KINDS = frozenset({ContentKind.TEXT, ContentKind.NOTEBOOK})


@dataclass(frozen=True)
class Tab:
    label: str
    is_active: bool = False
    is_pinned: bool = False
    is_dirty: bool = False
    is_preview: bool = False
    kind: ContentKind = ContentKind.TEXT
    resource: str | None = None

    @property
    def resource_path(self) -> str | None:
        """Filesystem path of the tab's document, None for resource-less tabs."""
        if self.kind in RESOURCE_KINDS:
            return self.resource
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "Tab":
        """Build a Tab from a snapshot entry.

        Accepts both the short snapshot keys (``active``, ``pinned``) and
        the ``is_*`` attribute names.
        """
        def flag(name: str) -> bool:
            key = name if name in data else f"is_{name}"
            return get_cfg_value(key, "boolean", data) is True

        return cls(
            label=str(data.get("label", "")),
            is_active=flag("active"),
            is_pinned=flag("pinned"),
            is_dirty=flag("dirty"),
            is_preview=flag("preview"),
            kind=ContentKind.parse(data.get("kind")),
            resource=data.get("resource"),
        )


def find_active_index(tabs) -> int:
    """Index of the active tab, -1 when no tab is active."""
    for index, tab in enumerate(tabs):
        if tab.is_active:
            return index
    return -1
