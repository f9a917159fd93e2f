# =============================================================================
# Document Resolution
# =============================================================================

import weakref
from dataclasses import dataclass
from typing import Callable

from loguru import logger


@dataclass
class DocumentInfo:
    """What the engine needs to know about a tab's underlying document."""

    uri: str
    is_untitled: bool = False
    language_id: str = ""


class DocumentCache:
    """Best-effort weak cache in front of the host's document lookup.

    Entries disappear as soon as the host drops its DocumentInfo, so a
    miss is always possible and simply falls through to ``resolve``.
    """

    def __init__(self, resolve: Callable[[str], DocumentInfo | None]):
        self._resolve = resolve
        self._cache: weakref.WeakValueDictionary[str, DocumentInfo] = weakref.WeakValueDictionary()

    def get(self, resource: str | None) -> DocumentInfo | None:
        if not resource:
            return None

        cached = self._cache.get(resource)
        if cached is not None:
            return cached

        document = self._resolve(resource)
        if document is not None:
            self._cache[resource] = document
        else:
            logger.debug(
                "No document found for tab resource",
                operation="resolve_document",
                status="miss",
                resource=resource
            )
        return document

    def clear(self) -> None:
        self._cache.clear()
