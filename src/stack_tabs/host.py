# =============================================================================
# Host Seam
# =============================================================================
# The editor host owns the live tab strip, the open documents and the actual
# move command. The engine only talks to it through the Host protocol below.
# SnapshotHost is an in-memory host fed from a JSON snapshot, used by the
# command line entry point and by tests.

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

from loguru import logger

from .config_loader import get_cfg_value, path_contains
from .documents import DocumentInfo
from .errors import Error, ErrorType, Result
from .options import Direction
from .tabs import Tab, find_active_index


@dataclass(frozen=True)
class FocusState:
    """Snapshot of what the host currently has focused."""

    active_file: str | None = None
    workspace_folders: tuple[str, ...] = ()

    def __post_init__(self):
        # Must stay hashable: focus states key the resolved-pattern cache
        object.__setattr__(self, "workspace_folders", tuple(self.workspace_folders))

    def workspace_folder_for(self, path: str | None) -> str | None:
        """Return the most specific workspace folder containing ``path``."""
        if not path:
            return None
        best = None
        for folder in self.workspace_folders:
            root = folder.rstrip("/\\") or folder
            if path_contains(root, path):
                if best is None or len(root) > len(best):
                    best = root
        return best


@dataclass(frozen=True)
class MoveRequest:
    direction: Direction
    distance: int

    def as_args(self) -> dict:
        """Arguments in the shape of the editor's ``moveActiveEditor`` command."""
        return {"to": self.direction.value, "by": "tab", "value": self.distance}


class Host(Protocol):
    def get_active_tab_sequence(self) -> Sequence[Tab] | None: ...

    def resolve_document(self, resource: str) -> DocumentInfo | None: ...

    def focus_state(self) -> FocusState: ...

    def move_active_tab(self, request: MoveRequest) -> None: ...


@dataclass
class SnapshotHost:
    tabs: list[Tab] = field(default_factory=list)
    documents: dict[str, DocumentInfo] = field(default_factory=dict)
    workspace_folders: tuple[str, ...] = ()
    active_file: str | None = None
    moves: list[MoveRequest] = field(default_factory=list)

    def get_active_tab_sequence(self) -> Sequence[Tab] | None:
        return tuple(self.tabs)

    def resolve_document(self, resource: str) -> DocumentInfo | None:
        return self.documents.get(resource)

    def focus_state(self) -> FocusState:
        active_file = self.active_file
        if active_file is None:
            index = find_active_index(self.tabs)
            if index != -1:
                active_file = self.tabs[index].resource_path
        return FocusState(active_file=active_file, workspace_folders=self.workspace_folders)

    def move_active_tab(self, request: MoveRequest) -> None:
        index = find_active_index(self.tabs)
        if index == -1:
            return
        offset = request.distance if request.direction is Direction.RIGHT else -request.distance
        target = max(0, min(len(self.tabs) - 1, index + offset))
        tab = self.tabs.pop(index)
        self.tabs.insert(target, tab)
        self.moves.append(request)
        logger.debug(
            "Snapshot tab moved",
            operation="move_active_tab",
            status="success",
            from_index=index,
            to_index=target
        )

    @classmethod
    def from_dict(cls, data: dict) -> "SnapshotHost":
        """Build a host from a snapshot mapping.

        Each tab entry may carry ``untitled`` and ``languageId`` describing
        its document; those become the host's resolvable documents.
        """
        tabs = []
        documents = {}
        for entry in data.get("tabs", []):
            tab = Tab.from_dict(entry)
            tabs.append(tab)
            if tab.resource and ("untitled" in entry or "languageId" in entry):
                documents[tab.resource] = DocumentInfo(
                    uri=tab.resource,
                    is_untitled=get_cfg_value("untitled", "boolean", entry) is True,
                    language_id=str(entry.get("languageId", "")),
                )
        return cls(
            tabs=tabs,
            documents=documents,
            workspace_folders=tuple(data.get("workspaceFolders", ())),
            active_file=data.get("activeFile"),
        )


def load_snapshot(path: Path) -> Result[SnapshotHost]:
    """Load a SnapshotHost from a JSON file.

    Returns:
        Result[SnapshotHost]: Ok with the host, or Err with error details
    """
    if not path.exists():
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Snapshot file not found: {path}",
            context={"snapshot_path": str(path)}
        ))

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=f"Invalid snapshot file: {e}",
            context={"snapshot_path": str(path)},
            original_exception=e
        ))

    if not isinstance(data, dict) or not isinstance(data.get("tabs", []), list):
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message="Snapshot must be an object with a 'tabs' list",
            context={"snapshot_path": str(path)}
        ))

    host = SnapshotHost.from_dict(data)
    logger.debug(
        "Snapshot loaded",
        operation="load_snapshot",
        status="success",
        snapshot_path=str(path),
        metrics={"tabs_count": len(host.tabs)}
    )
    return Result.ok(host)
