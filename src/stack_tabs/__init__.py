"""Stack the active editor tab next to its nearest blocking tab."""

from .config_loader import ConfigStore
from .filters import BlockingPredicate, Keyword, PrefixPattern, parse_filter_token
from .host import FocusState, Host, MoveRequest, SnapshotHost
from .options import Direction, Options, OptionsResolver
from .position import blocking_tab_indexes, compute_position
from .stacker import TabStacker
from .tabs import ContentKind, Tab
from .variables import VariableContext, resolve_variables

__version__ = "0.1.0"

__all__ = [
    "BlockingPredicate",
    "ConfigStore",
    "ContentKind",
    "Direction",
    "FocusState",
    "Host",
    "Keyword",
    "MoveRequest",
    "Options",
    "OptionsResolver",
    "PrefixPattern",
    "SnapshotHost",
    "Tab",
    "TabStacker",
    "VariableContext",
    "blocking_tab_indexes",
    "compute_position",
    "parse_filter_token",
    "resolve_variables",
]
