# =============================================================================
# Tab Stacker
# =============================================================================
# Glue between the host and the decision engine: resolves options for the
# active tab, computes the stack position and asks the host to move the tab.

from uuid import uuid4

from loguru import logger

from .config_loader import ConfigStore
from .documents import DocumentCache
from .filters import BlockingPredicate
from .host import Host, MoveRequest
from .logging_config import trace_id_var
from .options import Options, OptionsResolver
from .position import compute_position
from .tabs import find_active_index


class TabStacker:
    """Owns the current configuration for one host session.

    ``load_options`` replaces the options and the blocking predicate
    together, so the predicate's pattern cache never outlives the
    configuration it was built for.
    """

    def __init__(self, host: Host, store: ConfigStore | None = None, windows: bool | None = None):
        self.host = host
        self.store = store or ConfigStore()
        self.resolver = OptionsResolver(self.store)
        self.windows = windows
        self.documents = DocumentCache(host.resolve_document)
        self.options = Options()
        self.predicate = self._build_predicate()
        self.load_options()

    @property
    def is_debug(self) -> bool:
        return self.options.debug

    def _build_predicate(self) -> BlockingPredicate:
        return BlockingPredicate(
            documents=self.documents,
            focus=self.host.focus_state,
            windows=self.windows,
        )

    def load_options(self, scope: str | None = None) -> Options:
        """Resolve options for ``scope`` and rebuild the blocking predicate."""
        self.options = self.resolver.effective_options(scope)
        self.predicate = self._build_predicate()
        self.documents.clear()
        logger.debug(
            "Options loaded",
            operation="load_options",
            status="success",
            scope=scope,
            filters=list(self.options.block_move_filters)
        )
        return self.options

    def on_configuration_changed(self, scope: str | None = None) -> None:
        """Re-read settings after the host reports a configuration change."""
        logger.debug(
            "Configuration changed, reloading options",
            operation="on_configuration_changed",
            status="started"
        )
        self.store.reload()
        self.load_options(scope)

    def stack_tab(self) -> MoveRequest | None:
        """Move the active tab next to its nearest blocking tab.

        Returns:
            The MoveRequest sent to the host, or None when nothing moved
        """
        token = trace_id_var.set(str(uuid4()))
        try:
            return self._stack_tab()
        finally:
            trace_id_var.reset(token)

    def _stack_tab(self) -> MoveRequest | None:
        tabs = self.host.get_active_tab_sequence()
        if not tabs:
            logger.debug(
                "No tabs returned from current editor group",
                operation="stack_tab",
                status="skipped"
            )
            return None

        current_index = find_active_index(tabs)
        if current_index == -1:
            logger.debug("No active tab found", operation="stack_tab", status="skipped")
            return None

        scope = tabs[current_index].resource_path
        options = self.resolver.effective_options(scope)
        if not options.enabled:
            logger.debug(
                "Tab stacking disabled",
                operation="stack_tab",
                status="disabled",
                scope=scope
            )
            return None

        ctx = self.predicate.context()
        distance = compute_position(
            current_index,
            tabs,
            lambda tab, opts: self.predicate(tab, opts, ctx),
            options,
        )

        if distance is None or distance <= 0:
            logger.debug(
                "Tab not moved - no valid stack position found",
                operation="stack_tab",
                status="not_moved",
                tab_index=current_index
            )
            return None

        request = MoveRequest(direction=options.direction, distance=distance)
        logger.debug(
            "Moving active tab",
            operation="stack_tab",
            status="moving",
            tab_index=current_index,
            tab_label=tabs[current_index].label,
            args=request.as_args()
        )
        self.host.move_active_tab(request)
        return request

    def on_stack_tab_command(self) -> MoveRequest | None:
        """Command entry point for the host; failures are logged, not raised."""
        try:
            return self.stack_tab()
        except Exception:
            logger.exception(
                "Error stacking tab",
                operation="stack_tab",
                status="failed"
            )
            return None
