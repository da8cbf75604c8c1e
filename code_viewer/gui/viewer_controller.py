# code_viewer/gui/viewer_controller.py

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal, Slot, QTimer

from code_viewer.core.config_manager import DEFAULT_DEBOUNCE_MS, DEFAULT_COPY_RESET_MS
from code_viewer.core.search import filter_snippets
from code_viewer.core.snippet_loader import Snippet

from .clipboard import copy_to_clipboard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyResult:
    """The outcome of a copy request, handed back instead of raising."""
    item_id: str
    ok: bool
    error: Optional[str] = None


# --- The Viewer Controller: The Brain of the Viewer ---
class ViewerController(QObject):
    """
    The non-visual brain of the viewer. It owns the snippet list, the search
    query, the active selection and the per-snippet "copied" flags, and tells
    the widgets what changed through signals. It never touches a widget itself.

    Lifecycle:
        initialize(items) -> set_query / select_item / request_copy ... -> teardown()

    Every timer the controller starts is tracked, so teardown() can guarantee
    that no callback fires against a torn-down view.
    """
    filtered_items_changed = Signal(object)
    active_item_changed = Signal(object)
    scroll_to_item = Signal(str)
    copy_state_changed = Signal(str, bool)
    copy_result = Signal(str, bool)
    query_changed = Signal(str)

    def __init__(self,
                 copy_func: Callable[[str], bool] = copy_to_clipboard,
                 debounce_ms: int = DEFAULT_DEBOUNCE_MS,
                 copy_reset_ms: int = DEFAULT_COPY_RESET_MS,
                 parent: Optional[QObject] = None):
        """
        Initializes the controller. No snippets are loaded until initialize().

        Args:
            copy_func: Writes text to the clipboard and reports success.
            debounce_ms: Quiet period before a new query is applied.
            copy_reset_ms: How long a snippet stays flagged as "copied".
            parent: Optional Qt parent.
        """
        super().__init__(parent)
        self._copy_func = copy_func
        self.copy_reset_ms = copy_reset_ms

        # --- View State ---
        self._initialized: bool = False
        self._items: List[Snippet] = []
        self._items_by_id: Dict[str, Snippet] = {}
        self._filtered: List[Snippet] = []
        self._query: str = ""
        self._active_id: Optional[str] = None
        self._copy_states: Dict[str, bool] = {}

        # --- Timers ---
        # Exactly one debounce timer exists. start() on a running single-shot
        # QTimer restarts it, so repeated queries never pile up callbacks.
        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(debounce_ms)
        self._debounce_timer.timeout.connect(self._on_debounce_timeout)

        self._copy_timers: Dict[str, QTimer] = {}
        self._pending_notifications: List[QTimer] = []

    @property
    def debounce_ms(self) -> int:
        return self._debounce_timer.interval()

    def is_initialized(self) -> bool:
        return self._initialized

    # --- Lifecycle ---

    def initialize(self, items: Sequence[Snippet]) -> bool:
        """
        Loads the snippets as the working set and shows all of them.

        A second call before teardown() is ignored, so a view that mounts
        twice keeps its first snippet list and its current state. When two
        snippets share an id, the first one is kept and the rest are skipped.

        Returns:
            True if the snippets were loaded, False if the call was ignored.
        """
        if self._initialized:
            logger.warning("Viewer is already initialized. Ignoring repeated initialize().")
            return False

        items_by_id = {}
        unique_items = []
        for item in items:
            if item.id in items_by_id:
                logger.warning(f"Skipping snippet with duplicate id '{item.id}'.")
                continue
            items_by_id[item.id] = item
            unique_items.append(item)

        self._items = unique_items
        self._items_by_id = items_by_id
        self._filtered = list(self._items)
        self._query = ""
        self._active_id = None
        self._copy_states = {}
        self._initialized = True

        logger.info(f"Viewer initialized with {len(self._items)} snippets.")
        self.filtered_items_changed.emit(list(self._filtered))
        return True

    def teardown(self):
        """
        Cancels every pending timer and discards all state.
        Safe to call at any time, including repeatedly.
        """
        self._debounce_timer.stop()

        for timer in self._copy_timers.values():
            timer.stop()
            timer.deleteLater()
        self._copy_timers.clear()

        for timer in self._pending_notifications:
            timer.stop()
            timer.deleteLater()
        self._pending_notifications.clear()

        self._items = []
        self._items_by_id = {}
        self._filtered = []
        self._query = ""
        self._active_id = None
        self._copy_states = {}

        if self._initialized:
            logger.info("Viewer torn down. All pending timers cancelled.")
        self._initialized = False

    # --- Search ---

    @Slot(str)
    def set_query(self, text: str):
        """
        Records a new query right away and applies it once typing settles.

        Every call restarts the debounce window, so only the last query typed
        before the window elapses is ever applied.
        """
        if not self._initialized:
            logger.debug("set_query() called before initialize(). Ignored.")
            return
        self._query = text
        self.query_changed.emit(text)
        self._debounce_timer.start()

    @Slot()
    def clear_query(self):
        """Clears the query and shows every snippet immediately, skipping the debounce."""
        if not self._initialized:
            logger.debug("clear_query() called before initialize(). Ignored.")
            return
        self._debounce_timer.stop()
        if self._query:
            self._query = ""
            self.query_changed.emit("")
        self._recompute_filtered()

    def is_search_pending(self) -> bool:
        """True while a typed query is waiting for its debounce window."""
        return self._debounce_timer.isActive()

    @Slot()
    def _on_debounce_timeout(self):
        # Reads self._query at fire time, never a value captured when the timer started.
        if not self._initialized:
            return
        self._recompute_filtered()

    def _recompute_filtered(self):
        """Applies the current query to the snippet list and repairs the selection."""
        self._filtered = filter_snippets(self._items, self._query)
        logger.debug(f"Query '{self._query}' matched {len(self._filtered)} of {len(self._items)} snippets.")

        # The selection is repaired before anything is emitted, so no slot ever
        # observes an active id that is missing from the filtered list.
        selection_dropped = False
        if self._active_id is not None and not any(item.id == self._active_id for item in self._filtered):
            logger.debug(f"Active snippet '{self._active_id}' was filtered out. Clearing selection.")
            self._active_id = None
            selection_dropped = True

        self.filtered_items_changed.emit(list(self._filtered))
        if selection_dropped:
            self.active_item_changed.emit(None)

    # --- Selection ---

    @Slot(str)
    def select_item(self, item_id: str) -> bool:
        """
        Makes a snippet the active one and asks the view to scroll to it.

        Unknown or filtered-out ids are ignored: the view can race ahead of a
        pending filter, and a stale click must not break anything.

        Returns:
            True if the selection changed to item_id, False if it was ignored.
        """
        if not self._initialized or not any(item.id == item_id for item in self._filtered):
            logger.debug(f"Ignoring selection of unavailable snippet '{item_id}'.")
            return False

        if self._active_id != item_id:
            self._active_id = item_id
            self.active_item_changed.emit(item_id)
        self.scroll_to_item.emit(item_id)
        return True

    # --- Copy To Clipboard ---

    def request_copy(self, item_id: str, text: str) -> CopyResult:
        """
        Copies text to the clipboard on behalf of a snippet.

        On success the snippet's copy flag turns on and a reset timer starts;
        copying the same snippet again restarts that timer rather than adding
        a second one. Failures are returned, never raised, and leave the copy
        flag untouched. copy_result is emitted on the next event-loop turn.
        """
        if not self._initialized:
            logger.warning(f"Copy of '{item_id}' requested before initialize().")
            return CopyResult(item_id, False, "Viewer is not initialized.")

        error = None
        try:
            ok = bool(self._copy_func(text))
            if not ok:
                error = "Clipboard is unavailable."
        except Exception as e:
            logger.error(f"Clipboard copy for '{item_id}' raised: {e}", exc_info=True)
            ok = False
            error = str(e) or type(e).__name__

        if ok:
            logger.info(f"Copied snippet '{item_id}' to the clipboard.")
            self._copy_states[item_id] = True
            self._restart_copy_timer(item_id)
            self.copy_state_changed.emit(item_id, True)
        else:
            logger.warning(f"Copy failed for snippet '{item_id}': {error}")

        self._notify_copy_result(item_id, ok)
        return CopyResult(item_id, ok, error)

    def _restart_copy_timer(self, item_id: str):
        timer = self._copy_timers.get(item_id)
        if timer is None:
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(lambda item_id=item_id: self._reset_copy_state(item_id))
            self._copy_timers[item_id] = timer
        timer.start(self.copy_reset_ms)

    def _reset_copy_state(self, item_id: str):
        timer = self._copy_timers.pop(item_id, None)
        if timer is not None:
            timer.deleteLater()
        if self._copy_states.pop(item_id, False):
            self.copy_state_changed.emit(item_id, False)

    def _notify_copy_result(self, item_id: str, ok: bool):
        # A zero-interval timer delivers the result after the caller has returned.
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(0)
        timer.timeout.connect(lambda: self._emit_copy_result(timer, item_id, ok))
        self._pending_notifications.append(timer)
        timer.start()

    def _emit_copy_result(self, timer: QTimer, item_id: str, ok: bool):
        if timer in self._pending_notifications:
            self._pending_notifications.remove(timer)
        timer.deleteLater()
        self.copy_result.emit(item_id, ok)

    # --- Query Surface ---

    def get_filtered_items(self) -> List[Snippet]:
        return list(self._filtered)

    def get_active_item_id(self) -> Optional[str]:
        return self._active_id

    def get_copy_state(self, item_id: str) -> bool:
        return self._copy_states.get(item_id, False)

    def get_current_query(self) -> str:
        return self._query

    def get_item(self, item_id: str) -> Optional[Snippet]:
        return self._items_by_id.get(item_id)

    def get_all_items(self) -> List[Snippet]:
        return list(self._items)
