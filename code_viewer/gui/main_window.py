# code_viewer/gui/main_window.py

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import Slot, Qt, QModelIndex, QItemSelectionModel
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QMessageBox, QWidget, QHBoxLayout, QVBoxLayout,
    QListView, QScrollArea, QPushButton, QAbstractItemView
)
from PySide6.QtGui import QAction, QActionGroup

from code_viewer.core.config_manager import ViewerSettings, load_settings
from code_viewer.core.snippet_loader import Snippet, SnippetLoadError, load_snippets
from code_viewer.utils.logger import setup_logging

from .viewer_controller import ViewerController
from .snippet_list_model import SnippetListModel
from .widgets import SearchBar, SnippetCard, StatusWidget
from .resources import (
    load_stylesheet, get_icon, validate_assets, get_current_theme, set_current_theme,
    AVAILABLE_THEMES, SETTINGS_FILE_PATH, DEFAULT_DATA_FILE_PATH, ICON_SIZE
)

logger = logging.getLogger(__name__)

# At or below this width the sidebar gets out of the way of the code.
NARROW_WIDTH = 768
# How far the content must be scrolled before "back to top" is offered.
BACK_TO_TOP_THRESHOLD = 300


class ViewerWindow(QMainWindow):
    """
    The main application window. It assembles the sidebar, the search bar
    and the snippet cards, and wires them to the ViewerController. The window
    renders state; every decision about that state belongs to the controller.
    """

    def __init__(self, snippets: Optional[List[Snippet]] = None,
                 settings: Optional[ViewerSettings] = None,
                 controller: Optional[ViewerController] = None):
        super().__init__()
        self.settings = settings or ViewerSettings()
        self.setWindowTitle(" Code Snippet Viewer")
        self.setWindowIcon(get_icon("app_icon"))
        self.setGeometry(100, 100, 1100, 750)

        self.controller = controller or ViewerController(
            debounce_ms=self.settings.debounce_ms,
            copy_reset_ms=self.settings.copy_reset_ms,
            parent=self,
        )
        self.cards: Dict[str, SnippetCard] = {}

        self._create_menus()
        self._init_ui()
        self._connect_signals()

        # Initializing last means the first filtered_items_changed already
        # finds the sidebar model and the cards in place.
        self._load_snippets(snippets or [])

    # --- UI Assembly ---

    def _create_menus(self):
        """Creates the menu bar: a View menu for the sidebar and a theme switcher."""
        menu_bar = self.menuBar()

        view_menu = menu_bar.addMenu("&View")
        self.toggle_sidebar_action = QAction(get_icon("menu"), "Toggle Sidebar", self)
        self.toggle_sidebar_action.setShortcut("Ctrl+B")
        self.toggle_sidebar_action.triggered.connect(self.toggle_sidebar)
        view_menu.addAction(self.toggle_sidebar_action)

        settings_menu = menu_bar.addMenu("&Settings")
        settings_menu.setIcon(get_icon("settings"))
        theme_menu = settings_menu.addMenu("Theme")
        theme_group = QActionGroup(self)
        current_theme = get_current_theme()
        for theme_file, label in AVAILABLE_THEMES.items():
            action = QAction(label, self, checkable=True)
            action.triggered.connect(lambda checked=False, t=theme_file: self._handle_theme_change(t))
            theme_menu.addAction(action)
            theme_group.addAction(action)
            action.setChecked(theme_file == current_theme)

        toolbar = self.addToolBar("Main")
        toolbar.setMovable(False)
        toolbar.addAction(self.toggle_sidebar_action)

    def _init_ui(self):
        central = QWidget()
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(10, 10, 10, 10)
        main_layout.setSpacing(10)

        # --- Sidebar: search + filtered snippet list ---
        self.sidebar = QWidget()
        self.sidebar.setMinimumWidth(220)
        self.sidebar.setMaximumWidth(320)
        sidebar_layout = QVBoxLayout(self.sidebar)
        sidebar_layout.setContentsMargins(0, 0, 0, 0)

        self.search_bar = SearchBar()
        self.list_model = SnippetListModel(self)
        self.list_view = QListView()
        self.list_view.setObjectName("SnippetSidebar")
        self.list_view.setModel(self.list_model)
        self.list_view.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list_view.setEditTriggers(QAbstractItemView.NoEditTriggers)

        sidebar_layout.addWidget(self.search_bar)
        sidebar_layout.addWidget(self.list_view)

        # --- Content: one card per snippet ---
        content = QWidget()
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(0, 0, 0, 0)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.cards_container = QWidget()
        self.cards_layout = QVBoxLayout(self.cards_container)
        self.cards_layout.setSpacing(14)
        self.cards_layout.addStretch()
        self.scroll_area.setWidget(self.cards_container)

        bottom_layout = QHBoxLayout()
        self.status_widget = StatusWidget()
        self.back_to_top_button = QPushButton(" Top")
        self.back_to_top_button.setIcon(get_icon("up-arrow"))
        self.back_to_top_button.setIconSize(ICON_SIZE)
        self.back_to_top_button.setVisible(False)
        bottom_layout.addWidget(self.status_widget)
        bottom_layout.addWidget(self.back_to_top_button)

        content_layout.addWidget(self.scroll_area)
        content_layout.addLayout(bottom_layout)

        main_layout.addWidget(self.sidebar)
        main_layout.addWidget(content, 1)
        self.setCentralWidget(central)

    def _connect_signals(self):
        """Connects view events to the controller, and controller signals back to the view."""
        self.search_bar.query_edited.connect(self.controller.set_query)
        self.search_bar.cleared.connect(self.controller.clear_query)
        self.list_view.clicked.connect(self._on_sidebar_clicked)
        self.back_to_top_button.clicked.connect(self.back_to_top)
        self.scroll_area.verticalScrollBar().valueChanged.connect(self._on_content_scrolled)

        self.controller.filtered_items_changed.connect(self._on_filtered_items_changed)
        self.controller.active_item_changed.connect(self._on_active_item_changed)
        self.controller.scroll_to_item.connect(self._scroll_to_card)
        self.controller.copy_state_changed.connect(self._on_copy_state_changed)
        self.controller.copy_result.connect(self._on_copy_result)

    def _load_snippets(self, snippets: List[Snippet]):
        """Creates the cards, then hands the snippets to the controller."""
        for snippet in snippets:
            if snippet.id in self.cards:
                continue
            card = SnippetCard(snippet)
            card.copy_requested.connect(self._on_copy_requested)
            # Insert above the trailing stretch.
            self.cards_layout.insertWidget(self.cards_layout.count() - 1, card)
            self.cards[snippet.id] = card
        self.controller.initialize(snippets)

    # --- Slots: View -> Controller ---

    @Slot(QModelIndex)
    def _on_sidebar_clicked(self, index: QModelIndex):
        snippet_id = index.data(SnippetListModel.SnippetIdRole)
        if snippet_id is not None:
            self.controller.select_item(snippet_id)

    @Slot(str, str)
    def _on_copy_requested(self, snippet_id: str, code: str):
        self.controller.request_copy(snippet_id, code)

    # --- Slots: Controller -> View ---

    @Slot(object)
    def _on_filtered_items_changed(self, snippets: List[Snippet]):
        self.list_model.set_snippets(snippets)
        visible_ids = {snippet.id for snippet in snippets}
        for snippet_id, card in self.cards.items():
            card.setVisible(snippet_id in visible_ids)
        self.status_widget.set_counts(len(snippets), len(self.cards), self.controller.get_current_query())
        # A model reset drops the view's selection; restore the one that survived.
        self._sync_sidebar_selection(self.controller.get_active_item_id())

    @Slot(object)
    def _on_active_item_changed(self, snippet_id: Optional[str]):
        for card_id, card in self.cards.items():
            card.set_active(card_id == snippet_id)
        self._sync_sidebar_selection(snippet_id)

    @Slot(str)
    def _scroll_to_card(self, snippet_id: str):
        card = self.cards.get(snippet_id)
        if card is None:
            return
        self.scroll_area.verticalScrollBar().setValue(card.y())
        # On narrow windows the sidebar covers the code, so get it out of the way.
        if self.width() <= NARROW_WIDTH:
            self.set_sidebar_visible(False)

    @Slot(str, bool)
    def _on_copy_state_changed(self, snippet_id: str, copied: bool):
        card = self.cards.get(snippet_id)
        if card is not None:
            card.set_copied(copied)

    @Slot(str, bool)
    def _on_copy_result(self, snippet_id: str, ok: bool):
        if ok:
            return
        self.status_widget.set_status(f"Could not copy '{snippet_id}' to the clipboard.", is_error=True)
        QMessageBox.warning(self, "Copy Failed", "Copy failed, please copy the code manually.")

    def _sync_sidebar_selection(self, snippet_id: Optional[str]):
        selection = self.list_view.selectionModel()
        row = self.list_model.row_of(snippet_id) if snippet_id is not None else -1
        if row < 0:
            selection.clearSelection()
            return
        selection.select(self.list_model.index(row), QItemSelectionModel.ClearAndSelect)

    # --- Sidebar & Scrolling ---

    def is_sidebar_visible(self) -> bool:
        return not self.sidebar.isHidden()

    def set_sidebar_visible(self, visible: bool):
        self.sidebar.setVisible(visible)

    @Slot()
    def toggle_sidebar(self):
        self.set_sidebar_visible(not self.is_sidebar_visible())

    @Slot(int)
    def _on_content_scrolled(self, value: int):
        self.back_to_top_button.setVisible(value > BACK_TO_TOP_THRESHOLD)

    @Slot()
    def back_to_top(self):
        self.scroll_area.verticalScrollBar().setValue(0)

    def resizeEvent(self, event):
        """Shows the sidebar on wide windows and hides it on narrow ones."""
        super().resizeEvent(event)
        self.set_sidebar_visible(event.size().width() > NARROW_WIDTH)

    # --- Theme & Messages ---

    @Slot(str)
    def _handle_theme_change(self, theme_file: str):
        """Applies the selected theme and saves the choice."""
        if set_current_theme(theme_file):
            QApplication.instance().setStyleSheet(load_stylesheet(theme_file))
            self.status_widget.set_status(f"Theme changed to {AVAILABLE_THEMES[theme_file]}.")
        else:
            self.show_error_message("Could not save theme setting.")

    def show_error_message(self, message: str):
        """A simple helper for displaying errors."""
        QMessageBox.critical(self, "Error", message)

    def closeEvent(self, event):
        """Cancels every pending controller timer before the window goes away."""
        self.controller.teardown()
        event.accept()


def resolve_data_file(data_file: Optional[Path], settings: ViewerSettings) -> Path:
    """Picks the snippet data file: explicit argument, then settings, then the bundled sample."""
    if data_file:
        return Path(data_file)
    if settings.data_file:
        return Path(settings.data_file)
    return DEFAULT_DATA_FILE_PATH


def open_viewer_window(data_file: Optional[Path], settings: ViewerSettings) -> ViewerWindow:
    """
    Loads the snippets and shows the viewer. A broken data file still opens
    an (empty) viewer, with the error in the status bar and a message box.
    """
    load_error = None
    try:
        snippets = load_snippets(resolve_data_file(data_file, settings))
    except SnippetLoadError as e:
        logger.error(f"Could not load snippets: {e}")
        snippets, load_error = [], str(e)

    window = ViewerWindow(snippets, settings)
    window.show()
    if load_error:
        window.status_widget.set_status(load_error, is_error=True)
        window.show_error_message(f"Failed to load snippets:\n{load_error}")
    return window


def run_gui(data_file: Optional[Path] = None):
    """
    The entry point for the GUI application.
    """
    # Step 1: Read the settings, then configure logging at the chosen console level.
    settings = load_settings(SETTINGS_FILE_PATH)
    setup_logging(settings.log_level)

    # Step 2: Validate that all required assets (icons, styles) are present.
    validate_assets()

    # Step 3: Create the core Qt application instance.
    app = QApplication.instance() or QApplication(sys.argv)

    # Step 4: Apply the chosen theme.
    app.setStyleSheet(load_stylesheet(settings.theme))

    # Steps 5-6: Load the snippets, then create and show the main window.
    window = open_viewer_window(data_file, settings)

    # Step 7: Start the application's main event loop and ensure a clean exit.
    sys.exit(app.exec())
