# code_viewer/gui/widgets.py

from PySide6.QtCore import Slot, Signal
from PySide6.QtGui import QFontDatabase
from PySide6.QtWidgets import (
    QWidget, QHBoxLayout, QVBoxLayout, QLabel, QLineEdit, QPushButton, QFrame,
    QPlainTextEdit, QSizePolicy
)

from code_viewer.core.formatting import format_title, detect_language
from code_viewer.core.snippet_loader import Snippet

from .highlighter import CodeHighlighter
from .resources import get_icon, ICON_SIZE

COPY_LABEL = " Copy"
COPIED_LABEL = " Copied!"


# --- Custom Widget 1: The Search Bar ---
class SearchBar(QWidget):
    """
    A search field with a clear button.

    Every keystroke is forwarded through `query_edited`. The clear button
    empties the field and emits `cleared` instead, so the controller can
    skip its debounce for an explicit clear.
    """
    query_edited = Signal(str)
    cleared = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.search_edit = QLineEdit()
        self.search_edit.setObjectName("SearchInput")
        self.search_edit.setPlaceholderText("Search snippets...")
        self.search_edit.addAction(get_icon("search"), QLineEdit.ActionPosition.LeadingPosition)

        self.clear_button = QPushButton()
        self.clear_button.setIcon(get_icon("clear"))
        self.clear_button.setIconSize(ICON_SIZE)
        self.clear_button.setToolTip("Clear search")
        self.clear_button.setEnabled(False)

        layout.addWidget(self.search_edit)
        layout.addWidget(self.clear_button)

        # textEdited (not textChanged) fires only for user input, so clearing
        # the field programmatically does not echo back as a new query.
        self.search_edit.textEdited.connect(self._on_text_edited)
        self.clear_button.clicked.connect(self.clear)

    @Slot(str)
    def _on_text_edited(self, text: str):
        self.clear_button.setEnabled(bool(text))
        self.query_edited.emit(text)

    @Slot()
    def clear(self):
        """Empties the field and announces the explicit clear."""
        self.search_edit.clear()
        self.clear_button.setEnabled(False)
        self.cleared.emit()

    def text(self) -> str:
        return self.search_edit.text()


# --- Custom Widget 2: The Snippet Card ---
class SnippetCard(QFrame):
    """
    Displays one snippet: its title, description, highlighted code and a
    copy button. The card only reports copy requests; the controller
    decides what happens and tells the card when to show "Copied!".
    """
    copy_requested = Signal(str, str)

    def __init__(self, snippet: Snippet, parent=None):
        super().__init__(parent)
        self.snippet = snippet
        self.setObjectName("SnippetCard")
        self.setProperty("active", False)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 12)

        header_layout = QHBoxLayout()
        self.title_label = QLabel(format_title(snippet.title) or snippet.id)
        self.title_label.setObjectName("SnippetTitle")
        self.copy_button = QPushButton(COPY_LABEL)
        self.copy_button.setIcon(get_icon("copy"))
        self.copy_button.setIconSize(ICON_SIZE)
        header_layout.addWidget(self.title_label)
        header_layout.addStretch()
        header_layout.addWidget(self.copy_button)

        self.description_label = QLabel(snippet.description)
        self.description_label.setObjectName("SnippetDescription")
        self.description_label.setWordWrap(True)
        self.description_label.setVisible(bool(snippet.description))

        self.code_view = QPlainTextEdit()
        self.code_view.setObjectName("SnippetCode")
        self.code_view.setReadOnly(True)
        self.code_view.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.code_view.setFont(QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        self.code_view.setPlainText(snippet.code)
        self.highlighter = CodeHighlighter(self.code_view.document(), detect_language(snippet.code))

        # Show the whole snippet instead of a tiny scrolling box inside the page.
        line_count = max(1, snippet.code.count("\n") + 1)
        line_height = self.code_view.fontMetrics().lineSpacing()
        self.code_view.setFixedHeight(min(line_count, 40) * line_height + 16)
        self.code_view.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)

        layout.addLayout(header_layout)
        layout.addWidget(self.description_label)
        layout.addWidget(self.code_view)

        self.copy_button.clicked.connect(self._on_copy_clicked)

    @Slot()
    def _on_copy_clicked(self):
        self.copy_requested.emit(self.snippet.id, self.snippet.code)

    def set_copied(self, copied: bool):
        """Switches the copy button between its normal and confirmation look."""
        self.copy_button.setText(COPIED_LABEL if copied else COPY_LABEL)
        self.copy_button.setIcon(get_icon("copied" if copied else "copy"))

    def set_active(self, active: bool):
        """Marks the card as the active one; the stylesheet draws the highlight."""
        self.setProperty("active", active)
        # Qt does not restyle on property changes by itself.
        self.style().unpolish(self)
        self.style().polish(self)


# --- Custom Widget 3: The Status Widget ---
class StatusWidget(QWidget):
    """A one-line status area showing how many snippets match the search."""

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 5, 10, 5)

        self.status_label = QLabel("Status:")
        self.status_label.setObjectName("StatusLabel")
        self.status_message = QLabel("No snippets loaded.")
        self.status_message.setWordWrap(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Minimum)

        layout.addWidget(self.status_label)
        layout.addWidget(self.status_message)
        layout.addStretch()

    def set_status(self, message: str, is_error: bool = False):
        """Updates the status message and turns it red for errors."""
        self.status_message.setText(message)
        if is_error:
            self.status_message.setStyleSheet("color: #BF616A;")  # Nord Red
        else:
            self.status_message.setStyleSheet("")

    def set_counts(self, shown: int, total: int, query: str = ""):
        if query.strip():
            self.set_status(f"Showing {shown} of {total} snippets matching '{query.strip()}'.")
        else:
            self.set_status(f"Showing all {total} snippets.")
