# code_viewer/gui/snippet_list_model.py

from typing import List, Optional

from PySide6.QtCore import QAbstractListModel, Qt, QModelIndex

from code_viewer.core.formatting import format_title
from code_viewer.core.snippet_loader import Snippet


# --- The Snippet List Model: The "Brain" of the Sidebar ---
class SnippetListModel(QAbstractListModel):
    """
    A list model exposing the currently filtered snippets to the sidebar view.

    The model holds no filtering logic of its own. It mirrors whatever list
    the ViewerController publishes through `filtered_items_changed`.
    """
    # Lets views and tests fetch the snippet id behind a row.
    SnippetIdRole = Qt.UserRole + 1

    def __init__(self, parent=None):
        super().__init__(parent)
        self._snippets: List[Snippet] = []

    # --- Required Methods for QAbstractListModel ---

    def rowCount(self, parent=QModelIndex()):
        """Returns the number of visible snippets."""
        if parent.isValid():
            return 0
        return len(self._snippets)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid() or not (0 <= index.row() < len(self._snippets)):
            return None

        snippet = self._snippets[index.row()]

        if role == Qt.DisplayRole:
            return format_title(snippet.title) or snippet.id
        if role == Qt.ToolTipRole:
            # The description is the most useful extra context on hover.
            return snippet.description or snippet.title
        if role == self.SnippetIdRole:
            return snippet.id
        return None

    # --- Custom Public Methods ---

    def set_snippets(self, snippets: List[Snippet]):
        """Replaces the whole list. Called after every filter recomputation."""
        self.beginResetModel()
        self._snippets = list(snippets)
        self.endResetModel()

    def snippet_at(self, row: int) -> Optional[Snippet]:
        if 0 <= row < len(self._snippets):
            return self._snippets[row]
        return None

    def row_of(self, snippet_id: str) -> int:
        """Returns the row showing the given snippet, or -1 if it is not listed."""
        for row, snippet in enumerate(self._snippets):
            if snippet.id == snippet_id:
                return row
        return -1

    def clear(self):
        self.set_snippets([])
