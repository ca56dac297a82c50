"""
Staging area for unsaved edits.

Changes are keyed by (key, file_index). The history lists cells in the order
they were first edited, so undo walks back through cells rather than through
individual keystrokes. Every operation runs under one lock because the
mapping and the history have to change together.
"""
import threading

from core.models import PendingChange
from utils.logging_setup import get_logger

logger = get_logger("pending")


class PendingChangeStore:
    def __init__(self):
        self._changes = {}
        self._history = []
        self._conflicts = set()
        self._lock = threading.RLock()

    def upsert_change(self, key, file_index, old_value, new_value):
        """
        Stage new_value for (key, file_index).

        A re-edit keeps the first recorded old_value and its history position.
        An edit that lands back on the old value removes the entry. Returns the
        live PendingChange, or None when nothing is pending afterwards.
        """
        cell = (key, file_index)
        with self._lock:
            existing = self._changes.get(cell)
            if existing is not None:
                old_value = existing.old_value

            if new_value == old_value:
                if existing is not None:
                    self._drop(cell)
                    logger.debug(f"Collapsed no-op change {cell}")
                return None

            change = PendingChange(key, file_index, old_value, new_value)
            self._changes[cell] = change
            if existing is None:
                self._history.append(cell)
            return change

    def find_change(self, key, file_index):
        with self._lock:
            return self._changes.get((key, file_index))

    def remove_change(self, key, file_index):
        """Revert one cell. Returns False when nothing was pending for it."""
        with self._lock:
            cell = (key, file_index)
            if cell not in self._changes:
                return False
            self._drop(cell)
            return True

    def remove_changes_for_key(self, key, exclude_file_index=None):
        """Drop the changes of key in every file except exclude_file_index."""
        with self._lock:
            cells = [cell for cell in self._history
                     if cell[0] == key and cell[1] != exclude_file_index]
            for cell in cells:
                self._drop(cell)
            return len(cells)

    def undo_last(self):
        """Remove the most recently first-edited change."""
        with self._lock:
            if not self._history:
                return False
            self._drop(self._history[-1])
            return True

    def clear_changes(self):
        with self._lock:
            self._changes.clear()
            self._history.clear()
            self._conflicts.clear()

    def changes(self):
        """Pending changes in history order."""
        with self._lock:
            return [self._changes[cell] for cell in self._history]

    def changes_for_file(self, file_index):
        with self._lock:
            return [self._changes[cell] for cell in self._history if cell[1] == file_index]

    def set_conflicts_for_file(self, file_index, cells):
        """Replace the conflict flags of one file with cells (only live cells are kept)."""
        with self._lock:
            self._conflicts = {c for c in self._conflicts if c[1] != file_index}
            self._conflicts.update(c for c in cells if c in self._changes and c[1] == file_index)

    def is_conflict(self, key, file_index):
        with self._lock:
            return (key, file_index) in self._conflicts

    def conflicts(self):
        with self._lock:
            return set(self._conflicts)

    def _drop(self, cell):
        del self._changes[cell]
        self._history.remove(cell)
        self._conflicts.discard(cell)

    def __len__(self):
        with self._lock:
            return len(self._changes)

    def __contains__(self, cell):
        with self._lock:
            return cell in self._changes

    def __bool__(self):
        return len(self) > 0
