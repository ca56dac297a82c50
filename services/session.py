"""
A diff session: the loaded files, their staged edits and the watcher.

This is the layer a front-end talks to. Every editing operation ends up as an
upsert/remove on the PendingChangeStore; save patches the files and writes
them back.
"""
import re
import threading

from config import DEFAULT_SETTING, load_setting
from core.differ import compute_diff
from core.env_format import parse_content
from core.models import FileChangeEntry
from core.patcher import group_changes_by_file, patch_file_content
from core.pending import PendingChangeStore
from core.reconciler import reconcile_file_change
from services.env_io import read_env_files, read_text, write_text
from services.file_watcher import FileWatcher
from utils.helpers import summarize_changes
from utils.logging_setup import get_logger, setup_logging
from utils.paths import find_file_index

logger = get_logger("session")

DELETE_MARKERS = ("<null>", "<unset>")
EMPTY_MARKERS = ('""', "''")

_INVALID_KEY = re.compile(r"[\s=#\"']")


def parse_input(text):
    """Map what the user typed to a value: deletion markers give None."""
    trimmed = text.strip()
    if trimmed in DELETE_MARKERS:
        return None
    if trimmed in EMPTY_MARKERS:
        return ""
    return text


class DiffSession:
    def __init__(self, paths=None, setting=None):
        self.setting = dict(DEFAULT_SETTING)
        if setting:
            self.setting.update(setting)
        self.files = []
        self.store = PendingChangeStore()
        self.watcher = None
        self.clipboard = None  # (key, value) of the last copied cell
        self._on_change = None
        self._reconcile_locks = {}
        self._locks_guard = threading.Lock()
        if paths:
            self.load(paths)

    @classmethod
    def from_stored_setting(cls, paths=None, settings=None):
        """Build a session from the persisted setting, configuring logging on the way."""
        setting = load_setting(settings)
        setup_logging(debug=bool(setting["debug"]), log_file=setting["log_file"] or None)
        return cls(paths, setting)

    # Files

    def load(self, paths):
        self.set_files(read_env_files(paths))

    def set_files(self, files):
        """Replace the file set. Staged edits belong to the old set and are dropped."""
        watching = self.watcher is not None
        if watching:
            self.stop_watching()
        self.files = list(files)
        self.store.clear_changes()
        logger.info(f"Loaded {len(self.files)} file(s): {', '.join(self.filenames)}")
        if watching:
            self.watch(self._on_change)

    @property
    def file_count(self):
        return len(self.files)

    @property
    def filenames(self):
        return [f.filename for f in self.files]

    def rows(self):
        return compute_diff(self.files)

    def original_value(self, key, file_index):
        self._check_index(file_index)
        return self.files[file_index].get(key)

    def effective_value(self, key, file_index):
        """The value the cell will have after saving."""
        change = self.store.find_change(key, file_index)
        if change is not None:
            return change.new_value
        return self.original_value(key, file_index)

    # Editing

    def edit_value(self, key, file_index, text):
        """Stage what the user typed for a cell. Returns the live change or None."""
        return self._stage(key, file_index, parse_input(text))

    def add_variable(self, key, file_index, value):
        key = key.strip()
        if not key or _INVALID_KEY.search(key):
            raise ValueError(f"Invalid variable name: {key!r}")
        return self._stage(key, file_index, value)

    def delete_variable(self, key, file_index):
        """Mark a cell for deletion. Returns False when it is already missing."""
        if self.effective_value(key, file_index) is None:
            return False
        if self.original_value(key, file_index) is None:
            # Only exists as a pending addition
            self.store.remove_change(key, file_index)
            return True
        self._stage(key, file_index, None)
        return True

    def delete_all(self, key):
        """Mark key for deletion everywhere. Returns how many files are affected."""
        self.store.remove_changes_for_key(key)
        count = 0
        for i in range(self.file_count):
            if self.original_value(key, i) is not None:
                self._stage(key, i, None)
                count += 1
        return count

    def sync_to_right(self, key):
        return self._sync(key, 0, 1)

    def sync_to_left(self, key):
        return self._sync(key, 1, 0)

    def _sync(self, key, source, target):
        if self.file_count != 2:
            return None
        value = self.effective_value(key, source)
        if value is None or value == self.effective_value(key, target):
            return None
        return self._stage(key, target, value)

    # Clipboard

    def copy_value(self, key, file_index):
        """Copy the loaded value of a cell. Returns False when the cell is empty."""
        value = self.original_value(key, file_index)
        if value is None:
            logger.info(f"Nothing to copy for {key}")
            return False
        self.clipboard = (key, value)
        logger.debug(f"Copied {key}")
        return True

    def paste(self, key, file_index):
        """Stage the clipboard value into a cell. Returns the change or None."""
        if self.clipboard is None:
            logger.info("Clipboard empty")
            return None
        value = self.clipboard[1]
        if value == self.original_value(key, file_index):
            logger.info(f"Same value, nothing pasted to {key}")
            return None
        return self._stage(key, file_index, value)

    def paste_all(self, key):
        """Stage the clipboard value in every file that differs. Returns the count."""
        if self.clipboard is None:
            logger.info("Clipboard empty")
            return 0
        value = self.clipboard[1]
        targets = [i for i in range(self.file_count) if self.original_value(key, i) != value]
        if not targets:
            logger.info(f"All files already have this value for {key}")
            return 0
        for i in targets:
            self._stage(key, i, value)
        logger.info(f"Pasted {key} to {len(targets)} file(s)")
        return len(targets)

    def revert(self, key, file_index):
        return self.store.remove_change(key, file_index)

    def undo(self):
        return self.store.undo_last()

    def undo_all(self):
        if not self.store:
            return False
        self.store.clear_changes()
        return True

    def pending_changes(self):
        return self.store.changes()

    def is_conflict(self, key, file_index):
        return self.store.is_conflict(key, file_index)

    def _stage(self, key, file_index, new_value):
        """
        Stage new_value for a cell, compared against the loaded value.

        A re-edit is compared against the value the change was first made on.
        Typing that value again drops the change even when the cell is flagged
        as a conflict, so the value now on disk is kept.
        """
        original = self.original_value(key, file_index)
        return self.store.upsert_change(key, file_index, original, new_value)

    def _check_index(self, file_index):
        if not 0 <= file_index < self.file_count:
            raise IndexError(f"No loaded file at index {file_index}")

    # Saving

    def save_preview(self, max_items=None):
        if max_items is None:
            max_items = self.setting["save_preview_max_items"]
        return summarize_changes(self.store.changes(), self.filenames, max_items)

    def plan_save(self, reload_from_disk=True):
        """
        Patch every file that has pending changes.

        The file is re-read first so changes on disk that were not reconciled
        yet are kept.
        """
        entries = []
        for i, changes in sorted(group_changes_by_file(self.store.changes()).items()):
            parsed = self.files[i]
            if reload_from_disk:
                parsed = parse_content(parsed.path, read_text(parsed.path))
            new_content = patch_file_content(parsed, changes, i)
            entries.append(FileChangeEntry(i, parsed.path, parsed.text, new_content, changes))
        return entries

    def save(self):
        """
        Write all pending changes. Returns the written entries.

        On a write error the files already written keep their new state and the
        remaining changes stay pending.
        """
        entries = self.plan_save()
        for entry in entries:
            if entry.has_effect:
                write_text(entry.file_path, entry.new_content)
                if self.watcher is not None:
                    self.watcher.record_content(entry.file_path, entry.new_content)
            self.files[entry.file_index] = parse_content(entry.file_path, entry.new_content)
            for change in entry.changes:
                self.store.remove_change(change.key, change.file_index)
            logger.info(f"Saved {self.files[entry.file_index].filename}")
        return entries

    # External changes

    def handle_file_change(self, event):
        """Reconcile a watcher event. Returns None when the path is not loaded."""
        file_index = find_file_index(self.files, event.path)
        if file_index == -1:
            logger.debug(f"Ignoring change of unknown file {event.path}")
            return None

        with self._reconcile_lock(self.files[file_index].path):
            result = reconcile_file_change(self.files, self.store, file_index, event.content)
        logger.info(f"↻ {result.parsed_file.filename} updated")
        return result

    def _reconcile_lock(self, path):
        with self._locks_guard:
            return self._reconcile_locks.setdefault(path, threading.Lock())

    def watch(self, on_change=None):
        """Start watching the loaded files; on_change receives each ReconcileResult."""
        if self.watcher is not None:
            return self.watcher
        self._on_change = on_change

        def _handle(event):
            result = self.handle_file_change(event)
            if result is not None and on_change is not None:
                on_change(result)

        self.watcher = FileWatcher([f.path for f in self.files], _handle,
                                   self.setting["debounce_ms"])
        self.watcher.start()
        return self.watcher

    def stop_watching(self):
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None
