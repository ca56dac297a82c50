"""Merge an on-disk change of a loaded file into the in-memory model"""
from core.env_format import parse_content
from utils.logging_setup import get_logger

logger = get_logger("reconciler")


class ReconcileResult:
    """Outcome of one reconciliation pass"""
    def __init__(self, file_index, parsed_file, stale):
        self.file_index = file_index
        self.parsed_file = parsed_file
        self.stale = stale

    @property
    def has_conflicts(self):
        return bool(self.stale)

    def __repr__(self):
        return f"ReconcileResult({self.file_index}, stale={sorted(self.stale)!r})"


def find_stale_changes(parsed_file, changes):
    """Cells whose disk value no longer matches the value the edit started from."""
    return {
        change.cell for change in changes
        if parsed_file.variables.get(change.key) != change.old_value
    }


def reconcile_file_change(files, store, file_index, content):
    """
    Re-parse content as files[file_index] and flag stale pending changes.

    files is updated in place. Pending changes stay in the store; only the
    conflict flags of this file are recomputed.
    """
    current = files[file_index]
    fresh = parse_content(current.path, content)

    stale = find_stale_changes(fresh, store.changes_for_file(file_index))
    store.set_conflicts_for_file(file_index, stale)
    files[file_index] = fresh

    if stale:
        logger.warning(f"{current.filename}: {len(stale)} pending change(s) now conflict with disk")
    else:
        logger.debug(f"{current.filename} refreshed from disk")
    return ReconcileResult(file_index, fresh, stale)
