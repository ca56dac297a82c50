"""Cross-file comparison of parsed files"""
from core.models import DiffRow, STATUS_ORDER


def collect_keys(files):
    """Union of every file's keys, in first-seen order."""
    keys = {}
    for parsed in files:
        for key in parsed.variables:
            keys.setdefault(key, None)
    return list(keys)


def _row_sort_key(row):
    # Case-insensitive key order; the exact key breaks ties so output is deterministic
    return (STATUS_ORDER[row.status], row.key.lower(), row.key)


def compute_diff(files):
    """Build one DiffRow per key, values aligned with the order of files."""
    rows = []
    for key in collect_keys(files):
        values = [parsed.variables.get(key) for parsed in files]
        rows.append(DiffRow(key, values))
    rows.sort(key=_row_sort_key)
    return rows
