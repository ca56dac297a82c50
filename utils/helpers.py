"""Helper utility functions"""
from config import SAVE_PREVIEW_MAX_ITEMS, TRUNCATE_PREVIEW


def truncate(text, max_len):
    """Shorten text to max_len characters, ending with an ellipsis when cut."""
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    return text[:max_len - 1] + "…"


def format_value(value, max_len=TRUNCATE_PREVIEW):
    if value is None:
        return "<unset>"
    return truncate(value, max_len)


def describe_change(change, filename):
    """One-line summary of a pending change"""
    if change.is_deletion:
        return f"- {change.key} in {filename}"
    if change.is_new:
        return f"+ {change.key}={format_value(change.new_value)} in {filename}"
    return (f"~ {change.key}: {format_value(change.old_value)} → "
            f"{format_value(change.new_value)} in {filename}")


def summarize_changes(changes, filenames, max_items=SAVE_PREVIEW_MAX_ITEMS):
    """
    Summary lines for a save preview.

    At most max_items changes are listed; the rest are folded into a trailing
    "... and N more" line.
    """
    max_items = max(0, max_items)
    lines = []
    for change in changes[:max_items]:
        lines.append(describe_change(change, filenames[change.file_index]))
    hidden = len(changes) - max_items
    if hidden > 0:
        lines.append(f"... and {hidden} more")
    return lines
