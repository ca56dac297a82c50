"""
Apply pending changes to a parsed file.

Only lines whose key has a change are touched; every other line is emitted
from its raw text, so unaffected bytes never change.
"""
from core.env_format import build_assignment_line, substitute_value


def group_changes_by_file(changes):
    """Group changes into {file_index: [change, ...]} keeping their order."""
    by_file = {}
    for change in changes:
        by_file.setdefault(change.file_index, []).append(change)
    return by_file


def patch_file_content(parsed_file, changes, file_index=None):
    """
    Return parsed_file's text with changes applied.

    When file_index is given, changes targeting other files are ignored.
    Deleted keys lose every line that assigns them, modified keys have the value
    replaced in place on every such line, and keys the file never had are
    appended at the end.
    """
    by_key = {}
    for change in changes:
        if file_index is not None and change.file_index != file_index:
            continue
        by_key[change.key] = change

    if not by_key:
        return parsed_file.text

    out = []
    emitted = set()
    for line in parsed_file.lines:
        change = by_key.get(line.key) if line.is_assignment else None
        if change is None:
            out.append([line.raw, line.eol])
            continue

        emitted.add(line.key)
        if change.new_value is None:
            continue
        out.append([substitute_value(line, change.new_value), line.eol])

    additions = [c for c in by_key.values()
                 if c.key not in emitted and c.new_value is not None]
    if additions:
        if out and not out[-1][1]:
            out[-1][1] = parsed_file.eol
        for change in additions:
            out.append([build_assignment_line(change.key, change.new_value), parsed_file.eol])

    return "".join(raw + eol for raw, eol in out)
