"""Data models for the diff/patch engine"""
import os
import difflib

LINE_BLANK = "blank"
LINE_COMMENT = "comment"
LINE_ASSIGNMENT = "assignment"

STATUS_MISSING = "missing"
STATUS_DIFFERENT = "different"
STATUS_IDENTICAL = "identical"

# Diff rows sort missing first, then different, then identical
STATUS_ORDER = {
    STATUS_MISSING: 0,
    STATUS_DIFFERENT: 1,
    STATUS_IDENTICAL: 2,
}


class Line:
    """
    One physical line of a KEY=VALUE file.

    raw is the line text without its terminator and eol is the terminator
    itself ("" for a final unterminated line), so raw + eol is always the
    exact original text. Assignment lines also record where the value sits
    inside raw and which quote character surrounds it.
    """
    __slots__ = ("kind", "raw", "eol", "key", "value", "quote", "value_start", "value_end")

    def __init__(self, kind, raw, eol="", key=None, value=None, quote="",
                 value_start=None, value_end=None):
        self.kind = kind
        self.raw = raw
        self.eol = eol
        self.key = key
        self.value = value
        self.quote = quote
        self.value_start = value_start
        self.value_end = value_end

    @property
    def text(self):
        return self.raw + self.eol

    @property
    def is_assignment(self):
        return self.kind == LINE_ASSIGNMENT

    def __eq__(self, other):
        if not isinstance(other, Line):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self):
        if self.is_assignment:
            return f"Line({self.kind!r}, key={self.key!r}, value={self.value!r})"
        return f"Line({self.kind!r}, {self.raw!r})"


class ParsedFile:
    """A loaded file: its ordered lines and the derived key/value map"""
    def __init__(self, path, lines, eol="\n"):
        self.path = path
        self.filename = os.path.basename(path.replace("\\", "/"))
        self.lines = list(lines)
        self.eol = eol
        self.variables = {}
        for line in self.lines:
            if line.is_assignment:
                # Later duplicates win in the map; every line stays in self.lines
                self.variables[line.key] = line.value

    @property
    def text(self):
        return "".join(line.text for line in self.lines)

    def get(self, key):
        return self.variables.get(key)

    def __repr__(self):
        return f"ParsedFile({self.path!r}, {len(self.variables)} variables)"


class DiffRow:
    """A key and its value in every loaded file (None where absent)"""
    def __init__(self, key, values, status=None):
        self.key = key
        self.values = list(values)
        self.status = status if status is not None else get_variable_status(self.values)

    def __eq__(self, other):
        if not isinstance(other, DiffRow):
            return NotImplemented
        return (self.key, self.values, self.status) == (other.key, other.values, other.status)

    def __repr__(self):
        return f"DiffRow({self.key!r}, {self.values!r}, {self.status!r})"


class PendingChange:
    """An unsaved edit of one key in one file (new_value None means delete)"""
    def __init__(self, key, file_index, old_value, new_value):
        self.key = key
        self.file_index = file_index
        self.old_value = old_value
        self.new_value = new_value

    @property
    def cell(self):
        return (self.key, self.file_index)

    @property
    def is_new(self):
        return self.old_value is None

    @property
    def is_deletion(self):
        return self.new_value is None

    def __eq__(self, other):
        if not isinstance(other, PendingChange):
            return NotImplemented
        return (self.key, self.file_index, self.old_value, self.new_value) == \
            (other.key, other.file_index, other.old_value, other.new_value)

    def __repr__(self):
        return (f"PendingChange({self.key!r}, {self.file_index}, "
                f"{self.old_value!r} -> {self.new_value!r})")


class FileChangeEntry:
    """Represents a planned write of one file with its content before and after patching"""
    def __init__(self, file_index, file_path, old_content, new_content, changes):
        self.file_index = file_index
        self.file_path = file_path
        self.old_content = old_content
        self.new_content = new_content
        self.changes = list(changes)

    @property
    def has_effect(self):
        return self.old_content != self.new_content

    def get_diff_lines(self):
        """Generate unified diff lines for display"""
        old_lines = self.old_content.splitlines(keepends=True)
        new_lines = self.new_content.splitlines(keepends=True)
        diff = difflib.unified_diff(old_lines, new_lines, lineterm='')
        return [line.rstrip("\r\n") for line in list(diff)[2:]]  # Skip the file header lines


def get_variable_status(values):
    """Classify a row: missing if any slot is absent, else identical or different."""
    present = [v for v in values if v is not None]
    if len(present) < len(values):
        return STATUS_MISSING
    if all(v == present[0] for v in present):
        return STATUS_IDENTICAL
    return STATUS_DIFFERENT
