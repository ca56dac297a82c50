"""
Parsing and serializing KEY=VALUE files while preserving their formatting.

Files are split into Line records that keep the original text byte for byte,
so a file can be patched by touching only the lines whose keys changed.
"""
import re

from core.models import (Line, ParsedFile, LINE_BLANK, LINE_COMMENT,
                         LINE_ASSIGNMENT)

_EOL = re.compile(r"\r\n|\r|\n")
_EXPORT = re.compile(r"^export\s+")
# A quoted value, optionally followed by an inline comment
_QUOTED = re.compile(r"""^(["'])(.*)\1(\s*(?:#.*)?)$""")
_INLINE_COMMENT = re.compile(r"\s#")
_UNSAFE = re.compile(r"""[\s#"'=]""")


def split_lines(content):
    """Split content into (text, terminator) pairs without normalizing line endings."""
    pairs = []
    pos = 0
    for m in _EOL.finditer(content):
        pairs.append((content[pos:m.start()], m.group()))
        pos = m.end()
    if pos < len(content):
        pairs.append((content[pos:], ""))
    return pairs


def detect_eol(content):
    m = _EOL.search(content)
    return m.group() if m else "\n"


def parse_line(raw, eol=""):
    """Classify a single line. Never raises; unparseable lines come back as comments."""
    stripped = raw.strip()
    if not stripped:
        return Line(LINE_BLANK, raw, eol)
    if stripped.startswith("#"):
        return Line(LINE_COMMENT, raw, eol)

    assignment = _parse_assignment(raw)
    if assignment is None:
        # Opaque line: kept verbatim, contributes no key
        return Line(LINE_COMMENT, raw, eol)

    key, value, quote, start, end = assignment
    return Line(LINE_ASSIGNMENT, raw, eol, key=key, value=value, quote=quote,
                value_start=start, value_end=end)


def _parse_assignment(raw):
    eq = raw.find("=")
    if eq == -1:
        return None

    key = _EXPORT.sub("", raw[:eq].strip()).strip()
    if not key:
        return None

    rest = raw[eq + 1:]
    body = rest.lstrip()
    offset = eq + 1 + len(rest) - len(body)

    m = _QUOTED.match(body)
    if m:
        value = m.group(2)
        start = offset + 1
        return key, value, m.group(1), start, start + len(value)

    comment = _INLINE_COMMENT.search(rest)
    value_text = rest[:comment.start()] if comment else rest
    value = value_text.strip()
    if not value:
        return key, "", "", eq + 1, eq + 1
    start = eq + 1 + len(value_text) - len(value_text.lstrip())
    return key, value, "", start, start + len(value)


def parse_lines(content):
    """Parse file content into an ordered list of Line records."""
    return [parse_line(raw, eol) for raw, eol in split_lines(content)]


def parse_content(path, content):
    """Parse content read from path into a ParsedFile."""
    return ParsedFile(path, parse_lines(content), eol=detect_eol(content))


def parse_to_map(content):
    """Key/value map of content; the last assignment of a key wins."""
    return {line.key: line.value for line in parse_lines(content) if line.is_assignment}


def needs_quotes(value):
    return value == "" or bool(_UNSAFE.search(value))


def build_assignment_line(key, value):
    """Build a canonical KEY=VALUE line for a key that has no existing line."""
    if needs_quotes(value):
        return f'{key}="{value}"'
    return f"{key}={value}"


def substitute_value(line, value):
    """
    Return line's raw text with its value replaced.

    The original quote character and anything around the value (export prefix,
    spacing, inline comment) are kept. An unquoted value only gains double
    quotes when the new value could not be read back unquoted.
    """
    head = line.raw[:line.value_start]
    tail = line.raw[line.value_end:]
    if not line.quote and needs_quotes(value):
        return f'{head}"{value}"{tail}'
    return head + value + tail
