"""Tests for parsing and serializing KEY=VALUE lines"""
import pytest

from core.env_format import (build_assignment_line, needs_quotes, parse_line,
                             parse_lines, parse_to_map, split_lines,
                             substitute_value)


def kinds(lines):
    return [line.kind for line in lines]


def test_parses_simple_assignments():
    lines = parse_lines("KEY1=value1\nKEY2=value2")
    assert kinds(lines) == ["assignment", "assignment"]
    assert [(l.key, l.value) for l in lines] == [("KEY1", "value1"), ("KEY2", "value2")]


def test_preserves_comments_and_blank_lines():
    lines = parse_lines("# header\nKEY=value\n\n   \n# footer\n")
    assert kinds(lines) == ["comment", "assignment", "blank", "blank", "comment"]
    assert lines[0].raw == "# header"
    assert lines[3].raw == "   "


def test_indented_comment():
    assert parse_line("   # not a key=value").kind == "comment"


def test_strips_one_layer_of_quotes():
    lines = parse_lines("DOUBLE=\"hello world\"\nSINGLE='another value'\nNESTED=\"'x'\"")
    assert [l.value for l in lines] == ["hello world", "another value", "'x'"]
    assert [l.quote for l in lines] == ['"', "'", '"']


def test_mismatched_quotes_are_kept():
    line = parse_line("KEY=\"abc'")
    assert line.value == "\"abc'"
    assert line.quote == ""


def test_trims_key_and_value():
    line = parse_line("  KEY  =   value  ")
    assert (line.key, line.value) == ("KEY", "value")


def test_value_may_contain_equals():
    line = parse_line("URL=postgres://u:p@h/db?a=b")
    assert line.key == "URL"
    assert line.value == "postgres://u:p@h/db?a=b"


def test_export_prefix():
    line = parse_line("export API_KEY=secret123")
    assert (line.key, line.value) == ("API_KEY", "secret123")


def test_inline_comment_on_unquoted_value():
    line = parse_line("KEY=value # this is a comment")
    assert line.value == "value"


def test_hash_without_space_is_part_of_value():
    assert parse_line("COLOR=#ff0000x").value == "#ff0000x"
    assert parse_line("KEY=a#b").value == "a#b"


def test_inline_comment_after_quoted_value():
    line = parse_line('KEY="a # b"   # note')
    assert line.value == "a # b"
    assert line.quote == '"'


def test_empty_values():
    assert parse_line("EMPTY=").value == ""
    assert parse_line('QUOTED=""').value == ""
    assert parse_line("COMMENTED=   # nothing").value == ""


def test_opaque_lines_are_kept_as_comments():
    lines = parse_lines("just some text\n=novalue\nKEY=1")
    assert kinds(lines) == ["comment", "comment", "assignment"]
    assert lines[0].raw == "just some text"
    assert parse_to_map("just some text\n=novalue\nKEY=1") == {"KEY": "1"}


def test_duplicate_keys_last_wins_in_map(parse):
    parsed = parse("A=1\nB=2\nA=3\n")
    assert parsed.variables == {"A": "3", "B": "2"}
    assert len(parsed.lines) == 3


def test_keys_are_case_sensitive():
    assert parse_to_map("key=1\nKEY=2") == {"key": "1", "KEY": "2"}


def test_empty_content(parse):
    parsed = parse("")
    assert parsed.lines == []
    assert parsed.variables == {}
    assert parsed.text == ""


@pytest.mark.parametrize("content", [
    "A=1\nB=2\n",
    "A=1\nB=2",
    "A=1\r\nB=2\r\n",
    "A=1\rB=2\r",
    "\n\n\n",
    "# only a comment",
    "  export   KEY = 'quoted value'   # trailing\r\n\nweird line\n=\n",
])
def test_text_round_trips(parse, content):
    assert parse(content).text == content


def test_split_lines_keeps_terminators():
    assert split_lines("a\r\nb\nc") == [("a", "\r\n"), ("b", "\n"), ("c", "")]


def test_eol_detection(parse):
    assert parse("A=1\r\nB=2\r\n").eol == "\r\n"
    assert parse("A=1").eol == "\n"


def test_filename_is_basename(parse):
    assert parse("", "config\\prod\\.env.prod").filename == ".env.prod"
    assert parse("", "/srv/app/.env").filename == ".env"


@pytest.mark.parametrize("value, expected", [
    ("plain", False),
    ("", True),
    ("has space", True),
    ("tab\there", True),
    ("a#b", True),
    ('say "hi"', True),
    ("it's", True),
    ("a=b", True),
    ("https://example.com/path", False),
])
def test_needs_quotes(value, expected):
    assert needs_quotes(value) is expected


def test_build_assignment_line():
    assert build_assignment_line("A", "1") == "A=1"
    assert build_assignment_line("A", "") == 'A=""'
    assert build_assignment_line("A", "hello world") == 'A="hello world"'


def test_built_lines_parse_back():
    for value in ["1", "", "hello world", 'with "quotes"', "x # y", "k=v"]:
        line = parse_line(build_assignment_line("KEY", value))
        assert line.value == value


def test_substitute_keeps_quote_style():
    assert substitute_value(parse_line("A='old'"), "new") == "A='new'"
    assert substitute_value(parse_line('A="old"'), "new value") == 'A="new value"'


def test_substitute_keeps_surroundings():
    line = parse_line("export  A = old   # keep me")
    assert substitute_value(line, "new") == "export  A = new   # keep me"


def test_substitute_quotes_unsafe_value_on_unquoted_line():
    assert substitute_value(parse_line("A=old"), "two words") == 'A="two words"'
    assert substitute_value(parse_line("A=old"), "") == 'A=""'


def test_substitute_into_empty_value():
    assert substitute_value(parse_line("A="), "x") == "A=x"
    assert substitute_value(parse_line("A=   # note"), "x") == "A=x   # note"


def test_substituted_values_parse_back():
    originals = ["A=old", "A='old'", 'A="old"', "A=old # c", "export A=", 'A="o" # c']
    for raw in originals:
        for value in ["new", "", "two words", "x#y", "it's", 'q"q']:
            line = parse_line(substitute_value(parse_line(raw), value))
            assert (line.key, line.value) == ("A", value), (raw, value)
