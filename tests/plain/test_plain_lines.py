from __future__ import annotations

import io

from sddsplain.plain import LineSource


def _source(text: str, **kwargs) -> LineSource:
    return LineSource(io.BytesIO(text.encode()), **kwargs)


def test_filters():
    text = "header one\nheader two\n! note\n# comment\n\n   \n1 2\r\n% more\n3 4\n"
    lines = _source(text, skip_lines=2, comment_chars="#%")
    assert list(lines) == ["1 2", "3 4"]
    assert lines.eof
    assert lines.readline() is None


def test_skip_lines_counts_comments():
    lines = _source("! a\n! b\n1\n2\n", skip_lines=2)
    assert list(lines) == ["1", "2"]

    lines = _source("1\n", skip_lines=5)
    assert list(lines) == []


def test_eof_sequence():
    lines = _source("1\n2\nEND of data\n3\n", eof_sequence="END")
    assert list(lines) == ["1", "2"]
    assert lines.lineno == 3


def test_separator_blank_lines():
    # with a separator, a line of separators still holds empty fields
    lines = _source(",,\n  \n5\n", separator=",")
    assert list(lines) == [",,", "5"]


def test_unread():
    lines = _source("a\nb\n")
    first = lines.readline()
    lines.unread(first)
    assert lines.readline() == "a"
    assert lines.readline() == "b"
    lines.unread("b")
    assert lines.readline() == "b"
    assert lines.readline() is None
