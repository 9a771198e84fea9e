"""Splitting of plain-data lines into fields."""

from __future__ import annotations


def _skip_quoted(line: str, pos: int) -> int:
    """Return the index of the quote closing the one at ``line[pos]``.

    A quote preceded by a backslash does not close, unless that backslash is
    itself escaped. Returns ``len(line)`` if the quote is never closed.
    """
    pos += 1
    n = len(line)
    while pos < n:
        c = line[pos]
        if c == "\\" and pos + 1 < n:
            pos += 2
            continue
        if c == '"':
            return pos
        pos += 1
    return n


def get_token(line: str, separator: str | None = None) -> tuple[str, str] | None:
    r"""Extract the first field of `line`.

    Parameters
    ----------
    line
        the text to tokenize.
    separator
        single-character field separator. If ``None``, fields are separated
        by runs of whitespace.

    Returns
    -------
    (token, rest)
        the first field and the text following its separator, or ``None``
        if `line` holds nothing but whitespace.

    Notes
    -----
    A field starting with a double quote extends to the matching unescaped
    quote; the quotes are removed but the escape sequences inside are kept
    verbatim (see :func:`.utils.interpret_escapes`). Quoted sections inside
    an unquoted field are kept whole, quotes included, so they may contain
    separators. With a separator, two adjacent separators delimit an empty
    field.

    Examples
    --------
    >>> get_token('"a b" c')
    ('a b', 'c')
    >>> get_token("1,,3", ",")
    ('1', ',3')
    """
    n = len(line)
    pos = 0
    while pos < n and line[pos].isspace():
        pos += 1
    if pos == n:
        return None

    def at_separator(i: int) -> bool:
        if separator is None:
            return line[i].isspace()
        return line[i] == separator

    if line[pos] == '"':
        end = _skip_quoted(line, pos)
        token = line[pos + 1 : end]
        i = end + 1 if end < n else n
        # whatever follows the closing quote up to the separator is dropped
        while i < n and not at_separator(i):
            i += 1
        return token, line[i + 1 :] if i < n else ""

    start = pos
    i = pos
    while i < n and not at_separator(i):
        if line[i] == '"' and (i == 0 or line[i - 1] != "\\"):
            i = _skip_quoted(line, i)
            if i >= n:
                break
        i += 1

    return line[start:i], line[i + 1 :] if i < n else ""


def split_tokens(line: str, separator: str | None = None) -> list[str]:
    """Split `line` into all of its fields, see :func:`get_token`."""
    tokens = []
    result = get_token(line, separator)
    while result is not None:
        token, line = result
        tokens.append(token)
        result = get_token(line, separator)
    return tokens


def count_tokens(line: str, separator: str | None = None) -> int:
    """Number of fields in `line`, see :func:`get_token`."""
    return len(split_tokens(line, separator))
