"""Text helpers shared by the plain-data and SDDS codecs."""

from __future__ import annotations

import fnmatch
import logging
import re

log = logging.getLogger(__name__)

_escapes = {
    "n": "\n",
    "t": "\t",
    "b": "\b",
    "r": "\r",
    "f": "\f",
    "v": "\v",
    "a": "\a",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "?": "?",
}
_octal = re.compile(r"[0-7]{1,3}")


def interpret_escapes(text: str) -> str:
    r"""Replace C-style escape sequences with the characters they stand for.

    Handles ``\n``, ``\t``, ``\b``, ``\r``, ``\f``, ``\v``, ``\a``, ``\\``,
    ``\"``, ``\'``, ``\?`` and octal ``\ooo``. Unknown sequences are kept
    verbatim.

    Examples
    --------
    >>> interpret_escapes(r"a\tb\"c\101")
    'a\tb"cA'
    """
    if "\\" not in text:
        return text

    out = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c != "\\" or i == n - 1:
            out.append(c)
            i += 1
            continue

        nxt = text[i + 1]
        if nxt in _escapes:
            out.append(_escapes[nxt])
            i += 2
            continue

        m = _octal.match(text, i + 1)
        if m is not None:
            out.append(chr(int(m.group(0), 8)))
            i = m.end()
            continue

        out.append(c)
        out.append(nxt)
        i += 2

    return "".join(out)


def escape_string(
    text: str, quote: bool | None = None, separator: str | None = None
) -> str:
    """Render a string so that :func:`.tokenizer.get_token` reads it back.

    Backslashes, quotes and control characters are escaped. If `quote` is
    ``None``, the string is quoted only when empty, when it starts with
    ``!``, or when it contains whitespace or `separator`; ``True`` always
    quotes it.
    """
    out = []
    for c in text:
        if c == "\\":
            out.append("\\\\")
        elif c == '"':
            out.append('\\"')
        elif c == "\n":
            out.append("\\n")
        elif c == "\t" and quote is False:
            out.append("\\t")
        elif c == "\r":
            out.append("\\r")
        elif ord(c) < 32 and c != "\t":
            out.append(f"\\{ord(c):03o}")
        else:
            out.append(c)
    body = "".join(out)

    if quote is None:
        quote = (
            body == ""
            or body[0] == "!"
            or any(c.isspace() for c in body)
            or (separator is not None and separator in body)
        )
    return f'"{body}"' if quote else body


def escape_character(char: str, separator: str | None = None) -> str:
    """Render a single character as one glyph.

    Invisible characters and `separator` are written as octal escapes.
    """
    if char == "":
        return "\\000"
    if char == "\\":
        return "\\\\"
    if char == '"':
        return '\\"'
    if char.isspace() or not char.isprintable() or char == separator:
        return f"\\{ord(char) & 0o777:03o}"
    return char


def d_to_e_notation(text: str) -> str:
    """Convert Fortran ``D+``/``D-`` exponents to C ``e+``/``e-`` exponents."""
    return text.replace("D+", "e+").replace("D-", "e-")


_length_modifiers = re.compile(
    r"%([-+ #0]*\d*(?:\.\d*)?)(?:hh|h|ll|l|L|q|j|z|t)?([diouxXeEfFgGcs])"
)
_inttypes_macros = re.compile(r'"?\s*PRI([diouxX])(?:8|16|32|64)\s*"?')


def normalize_format(fmt: str) -> str:
    """Turn a C printf format string into one Python's ``%`` operator accepts.

    C length modifiers (``%ld``, ``%lu``, ``%Lf``, ``%hd``, ``%lld``...) and
    ``<inttypes.h>`` macros (``%" PRId32 "``) are reduced to the bare
    conversion.

    Examples
    --------
    >>> normalize_format("%10ld")
    '%10d'
    >>> normalize_format("%.3Lf")
    '%.3f'
    """
    fmt = _inttypes_macros.sub(r"\1", fmt)
    return _length_modifiers.sub(r"%\1\2", fmt)


def has_wildcards(pattern: str) -> bool:
    """Whether `pattern` contains shell-style wildcard characters."""
    return any(c in pattern for c in "*?[")


def expand_wildcards(
    patterns: list[str], names: list[str], exclude: list[str] | None = None
) -> list[str]:
    """Expand shell-style `patterns` against `names`, keeping `names` order.

    Names already in `exclude` and duplicates are skipped.
    """
    selected = list(exclude) if exclude is not None else []
    matched = []
    for pattern in patterns:
        for name in names:
            if fnmatch.fnmatchcase(name, pattern) and name not in selected:
                selected.append(name)
                matched.append(name)

    log.debug(f"patterns {patterns} matched {matched}")
    return matched
