"""Reading and writing of the SDDS layout header.

The header is the ASCII text preceding the data region::

    SDDS1
    !# little-endian
    &description text="beam data", &end
    &parameter name=Run, type=long, &end
    &column name=x, units=m, type=double, &end
    &data mode=binary, &end

Each ``&...`` block is a namelist of ``key=value,`` entries closed by
``&end``. Values holding separators are double-quoted with embedded quotes
escaped, and a namelist may span several lines.
"""

from __future__ import annotations

import logging
import re
from typing import IO

from .. import datatype
from ..exceptions import FormatError
from ..layout import ColumnDefinition, Layout, ParameterDefinition

log = logging.getLogger(__name__)

HEADER_ENCODING = "utf-8"

_version_line = re.compile(r"^SDDS([1-5])\s*$")
_needs_quotes = re.compile(r'[\s,&"!*]')

_parameter_keys = (
    "name",
    "symbol",
    "units",
    "description",
    "format_string",
    "type",
    "fixed_value",
)
_column_keys = ("name", "symbol", "units", "description", "format_string", "type")
_known_keys = {
    "&description": {"text", "contents"},
    "&parameter": set(_parameter_keys),
    "&column": {*_column_keys, "field_length"},
    "&data": {
        "mode",
        "lines_per_row",
        "no_row_counts",
        "additional_header_lines",
        "column_major_order",
        "endian",
    },
}


def _quote(value: str) -> str:
    if value == "" or _needs_quotes.search(value):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return value


def _namelist(command: str, entries: list[tuple[str, str | None]]) -> str:
    fields = "".join(f"{k}={_quote(v)}, " for k, v in entries if v is not None)
    return f"&{command} {fields}&end\n"


def format_header(layout: Layout) -> str:
    """Render the header of a file with the given layout."""
    lines = [f"SDDS{layout.version()}\n"]
    if layout.binary:
        order = "little" if layout.byteorder == "<" else "big"
        lines.append(f"!# {order}-endian\n")

    if layout.description is not None or layout.contents is not None:
        lines.append(
            _namelist(
                "description",
                [("text", layout.description), ("contents", layout.contents)],
            )
        )

    for p in layout.parameters:
        lines.append(
            _namelist(
                "parameter",
                [
                    (k, str(p.type) if k == "type" else getattr(p, k))
                    for k in _parameter_keys
                ],
            )
        )

    for c in layout.columns:
        lines.append(
            _namelist(
                "column",
                [
                    (k, str(c.type) if k == "type" else getattr(c, k))
                    for k in _column_keys
                ],
            )
        )

    data = [("mode", "binary" if layout.binary else "ascii")]
    if layout.no_row_counts and not layout.binary:
        data.append(("no_row_counts", "1"))
    if layout.column_major:
        data.append(("column_major_order", "1"))
    lines.append(_namelist("data", data))

    return "".join(lines)


def write_header(stream: IO[bytes], layout: Layout) -> None:
    """Write the header of `layout` to the binary `stream`."""
    stream.write(format_header(layout).encode(HEADER_ENCODING))


def _parse_namelist(text: str, where: str) -> tuple[str, dict[str, str]]:
    """Split ``&command key=value, ... &end`` into the command and its entries."""
    m = re.match(r"\s*(&\w+)", text)
    if m is None:
        msg = f"expected a namelist, got '{text.strip()}'"
        raise FormatError(msg, where=where)
    command = m.group(1)

    entries = {}
    pos = m.end()
    n = len(text)
    while True:
        while pos < n and (text[pos].isspace() or text[pos] == ","):
            pos += 1
        if pos >= n:
            msg = f"namelist {command} is not closed by &end"
            raise FormatError(msg, where=where)
        if text.startswith("&end", pos):
            break

        eq = text.find("=", pos)
        if eq < 0:
            msg = f"missing '=' in namelist {command}"
            raise FormatError(msg, where=where)
        key = text[pos:eq].strip()
        pos = eq + 1
        while pos < n and text[pos] in " \t":
            pos += 1

        if pos < n and text[pos] == '"':
            value = []
            pos += 1
            while pos < n and text[pos] != '"':
                if text[pos] == "\\" and pos + 1 < n:
                    pos += 1
                value.append(text[pos])
                pos += 1
            if pos >= n:
                msg = f"unterminated string for {key} in namelist {command}"
                raise FormatError(msg, where=where)
            pos += 1
            entries[key] = "".join(value)
        else:
            start = pos
            while pos < n and text[pos] != "," and not text.startswith("&end", pos):
                pos += 1
            entries[key] = text[start:pos].strip()

    return command, entries


def _closes_namelist(text: str) -> bool:
    """Whether `text` holds an ``&end`` outside double quotes."""
    quoted = False
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\" and quoted:
            i += 2
            continue
        if c == '"':
            quoted = not quoted
        elif not quoted and text.startswith("&end", i):
            return True
        i += 1
    return False


def _readline(stream: IO[bytes]) -> str | None:
    line = stream.readline()
    if not line:
        return None
    return line.decode(HEADER_ENCODING, "surrogateescape")


def read_header(stream: IO[bytes], name: str | None = None) -> Layout:
    """Parse the header of an SDDS file.

    The stream is left positioned at the first byte of the data region.

    Parameters
    ----------
    stream
        binary stream positioned at the start of the file.
    name
        name of the stream, used in error messages.

    Raises
    ------
    .FormatError
        if the header is malformed, or uses ``&array`` or ``&include``,
        which are not supported.
    """
    first = _readline(stream)
    if first is None or _version_line.match(first) is None:
        got = "" if first is None else first.strip()
        msg = f"not an SDDS file (first line is '{got}')"
        raise FormatError(msg, stream=name)
    log.debug(f"reading {first.strip()} header")

    layout = Layout()
    lineno = 1
    while True:
        line = _readline(stream)
        lineno += 1
        if line is None:
            msg = "end of file before the &data namelist"
            raise FormatError(msg, stream=name, where=f"line {lineno}")

        stripped = line.strip()
        if stripped == "":
            continue
        if stripped.startswith("!"):
            if stripped == "!# big-endian":
                layout.byteorder = ">"
            elif stripped == "!# little-endian":
                layout.byteorder = "<"
            continue

        text = line
        while not _closes_namelist(text):
            more = _readline(stream)
            lineno += 1
            if more is None:
                msg = "end of file inside a namelist"
                raise FormatError(msg, stream=name, where=f"line {lineno}")
            text += more

        command, entries = _parse_namelist(text, where=f"line {lineno}")
        log.debug(f"namelist {command} {entries}")

        if command in ("&array", "&include", "&associate"):
            msg = f"namelist {command} is not supported"
            raise FormatError(msg, stream=name, where=f"line {lineno}")
        if command not in _known_keys:
            msg = f"unknown namelist {command}"
            raise FormatError(msg, stream=name, where=f"line {lineno}")

        unknown = set(entries) - _known_keys[command]
        if unknown:
            msg = f"unexpected keys {sorted(unknown)} in namelist {command}"
            raise FormatError(msg, stream=name, where=f"line {lineno}")

        if command == "&description":
            layout.description = entries.get("text")
            layout.contents = entries.get("contents")
        elif command == "&parameter":
            layout.add_parameter(
                ParameterDefinition(
                    **{k: entries.get(k) for k in _parameter_keys if k != "type"},
                    type=_entry_type(entries, command, name, lineno),
                )
            )
        elif command == "&column":
            layout.add_column(
                ColumnDefinition(
                    **{k: entries.get(k) for k in _column_keys if k != "type"},
                    type=_entry_type(entries, command, name, lineno),
                )
            )
        else:
            _apply_data(layout, entries, name, lineno)
            break

    for _ in range(layout.additional_header_lines):
        _readline(stream)

    return layout


def _entry_type(
    entries: dict[str, str], command: str, name: str | None, lineno: int
) -> datatype.ValueType:
    if "type" not in entries:
        msg = f"namelist {command} has no type"
        raise FormatError(msg, stream=name, where=f"line {lineno}")
    try:
        return datatype.type_of(entries["type"])
    except ValueError as e:
        raise FormatError(str(e), stream=name, where=f"line {lineno}") from e


def _apply_data(
    layout: Layout, entries: dict[str, str], name: str | None, lineno: int
) -> None:
    mode = entries.get("mode", "binary")
    if mode not in ("ascii", "binary"):
        msg = f"unknown data mode '{mode}'"
        raise FormatError(msg, stream=name, where=f"line {lineno}")

    try:
        layout.binary = mode == "binary"
        layout.no_row_counts = int(entries.get("no_row_counts", 0)) != 0
        layout.column_major = int(entries.get("column_major_order", 0)) != 0
        layout.additional_header_lines = int(
            entries.get("additional_header_lines", 0)
        )
        lines_per_row = int(entries.get("lines_per_row", 1))
    except ValueError as e:
        msg = f"bad integer in &data namelist ({e})"
        raise FormatError(msg, stream=name, where=f"line {lineno}") from e

    if lines_per_row != 1:
        msg = "lines_per_row other than 1 is not supported"
        raise FormatError(msg, stream=name, where=f"line {lineno}")

    if "endian" in entries:
        layout.byteorder = ">" if entries["endian"] == "big" else "<"
