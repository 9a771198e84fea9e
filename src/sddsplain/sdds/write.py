"""Emission of SDDS page records, in ASCII and binary."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import IO, Any

import numpy as np

from .. import codec, settings
from ..layout import Layout

log = logging.getLogger(__name__)


def write_row_count(stream: IO[bytes], rows: int) -> None:
    """Write a binary row count.

    Counts that do not fit in 32 bits are written as ``INT32_MIN`` followed
    by the count as a 64-bit integer.
    """
    if rows > settings.INT32_MAX:
        codec.write_int32(stream, settings.INT32_MIN)
        codec.write_int64(stream, rows)
    else:
        codec.write_int32(stream, rows)


def write_page_binary(
    stream: IO[bytes],
    layout: Layout,
    parameters: Sequence[Any],
    columns: Sequence[np.ndarray],
    rows: int,
) -> None:
    """Write one binary page record.

    Parameters
    ----------
    stream
        the output stream, positioned after the header or the previous page.
    layout
        the committed layout of the file.
    parameters
        one value per parameter of `layout`. Values of parameters with a
        fixed value are not written.
    columns
        one array per column of `layout`, holding at least `rows` elements.
    rows
        number of rows of the page.
    """
    write_row_count(stream, rows)

    for definition, value in zip(layout.parameters, parameters):
        if definition.fixed_value is None:
            codec.write_scalar_binary(stream, value, definition.type)

    vtypes = [c.type for c in layout.columns]
    if layout.column_major:
        for nda, vtype in zip(columns, vtypes):
            codec.write_array_binary(stream, nda[:rows], vtype)
    else:
        codec.write_rows_binary(stream, columns, vtypes, rows)


def write_page_ascii(
    stream: IO[bytes],
    layout: Layout,
    parameters: Sequence[Any],
    columns: Sequence[np.ndarray],
    rows: int,
    page_number: int,
) -> None:
    """Write one ASCII page record.

    The page starts with a ``! page number N`` comment, then one line per
    parameter without a fixed value, the row count (unless the layout has
    ``no_row_counts``) and one line per row, or one line per column for
    column-major layouts. Pages without row counts end with a blank line.
    """
    lines = [f"! page number {page_number}\n"]

    for definition, value in zip(layout.parameters, parameters):
        if definition.fixed_value is None:
            lines.append(codec.emit_scalar_ascii(value, definition.type) + "\n")

    if not layout.no_row_counts:
        lines.append(f"{rows:>20}\n")

    vtypes = [c.type for c in layout.columns]
    if layout.column_major:
        for nda, vtype in zip(columns, vtypes):
            if rows > 0:
                text = (codec.emit_scalar_ascii(v, vtype) for v in nda[:rows])
                lines.append(" ".join(text) + "\n")
    else:
        for i in range(rows):
            text = (
                codec.emit_scalar_ascii(nda[i], vtype)
                for nda, vtype in zip(columns, vtypes)
            )
            lines.append(" ".join(text) + "\n")

    if layout.no_row_counts:
        lines.append("\n")

    stream.write("".join(lines).encode(codec.TEXT_ENCODING, codec.TEXT_ERRORS))
