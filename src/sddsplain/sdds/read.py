"""Reading SDDS files page by page."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO

import numpy as np

from .. import codec, settings
from ..datatype import ValueType
from ..exceptions import FormatError, ShortReadError, StreamError
from ..layout import Layout
from ..tokenizer import split_tokens
from ..types import Array, Page, Scalar
from . import header

log = logging.getLogger(__name__)


class SDDSReader:
    """Iterate over the pages of an SDDS file.

    The header is parsed when the reader is created and exposed as
    :attr:`layout`. Pages are then read strictly in order, with
    :meth:`read_page` or by iterating over the reader. Only one page is held
    in memory at a time.

    Examples
    --------
    >>> from sddsplain.sdds import SDDSReader
    >>> with SDDSReader("data.sdds") as f:
    ...     for page in f:
    ...         print(page.parameters["Run"].value, len(page))
    """

    def __init__(
        self,
        input: str | Path | IO[bytes],  # noqa: A002
        name: str | None = None,
    ) -> None:
        """
        Parameters
        ----------
        input
            path of the file to read, or a binary stream positioned at the
            start of the file. A stream passed in is not closed by
            :meth:`close`.
        name
            name of the input used in error messages. Defaults to the path.
        """
        if isinstance(input, (str, Path)):
            try:
                self.stream = open(input, "rb")  # noqa: SIM115
            except OSError as e:
                msg = f"cannot open input ({e.strerror})"
                raise StreamError(msg, stream=str(input)) from e
            self._owns_stream = True
            self.name = str(input) if name is None else name
        else:
            self.stream = input
            self._owns_stream = False
            self.name = name

        try:
            self.layout: Layout = header.read_header(self.stream, self.name)
        except Exception:
            self.close()
            raise

        self.pages_read = 0
        self._fixed = {
            p.name: p.fixed()
            for p in self.layout.parameters
            if p.fixed_value is not None
        }
        self._pushback: list[str] = []
        self._eof = False

    def __enter__(self) -> SDDSReader:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_stream and self.stream is not None:
            self.stream.close()
        self.stream = None

    def get_parameter_names(self) -> list[str]:
        return self.layout.parameter_names()

    def get_column_names(self) -> list[str]:
        return self.layout.column_names()

    def __iter__(self) -> Iterator[Page]:
        while True:
            page = self.read_page()
            if page is None:
                return
            yield page

    def read_page(self) -> Page | None:
        """Read the next page, or return ``None`` at the end of the file."""
        if self.stream is None or self._eof:
            return None

        if self.layout.binary:
            page = self._read_page_binary()
        else:
            page = self._read_page_ascii()

        if page is None:
            self._eof = True
            return None

        self.pages_read += 1
        page.page_number = self.pages_read
        log.debug(f"read page {self.pages_read} with {len(page)} rows")
        return page

    def _make_page(self, parameters: dict, columns: list[np.ndarray]) -> Page:
        params = {}
        for p in self.layout.parameters:
            value = self._fixed.get(p.name, parameters.get(p.name))
            attrs = {"units": p.units} if p.units else None
            params[p.name] = Scalar(value, vtype=p.type, attrs=attrs)

        cols = {}
        for c, nda in zip(self.layout.columns, columns):
            attrs = {"units": c.units} if c.units else None
            cols[c.name] = Array(nda, vtype=c.type, attrs=attrs)

        return Page(col_dict=cols, parameters=params)

    # binary

    def _read_page_binary(self) -> Page | None:
        order = self.layout.byteorder
        where = f"page {self.pages_read + 1}"

        head = self.stream.read(4)
        if len(head) == 0:
            return None
        if len(head) < 4:
            msg = "truncated row count"
            raise ShortReadError(msg, stream=self.name, where=where)

        rows = int(np.frombuffer(head, f"{order}i4")[0])
        if rows == settings.INT32_MIN:
            rows = codec.read_int64(self.stream, order)
        if rows < 0:
            msg = f"negative row count {rows}"
            raise FormatError(msg, stream=self.name, where=where)

        try:
            parameters = {}
            for p in self.layout.parameters:
                if p.name not in self._fixed:
                    parameters[p.name] = codec.read_scalar_binary(
                        self.stream, p.type, order, p.name
                    )

            vtypes = [c.type for c in self.layout.columns]
            names = self.layout.column_names()
            if self.layout.column_major:
                columns = [
                    codec.read_array_binary(self.stream, vt, rows, order, n)
                    for vt, n in zip(vtypes, names)
                ]
            else:
                columns = codec.read_rows_binary(
                    self.stream, vtypes, rows, order, names
                )
        except ShortReadError as e:
            e.stream = self.name
            e.where = where
            raise

        return self._make_page(parameters, columns)

    # ASCII

    def _next_line(self) -> str | None:
        """Next data line, skipping ``!`` comments."""
        if self._pushback:
            return self._pushback.pop()
        while True:
            raw = self.stream.readline()
            if not raw:
                return None
            line = raw.decode(codec.TEXT_ENCODING, codec.TEXT_ERRORS).rstrip("\r\n")
            if not line.startswith("!"):
                return line

    def _next_nonblank(self) -> str | None:
        line = self._next_line()
        while line is not None and line.strip() == "":
            line = self._next_line()
        return line

    def _tokens(self, n: int, what: str, where: str) -> list[str]:
        """Collect `n` tokens, continuing over as many lines as needed."""
        tokens: list[str] = []
        while len(tokens) < n:
            line = self._next_nonblank()
            if line is None:
                msg = f"end of file reading {what}"
                raise ShortReadError(msg, stream=self.name, where=where)
            tokens.extend(split_tokens(line))
        if len(tokens) > n:
            msg = f"{len(tokens) - n} extra values reading {what}"
            raise FormatError(msg, stream=self.name, where=where)
        return tokens

    def _read_page_ascii(self) -> Page | None:
        where = f"page {self.pages_read + 1}"
        layout = self.layout

        first = self._next_nonblank()
        if first is None:
            return None
        self._pushback.append(first)

        parameters = {}
        for p in layout.parameters:
            if p.name in self._fixed:
                continue
            line = self._next_line()
            if line is None:
                msg = f"end of file reading parameter {p.name}"
                raise ShortReadError(msg, stream=self.name, where=where)
            text = line.strip()
            if p.type.is_string or p.type is ValueType.CHARACTER:
                tokens = split_tokens(text) if text.startswith('"') else [text]
                text = tokens[0] if tokens else ""
            parameters[p.name] = codec.parse_scalar(text, p.type, p.name)

        vtypes = [c.type for c in layout.columns]
        names = layout.column_names()

        if layout.no_row_counts:
            rows_tokens = self._rows_until_blank(len(vtypes), where)
        else:
            line = self._next_nonblank()
            if line is None:
                msg = "end of file reading the row count"
                raise ShortReadError(msg, stream=self.name, where=where)
            rows = codec.parse_scalar(line, ValueType.LONG64, "row count")
            if rows < 0:
                msg = f"negative row count {rows}"
                raise FormatError(msg, stream=self.name, where=where)
            rows = int(rows)
            if len(vtypes) == 0:
                rows_tokens = None
            elif layout.column_major:
                rows_tokens = [
                    self._tokens(rows, f"column {n}", where) if rows > 0 else []
                    for n in names
                ]
            else:
                per_row = [
                    self._tokens(len(vtypes), f"row {i}", where) for i in range(rows)
                ]
                rows_tokens = [list(col) for col in zip(*per_row)] or [
                    [] for _ in vtypes
                ]

        columns = []
        if rows_tokens is not None:
            for tokens, vt, n in zip(rows_tokens, vtypes, names):
                nda = np.empty(len(tokens), dtype=vt.dtype)
                for i, t in enumerate(tokens):
                    nda[i] = codec.parse_scalar(t, vt, n)
                columns.append(nda)
        else:
            columns = [np.empty(0, dtype=vt.dtype) for vt in vtypes]

        return self._make_page(parameters, columns)

    def _rows_until_blank(self, ncols: int, where: str) -> list[list[str]]:
        """Collect the page rows when row counts are absent.

        The page ends at a blank line or at the end of the file. In
        column-major order each column is one line.
        """
        lines = []
        line = self._next_line()
        while line is not None and line.strip() != "":
            lines.append(split_tokens(line))
            line = self._next_line()

        if self.layout.column_major:
            if len(lines) != ncols:
                msg = f"expected {ncols} column lines, got {len(lines)}"
                raise FormatError(msg, stream=self.name, where=where)
            return lines

        for i, tokens in enumerate(lines):
            if len(tokens) != ncols:
                msg = f"row {i} has {len(tokens)} values instead of {ncols}"
                raise FormatError(msg, stream=self.name, where=where)
        return [list(col) for col in zip(*lines)] or [[] for _ in range(ncols)]
