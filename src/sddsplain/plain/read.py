"""Reading pages from plain-data streams."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from typing import IO, Any

import numpy as np

from .. import codec, settings
from ..datatype import ValueType
from ..exceptions import (
    BadNumericError,
    BadRowError,
    FormatError,
    ModeMismatchError,
    SDDSPlainError,
    ShortReadError,
)
from ..tokenizer import count_tokens, split_tokens
from ..types import Array, Page, Scalar
from .config import FieldSpec, InputConfig
from .lines import LineSource

log = logging.getLogger(__name__)

PROBE_SIZE = 64
MAX_PLAUSIBLE_ROWS = 2**28


def _printable(data: bytes) -> bool:
    return all(32 <= b < 127 or b in b"\t\n\r" for b in data)


def check_input_mode(head: bytes, binary: bool, row_count: bool = True) -> None:
    """Check that the first bytes of a stream match the declared input mode.

    Parameters
    ----------
    head
        up to the first 64 bytes of the stream.
    binary
        whether the stream is declared binary.
    row_count
        whether a binary stream starts with a row count.

    Raises
    ------
    .ModeMismatchError
        if an ASCII stream holds a NUL byte, or if a binary stream starts
        with four printable characters that do not decode to a plausible
        row count.
    """
    head = head[:PROBE_SIZE]
    if not binary:
        if b"\0" in head:
            msg = "NUL byte found in ASCII input"
            raise ModeMismatchError(msg)
        return

    if row_count and len(head) >= 4 and _printable(head[:4]):
        rows = int.from_bytes(head[:4], "little", signed=True)
        if rows < 0 or rows > MAX_PLAUSIBLE_ROWS:
            msg = f"binary input starts with text ({head[:4]!r})"
            raise ModeMismatchError(msg)


def probe(stream: IO[bytes], n: int = PROBE_SIZE) -> tuple[bytes, IO[bytes]]:
    """Return the first `n` bytes of `stream` without consuming them.

    Returns the bytes and the stream to read from afterwards, which is
    `stream` itself unless it had to be wrapped in a buffer.
    """
    if stream.seekable():
        pos = stream.tell()
        head = stream.read(n)
        stream.seek(pos)
        return head, stream
    if not hasattr(stream, "peek"):
        stream = io.BufferedReader(stream)
    return stream.peek(n)[:n], stream


class PlainReader:
    """Iterate over the pages of a plain-data stream.

    Each page holds one :class:`.Scalar` per declared parameter and one
    :class:`.Array` per declared column, skipped columns excepted. Pages are
    produced strictly in stream order, one at a time.

    Examples
    --------
    >>> from sddsplain.plain import FieldSpec, InputConfig, PlainReader
    >>> config = InputConfig(columns=[FieldSpec("x", "double")], no_row_count=True)
    >>> with open("data.txt", "rb") as f:
    ...     for page in PlainReader(f, config.validate()):
    ...         print(page["x"].nda)
    """

    def __init__(
        self, stream: IO[bytes], config: InputConfig, name: str | None = None
    ) -> None:
        """
        Parameters
        ----------
        stream
            the input, opened in binary mode.
        config
            a validated input configuration.
        name
            name of the input used in error messages.
        """
        self.stream = stream
        self.config = config
        self.name = name
        self.capacity = config.capacity
        if self.capacity is None:
            self.capacity = settings.DEFAULT_ROW_CAPACITY

        self.pages_read = 0
        self._done = False

        if not config.binary:
            self.lines = LineSource(
                stream,
                skip_lines=config.skip_lines,
                comment_chars=config.comment_chars,
                eof_sequence=config.eof_sequence,
                separator=config.separator,
            )

    def __iter__(self) -> Iterator[Page]:
        while True:
            page = self.read_page()
            if page is None:
                return
            yield page

    def read_page(self) -> Page | None:
        """Read the next page, or return ``None`` at the end of the stream."""
        if self._done:
            return None

        if self.config.binary:
            page = self._read_page_binary()
        else:
            page = self._read_page_ascii()

        if page is None:
            self._done = True
            return None

        self.pages_read += 1
        page.page_number = self.pages_read
        log.debug(f"read page {self.pages_read} with {len(page)} rows")
        return page

    def _warn(self, msg: str) -> None:
        if not self.config.no_warnings:
            where = f"{self.name}: " if self.name is not None else ""
            log.warning(where + msg)

    def _make_page(self, parameters: dict[str, Any], columns: dict[str, Any]) -> Page:
        params = {}
        for p in self.config.parameters:
            attrs = {"units": p.units} if p.units else None
            params[p.name] = Scalar(parameters[p.name], vtype=p.type, attrs=attrs)

        cols = {}
        for c in self.config.columns:
            if c.skip:
                continue
            data = columns[c.name]
            array = data if isinstance(data, Array) else Array(data, vtype=c.type)
            if c.units:
                array.attrs["units"] = c.units
            cols[c.name] = array

        return Page(col_dict=cols, parameters=params)

    # binary

    def _read_page_binary(self) -> Page | None:
        cfg = self.config
        first = self.pages_read == 0
        where = f"page {self.pages_read + 1}"

        if cfg.binary_rows is not None:
            if not first:
                if self.stream.read(1):
                    self._warn("ignoring data after the single binary_rows page")
                return None
            rows = cfg.binary_rows
        else:
            head = self.stream.read(4)
            if len(head) < 4:
                if first:
                    msg = "unable to read the number of rows"
                    raise ShortReadError(msg, stream=self.name, where=where)
                if len(head) > 0:
                    self._warn(f"ignoring {len(head)} trailing bytes")
                return None
            rows = int(np.frombuffer(head, "<i4")[0])
            if rows == settings.INT32_MIN:
                rows = codec.read_int64(self.stream)
            if rows < 0:
                msg = f"invalid row count {rows}"
                exc = ModeMismatchError if first else FormatError
                raise exc(msg, stream=self.name, where=where)

        max_length = settings.MAX_STRING_LENGTH
        try:
            parameters = {
                p.name: codec.read_scalar_binary(
                    self.stream, p.type, name=p.name, max_length=max_length
                )
                for p in cfg.parameters
            }

            vtypes = [c.type for c in cfg.columns]
            names = [c.name for c in cfg.columns]
            if cfg.column_major:
                arrays = [
                    codec.read_array_binary(
                        self.stream, vt, rows, name=n, max_length=max_length
                    )
                    for vt, n in zip(vtypes, names)
                ]
            else:
                arrays = codec.read_rows_binary(
                    self.stream, vtypes, rows, names=names, max_length=max_length
                )
        except (ShortReadError, FormatError) as e:
            if first:
                msg = f"{e.args[0]} ({rows} rows declared)"
                raise ModeMismatchError(
                    msg, stream=self.name, obj=e.obj, where=where
                ) from e
            e.stream = self.name
            e.where = where
            raise

        columns = {c.name: a for c, a in zip(cfg.columns, arrays) if not c.skip}
        return self._make_page(parameters, columns)

    # ASCII

    def _new_columns(self, capacity: int) -> list[Array]:
        columns = []
        for c in self.config.columns:
            array = Array(shape=0, vtype=c.type, capacity=self.capacity)
            array.reserve_capacity(capacity)
            columns.append(array)
        return columns

    def _where(self) -> str:
        return f"page {self.pages_read + 1}, line {self.lines.lineno}"

    def _parse_parameter(self, line: str, p: FieldSpec) -> Any:
        text = line
        if p.type is ValueType.STRING:
            text = line.strip()
            if text.startswith('"'):
                tokens = split_tokens(text)
                text = tokens[0] if tokens else ""
        try:
            return codec.parse_scalar(
                text, p.type, p.name, max_length=settings.MAX_STRING_LENGTH
            )
        except SDDSPlainError as e:
            e.stream = self.name
            e.where = self._where()
            raise

    def _parse_row(self, line: str, columns: list[Array]) -> bool:
        """Append the values of one row-major line to `columns`.

        Returns ``False`` if the row was dropped.
        """
        cfg = self.config
        tokens = split_tokens(line, cfg.separator)
        values = []
        try:
            for i, c in enumerate(cfg.columns):
                if i < len(tokens):
                    token = tokens[i]
                elif cfg.fillin:
                    token = "0" if c.type.is_numeric else ""
                else:
                    msg = f"missing value, {len(tokens)} of {len(cfg.columns)} found"
                    raise BadRowError(msg, obj=c.name)
                values.append(
                    codec.parse_scalar(
                        token, c.type, c.name, max_length=settings.MAX_STRING_LENGTH
                    )
                )
        except SDDSPlainError as e:
            e.stream = self.name
            e.where = self._where()
            if not cfg.recover or not isinstance(e, (BadNumericError, BadRowError)):
                raise
            self._warn(f"dropping row: {e}")
            return False

        for array, value in zip(columns, values):
            array.append(value)
        return True

    def _parse_column_line(self, line: str, c: FieldSpec, rows: int) -> np.ndarray:
        tokens = split_tokens(line, self.config.separator)
        if len(tokens) < rows:
            msg = f"{len(tokens)} values found, {rows} expected"
            raise BadRowError(msg, stream=self.name, obj=c.name, where=self._where())

        nda = np.empty(rows, dtype=object if c.type.is_string else c.type.dtype)
        try:
            for i in range(rows):
                nda[i] = codec.parse_scalar(
                    tokens[i], c.type, c.name, max_length=settings.MAX_STRING_LENGTH
                )
        except SDDSPlainError as e:
            e.stream = self.name
            e.where = self._where()
            raise
        return nda

    def _read_page_ascii(self) -> Page | None:
        cfg = self.config
        nparams = len(cfg.parameters)
        ncols = len(cfg.columns)

        parameters: dict[str, Any] = {}
        rows: int | None = None
        row = 0
        col = 0
        row_columns = None
        col_columns: dict[str, np.ndarray] = {}

        def complete() -> bool:
            if len(parameters) < nparams:
                return False
            if rows is None and not cfg.no_row_count:
                return False
            if ncols == 0:
                return True
            if cfg.column_major:
                return col == ncols or rows == 0
            return rows is not None and row == rows

        def make() -> Page:
            if cfg.column_major:
                if rows == 0:
                    columns = {c.name: np.empty(0, c.type.dtype) for c in cfg.columns}
                else:
                    columns = col_columns
            else:
                if row_columns is None:
                    arrays = self._new_columns(0)
                else:
                    arrays = row_columns
                columns = {c.name: a for c, a in zip(cfg.columns, arrays)}
            return self._make_page(parameters, columns)

        while True:
            line = self.lines.readline()
            if line is None:
                break

            if len(parameters) < nparams:
                p = cfg.parameters[len(parameters)]
                parameters[p.name] = self._parse_parameter(line, p)

            elif rows is None and not cfg.no_row_count:
                try:
                    value = codec.parse_scalar(line, ValueType.LONG, "row count")
                except BadNumericError as e:
                    e.stream = self.name
                    e.where = self._where()
                    raise
                if value < 0:
                    msg = f"invalid row count {value}"
                    raise FormatError(msg, stream=self.name, where=self._where())
                rows = int(value)
                if not cfg.column_major:
                    row_columns = self._new_columns(rows)

            elif cfg.column_major:
                c = cfg.columns[col]
                if cfg.no_row_count:
                    ntokens = count_tokens(line, cfg.separator)
                    if rows is None:
                        rows = ntokens
                    elif ntokens != rows:
                        msg = f"{ntokens} values found, {rows} expected"
                        raise BadRowError(
                            msg, stream=self.name, obj=c.name, where=self._where()
                        )
                nda = self._parse_column_line(line, c, rows)
                if not c.skip:
                    col_columns[c.name] = nda
                col += 1

            else:
                if row_columns is None:
                    row_columns = self._new_columns(self.capacity.initial)

                if cfg.no_row_count and nparams > 0 and row > 0:
                    ntokens = count_tokens(line, cfg.separator)
                    if ntokens == 1 and ntokens != ncols:
                        # a lone value starts the next page
                        self.lines.unread(line)
                        return make()

                if self._parse_row(line, row_columns):
                    row += 1

            if complete():
                return make()

        # end of the stream
        if len(parameters) == 0 and rows is None and row == 0 and col == 0:
            return None

        if cfg.no_row_count and not cfg.column_major and row > 0:
            return make()

        self._warn(
            f"end of input in the middle of page {self.pages_read + 1}, "
            "discarding the partial page"
        )
        return None
