"""Logical lines of an ASCII plain-data stream."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import IO

from .. import codec
from ..tokenizer import get_token

log = logging.getLogger(__name__)


class LineSource:
    """Produce the data lines of an ASCII stream.

    Raw lines go through the following filters, in order:

    1. the first `skip_lines` lines are dropped, once;
    2. lines starting with ``!`` are dropped;
    3. lines starting with any of `comment_chars` are dropped;
    4. lines holding no field are dropped;
    5. a line starting with `eof_sequence` ends the stream.

    A line can be handed back with :meth:`unread`, it is then returned
    again by the next call to :meth:`readline`.
    """

    def __init__(
        self,
        stream: IO[bytes],
        skip_lines: int = 0,
        comment_chars: str = "",
        eof_sequence: str | None = None,
        separator: str | None = None,
    ) -> None:
        self.stream = stream
        self.skip_lines = skip_lines
        self.comment_chars = comment_chars
        self.eof_sequence = eof_sequence
        self.separator = separator

        self.lineno = 0
        self.eof = False
        self._pushback: list[str] = []

    def _raw(self) -> str | None:
        data = self.stream.readline()
        if not data:
            return None
        self.lineno += 1
        return data.decode(codec.TEXT_ENCODING, codec.TEXT_ERRORS).rstrip("\r\n")

    def readline(self) -> str | None:
        """Return the next data line, or ``None`` at the end of the stream."""
        if self._pushback:
            return self._pushback.pop()
        if self.eof:
            return None

        while self.skip_lines > 0:
            self.skip_lines -= 1
            if self._raw() is None:
                break

        while True:
            line = self._raw()
            if line is None:
                self.eof = True
                return None

            if line.startswith("!"):
                continue
            if line[:1] and line[0] in self.comment_chars:
                continue
            if get_token(line, self.separator) is None:
                continue

            if self.eof_sequence is not None and line.startswith(self.eof_sequence):
                log.debug(f"end sequence found at line {self.lineno}")
                self.eof = True
                return None

            return line

    def unread(self, line: str) -> None:
        """Push `line` back so that it is returned by the next :meth:`readline`."""
        self._pushback.append(line)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.readline()
            if line is None:
                return
            yield line
