"""Conversion drivers between plain-data streams and SDDS files."""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Union

from .exceptions import SDDSPlainError, StreamError
from .plain import (
    InputConfig,
    OutputConfig,
    PlainReader,
    PlainWriter,
    SDDSConfig,
    check_input_mode,
    probe,
)
from .sdds import SDDSDataset, SDDSReader

log = logging.getLogger(__name__)

Channel = Union[str, Path, IO[bytes], None]
"""A path, an open binary stream, or ``None`` for the standard streams."""


def _name(channel: Channel, default: str) -> str:
    if isinstance(channel, (str, Path)):
        return str(channel)
    return getattr(channel, "name", default) if channel is not None else default


@contextlib.contextmanager
def _open(channel: Channel, mode: str) -> Iterator[IO[bytes]]:
    """Yield a binary stream for `channel`, closing it only if opened here."""
    if channel is None:
        std = sys.stdin if "r" in mode else sys.stdout
        yield std.buffer
        return
    if not isinstance(channel, (str, Path)):
        yield channel
        return

    try:
        stream = open(channel, mode)  # noqa: SIM115
    except OSError as e:
        what = "input" if "r" in mode else "output"
        msg = f"cannot open {what} ({e.strerror})"
        raise StreamError(msg, stream=str(channel)) from e
    with stream:
        yield stream


def plaindata2sdds(
    input_config: InputConfig,
    sdds_config: SDDSConfig | None = None,
    input: Channel = None,  # noqa: A002
    output: Channel = None,
) -> int:
    """Convert a plain-data stream into an SDDS file.

    Parameters
    ----------
    input_config
        layout of the plain-data stream. It is validated before any I/O.
    sdds_config
        mode and order of the SDDS output. Defaults to binary, row-major.
    input, output
        paths or binary streams. ``None`` stands for the standard input and
        output.

    Returns
    -------
    pages
        the number of pages written.

    Raises
    ------
    .SDDSPlainError
        any configuration, stream or format error. Pages converted before
        the error are flushed to the output.
    """
    input_config.validate()
    if sdds_config is None:
        sdds_config = SDDSConfig()

    in_name = _name(input, "<stdin>")
    out_name = _name(output, "<stdout>")

    with _open(input, "rb") as src, _open(output, "wb") as dst:
        head, src = probe(src)
        try:
            check_input_mode(
                head, input_config.binary, row_count=not input_config.no_row_count
            )
        except SDDSPlainError as e:
            e.stream = in_name
            raise

        reader = PlainReader(src, input_config, name=in_name)

        with SDDSDataset(
            dst,
            binary=sdds_config.binary,
            capacity=input_config.capacity,
            name=out_name,
        ) as ds:
            ds.new_layout(
                column_major=sdds_config.column_major,
                description=sdds_config.description,
                contents=sdds_config.contents,
            )
            for p in input_config.parameters:
                ds.define_parameter(p.name, p.type, p.units, p.description, p.symbol)
            columns = [c for c in input_config.columns if not c.skip]
            for c in columns:
                ds.define_column(c.name, c.type, c.units, c.description, c.symbol)
            ds.write_layout()

            ds.start_page(input_config.capacity.initial)
            for page in reader:
                for i, p in enumerate(input_config.parameters):
                    ds.set_parameter(i, page.parameters[p.name].value)

                rows = len(page)
                if columns and rows > ds.get_capacity():
                    ds.lengthen_page(rows - ds.get_capacity())
                for i, c in enumerate(columns):
                    ds.set_column(i, page[c.name], rows)

                ds.write_page()
                ds.start_page(input_config.capacity.initial)

            log.info(f"converted {ds.pages_written} pages from {in_name}")
            return ds.pages_written


def sdds2plaindata(
    output_config: OutputConfig,
    input: Channel = None,  # noqa: A002
    output: Channel = None,
) -> int:
    """Convert an SDDS file into a plain-data stream.

    Parameters
    ----------
    output_config
        the selection and layout of the plain-data output. It is validated
        before any I/O; selections are checked against the SDDS header.
    input, output
        paths or binary streams. ``None`` stands for the standard input and
        output.

    Returns
    -------
    pages
        the number of pages written.
    """
    output_config.validate()

    in_name = _name(input, "<stdin>")
    out_name = _name(output, "<stdout>")

    with _open(input, "rb") as src, SDDSReader(src, name=in_name) as reader:
        writer = PlainWriter(None, output_config, reader.layout, name=out_name)
        with _open(output, "wb") as dst:
            writer.stream = dst
            for page in reader:
                writer.write_page(page)
            dst.flush()

    log.info(f"converted {writer.pages_written} pages from {in_name}")
    return writer.pages_written


def run(
    input_config: InputConfig,
    sdds_config: SDDSConfig | None = None,
    input: Channel = None,  # noqa: A002
    output: Channel = None,
) -> int:
    """Run :func:`plaindata2sdds` and return a process exit status.

    Errors are reported with a one-line diagnostic on the package logger and
    turn into status 1.
    """
    try:
        plaindata2sdds(input_config, sdds_config, input, output)
    except SDDSPlainError as e:
        log.error(str(e))
        return 1
    return 0
