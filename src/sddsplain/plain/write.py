"""Writing pages to plain-data streams."""

from __future__ import annotations

import logging
from typing import IO, NamedTuple

import numpy as np

from .. import codec, utils
from ..datatype import ValueType
from ..exceptions import ConfigurationError
from ..layout import ColumnDefinition, Layout, ParameterDefinition
from ..sdds.write import write_row_count
from ..types import Page
from .config import OutputConfig

log = logging.getLogger(__name__)


class Field(NamedTuple):
    """A selected parameter or column, resolved against a layout."""

    name: str
    type: ValueType
    units: str | None
    format: str | None


def _resolve(
    definition: ParameterDefinition | ColumnDefinition, fmt: str | None
) -> Field:
    if fmt is not None:
        fmt = utils.normalize_format(fmt)
    return Field(definition.name, definition.type, definition.units, fmt)


def resolve_selections(
    config: OutputConfig, layout: Layout
) -> tuple[list[Field], list[Field]]:
    """Match the selections of `config` with the definitions of `layout`.

    Column selections holding wildcards expand to every matching column, in
    file order, that was not selected before. Selections without wildcards
    must name an existing parameter or column.

    Returns
    -------
    parameters, columns
        the selected fields, in output order.

    Raises
    ------
    .ConfigurationError
        if an explicit selection does not exist in `layout`.
    """
    parameters = []
    for sel in config.parameters:
        if sel.name not in layout.parameter_names():
            msg = f"parameter '{sel.name}' does not exist"
            raise ConfigurationError(msg, obj=sel.name)
        definition = layout.parameters[layout.parameter_index(sel.name)]
        parameters.append(_resolve(definition, sel.format))

    names = layout.column_names()
    explicit = [s for s in config.columns if not utils.has_wildcards(s.name)]
    patterns = [s for s in config.columns if utils.has_wildcards(s.name)]

    selected: list[tuple[str, str | None]] = []
    for sel in explicit:
        if sel.name not in names:
            msg = f"column '{sel.name}' does not exist"
            raise ConfigurationError(msg, obj=sel.name)
        selected.append((sel.name, sel.format))

    for sel in patterns:
        matched = utils.expand_wildcards(
            [sel.name], names, exclude=[n for n, _ in selected]
        )
        if not matched and not config.no_warnings:
            log.warning(f"no column matches '{sel.name}'")
        selected.extend((n, sel.format) for n in matched)

    columns = [
        _resolve(layout.columns[layout.column_index(name)], fmt)
        for name, fmt in selected
    ]
    return parameters, columns


class PlainWriter:
    """Write pages to a plain-data stream.

    In ASCII mode each page is written as one line per selected parameter,
    a tab-indented row count line (unless `no_row_count`), then one line per
    row, or one line per column in column-major order. Labeled output
    precedes each parameter value with its name and units, and the column
    data with a line of names and a line of units.

    In binary mode each page is an int32 row count (``INT32_MIN`` followed by
    an int64 for larger counts), the parameter values, then the column
    values. Strings are written as an int32 length followed by their bytes.

    Examples
    --------
    >>> from sddsplain.plain import OutputConfig, PlainWriter, Selection
    >>> from sddsplain.sdds import SDDSReader
    >>> config = OutputConfig(columns=[Selection("x")]).validate()
    >>> with SDDSReader("data.sdds") as f, open("data.txt", "wb") as out:
    ...     writer = PlainWriter(out, config, f.layout)
    ...     for page in f:
    ...         writer.write_page(page)
    """

    def __init__(
        self,
        stream: IO[bytes],
        config: OutputConfig,
        layout: Layout,
        name: str | None = None,
    ) -> None:
        self.stream = stream
        self.config = config
        self.name = name
        self.parameters, self.columns = resolve_selections(config, layout)
        self.pages_written = 0

        log.debug(
            f"selected parameters {[p.name for p in self.parameters]} "
            f"and columns {[c.name for c in self.columns]}"
        )

    def write_page(self, page: Page) -> None:
        """Write the selected parameters and columns of `page`."""
        rows = len(page) if self.columns else 0
        values = [page.parameters[p.name].value for p in self.parameters]
        columns = [page[c.name].nda for c in self.columns]

        if self.config.binary:
            self._write_binary(values, columns, rows)
        else:
            self._write_ascii(values, columns, rows)

        self.pages_written += 1
        log.debug(f"wrote page {self.pages_written} with {rows} rows")

    def _write_binary(self, values: list, columns: list[np.ndarray], rows: int) -> None:
        write_row_count(self.stream, rows)

        for p, value in zip(self.parameters, values):
            codec.write_scalar_binary(self.stream, value, p.type)

        if not self.columns or rows == 0:
            return
        vtypes = [c.type for c in self.columns]
        if self.config.column_major:
            for nda, vtype in zip(columns, vtypes):
                codec.write_array_binary(self.stream, nda[:rows], vtype)
        else:
            codec.write_rows_binary(self.stream, columns, vtypes, rows)

    def _write_ascii(self, values: list, columns: list[np.ndarray], rows: int) -> None:
        cfg = self.config
        sep = cfg.separator
        lines = []

        for p, value in zip(self.parameters, values):
            text = codec.emit_scalar_ascii(value, p.type, p.format, sep)
            if cfg.labeled:
                text = p.name + sep + (p.units or "") + sep + text
            lines.append(text)

        if not cfg.no_row_count:
            lines.append(f"\t{rows}")

        if cfg.labeled and self.columns:
            lines.append(sep.join(c.name for c in self.columns))
            lines.append(sep.join(c.units or "" for c in self.columns))

        if self.columns and rows > 0:
            text = [
                [
                    codec.emit_scalar_ascii(v, c.type, c.format, sep)
                    for v in nda[:rows]
                ]
                for c, nda in zip(self.columns, columns)
            ]
            if cfg.column_major:
                lines.extend(sep.join(col) for col in text)
            else:
                lines.extend(sep.join(row) for row in zip(*text))

        data = "".join(line + "\n" for line in lines)
        self.stream.write(data.encode(codec.TEXT_ENCODING, codec.TEXT_ERRORS))
