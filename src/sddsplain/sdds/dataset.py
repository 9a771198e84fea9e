"""Page-at-a-time writing of SDDS files."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

import numpy as np

from .. import datatype, settings
from ..datatype import ValueType
from ..exceptions import IncompletePageError, LayoutError, StreamError
from ..layout import ColumnDefinition, Layout, ParameterDefinition
from ..types import Array, Page, Scalar
from . import header, write

log = logging.getLogger(__name__)


class SDDSDataset:
    """Writes an SDDS file one page at a time.

    The dataset goes through three states. While the layout is open,
    parameters and columns are declared with :meth:`define_parameter` and
    :meth:`define_column`. :meth:`write_layout` commits the layout and writes
    the header; further declarations are rejected from then on. Each page is
    then filled with :meth:`start_page`, :meth:`set_parameter`,
    :meth:`lengthen_page` and :meth:`set_column`, and emitted with
    :meth:`write_page`. :meth:`terminate` flushes and closes the output.

    Examples
    --------
    >>> from sddsplain.sdds import SDDSDataset
    >>> with SDDSDataset("out.sdds", binary=True) as ds:
    ...     ds.define_parameter("Run", "long")
    ...     ds.define_column("x", "double", units="m")
    ...     ds.write_layout()
    ...     ds.start_page(3)
    ...     ds.set_parameter(0, 42)
    ...     ds.set_column("x", [1.0, 2.0, 3.0])
    ...     ds.write_page()
    """

    def __init__(
        self,
        output: str | Path | IO[bytes],
        binary: bool = False,
        column_major: bool = False,
        capacity: settings.RowCapacity | None = None,
        name: str | None = None,
    ) -> None:
        """
        Parameters
        ----------
        output
            path of the file to create, or a binary stream to write to. A
            stream passed in is flushed but not closed by :meth:`terminate`.
        binary
            write a binary data region instead of an ASCII one.
        column_major
            store each column contiguously.
        capacity
            row allocation policy of the pages. Defaults to
            :data:`.settings.DEFAULT_ROW_CAPACITY`.
        name
            name of the output used in error messages. Defaults to the path.
        """
        if isinstance(output, (str, Path)):
            try:
                self.stream = open(output, "wb")  # noqa: SIM115
            except OSError as e:
                msg = f"cannot open output ({e.strerror})"
                raise StreamError(msg, stream=str(output)) from e
            self._owns_stream = True
            self.name = str(output) if name is None else name
        else:
            self.stream = output
            self._owns_stream = False
            self.name = name

        self.capacity = settings.DEFAULT_ROW_CAPACITY if capacity is None else capacity
        self.new_layout(column_major=column_major, binary=binary)

    def __enter__(self) -> SDDSDataset:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.terminate()

    def new_layout(
        self,
        column_major: bool = False,
        binary: bool | None = None,
        no_row_counts: bool = False,
        description: str | None = None,
        contents: str | None = None,
    ) -> None:
        """Discard all declarations and start a new layout.

        Parameters
        ----------
        column_major
            the order attribute of the layout. It only affects how pages are
            written.
        binary
            data region mode. Keeps the current mode if ``None``.
        no_row_counts
            omit row counts in ASCII pages.
        description, contents
            text of the ``&description`` namelist.
        """
        if getattr(self, "committed", False):
            msg = "cannot start a new layout after it was written"
            raise LayoutError(msg, stream=self.name)

        if binary is None:
            binary = self.layout.binary

        self.layout = Layout(
            column_major=column_major,
            binary=binary,
            no_row_counts=no_row_counts and not binary,
            description=description,
            contents=contents,
        )
        self.committed = False
        self.pages_written = 0
        self.page = None
        self._set_parameters: set[int] = set()
        self._set_columns: set[int] = set()

    def _check_open(self, what: str) -> None:
        if self.committed:
            msg = f"cannot {what} after the layout was written"
            raise LayoutError(msg, stream=self.name)

    def define_parameter(
        self,
        name: str,
        type: ValueType | str,  # noqa: A002
        units: str | None = None,
        description: str | None = None,
        symbol: str | None = None,
        format_string: str | None = None,
        fixed_value: str | None = None,
    ) -> int:
        """Declare a parameter and return its index."""
        self._check_open(f"define parameter {name}")
        index = self.layout.add_parameter(
            ParameterDefinition(
                name, type, units, description, symbol, format_string, fixed_value
            )
        )
        log.debug(f"defined parameter {name} of type {type}")
        return index

    def define_column(
        self,
        name: str,
        type: ValueType | str,  # noqa: A002
        units: str | None = None,
        description: str | None = None,
        symbol: str | None = None,
        format_string: str | None = None,
    ) -> int:
        """Declare a column and return its index."""
        self._check_open(f"define column {name}")
        index = self.layout.add_column(
            ColumnDefinition(name, type, units, description, symbol, format_string)
        )
        log.debug(f"defined column {name} of type {type}")
        return index

    def write_layout(self) -> None:
        """Commit the layout and write the file header."""
        self._check_open("write the layout")
        header.write_header(self.stream, self.layout)
        self.committed = True
        log.debug(
            f"committed layout with {len(self.layout.parameters)} parameters "
            f"and {len(self.layout.columns)} columns"
        )

    def start_page(self, initial_capacity: int | None = None) -> Page:
        """Start a new empty page able to hold `initial_capacity` rows.

        Values set on the previous page are discarded.
        """
        if not self.committed:
            msg = "cannot start a page before the layout was written"
            raise LayoutError(msg, stream=self.name)

        if initial_capacity is None:
            initial_capacity = self.capacity.initial

        cols = {}
        for c in self.layout.columns:
            array = Array(shape=0, vtype=c.type, capacity=self.capacity)
            array.reserve_capacity(initial_capacity)
            cols[c.name] = array

        self.page = Page(col_dict=cols, size=0, page_number=self.pages_written + 1)
        for p in self.layout.parameters:
            if p.fixed_value is not None:
                self.page.add_parameter(p.name, Scalar(p.fixed(), vtype=p.type))
        self._set_parameters = set()
        self._set_columns = set()
        return self.page

    def _check_page(self) -> None:
        if self.page is None:
            msg = "no page was started"
            raise LayoutError(msg, stream=self.name)

    def _parameter_index(self, index: int | str) -> int:
        if isinstance(index, str):
            return self.layout.parameter_index(index)
        if not 0 <= index < len(self.layout.parameters):
            msg = f"parameter index {index} out of range"
            raise LayoutError(msg, stream=self.name)
        return index

    def _column_index(self, index: int | str) -> int:
        if isinstance(index, str):
            return self.layout.column_index(index)
        if not 0 <= index < len(self.layout.columns):
            msg = f"column index {index} out of range"
            raise LayoutError(msg, stream=self.name)
        return index

    def set_parameter(self, index: int | str, value: Any) -> None:
        """Set the value of a parameter on the current page.

        Raises
        ------
        .TypeMismatchError
            if `value` does not match the declared type.
        """
        self._check_page()
        index = self._parameter_index(index)
        definition = self.layout.parameters[index]
        datatype.check_value(definition.type, value, definition.name)

        if definition.type.is_numeric:
            value = definition.type.dtype.type(value)
        self.page.add_parameter(definition.name, Scalar(value, vtype=definition.type))
        self._set_parameters.add(index)

    def get_capacity(self) -> int:
        """Number of rows the current page can hold without lengthening."""
        self._check_page()
        if len(self.layout.columns) == 0:
            return 0
        return self.page.get_capacity()

    def lengthen_page(self, extra_rows: int) -> None:
        """Grow the capacity of the current page by `extra_rows` rows."""
        self._check_page()
        if extra_rows < 0:
            msg = f"cannot lengthen a page by {extra_rows} rows"
            raise LayoutError(msg, stream=self.name)
        self.page.reserve_capacity(self.get_capacity() + extra_rows)

    def set_column(
        self, index: int | str, values: Sequence | np.ndarray, rows: int | None = None
    ) -> None:
        """Set the first `rows` values of a column on the current page.

        All the columns of a page must be set with the same number of rows,
        which must not exceed the page capacity (see :meth:`lengthen_page`).

        Raises
        ------
        .TypeMismatchError
            if `values` does not match the declared type.
        """
        self._check_page()
        index = self._column_index(index)
        definition = self.layout.columns[index]

        if isinstance(values, Array):
            values = values.nda
        values = np.asarray(
            values, dtype=object if definition.type is ValueType.STRING else None
        )
        if rows is None:
            rows = len(values)
        if len(values) < rows:
            msg = f"{rows} rows requested but only {len(values)} values given"
            raise LayoutError(msg, stream=self.name, obj=definition.name)
        if rows > 0:
            datatype.check_array(definition.type, values, definition.name)

        if len(self._set_columns) > 0 and rows != len(self.page):
            msg = f"column has {rows} rows but the page has {len(self.page)}"
            raise LayoutError(msg, stream=self.name, obj=definition.name)

        array = self.page[definition.name]
        if rows > array.get_capacity():
            msg = (
                f"{rows} rows exceed the page capacity of "
                f"{array.get_capacity()}, lengthen the page first"
            )
            raise LayoutError(msg, stream=self.name, obj=definition.name)

        array.resize(rows)
        array.nda[:] = values[:rows]
        self.page.size = rows
        self._set_columns.add(index)

    def write_page(self) -> None:
        """Write the current page.

        The page values are left in place, so that the caller may modify and
        write them again.

        Raises
        ------
        .IncompletePageError
            if a declared column or a parameter without fixed value was not
            set since :meth:`start_page`.
        """
        if not self.committed:
            msg = "cannot write a page before the layout was written"
            raise LayoutError(msg, stream=self.name)
        self._check_page()

        missing = [
            c.name
            for i, c in enumerate(self.layout.columns)
            if i not in self._set_columns
        ]
        missing += [
            p.name
            for i, p in enumerate(self.layout.parameters)
            if i not in self._set_parameters and p.fixed_value is None
        ]
        if missing:
            msg = f"values of {', '.join(missing)} were not set"
            raise IncompletePageError(msg, stream=self.name)

        rows = len(self.page)
        values = self.page.parameters
        parameters = [values[p.name].value for p in self.layout.parameters]
        columns = [self.page[c.name].nda for c in self.layout.columns]

        self.pages_written += 1
        if self.layout.binary:
            write.write_page_binary(self.stream, self.layout, parameters, columns, rows)
        else:
            write.write_page_ascii(
                self.stream, self.layout, parameters, columns, rows, self.pages_written
            )
        self.page.page_number = self.pages_written
        log.debug(f"wrote page {self.pages_written} with {rows} rows")

    def terminate(self) -> None:
        """Flush the output, and close it if it was opened by this object."""
        if self.stream is None:
            return
        try:
            self.stream.flush()
        finally:
            if self._owns_stream:
                self.stream.close()
            self.stream = None
            self.page = None
