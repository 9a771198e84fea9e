"""Declarations of the parameters and columns of a dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from . import codec, datatype
from .datatype import ValueType
from .exceptions import LayoutError

log = logging.getLogger(__name__)


@dataclass
class ParameterDefinition:
    """Declaration of a parameter: a scalar carrying one value per page.

    A `fixed_value` is stored in the header instead of the data region and
    is the same on every page.
    """

    name: str
    type: ValueType
    units: str | None = None
    description: str | None = None
    symbol: str | None = None
    format_string: str | None = None
    fixed_value: str | None = None

    def __post_init__(self) -> None:
        self.type = datatype.type_of(self.type)
        if not self.name:
            msg = "parameter name must be nonempty"
            raise LayoutError(msg)

    def fixed(self) -> Any:
        """The fixed value parsed with the parameter type, or ``None``."""
        if self.fixed_value is None:
            return None
        return codec.parse_scalar(self.fixed_value, self.type, self.name)


@dataclass
class ColumnDefinition:
    """Declaration of a column: a typed vector with one element per row."""

    name: str
    type: ValueType
    units: str | None = None
    description: str | None = None
    symbol: str | None = None
    format_string: str | None = None

    def __post_init__(self) -> None:
        self.type = datatype.type_of(self.type)
        if not self.name:
            msg = "column name must be nonempty"
            raise LayoutError(msg)


@dataclass
class Layout:
    """Ordered parameter and column declarations plus data-region attributes.

    Parameters
    ----------
    parameters
        parameter declarations, in wire order.
    columns
        column declarations, in wire order.
    column_major
        whether the data region stores each column contiguously.
    binary
        whether the data region is binary (``mode=binary``).
    no_row_counts
        whether ASCII pages omit their row count line.
    description, contents
        free-form text of the ``&description`` namelist.
    byteorder
        ``"<"`` or ``">"``, binary byte order of the data region.
    """

    parameters: list[ParameterDefinition] = field(default_factory=list)
    columns: list[ColumnDefinition] = field(default_factory=list)
    column_major: bool = False
    binary: bool = False
    no_row_counts: bool = False
    description: str | None = None
    contents: str | None = None
    additional_header_lines: int = 0
    byteorder: str = "<"

    def add_parameter(self, definition: ParameterDefinition) -> int:
        """Append a parameter declaration and return its index."""
        if definition.name in self.parameter_names():
            msg = f"parameter {definition.name} already exists"
            raise LayoutError(msg, obj=definition.name)
        self.parameters.append(definition)
        return len(self.parameters) - 1

    def add_column(self, definition: ColumnDefinition) -> int:
        """Append a column declaration and return its index."""
        if definition.name in self.column_names():
            msg = f"column {definition.name} already exists"
            raise LayoutError(msg, obj=definition.name)
        self.columns.append(definition)
        return len(self.columns) - 1

    def parameter_names(self) -> list[str]:
        return [p.name for p in self.parameters]

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def parameter_index(self, name: str) -> int:
        try:
            return self.parameter_names().index(name)
        except ValueError:
            msg = f"no parameter named {name}"
            raise LayoutError(msg, obj=name) from None

    def column_index(self, name: str) -> int:
        try:
            return self.column_names().index(name)
        except ValueError:
            msg = f"no column named {name}"
            raise LayoutError(msg, obj=name) from None

    def version(self) -> int:
        """Lowest SDDS protocol version able to describe this layout."""
        types = {d.type for d in self.parameters} | {d.type for d in self.columns}
        if ValueType.LONGDOUBLE in types:
            return 5
        if ValueType.LONG64 in types:
            return 4
        if self.column_major:
            return 3
        return 1
