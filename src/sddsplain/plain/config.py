"""Declarative description of plain-data streams and of the SDDS side.

These objects are usually built by the command line front end, but can be
created directly when the converters are used as a library. Every
configuration is checked with ``validate()`` before any I/O takes place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .. import datatype, settings
from ..datatype import ValueType
from ..exceptions import ConfigurationError
from ..tokenizer import split_tokens

log = logging.getLogger(__name__)

MAX_COMMENT_CHARS = 19


def parse_order(value: str) -> bool:
    """Return whether an order keyword means column-major."""
    value = value.strip()
    if value in ("row", "rowMajor", "rowMajorOrder"):
        return False
    if value in ("column", "columnMajor", "columnMajorOrder"):
        return True
    msg = f"invalid order '{value}', expected row or column"
    raise ConfigurationError(msg)


def parse_mode(value: str) -> bool:
    """Return whether a mode keyword means binary."""
    value = value.strip()
    if value in ("ascii", "a"):
        return False
    if value in ("binary", "b"):
        return True
    msg = f"invalid mode '{value}', expected ascii or binary"
    raise ConfigurationError(msg)


@dataclass
class FieldSpec:
    """Declaration of one parameter or column of a plain-data stream.

    Parameters
    ----------
    name
        the field name, ``None`` for a skipped column.
    type
        the value type.
    units, description, symbol
        decorations copied to the SDDS layout.
    count
        if not ``None``, the field stands for `count` fields named
        ``<name>1`` to ``<name><count>``, see :meth:`expand`.
    skip
        the column is consumed from the input but discarded.
    """

    name: str | None
    type: ValueType
    units: str | None = None
    description: str | None = None
    symbol: str | None = None
    count: int | None = None
    skip: bool = False

    def __post_init__(self) -> None:
        self.type = datatype.type_of(self.type)
        if self.skip:
            if self.name is not None or self.count is not None:
                msg = "a skipped column has no name and no count"
                raise ConfigurationError(msg)
            return
        if not self.name:
            msg = "field name must be nonempty"
            raise ConfigurationError(msg)
        if self.count is not None and self.count <= 0:
            msg = f"invalid count value {self.count} for {self.name}"
            raise ConfigurationError(msg, obj=self.name)

    @classmethod
    def parse(cls, text: str) -> FieldSpec:
        """Build a field from the ``name,type[,key=value...]`` syntax.

        Recognized keys are ``units``, ``description``, ``symbol`` and
        ``count``. Keys may be abbreviated.

        Examples
        --------
        >>> [f.name for f in FieldSpec.parse("x,double,count=3").expand()]
        ['x1', 'x2', 'x3']
        """
        items = split_tokens(text, ",")
        if len(items) < 2:
            msg = f"invalid field syntax '{text}', expected name,type[,key=value...]"
            raise ConfigurationError(msg)

        kwargs = {}
        for item in items[2:]:
            if "=" not in item:
                msg = f"invalid field syntax '{item}', expected key=value"
                raise ConfigurationError(msg, obj=items[0])
            key, value = item.split("=", 1)
            key = _match_key(key, ("units", "description", "symbol", "count"))
            if key == "count":
                try:
                    kwargs["count"] = int(value)
                except ValueError:
                    msg = f"invalid count value '{value}'"
                    raise ConfigurationError(msg, obj=items[0]) from None
            else:
                kwargs[key] = value

        return cls(items[0], items[1], **kwargs)

    @classmethod
    def skip_column(cls, type: ValueType | str) -> FieldSpec:  # noqa: A002
        """A column whose values are read and discarded."""
        return cls(None, type, skip=True)

    def expand(self) -> list[FieldSpec]:
        """Apply the `count` rule, returning the individual fields."""
        if self.count is None:
            return [self]
        return [
            replace(self, name=f"{self.name}{i}", count=None)
            for i in range(1, self.count + 1)
        ]


def _match_key(key: str, keys: tuple[str, ...]) -> str:
    key = key.strip()
    matches = [k for k in keys if k.startswith(key)] if key else []
    if len(matches) != 1:
        msg = f"unknown key '{key}', expected one of {', '.join(keys)}"
        raise ConfigurationError(msg)
    return matches[0]


def expand_fields(fields: list[FieldSpec]) -> list[FieldSpec]:
    """Expand every `count` of `fields`, keeping the declaration order."""
    out = []
    for f in fields:
        out.extend(f.expand())
    return out


@dataclass
class InputConfig:
    """How to read a plain-data stream.

    Parameters
    ----------
    binary
        binary stream instead of ASCII.
    separator
        single-character field separator. ``None`` splits on whitespace.
    comment_chars
        lines beginning with any of these characters are skipped.
    no_row_count
        the stream carries no row counts.
    binary_rows
        fixed row count of a count-less binary stream, which then holds a
        single page.
    column_major
        each column is stored contiguously (one line per column in ASCII).
    parameters, columns
        the fields, in stream order. Counts are expanded by
        :meth:`validate`.
    skip_lines
        number of lines dropped at the start of an ASCII stream.
    eof_sequence
        an ASCII line starting with this text ends the stream.
    fillin
        substitute ``0`` (or ``""``) for missing trailing fields of a row.
    recover
        drop rows holding unparsable values instead of failing.
    no_warnings
        do not report dropped rows and discarded pages.
    capacity
        row allocation policy. Defaults to
        :data:`.settings.DEFAULT_ROW_CAPACITY`.
    """

    binary: bool = False
    separator: str | None = None
    comment_chars: str = ""
    no_row_count: bool = False
    binary_rows: int | None = None
    column_major: bool = False
    parameters: list[FieldSpec] = field(default_factory=list)
    columns: list[FieldSpec] = field(default_factory=list)
    skip_lines: int = 0
    eof_sequence: str | None = None
    fillin: bool = False
    recover: bool = True
    no_warnings: bool = False
    capacity: settings.RowCapacity | None = None

    def validate(self) -> InputConfig:
        """Check the compatibility rules and expand field counts.

        Returns the configuration itself.

        Raises
        ------
        .ConfigurationError
            if any rule is violated.
        """
        if not self.parameters and not self.columns:
            msg = "at least one parameter or column must be declared"
            raise ConfigurationError(msg)

        if any(p.skip for p in self.parameters):
            msg = "parameters cannot be skipped"
            raise ConfigurationError(msg)

        if self.binary_rows is not None:
            if not self.binary:
                msg = "binary_rows requires binary input"
                raise ConfigurationError(msg)
            if self.binary_rows < 0:
                msg = f"invalid binary_rows value {self.binary_rows}"
                raise ConfigurationError(msg)
            self.no_row_count = True
        elif self.binary and self.no_row_count:
            msg = "binary input without row counts requires binary_rows"
            raise ConfigurationError(msg)

        if self.skip_lines < 0:
            msg = f"invalid skip_lines value {self.skip_lines}"
            raise ConfigurationError(msg)
        if self.skip_lines and self.binary:
            msg = "skip_lines does not work with binary input"
            raise ConfigurationError(msg)

        if self.separator is not None and len(self.separator) != 1:
            msg = f"separator must be exactly one character, got '{self.separator}'"
            raise ConfigurationError(msg)

        if len(self.comment_chars) > MAX_COMMENT_CHARS:
            msg = f"at most {MAX_COMMENT_CHARS} comment characters are allowed"
            raise ConfigurationError(msg)

        if self.eof_sequence is not None and self.eof_sequence == "":
            msg = "eof_sequence must be nonempty"
            raise ConfigurationError(msg)

        self.parameters = expand_fields(self.parameters)
        self.columns = expand_fields(self.columns)

        names = [f.name for f in self.parameters] + [
            f.name for f in self.columns if not f.skip
        ]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            msg = f"duplicated field names {dupes}"
            raise ConfigurationError(msg)

        if self.capacity is None:
            self.capacity = settings.DEFAULT_ROW_CAPACITY

        return self


@dataclass
class SDDSConfig:
    """How to write (or what was read from) the SDDS side of a conversion.

    Parameters
    ----------
    binary
        binary data region instead of ASCII.
    column_major
        store each column contiguously.
    description, contents
        text of the ``&description`` namelist.
    """

    binary: bool = True
    column_major: bool = False
    description: str | None = None
    contents: str | None = None


@dataclass
class Selection:
    """A parameter or column selected for plain-data output.

    `name` may hold shell-style wildcards for columns. `format` is an
    optional printf-style format string.
    """

    name: str
    format: str | None = None

    @classmethod
    def parse(cls, text: str) -> Selection:
        """Build a selection from the ``name[,format=<string>]`` syntax."""
        items = split_tokens(text, ",")
        if len(items) == 0 or not items[0]:
            msg = f"invalid selection syntax '{text}'"
            raise ConfigurationError(msg)
        fmt = None
        for item in items[1:]:
            if "=" not in item:
                msg = f"invalid selection syntax '{item}', expected format=<string>"
                raise ConfigurationError(msg, obj=items[0])
            key, value = item.split("=", 1)
            _match_key(key, ("format",))
            fmt = value
        return cls(items[0], fmt)


@dataclass
class OutputConfig:
    """How to write a plain-data stream from an SDDS file.

    Parameters
    ----------
    binary
        binary output instead of ASCII.
    separator
        field separator of ASCII output. Defaults to a single space.
    no_row_count
        omit the row counts of ASCII output.
    column_major
        write each column contiguously (one line per column in ASCII).
    parameters, columns
        the selected fields, in output order. Column names may hold
        wildcards.
    labeled
        precede ASCII parameter lines by their name and units and columns
        by a row of names and a row of units.
    no_warnings
        do not report unmatched wildcard selections.
    """

    binary: bool = False
    separator: str | None = None
    no_row_count: bool = False
    column_major: bool = False
    parameters: list[Selection] = field(default_factory=list)
    columns: list[Selection] = field(default_factory=list)
    labeled: bool = False
    no_warnings: bool = False

    def validate(self) -> OutputConfig:
        """Check the compatibility rules and fill in defaults.

        Raises
        ------
        .ConfigurationError
            if any rule is violated.
        """
        if not self.parameters and not self.columns:
            msg = "at least one parameter or column must be selected"
            raise ConfigurationError(msg)

        if self.binary:
            if self.no_row_count:
                msg = "binary output always carries row counts"
                raise ConfigurationError(msg)
            if self.labeled:
                msg = "labeled output requires ASCII mode"
                raise ConfigurationError(msg)
            if self.separator is not None:
                msg = "a separator requires ASCII output"
                raise ConfigurationError(msg)
        elif self.separator is None:
            self.separator = " "

        return self
