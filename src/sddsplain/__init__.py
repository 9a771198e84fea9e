"""
Conversion between headerless plain-data streams and SDDS (Self Describing
Data Sets) files.

A plain-data stream is a sequence of pages, each made of parameter values,
an optional row count and the values of a fixed set of columns, in ASCII or
binary, in row-major or column-major order. Its layout is not stored in the
stream and must be declared, see :class:`.plain.InputConfig`. The SDDS side
describes the same data with a self-describing header.

The in-memory data objects are:

* :class:`.Scalar`: typed parameter value. Access data via the :attr:`value`
  attribute
* :class:`.Array`: typed column backed by a :class:`numpy.ndarray`. Access
  data via the :attr:`nda` attribute
* :class:`.Table`: equal-length :class:`.Array` columns
* :class:`.Page`: a :class:`.Table` plus its parameter values, the unit in
  which both file formats are read and written

Conversions are run with :func:`.convert.plaindata2sdds` and
:func:`.convert.sdds2plaindata`, or from the command line with the
``plaindata2sdds`` and ``sdds2plaindata`` programs.
"""

from __future__ import annotations

from ._version import version as __version__
from .convert import plaindata2sdds, run, sdds2plaindata
from .datatype import ValueType
from .layout import ColumnDefinition, Layout, ParameterDefinition
from .plain import (
    FieldSpec,
    InputConfig,
    OutputConfig,
    PlainReader,
    PlainWriter,
    SDDSConfig,
    Selection,
)
from .sdds import SDDSDataset, SDDSReader
from .types import Array, Page, Scalar, SDDSObject, Table

__all__ = [
    "Array",
    "ColumnDefinition",
    "FieldSpec",
    "InputConfig",
    "Layout",
    "OutputConfig",
    "Page",
    "ParameterDefinition",
    "PlainReader",
    "PlainWriter",
    "SDDSConfig",
    "SDDSDataset",
    "SDDSObject",
    "SDDSReader",
    "Scalar",
    "Selection",
    "Table",
    "ValueType",
    "__version__",
    "plaindata2sdds",
    "run",
    "sdds2plaindata",
]
