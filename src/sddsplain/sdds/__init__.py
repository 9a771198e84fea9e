"""Reading and writing of SDDS files.

:class:`.SDDSDataset` writes a file page by page, :class:`.SDDSReader`
iterates over the pages of an existing one. Both ASCII and binary data
regions are supported, in row-major or column-major order.
"""

from __future__ import annotations

from .dataset import SDDSDataset
from .header import format_header, read_header, write_header
from .read import SDDSReader

__all__ = [
    "SDDSDataset",
    "SDDSReader",
    "format_header",
    "read_header",
    "write_header",
]
