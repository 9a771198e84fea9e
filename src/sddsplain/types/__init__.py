"""SDDS in-memory data objects.

A dataset streams as a sequence of :class:`.Page`. Each page is a
:class:`.Table` of equal-length :class:`.Array` columns carrying one
:class:`.Scalar` per parameter.
"""

from __future__ import annotations

from .array import Array
from .page import Page
from .scalar import Scalar
from .sddsobj import SDDSObject
from .table import Table

__all__ = [
    "Array",
    "Page",
    "SDDSObject",
    "Scalar",
    "Table",
]
