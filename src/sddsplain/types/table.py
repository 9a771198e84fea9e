"""
Implements an SDDS object representing an ordered set of typed columns of
equal length and corresponding utilities.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

import awkward as ak
import numpy as np
import pandas as pd

from .array import Array
from .sddsobj import SDDSObject

log = logging.getLogger(__name__)


class Table(SDDSObject, MutableMapping):
    """An ordered mapping of column names to :class:`.Array` of equal length.

    Unlike a plain dictionary the column order is meaningful: it is the
    order in which values appear on the wire.

    Note
    ----
    :meth:`__len__` returns the number of rows, not the number of columns.
    Use ``len(table.keys())`` for the latter.
    """

    def __new__(cls, *args, **kwargs) -> Table:
        obj = super().__new__(cls)
        obj.obj_dict = {}
        return obj

    def __init__(
        self,
        col_dict: Mapping[str, Array] | pd.DataFrame | None = None,
        size: int | None = None,
        attrs: Mapping[str, Any] | None = None,
    ) -> None:
        r"""
        Parameters
        ----------
        col_dict
            instantiate this table using the supplied mapping of column names
            and :class:`.Array`\ s, or a :class:`pandas.DataFrame`. Note: no
            copy is performed, the arrays are used directly.
        size
            sets the number of rows in the table. The arrays are resized to
            match it. If ``None``, the number of rows is taken from the first
            column, or zero for a table without columns.
        attrs
            a set of user attributes to be carried along with this object.
        """
        if isinstance(col_dict, pd.DataFrame):
            col_dict = {k: Array(v.to_numpy()) for k, v in col_dict.items()}

        self.size = 0
        if col_dict is not None:
            for name, obj in col_dict.items():
                self.obj_dict[name] = obj if isinstance(obj, Array) else Array(obj)

        if len(self.obj_dict) > 0:
            self.resize(new_size=size, do_warn=(size is None))
        elif size is not None:
            self.size = size

        super().__init__(attrs)

    def __getitem__(self, name: str) -> Array:
        return self.obj_dict[name]

    def __setitem__(self, name: str, obj: Array) -> None:
        self.add_column(name, obj)

    def __delitem__(self, name: str) -> None:
        self.remove_column(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.obj_dict)

    def __len__(self) -> int:
        """Provides ``__len__`` for this array-like class."""
        return self.size

    def __contains__(self, name: object) -> bool:
        return name in self.obj_dict

    def resize(self, new_size: int | None = None, do_warn: bool = False) -> None:
        """Set the number of rows, resizing every column.

        Columns keep their capacity (see :meth:`.Array.resize`), so shrinking
        and growing back is cheap.
        """
        for name, obj in self.obj_dict.items():
            if new_size is None:
                new_size = len(obj)
            elif len(obj) != new_size:
                if do_warn:
                    log.warning(
                        f"resizing column {name} with size {len(obj)} != {new_size}"
                    )
                obj.resize(new_size)
        self.size = 0 if new_size is None else new_size

    def reserve_capacity(self, capacity: int) -> None:
        """Make sure every column can hold at least `capacity` rows."""
        for obj in self.obj_dict.values():
            obj.reserve_capacity(capacity)

    def get_capacity(self) -> int:
        """Smallest capacity among the columns."""
        if len(self.obj_dict) == 0:
            return 0
        return min(obj.get_capacity() for obj in self.obj_dict.values())

    def add_column(self, name: str, obj: Array) -> None:
        """Append a column to the table.

        The first column of an empty table sets the number of rows, further
        columns must have exactly that length.
        """
        if not isinstance(obj, Array):
            obj = Array(obj)

        if len(self.obj_dict) == 0:
            self.size = len(obj)
        elif len(obj) != self.size:
            msg = (
                f"cannot add column {name} of length {len(obj)} to a table "
                f"with {self.size} rows"
            )
            raise ValueError(msg)

        self.obj_dict[name] = obj

    def remove_column(self, name: str) -> None:
        self.obj_dict.pop(name)

    def __eq__(self, other: Table) -> bool:
        if isinstance(other, Table):
            return (
                self.size == other.size
                and list(self.keys()) == list(other.keys())
                and all(self[k] == other[k] for k in self.keys())
            )

        return False

    def __str__(self) -> str:
        opts = {"show_dimensions": False, "index": False, "max_rows": 20}
        string = self.view_as("pd").to_string(**opts)

        if self.attrs:
            string += f"\nwith attrs={self.attrs}"

        return string

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + "(dict={"
            + ", ".join(f"{k!r}: {v!r}" for k, v in self.obj_dict.items())
            + f"}}, attrs={self.attrs!r})"
        )

    def view_as(
        self,
        library: str,
        with_units: bool = False,
        cols: list[str] | None = None,
    ) -> pd.DataFrame | np.NDArray | ak.Array:
        r"""View the Table data as a third-party format data structure.

        This is typically a zero-copy or nearly zero-copy operation.

        Supported third-party formats are:

        - ``pd``: returns a :class:`pandas.DataFrame`
        - ``ak``: returns an :class:`ak.Array` (record type)

        Parameters
        ----------
        library
            format of the returned data view.
        with_units
            forward physical units to the output data.
        cols
            a list of column names specifying the subset of the table's columns
            to be added to the data view structure.

        See Also
        --------
        .SDDSObject.view_as
        """
        if cols is None:
            cols = list(self.keys())

        if library == "pd":
            return pd.DataFrame(
                {col: self[col].view_as("pd", with_units=with_units) for col in cols}
            )

        if library == "ak":
            if with_units:
                msg = "Pint does not support Awkward yet, you must view the data with_units=False"
                raise ValueError(msg)

            if len(cols) == 0:
                return ak.Array([{}] * self.size)
            return ak.zip({col: self[col].view_as("ak") for col in cols}, depth_limit=1)

        if library == "np":
            msg = f"Format {library!r} is not supported for Tables."
            raise TypeError(msg)

        msg = f"{library!r} is not a supported third-party format."
        raise ValueError(msg)
