"""
Implements an SDDS object representing a typed column vector and
corresponding utilities.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import awkward as ak
import numpy as np
import pandas as pd
import pint_pandas  # noqa: F401

from .. import datatype, settings
from ..datatype import ValueType
from ..units import default_units_registry as u
from .sddsobj import SDDSObject

log = logging.getLogger(__name__)


class Array(SDDSObject):
    r"""Holds a one-dimensional :class:`numpy.ndarray` of typed values.

    The array distinguishes its length (the number of valid elements, the
    authoritative prefix) from its capacity (the number of allocated
    elements). Growing within the capacity is free; beyond it the buffer is
    reallocated following a :class:`.settings.RowCapacity` policy, so that
    rows can be appended one at a time without quadratic copying. Capacity
    never shrinks.

    Strings are held in an ``object`` array of Python :class:`str`,
    characters in a ``U1`` array.
    """

    def __init__(
        self,
        nda: np.ndarray = None,
        shape: int | tuple[int] = 0,
        dtype: np.dtype = None,
        fill_val: float | int | str | None = None,
        vtype: ValueType | str | None = None,
        capacity: settings.RowCapacity | None = None,
        attrs: dict[str, Any] | None = None,
    ) -> None:
        """
        Parameters
        ----------
        nda
            An :class:`numpy.ndarray` to be used for this object's internal
            array. Note: the array is used directly when its dtype already
            matches `vtype`, otherwise it is converted. If not supplied,
            internal memory is newly allocated based on the shape and type
            arguments.
        shape
            Length of the internal array. Required if `nda` is ``None``,
            otherwise unused.
        dtype
            Specifies the type of the data in the array. Used to infer
            `vtype` when that is not given.
        fill_val
            If ``None``, numeric memory is allocated without initialization
            (strings are always initialized to ``""``). Otherwise, the array
            is allocated with all elements set to the corresponding fill
            value. If `nda` is not ``None``, this parameter is ignored.
        vtype
            The SDDS value type of the elements. Inferred from `nda` or
            `dtype` if ``None``.
        capacity
            growth policy used when the array must be enlarged. Defaults to
            :data:`.settings.DEFAULT_ROW_CAPACITY`.
        attrs
            A set of user attributes to be carried along with this object.
        """
        if isinstance(nda, Array):
            nda = nda.nda

        if vtype is not None:
            vtype = datatype.type_of(vtype)

        if nda is not None and not isinstance(nda, np.ndarray):
            nda = np.array(nda, dtype=object if vtype is ValueType.STRING else None)

        if vtype is not None:
            self.vtype = vtype
        elif nda is not None:
            self.vtype = datatype.infer_type(nda)
        elif dtype is not None:
            self.vtype = datatype.infer_type(np.empty(0, dtype=dtype))
        else:
            self.vtype = ValueType.DOUBLE

        if nda is None:
            n = shape[0] if isinstance(shape, tuple) else int(shape)
            nda = self._allocate(n, fill_val)
        elif nda.dtype != self.vtype.dtype:
            if len(nda) > 0:
                datatype.check_array(self.vtype, nda)
            nda = nda.astype(self.vtype.dtype)

        if nda.ndim != 1:
            msg = f"an Array must be one-dimensional, got shape {nda.shape}"
            raise ValueError(msg)

        self._nda = nda
        self._size = len(nda)
        self.policy = settings.DEFAULT_ROW_CAPACITY if capacity is None else capacity

        super().__init__(attrs)

    def _allocate(self, n: int, fill_val=None) -> np.ndarray:
        if self.vtype is ValueType.STRING:
            return np.full(n, "" if fill_val is None else fill_val, dtype=object)
        if fill_val is None:
            return np.empty(n, dtype=self.vtype.dtype)
        if fill_val == 0:
            return np.zeros(n, dtype=self.vtype.dtype)
        return np.full(n, fill_val, dtype=self.vtype.dtype)

    @property
    def nda(self) -> np.ndarray:
        """View of the valid elements of the buffer."""
        return self._nda[: self._size]

    @property
    def dtype(self) -> np.dtype:
        return self._nda.dtype

    def __len__(self) -> int:
        return self._size

    def get_capacity(self) -> int:
        """Number of elements allocated in the internal buffer."""
        return len(self._nda)

    def reserve_capacity(self, capacity: int) -> None:
        """Make sure at least `capacity` elements are allocated."""
        if capacity <= len(self._nda):
            return
        new = self._allocate(capacity, 0 if self.vtype.is_numeric else None)
        new[: self._size] = self._nda[: self._size]
        self._nda = new

    def resize(self, new_size: int) -> None:
        """Change the number of valid elements.

        Growing beyond the capacity reallocates the buffer according to the
        growth policy. Elements exposed by growing are zero (``""`` for
        strings and characters) unless they held data before a shrink.
        """
        if new_size < 0:
            msg = f"cannot resize to negative length {new_size}"
            raise ValueError(msg)
        if new_size > len(self._nda):
            self.reserve_capacity(self.policy.grow(len(self._nda), new_size))
        self._size = new_size

    def append(self, value) -> None:
        self.resize(len(self) + 1)
        self._nda[self._size - 1] = value

    def __getitem__(self, key):
        return self.nda[key]

    def __eq__(self, other: Array) -> bool:
        if isinstance(other, Array):
            return (
                self.vtype is other.vtype
                and self.attrs == other.attrs
                and np.array_equal(self.nda, other.nda)
            )

        return False

    def __iter__(self) -> Iterator:
        yield from self.nda

    def __str__(self) -> str:
        string = str(self.nda)
        if self.attrs:
            string += f" with attrs={self.attrs}"
        return string

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + "("
            + np.array2string(self.nda, prefix=self.__class__.__name__ + " ")
            + f", attrs={self.attrs!r})"
        )

    def view_as(
        self, library: str, with_units: bool = False
    ) -> pd.Series | np.NDArray | ak.Array:
        """View the Array data as a third-party format data structure.

        This is a zero-copy operation for numeric data. Supported third-party
        formats are:

        - ``pd``: returns a :class:`pandas.Series`
        - ``np``: returns the valid part of the internal buffer
          (:class:`numpy.ndarray`)
        - ``ak``: returns an :class:`ak.Array` initialized with the data

        Parameters
        ----------
        library
            format of the returned data view.
        with_units
            forward physical units to the output data.

        See Also
        --------
        .SDDSObject.view_as
        """
        attach_units = with_units and "units" in self.attrs

        if library == "pd":
            if attach_units:
                return pd.Series(
                    self.nda, dtype=f"pint[{self.attrs['units']}]", copy=False
                )
            return pd.Series(self.nda, copy=False)

        if library == "np":
            if attach_units:
                return self.nda * u(self.attrs["units"])

            return self.nda

        if library == "ak":
            if attach_units:
                msg = "Pint does not support Awkward yet, you must view the data with_units=False"
                raise ValueError(msg)

            if self.vtype in (ValueType.STRING, ValueType.CHARACTER):
                return ak.Array(self.nda.tolist())
            if self.vtype is ValueType.LONGDOUBLE:
                return ak.Array(self.nda.astype(np.float64))
            return ak.Array(self.nda)

        msg = f"{library} is not a supported third-party format."
        raise ValueError(msg)
