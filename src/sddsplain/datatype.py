"""The closed set of SDDS value types and their fixed properties."""

from __future__ import annotations

import enum
import re
from collections import OrderedDict

import numpy as np

from .exceptions import ConfigurationError, TypeMismatchError


class ValueType(enum.Enum):
    """Scalar value type of a parameter or column.

    The enum value is the name used for the type in SDDS headers and on the
    command line.
    """

    SHORT = "short"
    LONG = "long"
    LONG64 = "long64"
    FLOAT = "float"
    DOUBLE = "double"
    LONGDOUBLE = "longdouble"
    CHARACTER = "character"
    STRING = "string"

    def __str__(self) -> str:
        return self.value

    @property
    def is_integer(self) -> bool:
        return self in (ValueType.SHORT, ValueType.LONG, ValueType.LONG64)

    @property
    def is_floating(self) -> bool:
        return self in (ValueType.FLOAT, ValueType.DOUBLE, ValueType.LONGDOUBLE)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_floating

    @property
    def is_comparable(self) -> bool:
        return self.is_numeric

    @property
    def is_string(self) -> bool:
        return self is ValueType.STRING

    @property
    def dtype(self) -> np.dtype:
        """The :class:`numpy.dtype` used to hold values of this type in memory."""
        return _dtypes[self]

    @property
    def wire_dtype(self) -> np.dtype:
        """The :class:`numpy.dtype` of the binary on-wire representation.

        Binary streams are pinned to little-endian. ``longdouble`` keeps the
        host layout, since its width is platform dependent. Strings have no
        fixed-width representation and raise :class:`TypeError`.
        """
        if self is ValueType.STRING:
            msg = "strings have no fixed-width binary representation"
            raise TypeError(msg)
        return _wire_dtypes[self]


_dtypes: dict[ValueType, np.dtype] = {
    ValueType.SHORT: np.dtype(np.int16),
    ValueType.LONG: np.dtype(np.int32),
    ValueType.LONG64: np.dtype(np.int64),
    ValueType.FLOAT: np.dtype(np.float32),
    ValueType.DOUBLE: np.dtype(np.float64),
    ValueType.LONGDOUBLE: np.dtype(np.longdouble),
    ValueType.CHARACTER: np.dtype("U1"),
    ValueType.STRING: np.dtype(object),
}

_wire_dtypes: dict[ValueType, np.dtype] = {
    ValueType.SHORT: np.dtype("<i2"),
    ValueType.LONG: np.dtype("<i4"),
    ValueType.LONG64: np.dtype("<i8"),
    ValueType.FLOAT: np.dtype("<f4"),
    ValueType.DOUBLE: np.dtype("<f8"),
    ValueType.LONGDOUBLE: np.dtype(np.longdouble),
    ValueType.CHARACTER: np.dtype("S1"),
}

_type_names: dict[str, ValueType] = OrderedDict(
    [
        (r"^short$", ValueType.SHORT),
        (r"^(long|long32)$", ValueType.LONG),
        (r"^long64$", ValueType.LONG64),
        (r"^(float|float32)$", ValueType.FLOAT),
        (r"^(double|float64)$", ValueType.DOUBLE),
        (r"^longdouble$", ValueType.LONGDOUBLE),
        (r"^(character|char)$", ValueType.CHARACTER),
        (r"^string$", ValueType.STRING),
    ]
)
"""Mapping between regular expressions matching type names and value types."""


def type_of(name: str | ValueType) -> ValueType:
    """Return the :class:`ValueType` corresponding to a type name.

    Both the SDDS names (``long``, ``double``...) and the width-explicit
    aliases (``long32``, ``float64``...) are accepted.
    """
    if isinstance(name, ValueType):
        return name

    expr = name.strip()
    for regex, type_ in _type_names.items():
        if re.search(regex, expr):
            return type_

    msg = f"unknown data type '{expr}'"
    raise ConfigurationError(msg)


def size_of(vtype: ValueType | str) -> int | str:
    """Binary width in bytes of a value type, or ``"variable"`` for strings."""
    vtype = type_of(vtype)
    if vtype is ValueType.STRING:
        return "variable"
    return vtype.wire_dtype.itemsize


def check_value(vtype: ValueType, value, name: str | None = None) -> None:
    """Raise :class:`.TypeMismatchError` if `value` cannot hold `vtype` data."""
    ok = True
    if vtype.is_integer:
        ok = isinstance(value, (int, np.integer)) and not isinstance(
            value, (bool, np.bool_)
        )
    elif vtype.is_floating:
        ok = isinstance(value, (int, float, np.integer, np.floating)) and not (
            isinstance(value, (bool, np.bool_))
        )
    elif vtype is ValueType.CHARACTER:
        ok = isinstance(value, str) and len(value) <= 1
    elif vtype is ValueType.STRING:
        ok = isinstance(value, str)

    if not ok:
        msg = f"value {value!r} is not compatible with type '{vtype}'"
        raise TypeMismatchError(msg, obj=name)


def check_array(vtype: ValueType, nda: np.ndarray, name: str | None = None) -> None:
    """Raise :class:`.TypeMismatchError` if `nda` cannot hold `vtype` data."""
    kind = nda.dtype.kind
    if vtype.is_integer:
        ok = kind in "iu"
    elif vtype.is_floating:
        ok = kind in "iuf"
    elif vtype is ValueType.CHARACTER:
        ok = kind == "U" and nda.dtype.itemsize <= 4
    else:
        ok = kind in "UO"

    if not ok:
        msg = f"array of dtype {nda.dtype} is not compatible with type '{vtype}'"
        raise TypeMismatchError(msg, obj=name)


def infer_type(obj: object) -> ValueType:
    """Get the :class:`ValueType` matching a Python/NumPy scalar or array.

    Parameters
    ----------
    obj
        if a ``str``, returns ``string`` (or ``character`` for a single
        glyph held in a one-character NumPy dtype). If the object has a
        :class:`numpy.dtype`, that will be used for determining the type,
        otherwise the type of the object is cast to a :class:`numpy.dtype`.
    """
    if isinstance(obj, str):
        return ValueType.STRING

    dt = obj.dtype if hasattr(obj, "dtype") else np.dtype(type(obj))
    kind = dt.kind

    if kind == "U":
        return ValueType.CHARACTER if dt.itemsize == 4 else ValueType.STRING
    if kind in ("O", "S"):
        return ValueType.STRING
    if kind in ("i", "u"):
        if dt.itemsize <= 2:
            return ValueType.SHORT
        if dt.itemsize == 4:
            return ValueType.LONG
        return ValueType.LONG64
    if kind == "f":
        if dt.itemsize <= 4:
            return ValueType.FLOAT
        if dt.itemsize == 8:
            return ValueType.DOUBLE
        return ValueType.LONGDOUBLE

    msg = "cannot determine value type for object of type"
    raise TypeError(msg, type(obj).__name__)
