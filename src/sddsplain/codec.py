"""Text and binary encodings of SDDS values.

Binary streams are little-endian by default (``byteorder="<"``); the SDDS
reader passes ``">"`` for files declaring ``!# big-endian``. Strings are
written as a signed 32-bit byte length followed by the UTF-8 bytes, with no
terminator. Characters occupy exactly one byte (Latin-1).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import IO, Any

import numpy as np

from . import utils
from .datatype import ValueType
from .exceptions import BadNumericError, FormatError, ShortReadError, StringTooLongError

log = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"
CHAR_ENCODING = "latin-1"

_int_prefix = re.compile(r"\s*([+-]?\d+)")
_float_prefix = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def parse_scalar(
    text: str,
    vtype: ValueType,
    name: str | None = None,
    max_length: int | None = None,
) -> Any:
    """Interpret `text` as a value of type `vtype`.

    Numbers follow ``sscanf`` semantics: leading whitespace is skipped and
    the longest valid prefix is converted, anything after it is ignored.
    Floating-point types accept Fortran ``D`` exponents. Characters and
    strings have their escape sequences interpreted; a character takes the
    first resulting glyph (or ``""`` for an empty field), which must fit in
    one byte. If `max_length` is given, longer strings and character fields
    are rejected.

    Raises
    ------
    .BadNumericError
        if no numeric prefix is found, the value overflows `vtype` or a
        character does not fit in one byte.
    .StringTooLongError
        if a string or character field is longer than `max_length` bytes.
    """
    if vtype.is_integer:
        m = _int_prefix.match(text)
        if m is None:
            msg = f"invalid {vtype} value '{text.strip()}'"
            raise BadNumericError(msg, obj=name)
        value = int(m.group(1))
        info = np.iinfo(vtype.dtype)
        if not info.min <= value <= info.max:
            msg = f"value {value} out of range for type {vtype}"
            raise BadNumericError(msg, obj=name)
        return vtype.dtype.type(value)

    if vtype.is_floating:
        m = _float_prefix.match(utils.d_to_e_notation(text))
        if m is None:
            msg = f"invalid {vtype} value '{text.strip()}'"
            raise BadNumericError(msg, obj=name)
        if vtype is ValueType.LONGDOUBLE:
            return np.longdouble(m.group(1))
        return vtype.dtype.type(float(m.group(1)))

    text = utils.interpret_escapes(text)
    if max_length is not None:
        _check_length(text, max_length, name)
    if vtype is ValueType.CHARACTER:
        if not text or text[0] == "\0":
            return ""
        if ord(text[0]) > 0xFF:
            msg = f"invalid {vtype} value '{text[0]}', not a single byte"
            raise BadNumericError(msg, obj=name)
        return text[0]
    return text


def _check_length(text: str, max_length: int, name: str | None) -> None:
    length = len(text.encode(TEXT_ENCODING, TEXT_ERRORS))
    if length > max_length:
        msg = f"string of {length} bytes exceeds {max_length}"
        raise StringTooLongError(msg, obj=name)


def emit_scalar_ascii(
    value: Any, vtype: ValueType, fmt: str | None = None, separator: str | None = None
) -> str:
    """Render a value as text.

    Parameters
    ----------
    value
        the value to render.
    vtype
        its type.
    fmt
        optional printf-style format. C length modifiers are accepted (see
        :func:`.utils.normalize_format`). Without a format, numbers are
        written with the shortest text that reads back to the same value,
        strings are quoted when empty or holding whitespace, and characters
        are written as one glyph (escaped if invisible).
    separator
        field separator of the output. Strings holding it are quoted and a
        character equal to it is escaped.
    """
    if fmt is not None:
        fmt = utils.normalize_format(fmt)
        if vtype.is_integer:
            return fmt % int(value)
        if vtype.is_floating:
            return fmt % float(value)
        return fmt % value

    if vtype.is_integer:
        return str(int(value))
    if vtype.is_floating:
        return str(vtype.dtype.type(value))
    if vtype is ValueType.CHARACTER:
        return utils.escape_character(value, separator)
    return utils.escape_string(value, separator=separator)


def _wire(vtype: ValueType, byteorder: str) -> np.dtype:
    dt = vtype.wire_dtype
    return dt if byteorder == "<" else dt.newbyteorder(byteorder)


def read_exact(stream: IO[bytes], n: int, what: str = "data") -> bytes:
    """Read exactly `n` bytes or raise :class:`.ShortReadError`."""
    data = stream.read(n)
    if data is None or len(data) != n:
        got = 0 if data is None else len(data)
        msg = f"unexpected end of stream reading {what} ({got} of {n} bytes)"
        raise ShortReadError(msg)
    return data


def read_int32(stream: IO[bytes], byteorder: str = "<") -> int:
    return int(np.frombuffer(read_exact(stream, 4, "int32"), f"{byteorder}i4")[0])


def read_int64(stream: IO[bytes], byteorder: str = "<") -> int:
    return int(np.frombuffer(read_exact(stream, 8, "int64"), f"{byteorder}i8")[0])


def write_int32(stream: IO[bytes], value: int) -> None:
    stream.write(np.int32(value).astype("<i4").tobytes())


def write_int64(stream: IO[bytes], value: int) -> None:
    stream.write(np.int64(value).astype("<i8").tobytes())


def _read_string(
    stream: IO[bytes], byteorder: str, name: str | None, max_length: int | None
) -> str:
    length = read_int32(stream, byteorder)
    if length < 0:
        msg = f"negative string length {length}"
        raise FormatError(msg, obj=name)
    if max_length is not None and length > max_length:
        msg = f"string of {length} bytes exceeds {max_length}"
        raise StringTooLongError(msg, obj=name)
    return read_exact(stream, length, "string").decode(TEXT_ENCODING, TEXT_ERRORS)


def read_scalar_binary(
    stream: IO[bytes],
    vtype: ValueType,
    byteorder: str = "<",
    name: str | None = None,
    max_length: int | None = None,
) -> Any:
    """Read one binary value of type `vtype` from `stream`.

    Strings longer than `max_length` bytes, if given, raise
    :class:`.StringTooLongError`.
    """
    if vtype is ValueType.STRING:
        return _read_string(stream, byteorder, name, max_length)

    dt = _wire(vtype, byteorder)
    data = read_exact(stream, dt.itemsize, str(vtype))
    if vtype is ValueType.CHARACTER:
        char = data.decode(CHAR_ENCODING)
        return "" if char == "\0" else char
    return vtype.dtype.type(np.frombuffer(data, dt)[0])


def write_scalar_binary(stream: IO[bytes], value: Any, vtype: ValueType) -> None:
    """Write one value of type `vtype` to `stream` (little-endian)."""
    if vtype is ValueType.STRING:
        data = value.encode(TEXT_ENCODING, TEXT_ERRORS)
        write_int32(stream, len(data))
        stream.write(data)
    elif vtype is ValueType.CHARACTER:
        stream.write((value or "\0").encode(CHAR_ENCODING)[:1])
    else:
        stream.write(np.asarray(value, dtype=vtype.wire_dtype).tobytes())


def _to_memory(nda: np.ndarray, vtype: ValueType) -> np.ndarray:
    if vtype is ValueType.CHARACTER:
        return np.char.decode(nda, CHAR_ENCODING).astype(vtype.dtype)
    return nda.astype(vtype.dtype)


def _to_wire(nda: np.ndarray, vtype: ValueType) -> np.ndarray:
    if vtype is ValueType.CHARACTER:
        return np.char.encode(np.asarray(nda).astype("U1"), CHAR_ENCODING).astype("S1")
    return np.asarray(nda).astype(vtype.wire_dtype)


def read_array_binary(
    stream: IO[bytes],
    vtype: ValueType,
    n: int,
    byteorder: str = "<",
    name: str | None = None,
    max_length: int | None = None,
) -> np.ndarray:
    """Read `n` contiguous binary values of type `vtype`."""
    if vtype is ValueType.STRING:
        out = np.empty(n, dtype=object)
        for i in range(n):
            out[i] = _read_string(stream, byteorder, name, max_length)
        return out

    dt = _wire(vtype, byteorder)
    data = read_exact(stream, n * dt.itemsize, f"{n} {vtype} values")
    return _to_memory(np.frombuffer(data, dt), vtype)


def write_array_binary(stream: IO[bytes], nda: np.ndarray, vtype: ValueType) -> None:
    """Write the values of `nda` contiguously as type `vtype`."""
    if vtype is ValueType.STRING:
        for value in nda:
            write_scalar_binary(stream, value, vtype)
        return
    stream.write(_to_wire(nda, vtype).tobytes())


def read_rows_binary(
    stream: IO[bytes],
    vtypes: Sequence[ValueType],
    n: int,
    byteorder: str = "<",
    names: Sequence[str | None] | None = None,
    max_length: int | None = None,
) -> list[np.ndarray]:
    """Read `n` interleaved (row-major) records, one value per type in `vtypes`.

    Returns one array per entry of `vtypes`.
    """
    names = list(names) if names is not None else [None] * len(vtypes)
    if not vtypes:
        return []

    if ValueType.STRING not in vtypes:
        record = np.dtype(
            [(f"f{i}", _wire(vt, byteorder)) for i, vt in enumerate(vtypes)]
        )
        data = read_exact(stream, n * record.itemsize, f"{n} rows")
        recs = np.frombuffer(data, record)
        return [_to_memory(recs[f"f{i}"], vt) for i, vt in enumerate(vtypes)]

    out = [np.empty(n, dtype=vt.dtype) for vt in vtypes]
    for row in range(n):
        for i, vt in enumerate(vtypes):
            out[i][row] = read_scalar_binary(
                stream, vt, byteorder, names[i], max_length
            )
    return out


def write_rows_binary(
    stream: IO[bytes], ndas: Sequence[np.ndarray], vtypes: Sequence[ValueType], n: int
) -> None:
    """Write the first `n` elements of `ndas` interleaved (row-major)."""
    if not vtypes:
        return
    if ValueType.STRING not in vtypes:
        record = np.dtype([(f"f{i}", vt.wire_dtype) for i, vt in enumerate(vtypes)])
        recs = np.empty(n, dtype=record)
        for i, (nda, vt) in enumerate(zip(ndas, vtypes)):
            recs[f"f{i}"] = _to_wire(nda[:n], vt)
        stream.write(recs.tobytes())
        return

    for row in range(n):
        for nda, vt in zip(ndas, vtypes):
            write_scalar_binary(stream, nda[row], vt)
