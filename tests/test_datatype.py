from __future__ import annotations

import numpy as np
import pytest

from sddsplain import datatype
from sddsplain.datatype import ValueType
from sddsplain.exceptions import ConfigurationError, TypeMismatchError


def test_type_of():
    assert datatype.type_of("short") is ValueType.SHORT
    assert datatype.type_of("long") is ValueType.LONG
    assert datatype.type_of("long32") is ValueType.LONG
    assert datatype.type_of("long64") is ValueType.LONG64
    assert datatype.type_of(" double ") is ValueType.DOUBLE
    assert datatype.type_of("float64") is ValueType.DOUBLE
    assert datatype.type_of("char") is ValueType.CHARACTER
    assert datatype.type_of("string") is ValueType.STRING
    assert datatype.type_of(ValueType.FLOAT) is ValueType.FLOAT

    with pytest.raises(ConfigurationError):
        datatype.type_of("ulong")
    with pytest.raises(ValueError):
        datatype.type_of("complex")


def test_size_of():
    assert datatype.size_of("short") == 2
    assert datatype.size_of("long") == 4
    assert datatype.size_of("long64") == 8
    assert datatype.size_of("float") == 4
    assert datatype.size_of("double") == 8
    assert datatype.size_of("character") == 1
    assert datatype.size_of("string") == "variable"


def test_properties():
    assert ValueType.LONG.is_integer
    assert ValueType.LONG.is_numeric
    assert not ValueType.LONG.is_floating
    assert ValueType.LONGDOUBLE.is_floating
    assert not ValueType.CHARACTER.is_numeric
    assert ValueType.STRING.is_string
    assert str(ValueType.LONG64) == "long64"

    assert ValueType.SHORT.dtype == np.int16
    assert ValueType.STRING.dtype == object
    assert ValueType.DOUBLE.wire_dtype == np.dtype("<f8")
    with pytest.raises(TypeError):
        _ = ValueType.STRING.wire_dtype


def test_check_value():
    datatype.check_value(ValueType.LONG, 3)
    datatype.check_value(ValueType.LONG, np.int64(3))
    datatype.check_value(ValueType.DOUBLE, 3)
    datatype.check_value(ValueType.DOUBLE, np.float32(1.5))
    datatype.check_value(ValueType.CHARACTER, "a")
    datatype.check_value(ValueType.CHARACTER, "")
    datatype.check_value(ValueType.STRING, "hello")

    with pytest.raises(TypeMismatchError):
        datatype.check_value(ValueType.LONG, 1.5)
    with pytest.raises(TypeMismatchError):
        datatype.check_value(ValueType.LONG, True)
    with pytest.raises(TypeMismatchError):
        datatype.check_value(ValueType.DOUBLE, "1.5")
    with pytest.raises(TypeMismatchError):
        datatype.check_value(ValueType.CHARACTER, "ab")
    with pytest.raises(TypeMismatchError):
        datatype.check_value(ValueType.STRING, 1)


def test_check_array():
    datatype.check_array(ValueType.LONG, np.array([1, 2]))
    datatype.check_array(ValueType.DOUBLE, np.array([1, 2]))
    datatype.check_array(ValueType.CHARACTER, np.array(["a", "b"]))
    datatype.check_array(ValueType.STRING, np.array(["ab", "c"], dtype=object))

    with pytest.raises(TypeMismatchError):
        datatype.check_array(ValueType.LONG, np.array([1.5]))
    with pytest.raises(TypeMismatchError):
        datatype.check_array(ValueType.CHARACTER, np.array(["ab"]))
    with pytest.raises(TypeMismatchError):
        datatype.check_array(ValueType.STRING, np.array([1.0]))


def test_infer_type():
    assert datatype.infer_type("abc") is ValueType.STRING
    assert datatype.infer_type(np.array(["a", "b"])) is ValueType.CHARACTER
    assert datatype.infer_type(np.array(["ab", "b"])) is ValueType.STRING
    assert datatype.infer_type(np.int16(1)) is ValueType.SHORT
    assert datatype.infer_type(np.array([1], dtype=np.int32)) is ValueType.LONG
    assert datatype.infer_type(np.array([1], dtype=np.int64)) is ValueType.LONG64
    assert datatype.infer_type(np.float32(1)) is ValueType.FLOAT
    assert datatype.infer_type(1.0) is ValueType.DOUBLE
