from __future__ import annotations

import numpy as np
import pint
import pytest

from sddsplain import Scalar
from sddsplain.datatype import ValueType
from sddsplain.exceptions import TypeMismatchError


def test_init():
    s = Scalar(np.int32(42), vtype="long")
    assert s.value == 42
    assert s.vtype is ValueType.LONG
    assert s.attrs == {}

    assert Scalar("abc").vtype is ValueType.STRING
    assert Scalar(1.5).vtype is ValueType.DOUBLE
    assert Scalar("", vtype="character").value == ""

    with pytest.raises(ValueError):
        Scalar([1, 2])
    with pytest.raises(TypeMismatchError):
        Scalar(1.5, vtype="long")
    with pytest.raises(TypeMismatchError):
        Scalar("ab", vtype="character")


def test_eq():
    assert Scalar(np.int32(1), vtype="long") == Scalar(1, vtype="long")
    assert Scalar(1, vtype="long") != Scalar(1, vtype="short")
    assert Scalar(1, vtype="long") != 1


def test_view():
    s = Scalar(2.0, attrs={"units": "m"})
    assert s.view_as() == 2.0

    q = s.view_as(with_units=True)
    assert isinstance(q, pint.Quantity)
    assert q.m == 2.0
    assert q.u == "meter"
