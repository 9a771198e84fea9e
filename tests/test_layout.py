from __future__ import annotations

import pytest

from sddsplain.datatype import ValueType
from sddsplain.exceptions import LayoutError
from sddsplain.layout import ColumnDefinition, Layout, ParameterDefinition


def test_definitions():
    p = ParameterDefinition("Run", "long", units="s")
    assert p.type is ValueType.LONG
    assert p.fixed() is None

    p = ParameterDefinition("E", "double", fixed_value="1.5D+2")
    assert p.fixed() == 150.0

    c = ColumnDefinition("x", ValueType.FLOAT)
    assert c.type is ValueType.FLOAT

    with pytest.raises(LayoutError):
        ParameterDefinition("", "long")
    with pytest.raises(LayoutError):
        ColumnDefinition("", "long")


def test_layout():
    layout = Layout()
    assert layout.add_parameter(ParameterDefinition("a", "long")) == 0
    assert layout.add_parameter(ParameterDefinition("b", "string")) == 1
    assert layout.add_column(ColumnDefinition("a", "double")) == 0

    assert layout.parameter_names() == ["a", "b"]
    assert layout.column_names() == ["a"]
    assert layout.parameter_index("b") == 1
    assert layout.column_index("a") == 0

    with pytest.raises(LayoutError):
        layout.add_parameter(ParameterDefinition("a", "short"))
    with pytest.raises(LayoutError):
        layout.add_column(ColumnDefinition("a", "short"))
    with pytest.raises(LayoutError):
        layout.column_index("zz")
    with pytest.raises(LayoutError):
        layout.parameter_index("zz")


def test_version():
    layout = Layout(columns=[ColumnDefinition("x", "double")])
    assert layout.version() == 1
    layout.column_major = True
    assert layout.version() == 3
    layout.add_column(ColumnDefinition("n", "long64"))
    assert layout.version() == 4
    layout.add_parameter(ParameterDefinition("e", "longdouble"))
    assert layout.version() == 5
