from __future__ import annotations

import pytest

from sddsplain import settings
from sddsplain.datatype import ValueType
from sddsplain.exceptions import ConfigurationError
from sddsplain.plain import FieldSpec, InputConfig, OutputConfig, Selection
from sddsplain.plain.config import parse_mode, parse_order


def test_fieldspec_parse():
    f = FieldSpec.parse("Val,double,units=m,desc=a value,sym=V")
    assert f == FieldSpec("Val", ValueType.DOUBLE, "m", "a value", "V")
    assert not f.skip


def test_fieldspec_count():
    f = FieldSpec.parse("x,float,count=3")
    assert f.count == 3
    assert [g.name for g in f.expand()] == ["x1", "x2", "x3"]
    assert all(g.type is ValueType.FLOAT and g.count is None for g in f.expand())

    # a count of one still numbers the field
    assert [g.name for g in FieldSpec("y", "long", count=1).expand()] == ["y1"]
    assert FieldSpec("z", "long").expand() == [FieldSpec("z", "long")]


@pytest.mark.parametrize(
    "text",
    [
        "x",
        "x,complex",
        "x,double,units",
        "x,double,color=red",
        "x,double,count=two",
        "x,double,count=0",
        ",double",
    ],
)
def test_fieldspec_parse_errors(text):
    with pytest.raises(ConfigurationError):
        FieldSpec.parse(text)


def test_skip_column():
    f = FieldSpec.skip_column("short")
    assert f.skip
    assert f.name is None
    assert f.type is ValueType.SHORT

    with pytest.raises(ConfigurationError):
        FieldSpec("x", "short", skip=True)


def test_parse_order_and_mode():
    assert parse_order("rowMajor") is False
    assert parse_order("column") is True
    assert parse_order("columnMajorOrder") is True
    assert parse_mode("binary") is True
    assert parse_mode("ascii") is False

    with pytest.raises(ConfigurationError):
        parse_order("diagonal")
    with pytest.raises(ConfigurationError):
        parse_mode("hex")


def test_input_config_validate():
    config = InputConfig(
        parameters=[FieldSpec("p", "long")],
        columns=[
            FieldSpec("x", "double", count=2),
            FieldSpec.skip_column("long"),
            FieldSpec.skip_column("long"),
        ],
    )
    assert config.validate() is config
    assert [c.name for c in config.columns] == ["x1", "x2", None, None]
    assert config.capacity is settings.DEFAULT_ROW_CAPACITY

    config = InputConfig(binary=True, binary_rows=4, columns=[FieldSpec("x", "long")])
    config.validate()
    assert config.no_row_count


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"columns": [FieldSpec("a", "long"), FieldSpec("a", "double")]},
        {"parameters": [FieldSpec("a", "long")], "columns": [FieldSpec("a", "long")]},
        {"columns": [FieldSpec("a", "long", count=2), FieldSpec("a2", "long")]},
        {"parameters": [FieldSpec.skip_column("long")]},
        {"binary_rows": 3, "columns": [FieldSpec("a", "long")]},
        {"binary": True, "binary_rows": -1, "columns": [FieldSpec("a", "long")]},
        {"binary": True, "no_row_count": True, "columns": [FieldSpec("a", "long")]},
        {"binary": True, "skip_lines": 2, "columns": [FieldSpec("a", "long")]},
        {"skip_lines": -1, "columns": [FieldSpec("a", "long")]},
        {"separator": ", ", "columns": [FieldSpec("a", "long")]},
        {"separator": "", "columns": [FieldSpec("a", "long")]},
        {"comment_chars": "#" * 20, "columns": [FieldSpec("a", "long")]},
        {"eof_sequence": "", "columns": [FieldSpec("a", "long")]},
    ],
)
def test_input_config_errors(kwargs):
    with pytest.raises(ConfigurationError):
        InputConfig(**kwargs).validate()


def test_selection_parse():
    assert Selection.parse("x") == Selection("x")
    assert Selection.parse("x*,format=%10.3lf") == Selection("x*", "%10.3lf")
    assert Selection.parse("x,fo=%d") == Selection("x", "%d")

    for text in ("", "x,%d", "x,width=3"):
        with pytest.raises(ConfigurationError):
            Selection.parse(text)


def test_output_config_validate():
    config = OutputConfig(columns=[Selection("x")]).validate()
    assert config.separator == " "

    config = OutputConfig(columns=[Selection("x")], separator=", ").validate()
    assert config.separator == ", "

    config = OutputConfig(binary=True, parameters=[Selection("p")]).validate()
    assert config.separator is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"binary": True, "no_row_count": True, "columns": [Selection("x")]},
        {"binary": True, "labeled": True, "columns": [Selection("x")]},
        {"binary": True, "separator": ",", "columns": [Selection("x")]},
    ],
)
def test_output_config_errors(kwargs):
    with pytest.raises(ConfigurationError):
        OutputConfig(**kwargs).validate()
