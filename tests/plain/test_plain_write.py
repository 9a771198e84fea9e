from __future__ import annotations

import io
import logging

import numpy as np
import pytest

from sddsplain.exceptions import ConfigurationError
from sddsplain.layout import ColumnDefinition, Layout, ParameterDefinition
from sddsplain.plain import (
    FieldSpec,
    InputConfig,
    OutputConfig,
    PlainReader,
    PlainWriter,
    Selection,
    resolve_selections,
)
from sddsplain.types import Array, Page, Scalar


@pytest.fixture
def layout():
    return Layout(
        parameters=[
            ParameterDefinition("Run", "long", units="s"),
            ParameterDefinition("label", "string"),
        ],
        columns=[
            ColumnDefinition("x", "double", units="m"),
            ColumnDefinition("n", "long"),
            ColumnDefinition("xy", "float"),
            ColumnDefinition("name", "string"),
        ],
    )


def _page(rows: int = 2) -> Page:
    return Page(
        col_dict={
            "x": Array(np.array([1.5, 2.5])[:rows], vtype="double"),
            "n": Array(np.array([1, 2], dtype="i4")[:rows], vtype="long"),
            "xy": Array(np.array([0.25, 0.5], dtype="f4")[:rows], vtype="float"),
            "name": Array(["a b", "c"][:rows], vtype="string"),
        },
        parameters={
            "Run": Scalar(np.int32(42), vtype="long"),
            "label": Scalar("first run", vtype="string"),
        },
    )


def _write(layout, pages, **kwargs) -> bytes:
    buf = io.BytesIO()
    writer = PlainWriter(buf, OutputConfig(**kwargs).validate(), layout)
    for page in pages:
        writer.write_page(page)
    assert writer.pages_written == len(pages)
    return buf.getvalue()


def test_resolve_selections(layout, caplog):
    config = OutputConfig(
        parameters=[Selection("label"), Selection("Run", "%5ld")],
        columns=[Selection("x*", "%.2Lf"), Selection("n"), Selection("z*")],
    ).validate()

    with caplog.at_level(logging.WARNING):
        params, columns = resolve_selections(config, layout)

    assert [p.name for p in params] == ["label", "Run"]
    assert params[1].format == "%5d"
    assert params[1].units == "s"
    assert [c.name for c in columns] == ["n", "x", "xy"]
    assert columns[1].format == "%.2f"
    assert columns[0].format is None
    assert "no column matches 'z*'" in caplog.text


@pytest.mark.parametrize(
    "kwargs",
    [
        {"parameters": [Selection("run")]},
        {"columns": [Selection("y")]},
        {"columns": [Selection("Run")]},
    ],
)
def test_resolve_selections_errors(layout, kwargs):
    config = OutputConfig(**kwargs).validate()
    with pytest.raises(ConfigurationError):
        resolve_selections(config, layout)


def test_ascii(layout):
    data = _write(
        layout,
        [_page()],
        parameters=[Selection("Run"), Selection("label")],
        columns=[Selection("n"), Selection("x"), Selection("name")],
    )
    assert data.decode() == '42\n"first run"\n\t2\n1 1.5 "a b"\n2 2.5 c\n'


def test_ascii_options(layout):
    data = _write(
        layout,
        [_page()],
        columns=[Selection("n", "%03d"), Selection("x")],
        no_row_count=True,
        column_major=True,
    )
    assert data.decode() == "001 002\n1.5 2.5\n"


def test_labeled(layout):
    data = _write(
        layout,
        [_page(), _page(0)],
        parameters=[Selection("Run")],
        columns=[Selection("x"), Selection("n")],
        separator=",",
        labeled=True,
    )
    page = "Run,s,42\n\t{rows}\nx,n\nm,\n"
    assert data.decode() == (
        page.format(rows=2) + "1.5,1\n2.5,2\n" + page.format(rows=0)
    )


def test_parameters_only(layout):
    data = _write(layout, [_page()], parameters=[Selection("Run", "%.1f")])
    assert data.decode() == "42.0\n\t0\n"


def test_binary(layout):
    data = _write(
        layout,
        [_page()],
        binary=True,
        parameters=[Selection("label")],
        columns=[Selection("n"), Selection("name")],
    )
    assert data == (
        np.int32(2).tobytes()
        + np.int32(9).tobytes()
        + b"first run"
        + np.int32(1).tobytes()
        + np.int32(3).tobytes()
        + b"a b"
        + np.int32(2).tobytes()
        + np.int32(1).tobytes()
        + b"c"
    )


def test_binary_column_major(layout):
    data = _write(
        layout,
        [_page(), _page(0)],
        binary=True,
        column_major=True,
        parameters=[Selection("Run")],
        columns=[Selection("x"), Selection("xy")],
    )
    page = np.int32(2).tobytes() + np.int32(42).tobytes()
    assert data == (
        page
        + np.array([1.5, 2.5], "<f8").tobytes()
        + np.array([0.25, 0.5], "<f4").tobytes()
        + np.int32(0).tobytes()
        + np.int32(42).tobytes()
    )


def _mixed_page(label: str, flag: str, rows: int) -> Page:
    return Page(
        col_dict={
            "s": Array(["a,b", "", 'say "hi"'][:rows], vtype="string"),
            "c": Array(["y", " ", ","][:rows], vtype="character"),
            "f": Array(np.array([0.1, -2.5, 1e30], "f4")[:rows], vtype="float"),
            "n": Array(np.array([2**40, -1, 0], "i8")[:rows], vtype="long64"),
        },
        parameters={
            "label": Scalar(label, vtype="string"),
            "flag": Scalar(flag, vtype="character"),
            "count": Scalar(np.int64(2**40), vtype="long64"),
        },
    )


@pytest.mark.parametrize(
    ("binary", "column_major", "separator"),
    [
        (False, False, None),
        (False, True, None),
        (False, False, ","),
        (False, True, ","),
        (True, False, None),
        (True, True, None),
    ],
)
def test_written_pages_read_back(binary, column_major, separator):
    layout = Layout(
        parameters=[
            ParameterDefinition("label", "string"),
            ParameterDefinition("flag", "character"),
            ParameterDefinition("count", "long64"),
        ],
        columns=[
            ColumnDefinition("s", "string"),
            ColumnDefinition("c", "character"),
            ColumnDefinition("f", "float"),
            ColumnDefinition("n", "long64"),
        ],
    )
    pages = [_mixed_page("run, one", "q", 3), _mixed_page("", ",", 0)]
    data = _write(
        layout,
        pages,
        binary=binary,
        column_major=column_major,
        separator=separator,
        parameters=[Selection("label"), Selection("flag"), Selection("count")],
        columns=[Selection("s"), Selection("c"), Selection("f"), Selection("n")],
    )

    config = InputConfig(
        binary=binary,
        column_major=column_major,
        separator=separator,
        recover=False,
        parameters=[
            FieldSpec("label", "string"),
            FieldSpec("flag", "character"),
            FieldSpec("count", "long64"),
        ],
        columns=[
            FieldSpec("s", "string"),
            FieldSpec("c", "character"),
            FieldSpec("f", "float"),
            FieldSpec("n", "long64"),
        ],
    ).validate()
    first, second = PlainReader(io.BytesIO(data), config)

    assert first.parameter_values() == {
        "label": "run, one",
        "flag": "q",
        "count": 2**40,
    }
    assert list(first["s"]) == ["a,b", "", 'say "hi"']
    assert list(first["c"]) == ["y", " ", ","]
    assert np.array_equal(first["f"].nda, np.array([0.1, -2.5, 1e30], "f4"))
    assert first["f"].nda.dtype == np.float32
    assert list(first["n"]) == [2**40, -1, 0]

    assert second.parameter_values() == {"label": "", "flag": ",", "count": 2**40}
    assert len(second) == 0
