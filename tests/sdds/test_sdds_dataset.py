from __future__ import annotations

import io

import numpy as np
import pytest

from sddsplain import settings
from sddsplain.exceptions import (
    IncompletePageError,
    LayoutError,
    StreamError,
    TypeMismatchError,
)
from sddsplain.sdds import SDDSDataset, SDDSReader


def test_ascii_output():
    buf = io.BytesIO()
    with SDDSDataset(buf, binary=False) as ds:
        assert ds.define_parameter("Run", "long") == 0
        assert ds.define_column("x", "double") == 0
        assert ds.define_column("n", "long") == 1
        ds.write_layout()

        ds.start_page(2)
        ds.set_parameter(0, 42)
        ds.set_column("x", [1.5, 2.5])
        ds.set_column(1, np.array([1, 2]))
        ds.write_page()

    assert buf.getvalue().decode() == (
        "SDDS1\n"
        "&parameter name=Run, type=long, &end\n"
        "&column name=x, type=double, &end\n"
        "&column name=n, type=long, &end\n"
        "&data mode=ascii, &end\n"
        "! page number 1\n"
        "42\n"
        "                   2\n"
        "1.5 1\n"
        "2.5 2\n"
    )


def test_binary_output():
    buf = io.BytesIO()
    with SDDSDataset(buf, binary=True) as ds:
        ds.define_parameter("label", "string")
        ds.define_column("x", "short")
        ds.write_layout()
        header_size = len(buf.getvalue())

        ds.start_page()
        ds.set_parameter("label", "ab")
        ds.set_column("x", [1, 2, 3])
        ds.write_page()

    data = buf.getvalue()[header_size:]
    assert data == (
        np.int32(3).tobytes()
        + np.int32(2).tobytes()
        + b"ab"
        + np.array([1, 2, 3], dtype="<i2").tobytes()
    )


def test_fixed_value():
    buf = io.BytesIO()
    with SDDSDataset(buf, binary=True) as ds:
        ds.define_parameter("E", "double", units="GeV", fixed_value="2.5")
        ds.define_parameter("Run", "long")
        ds.write_layout()
        page = ds.start_page()
        assert page.parameters["E"].value == 2.5
        ds.set_parameter("Run", 7)
        ds.write_page()

    buf.seek(0)
    with SDDSReader(buf) as f:
        page = f.read_page()
        assert page.parameter_values() == {"E": 2.5, "Run": 7}
        assert page.parameters["E"].attrs["units"] == "GeV"


def test_lifecycle_errors():
    ds = SDDSDataset(io.BytesIO())
    ds.define_column("x", "double")

    with pytest.raises(LayoutError):
        ds.start_page()
    with pytest.raises(LayoutError):
        ds.write_page()
    with pytest.raises(LayoutError):
        ds.define_column("x", "long")

    ds.write_layout()
    with pytest.raises(LayoutError):
        ds.define_column("y", "long")
    with pytest.raises(LayoutError):
        ds.define_parameter("p", "long")
    with pytest.raises(LayoutError):
        ds.write_layout()
    with pytest.raises(LayoutError):
        ds.new_layout()
    with pytest.raises(LayoutError):
        ds.set_column("x", [1.0])

    ds.start_page()
    with pytest.raises(IncompletePageError):
        ds.write_page()
    with pytest.raises(LayoutError):
        ds.set_column("y", [1.0])
    with pytest.raises(LayoutError):
        ds.set_column(3, [1.0])
    ds.terminate()
    ds.terminate()


def test_set_errors():
    ds = SDDSDataset(io.BytesIO(), capacity=settings.RowCapacity(initial=2))
    ds.define_parameter("n", "long")
    ds.define_column("x", "double")
    ds.define_column("c", "character")
    ds.write_layout()
    ds.start_page()
    assert ds.get_capacity() == 2

    with pytest.raises(TypeMismatchError):
        ds.set_parameter("n", 1.5)
    with pytest.raises(TypeMismatchError):
        ds.set_column("x", ["a", "b"])
    with pytest.raises(TypeMismatchError):
        ds.set_column("c", ["ab"])
    with pytest.raises(LayoutError):
        ds.set_column("x", [1.0], rows=2)
    with pytest.raises(LayoutError):
        ds.set_column("x", [1.0, 2.0, 3.0])

    ds.lengthen_page(1)
    assert ds.get_capacity() == 3
    ds.set_column("x", [1.0, 2.0, 3.0])
    with pytest.raises(LayoutError):
        ds.set_column("c", ["a", "b"])
    with pytest.raises(LayoutError):
        ds.lengthen_page(-1)

    ds.set_column("c", ["a", "b", "c"])
    ds.set_parameter(0, np.int64(5))
    ds.write_page()
    assert ds.pages_written == 1
    ds.terminate()


def test_start_page_resets():
    buf = io.BytesIO()
    with SDDSDataset(buf, binary=True) as ds:
        ds.define_column("x", "long")
        ds.write_layout()
        for n in (3, 0, 1):
            ds.start_page()
            ds.set_column("x", list(range(n)))
            ds.write_page()

    buf.seek(0)
    with SDDSReader(buf) as f:
        assert [len(p) for p in f] == [3, 0, 1]


def test_file_output(tmptestdir):
    path = tmptestdir / "dataset.sdds"
    with SDDSDataset(path) as ds:
        ds.define_column("x", "double", units="m", description="position")
        ds.write_layout()
        ds.start_page()
        ds.set_column("x", [0.5])
        ds.write_page()
    assert ds.stream is None

    with SDDSReader(path) as f:
        assert f.layout.columns[0].description == "position"
        assert list(f.read_page()["x"]) == [0.5]

    with pytest.raises(StreamError):
        SDDSDataset(tmptestdir / "no" / "such" / "dir.sdds")
