from __future__ import annotations

import awkward as ak
import numpy as np

from sddsplain import Array, Page, Scalar
from sddsplain.datatype import ValueType


def make_page():
    return Page(
        col_dict={
            "x": Array([1.0, 2.0, 3.0], vtype="double"),
            "n": Array([1, 2, 3], vtype="long"),
        },
        parameters={"Run": Scalar(np.int32(42), vtype="long")},
        page_number=2,
    )


def test_init():
    page = make_page()
    assert len(page) == 3
    assert page.page_number == 2
    assert list(page.parameters) == ["Run"]
    assert page.parameter_values() == {"Run": 42}

    empty = Page()
    assert len(empty) == 0
    assert empty.parameters == {}


def test_add_parameter():
    page = make_page()
    page.add_parameter("E", 1.5)
    page.add_parameter("label", Scalar("abc", vtype="string"))
    assert page.parameters["E"].vtype is ValueType.DOUBLE
    assert list(page.parameters) == ["Run", "E", "label"]
    assert page.parameter_values()["label"] == "abc"


def test_eq():
    assert make_page() == make_page()

    other = make_page()
    other.add_parameter("Run", Scalar(np.int32(43), vtype="long"))
    assert make_page() != other

    other = make_page()
    other["x"].nda[0] = 9.0
    assert make_page() != other


def test_view_as():
    page = make_page()

    df = page.view_as("pd")
    assert df.attrs["parameters"] == {"Run": 42}
    assert df["n"].tolist() == [1, 2, 3]

    arr = page.view_as("ak")
    assert ak.parameters(arr)["parameters"] == {"Run": 42}
    assert arr["x"].tolist() == [1.0, 2.0, 3.0]


def test_str():
    text = str(make_page())
    assert text.startswith("Run = ")
    assert "x" in text.splitlines()[1]
