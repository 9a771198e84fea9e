from __future__ import annotations

import pickle

import awkward as ak
import numpy as np
import pandas as pd
import pytest

from sddsplain import Array, Table


def make_cols():
    return {
        "a": Array(nda=np.array([1, 2, 3, 4])),
        "b": Array(nda=np.array([5.0, 6.0, 7.0, 8.0])),
    }


def test_init():
    tbl = Table()
    assert not tbl.size
    assert len(tbl) == 0

    tbl = Table(size=10)
    assert tbl.size == 10

    tbl = Table(col_dict=make_cols())
    assert tbl.size == 4
    assert list(tbl.keys()) == ["a", "b"]

    tbl = Table(size=3, col_dict=make_cols())
    assert tbl.size == 3
    assert len(tbl["a"]) == 3


def test_pandas_df_init():
    df = pd.DataFrame({"a": [1, 2, 3, 4], "b": [5, 6, 7, 8]})
    tbl = Table(col_dict=df)
    assert list(tbl.keys()) == ["a", "b"]
    assert isinstance(tbl["a"], Array)
    assert tbl["a"] == Array([1, 2, 3, 4])
    assert tbl["b"] == Array([5, 6, 7, 8])


def test_add_remove_column():
    tbl = Table()
    tbl.add_column("x", Array([1, 2]))
    assert tbl.size == 2
    tbl["y"] = Array([3.0, 4.0])
    assert list(tbl) == ["x", "y"]
    assert "y" in tbl

    with pytest.raises(ValueError):
        tbl.add_column("z", Array([1, 2, 3]))

    del tbl["x"]
    assert list(tbl) == ["y"]
    assert tbl.attrs == {}


def test_resize_and_capacity():
    tbl = Table(col_dict=make_cols())
    tbl.resize(2)
    assert len(tbl) == 2
    assert all(len(tbl[k]) == 2 for k in tbl)
    assert tbl.get_capacity() == 4

    tbl.reserve_capacity(50)
    assert tbl.get_capacity() == 50
    assert Table().get_capacity() == 0


def test_eq():
    assert Table(col_dict=make_cols()) == Table(col_dict=make_cols())

    other = make_cols()
    other["b"].nda[0] = -1.0
    assert Table(col_dict=make_cols()) != Table(col_dict=other)


def test_view_as():
    tbl = Table(col_dict=make_cols())
    tbl["a"].attrs["units"] = "s"

    df = tbl.view_as("pd")
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["a", "b"]
    assert df["b"].tolist() == [5.0, 6.0, 7.0, 8.0]

    df = tbl.view_as("pd", with_units=True)
    assert df["a"].dtype == "second"

    df = tbl.view_as("pd", cols=["b"])
    assert list(df.columns) == ["b"]

    arr = tbl.view_as("ak")
    assert isinstance(arr, ak.Array)
    assert arr.fields == ["a", "b"]
    assert arr["a"].tolist() == [1, 2, 3, 4]

    with pytest.raises(ValueError):
        tbl.view_as("ak", with_units=True)
    with pytest.raises(TypeError):
        tbl.view_as("np")
    with pytest.raises(ValueError):
        tbl.view_as("hist")


def test_str():
    tbl = Table(col_dict=make_cols())
    lines = str(tbl).splitlines()
    assert lines[0].split() == ["a", "b"]
    assert len(lines) == 5


def test_pickle():
    tbl = Table(col_dict=make_cols())
    ex = pickle.loads(pickle.dumps(tbl))
    assert isinstance(ex, Table)
    assert ex == tbl
