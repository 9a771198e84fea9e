from __future__ import annotations

import pickle

import pytest

from sddsplain.exceptions import (
    BadNumericError,
    BadRowError,
    ConfigurationError,
    FormatError,
    ModeMismatchError,
    SDDSPlainError,
    StreamError,
)


def test_message_context():
    e = BadRowError("missing value", stream="data.txt", obj="x", where="line 3")
    assert str(e) == "in data.txt, line 3, while processing 'x': missing value"
    assert str(BadRowError("missing value")) == "missing value"


def test_hierarchy():
    assert issubclass(BadNumericError, FormatError)
    assert issubclass(BadRowError, FormatError)
    assert issubclass(ModeMismatchError, StreamError)
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(FormatError, SDDSPlainError)


def test_mode_mismatch_hint():
    assert "check -inputMode" in str(ModeMismatchError("bad data"))


def test_pickle():
    e = BadNumericError("invalid long value 'x'", stream="f", obj="a", where="page 1")
    e2 = pickle.loads(pickle.dumps(e))
    assert type(e2) is BadNumericError
    assert str(e2) == str(e)

    with pytest.raises(FormatError):
        raise e2
