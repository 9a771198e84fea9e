"""Reading and writing of plain-data streams.

A plain-data stream is a headerless ASCII or binary stream whose pages are
made of parameter values, an optional row count and column values, laid
out as declared by an :class:`.InputConfig` (for reading) or an
:class:`.OutputConfig` (for writing).
"""

from __future__ import annotations

from .config import FieldSpec, InputConfig, OutputConfig, SDDSConfig, Selection
from .lines import LineSource
from .read import PlainReader, check_input_mode, probe
from .write import PlainWriter, resolve_selections

__all__ = [
    "FieldSpec",
    "InputConfig",
    "LineSource",
    "OutputConfig",
    "PlainReader",
    "PlainWriter",
    "SDDSConfig",
    "Selection",
    "check_input_mode",
    "probe",
    "resolve_selections",
]
