"""Base class of the in-memory objects a page is built from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import awkward as ak
import numpy as np
import pandas as pd


class SDDSObject(ABC):
    """Abstract base class representing an in-memory SDDS data object.

    Objects carry a dictionary of user attributes. The ``units`` attribute,
    if present, is forwarded to the data views.
    """

    @abstractmethod
    def __init__(self, attrs: dict[str, Any] | None = None) -> None:
        self.attrs = {} if attrs is None else dict(attrs)

    @abstractmethod
    def view_as(
        self, library: str, with_units: bool = False
    ) -> pd.DataFrame | np.NDArray | ak.Array:
        r"""View the object data as a third-party format data structure.

        This is typically a zero-copy or nearly zero-copy operation unless
        explicitly stated in the concrete class documentation. If requested
        and the object carries a ``units`` attribute, physical units are
        attached to the view through the :mod:`pint` package.

        Typical supported third-party libraries are:

        - ``pd``: :mod:`pandas`
        - ``np``: :mod:`numpy`
        - ``ak``: :mod:`awkward`

        Parameters
        ----------
        library
            format of the returned data view.
        with_units
            forward physical units to the output data.
        """
