"""Implements a page: a :class:`.Table` of columns plus its parameter values."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import awkward as ak
import numpy as np
import pandas as pd

from .array import Array
from .scalar import Scalar
from .table import Table

log = logging.getLogger(__name__)


class Page(Table):
    """One unit of ``(parameters, rows)`` produced and consumed atomically.

    Every column has exactly ``len(page)`` elements. Parameters hold one
    :class:`.Scalar` each and are kept in declaration order.
    """

    def __init__(
        self,
        col_dict: Mapping[str, Array] | pd.DataFrame | None = None,
        parameters: Mapping[str, Scalar] | None = None,
        size: int | None = None,
        page_number: int = 1,
        attrs: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Parameters
        ----------
        col_dict
            the columns, see :class:`.Table`.
        parameters
            mapping of parameter names to :class:`.Scalar` values. Plain
            values are wrapped into a :class:`.Scalar` with inferred type.
        size
            number of rows, see :class:`.Table`.
        page_number
            one-based position of this page in its stream.
        attrs
            a set of user attributes to be carried along with this object.
        """
        self.parameters: dict[str, Scalar] = {}
        if parameters is not None:
            for name, value in parameters.items():
                self.add_parameter(name, value)

        self.page_number = page_number
        super().__init__(col_dict=col_dict, size=size, attrs=attrs)

    def add_parameter(self, name: str, value: Scalar | Any) -> None:
        self.parameters[name] = value if isinstance(value, Scalar) else Scalar(value)

    def parameter_values(self) -> dict[str, Any]:
        """Mapping of parameter names to their bare values."""
        return {k: v.value for k, v in self.parameters.items()}

    def __eq__(self, other: Page) -> bool:
        if isinstance(other, Page):
            return (
                super().__eq__(other)
                and list(self.parameters) == list(other.parameters)
                and all(
                    self.parameters[k].vtype is other.parameters[k].vtype
                    and self.parameters[k].value == other.parameters[k].value
                    for k in self.parameters
                )
            )

        return False

    def __str__(self) -> str:
        head = "\n".join(f"{k} = {v.value!r}" for k, v in self.parameters.items())
        body = super().__str__()
        return f"{head}\n{body}" if head else body

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + f"(page_number={self.page_number}, parameters={self.parameters!r}, "
            + "dict={"
            + ", ".join(f"{k!r}: {v!r}" for k, v in self.obj_dict.items())
            + f"}}, attrs={self.attrs!r})"
        )

    def view_as(
        self,
        library: str,
        with_units: bool = False,
        cols: list[str] | None = None,
    ) -> pd.DataFrame | np.NDArray | ak.Array:
        """View the page columns as a third-party format data structure.

        The parameter values are stored in ``DataFrame.attrs["parameters"]``
        for the ``pd`` view and as the ``parameters`` array parameter of the
        ``ak`` view.

        See Also
        --------
        .Table.view_as
        """
        view = super().view_as(library, with_units=with_units, cols=cols)
        if library == "pd":
            view.attrs["parameters"] = self.parameter_values()
        elif library == "ak":
            view = ak.with_parameter(
                view,
                "parameters",
                {k: _jsonable(v) for k, v in self.parameter_values().items()},
            )
        return view


def _jsonable(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item() if not isinstance(value, np.longdouble) else float(value)
    return value
