"""Implements an SDDS object representing a parameter value."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from .. import datatype
from ..datatype import ValueType
from ..units import default_units_registry as u
from .sddsobj import SDDSObject

log = logging.getLogger(__name__)


class Scalar(SDDSObject):
    """Holds just a typed scalar value and some attributes (units, ...)."""

    def __init__(
        self,
        value: int | float | str,
        vtype: ValueType | str | None = None,
        attrs: dict[str, Any] | None = None,
    ) -> None:
        """
        Parameters
        ----------
        value
            the value for this scalar.
        vtype
            the value type. Inferred from `value` if ``None``.
        attrs
            a set of user attributes to be carried along with this object.
        """
        if not np.isscalar(value):
            msg = "cannot instantiate a Scalar with a non-scalar value"
            raise ValueError(msg)

        self.vtype = (
            datatype.infer_type(value) if vtype is None else datatype.type_of(vtype)
        )
        datatype.check_value(self.vtype, value)
        self.value = value
        super().__init__(attrs)

    def view_as(self, with_units: bool = False):
        r"""Dummy function, returns the scalar value itself.

        See Also
        --------
        .SDDSObject.view_as
        """
        if with_units:
            return self.value * u(self.attrs["units"])
        return self.value

    def __eq__(self, other: Scalar) -> bool:
        if isinstance(other, Scalar):
            return (
                self.vtype is other.vtype
                and self.value == other.value
                and self.attrs == other.attrs
            )

        return False

    def __str__(self) -> str:
        return f"{self.value!s} with attrs={self.attrs!r}"

    def __repr__(self) -> str:
        return self.__class__.__name__ + f"(value={self.value!r}, attrs={self.attrs!r})"
