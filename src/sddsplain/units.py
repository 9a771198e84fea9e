"""Physical units support, backed by :mod:`pint`.

SDDS units are free-form strings (``m``, ``mm``, ``1/s``, ``m$be$n``...), so
only the ones :mod:`pint` understands can be attached to data views.
"""

from __future__ import annotations

import pint

default_units_registry = pint.get_application_registry()
