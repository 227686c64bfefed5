"""
Adapter from tabular records to weighted points.
"""

from __future__ import annotations

import math
from typing import Hashable, Mapping, Optional, Sequence

import numpy as np


class RecordAdapter:
    """
    Turns dict-like records into (mass, point, key) triples.

    Args:
        columns: Record fields that make up the point, in axis order
        mass_column: Field holding the point's mass (default: mass 1.0)
        key_column: Field holding the point's key (default: no key)
    """

    def __init__(
        self,
        columns: Sequence[str],
        mass_column: Optional[str] = None,
        key_column: Optional[str] = None,
    ):
        if not columns:
            raise ValueError("At least one coordinate column is required")
        self.columns = list(columns)
        self.mass_column = mass_column
        self.key_column = key_column

    @property
    def dimensions(self) -> int:
        return len(self.columns)

    def adapt(self, record: Mapping) -> tuple[float, np.ndarray, Optional[Hashable]]:
        point = np.empty(len(self.columns), dtype=np.float64)
        for i, column in enumerate(self.columns):
            point[i] = self._number(record, column)

        mass = 1.0
        if self.mass_column is not None:
            mass = self._number(record, self.mass_column)

        key = None
        if self.key_column is not None:
            key = record.get(self.key_column)
            if isinstance(key, list):
                key = tuple(key)
            try:
                hash(key)
            except TypeError:
                raise ValueError(
                    f"Column '{self.key_column}' is not a usable key: {key!r}"
                ) from None

        return mass, point, key

    @staticmethod
    def _number(record: Mapping, column: str) -> float:
        if column not in record:
            raise ValueError(f"Record is missing column '{column}'")
        value = record[column]
        if isinstance(value, bool):
            raise ValueError(f"Column '{column}' is not numeric: {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Column '{column}' is not numeric: {value!r}") from None
        if not math.isfinite(number):
            raise ValueError(f"Column '{column}' is not finite: {value!r}")
        return number
