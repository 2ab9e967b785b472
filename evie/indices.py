"""
Filter options (distinct values seen in the dataset)
====================================================

The filter menus only offer values that actually occur in the loaded data.
`build_filter_options` collects them in a single pass:

- `makes`, `years`, `types`: sorted distinct text values
- `range_min` / `range_max`: bounds of the parsed electric range (0/0 when empty)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Set

from .models import VehicleRecord


@dataclass(frozen=True)
class FilterOptions:
    makes: List[str]
    years: List[str]
    types: List[str]
    range_min: int
    range_max: int


def build_filter_options(dataset: Sequence[VehicleRecord]) -> FilterOptions:
    makes: Set[str] = set()
    years: Set[str] = set()
    types: Set[str] = set()
    lo = hi = None

    for r in dataset:
        makes.add(r.make)
        years.add(r.model_year)
        types.add(r.ev_type)
        v = r.range
        lo = v if lo is None or v < lo else lo
        hi = v if hi is None or v > hi else hi

    return FilterOptions(
        makes=sorted(makes),
        years=sorted(years),
        types=sorted(types),
        range_min=lo or 0,
        range_max=hi or 0,
    )
