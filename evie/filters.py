"""
Predicate engine
================

One record is included in the current view when ALL of these hold:

- free-text search: some field contains the search term (case-insensitive)
- make / year / type: the record's value is in the selected set (or the set is empty)
- electric range: the parsed range lies inside the optional [min, max] bounds
"""

from __future__ import annotations
from typing import Iterable, List, Mapping, Optional
import re

from .models import EMPTY_CRITERIA, FilterCriteria, RangeBounds, VehicleRecord, parse_int


def matches_search(record: VehicleRecord, search_term: str) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    return any(needle in str(v).lower() for v in record.values())


def matches_criteria(record: VehicleRecord, criteria: FilterCriteria) -> bool:
    if criteria.makes and record.make not in criteria.makes:
        return False
    if criteria.years and record.model_year not in criteria.years:
        return False
    if criteria.types and record.ev_type not in criteria.types:
        return False
    lo, hi = criteria.range.min, criteria.range.max
    if lo is None and hi is None:
        return True
    r = record.range
    if lo is not None and r < lo:
        return False
    if hi is not None and r > hi:
        return False
    return True


def matches(record: VehicleRecord, search_term: str = "", criteria: FilterCriteria = EMPTY_CRITERIA) -> bool:
    """True if `record` passes the search term and every filter."""
    return matches_search(record, search_term) and matches_criteria(record, criteria)


def filter_dataset(
    dataset: Iterable[VehicleRecord],
    search_term: str = "",
    criteria: FilterCriteria = EMPTY_CRITERIA,
) -> List[VehicleRecord]:
    """Return the matching records in their original order (a new list)."""
    return [r for r in dataset if matches(r, search_term, criteria)]


_BOUND = re.compile(r"^\s*[+-]?\d+")


def _bound(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not _BOUND.match(str(value)):
        return None
    return parse_int(value)


def criteria_from_dict(raw: Mapping[str, object]) -> FilterCriteria:
    """Normalize form-style input into FilterCriteria.

    Accepts lists (or any iterable) for makes/years/types and
    {"min": "", "max": "300"} for the range; blank bounds mean "unset".
    """
    rng = raw.get("range") or {}
    if not isinstance(rng, Mapping):
        rng = {}
    return FilterCriteria(
        makes=frozenset(str(x) for x in (raw.get("makes") or []) if x is not None),
        years=frozenset(str(x) for x in (raw.get("years") or []) if x is not None),
        types=frozenset(str(x) for x in (raw.get("types") or []) if x is not None),
        range=RangeBounds(min=_bound(rng.get("min")), max=_bound(rng.get("max"))),
    )
