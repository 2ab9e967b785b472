"""
Summary statistics
==================

Dataset-wide descriptive numbers for the headline cards. They are always
computed over the FULL loaded dataset, never the filtered view (the
"Total EVs" card is the one number that follows the filters; see
`EVIE.total_filtered`).

Two median rules live here on purpose:
- `median_standard`: mean of the two middle values for even counts
- `median_middle`: element at index len // 2, used by the per-year view
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence, Set

from .models import VehicleRecord


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def pct(part: int, total: int) -> str:
    """Percentage with one decimal, as shown in the charts ("60.0")."""
    if not total:
        return "0.0"
    return f"{part / total * 100:.1f}"


def median_standard(values: Sequence[int]) -> int:
    s = sorted(values)
    n = len(s)
    if n == 0:
        return 0
    if n % 2 == 0:
        return round_half_up((s[n // 2 - 1] + s[n // 2]) / 2)
    return s[n // 2]


def median_middle(values: Sequence[int]) -> int:
    s = sorted(values)
    return s[len(s) // 2] if s else 0


@dataclass(frozen=True)
class SummaryStats:
    total_vehicles: int
    total_range: int
    average_range: int
    median_range: int
    min_range: int
    max_range: int
    unique_makes: int
    unique_models: int
    unique_counties: int
    unique_cities: int
    oldest_year: int
    newest_year: int


def summary_statistics(dataset: Sequence[VehicleRecord]) -> SummaryStats:
    """One pass over the dataset; every field is 0 for an empty dataset."""
    total = 0
    ranges: List[int] = []
    makes: Set[str] = set()
    models: Set[str] = set()
    counties: Set[str] = set()
    cities: Set[str] = set()
    years: Set[int] = set()

    for r in dataset:
        v = r.range
        total += v
        ranges.append(v)
        makes.add(r.make)
        models.add(r.make_model)
        counties.add(r.county)
        cities.add(r.city)
        years.add(r.year)

    n = len(ranges)
    return SummaryStats(
        total_vehicles=n,
        total_range=total,
        average_range=round_half_up(total / n) if n else 0,
        median_range=median_standard(ranges),
        min_range=min(ranges) if ranges else 0,
        max_range=max(ranges) if ranges else 0,
        unique_makes=len(makes),
        unique_models=len(models),
        unique_counties=len(counties),
        unique_cities=len(cities),
        oldest_year=min(years) if years else 0,
        newest_year=max(years) if years else 0,
    )
