"""
Aggregate views (distributions and time series)
===============================================

Every function here is a pure computation over a sequence of records:
it groups in one pass, derives counts/averages/percentages, and returns new
frozen entries. Nothing is cached here; see `engine.ViewCache` for that.

Distributions (grouped by a categorical field):
- make_distribution       top manufacturers by count
- county_distribution     every county, with average range and make diversity
- range_by_make           manufacturers ranked by average electric range
- model_year_distribution vehicles per model year

Time series (grouped by parsed model year, invalid years -> 0):
- growth_rates            year-over-year change in registrations
- range_evolution         average / median range and model diversity per year
- year_share              each year's share of the whole dataset
- make_growth             per-manufacturer growth between its last two years
- range_highlights        latest year snapshot + first-to-last improvement

Percentages are one-decimal strings ("60.0"), growth rates are floats.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set
import heapq

from .config import TOP_MAKES
from .models import VehicleRecord, parse_int
from .stats import median_middle, pct, round_half_up


# -----------------------------
# Result types
# -----------------------------

@dataclass(frozen=True)
class DistributionEntry:
    name: str
    value: int
    percentage: str


@dataclass(frozen=True)
class CountyEntry:
    name: str
    value: int
    avg_range: int
    unique_makes: int
    percentage: str


@dataclass(frozen=True)
class MakeRangeEntry:
    make: str
    average_range: int
    model_count: int
    year_span: int
    total_vehicles: int
    market_share: str


@dataclass(frozen=True)
class ModelYearEntry:
    year: str
    count: int
    avg_range: int
    percentage: str


@dataclass(frozen=True)
class GrowthPoint:
    year: int
    growth: float
    total: int


@dataclass(frozen=True)
class YearEntry:
    year: int
    average_range: int
    model_count: int
    median_range: int
    total_vehicles: int


@dataclass(frozen=True)
class YearShare:
    year: int
    count: int
    share: str


@dataclass(frozen=True)
class MakeGrowth:
    make: str
    year: int
    previous_year: int
    count: int
    previous_count: int
    growth: float


@dataclass(frozen=True)
class RangeHighlights:
    latest_year: int
    latest_average_range: int
    latest_model_count: int
    range_improvement: float


def _growth(current: int, previous: int) -> float:
    if not previous:
        return 0.0
    return float(f"{(current - previous) / previous * 100:.1f}")


# -----------------------------
# Distributions
# -----------------------------

def make_distribution(dataset: Sequence[VehicleRecord], top_n: int = TOP_MAKES) -> List[DistributionEntry]:
    """Top `top_n` manufacturers by vehicle count (the rest are dropped, not bucketed)."""
    counts = Counter(r.make for r in dataset)
    total = len(dataset)
    top = heapq.nlargest(top_n, counts.items(), key=lambda kv: kv[1])
    return [DistributionEntry(name=k, value=v, percentage=pct(v, total)) for k, v in top]


@dataclass
class _CountyAcc:
    count: int = 0
    total_range: int = 0
    makes: Set[str] = field(default_factory=set)


def county_distribution(dataset: Sequence[VehicleRecord]) -> List[CountyEntry]:
    groups: Dict[str, _CountyAcc] = {}
    for r in dataset:
        acc = groups.setdefault(r.county, _CountyAcc())
        acc.count += 1
        acc.total_range += r.range
        acc.makes.add(r.make)

    total = len(dataset)
    out = [
        CountyEntry(
            name=county,
            value=acc.count,
            avg_range=round_half_up(acc.total_range / acc.count),
            unique_makes=len(acc.makes),
            percentage=pct(acc.count, total),
        )
        for county, acc in groups.items()
    ]
    out.sort(key=lambda e: e.value, reverse=True)
    return out


@dataclass
class _MakeAcc:
    count: int = 0
    total_range: int = 0
    models: Set[str] = field(default_factory=set)
    years: Set[str] = field(default_factory=set)


def range_by_make(dataset: Sequence[VehicleRecord]) -> List[MakeRangeEntry]:
    """Manufacturers ranked by average electric range, best first.

    `year_span` is the number of distinct model years seen, not max - min.
    """
    groups: Dict[str, _MakeAcc] = {}
    for r in dataset:
        acc = groups.setdefault(r.make, _MakeAcc())
        acc.count += 1
        acc.total_range += r.range
        acc.models.add(r.model)
        acc.years.add(r.model_year)

    total = len(dataset)
    out = [
        MakeRangeEntry(
            make=make,
            average_range=round_half_up(acc.total_range / acc.count),
            model_count=len(acc.models),
            year_span=len(acc.years),
            total_vehicles=acc.count,
            market_share=pct(acc.count, total),
        )
        for make, acc in groups.items()
    ]
    out.sort(key=lambda e: e.average_range, reverse=True)
    return out


def model_year_distribution(dataset: Sequence[VehicleRecord]) -> List[ModelYearEntry]:
    counts: Dict[str, int] = {}
    ranges: Dict[str, int] = {}
    for r in dataset:
        counts[r.model_year] = counts.get(r.model_year, 0) + 1
        ranges[r.model_year] = ranges.get(r.model_year, 0) + r.range

    total = len(dataset)
    out = [
        ModelYearEntry(
            year=year,
            count=n,
            avg_range=round_half_up(ranges[year] / n),
            percentage=pct(n, total),
        )
        for year, n in counts.items()
    ]
    out.sort(key=lambda e: parse_int(e.year))
    return out


# -----------------------------
# Time series
# -----------------------------

@dataclass
class _YearAcc:
    total: int = 0
    total_range: int = 0
    models: Set[str] = field(default_factory=set)
    ranges: List[int] = field(default_factory=list)


def _by_year(dataset: Sequence[VehicleRecord]) -> Dict[int, _YearAcc]:
    yearly: Dict[int, _YearAcc] = {}
    for r in dataset:
        v = r.range
        acc = yearly.setdefault(r.year, _YearAcc())
        acc.total += 1
        acc.total_range += v
        acc.models.add(r.make_model)
        acc.ranges.append(v)
    return yearly


def _growth_points(counts: Dict[int, int]) -> List[GrowthPoint]:
    out: List[GrowthPoint] = []
    prev = None
    for year in sorted(counts):
        n = counts[year]
        out.append(GrowthPoint(year=year, growth=0.0 if prev is None else _growth(n, prev), total=n))
        prev = n
    return out


def growth_rates(dataset: Sequence[VehicleRecord]) -> List[GrowthPoint]:
    """Registrations per model year and % change from the previous observed year."""
    return _growth_points({y: acc.total for y, acc in _by_year(dataset).items()})


def range_evolution(dataset: Sequence[VehicleRecord]) -> List[YearEntry]:
    yearly = _by_year(dataset)
    return [
        YearEntry(
            year=year,
            average_range=round_half_up(acc.total_range / acc.total),
            model_count=len(acc.models),
            median_range=median_middle(acc.ranges),
            total_vehicles=acc.total,
        )
        for year, acc in sorted(yearly.items())
    ]


def year_share(dataset: Sequence[VehicleRecord]) -> List[YearShare]:
    counts = Counter(r.year for r in dataset)
    total = len(dataset)
    return [YearShare(year=y, count=n, share=pct(n, total)) for y, n in sorted(counts.items())]


def make_growth_series(dataset: Sequence[VehicleRecord]) -> Dict[str, List[GrowthPoint]]:
    """Per manufacturer: registrations per model year with year-over-year growth."""
    per_make: Dict[str, Dict[int, int]] = {}
    for r in dataset:
        years = per_make.setdefault(r.make, {})
        years[r.year] = years.get(r.year, 0) + 1
    return {make: _growth_points(years) for make, years in per_make.items()}


def make_growth(dataset: Sequence[VehicleRecord]) -> List[MakeGrowth]:
    """Each manufacturer's growth between its two most recent model years, fastest first."""
    out: List[MakeGrowth] = []
    for make, points in make_growth_series(dataset).items():
        last = points[-1]
        prev = points[-2] if len(points) > 1 else last
        out.append(MakeGrowth(
            make=make,
            year=last.year,
            previous_year=prev.year,
            count=last.total,
            previous_count=prev.total,
            growth=last.growth,
        ))
    out.sort(key=lambda e: e.growth, reverse=True)
    return out


def range_highlights(dataset: Sequence[VehicleRecord]) -> RangeHighlights:
    evo = range_evolution(dataset)
    if not evo:
        return RangeHighlights(latest_year=0, latest_average_range=0, latest_model_count=0, range_improvement=0.0)
    first, last = evo[0], evo[-1]
    return RangeHighlights(
        latest_year=last.year,
        latest_average_range=last.average_range,
        latest_model_count=last.model_count,
        range_improvement=_growth(last.average_range, first.average_range),
    )
