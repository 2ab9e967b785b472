"""
Core engine (EVIE)
==================

EVIE (Electric Vehicle Insight Engine) is the in-memory heart of the
dashboard:

1) Load dataset -> list of VehicleRecord (immutable, never edited)
2) Keep a view state: search term, filters, sort, page
3) Derive the table view: filter -> sort -> paginate
4) Derive the aggregate views (distributions, time series, summary)
5) Reload the dataset, carrying active filters through a FilterSession

The aggregates always read the FULL dataset; only the table view and the
headline total follow the filters. Derived views are memoized per dataset
version in a `ViewCache`, which is dropped whenever a new dataset is installed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Hashable, List, Optional, Sequence
import logging

from . import aggregates, stats
from .config import (DEFAULT_PAGE_SIZE, DEFAULT_SORT_DIRECTION, DEFAULT_SORT_FIELD, PAGE_SIZE_OPTIONS, TOP_MAKES,
                     VIEW_CACHE_SIZE)
from .dsa import merge_sort
from .filters import filter_dataset
from .indices import FilterOptions, build_filter_options
from .loader import to_csv_text
from .models import EMPTY_CRITERIA, FilterCriteria, RangeBounds, VehicleRecord, resolve_field
from .session import IDLE, FilterSession, ReloadOutcome, reload_dataset, reload_dataset_async

logger = logging.getLogger(__name__)

DIRECTIONS = ("asc", "desc")


# ---------------- Table view helpers ----------------
def sort_records(records: Sequence[VehicleRecord], field: str, direction: str = "asc") -> List[VehicleRecord]:
    """Sort by the raw text of `field`.

    Values compare as text, so "100" sorts before "25" for numeric-looking
    fields. Always returns a new list.
    """
    if direction not in DIRECTIONS:
        raise ValueError("direction must be 'asc' or 'desc'")
    attr = resolve_field(field)
    return merge_sort(records, key=lambda r: getattr(r, attr), descending=(direction == "desc"))


def paginate(rows: Sequence[VehicleRecord], page: int, page_size: int) -> List[VehicleRecord]:
    """Rows [page*page_size, page*page_size + page_size), empty when out of range."""
    if page < 0 or page_size <= 0:
        return []
    start = page * page_size
    return list(rows[start:start + page_size])


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return (total + page_size - 1) // page_size


# ---------------- Memoization ----------------
class ViewCache:
    """Memo of derived views keyed by (dataset version, view key).

    Holds at most `maxsize` views; the least recently used one is evicted first.
    """

    def __init__(self, maxsize: int = VIEW_CACHE_SIZE) -> None:
        self.maxsize = maxsize
        self._store: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, version: int, key: Hashable, compute: Callable[[], Any]) -> Any:
        k = (version, key)
        if k in self._store:
            self.hits += 1
            self._store.move_to_end(k)
            return self._store[k]
        self.misses += 1
        value = compute()
        self._store[k] = value
        while len(self._store) > self.maxsize:
            self._store.popitem(last=False)
        return value

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


@dataclass
class ViewState:
    """What the table currently shows."""
    search_term: str = ""
    criteria: FilterCriteria = EMPTY_CRITERIA
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: str = DEFAULT_SORT_DIRECTION
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass
class EVIE:
    """Electric Vehicle Insight Engine.

    The engine stores:
    - records: the dataset from the most recent successful load
    - state: search / filters / sort / page of the table view
    - session: filters waiting to be restored after a reload
    - loading: True while a reload is in flight (a second one is refused)
    """
    records: List[VehicleRecord] = field(default_factory=list)
    dataset_path: Optional[str] = None
    top_makes: int = TOP_MAKES
    state: ViewState = field(default_factory=ViewState)
    session: FilterSession = IDLE
    loading: bool = False
    version: int = 0
    cache: ViewCache = field(default_factory=ViewCache, repr=False)

    # ---------------- Search / filters ----------------
    def set_search(self, term: str) -> None:
        self.state.search_term = term or ""
        self.state.page = 0

    def apply_criteria(self, criteria: FilterCriteria) -> None:
        self.state.criteria = criteria
        self.session = self.session.on_criteria_change(criteria)
        self.state.page = 0

    def set_filter(self, kind: str, values: Any) -> None:
        """Change one filter dimension: makes, years, types (iterables) or range (RangeBounds)."""
        kind = kind.lower()
        if kind in ("make", "makes"):
            c = self.state.criteria.replace(makes=values)
        elif kind in ("year", "years"):
            c = self.state.criteria.replace(years=values)
        elif kind in ("type", "types"):
            c = self.state.criteria.replace(types=values)
        elif kind == "range":
            if not isinstance(values, RangeBounds):
                raise ValueError("range filter takes a RangeBounds")
            c = self.state.criteria.replace(range=values)
        else:
            raise ValueError("filter kind must be: make, year, type, range")
        self.apply_criteria(c)

    def clear_filters(self) -> None:
        self.state.criteria = EMPTY_CRITERIA
        self.session = self.session.cleared()
        self.state.page = 0

    # ---------------- Sort / page ----------------
    def sort_by(self, field: str, direction: Optional[str] = None) -> None:
        """Sort the table by `field`.

        Without an explicit direction, picking the current field again flips
        the direction and a new field starts ascending.
        """
        attr = resolve_field(field)
        if direction is None:
            if attr == resolve_field(self.state.sort_field):
                direction = "desc" if self.state.sort_direction == "asc" else "asc"
            else:
                direction = "asc"
        if direction not in DIRECTIONS:
            raise ValueError("direction must be 'asc' or 'desc'")
        self.state.sort_field = field
        self.state.sort_direction = direction

    def set_page(self, page: int) -> None:
        self.state.page = page

    def set_page_size(self, size: int) -> None:
        if size not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"page size must be one of {PAGE_SIZE_OPTIONS}")
        self.state.page_size = size
        self.state.page = 0

    # ---------------- Table view ----------------
    def _view_key(self, kind: str) -> tuple:
        return (kind, self.state.search_term, self.state.criteria)

    def filtered(self) -> List[VehicleRecord]:
        return self.cache.get(self.version, self._view_key("filtered"),
                              lambda: filter_dataset(self.records, self.state.search_term, self.state.criteria))

    def sorted_view(self) -> List[VehicleRecord]:
        s = self.state
        key = self._view_key("sorted") + (s.sort_field, s.sort_direction)
        return self.cache.get(self.version, key,
                              lambda: sort_records(self.filtered(), s.sort_field, s.sort_direction))

    def page_rows(self) -> List[VehicleRecord]:
        return paginate(self.sorted_view(), self.state.page, self.state.page_size)

    def pages(self) -> int:
        return page_count(self.total_filtered, self.state.page_size)

    @property
    def total_filtered(self) -> int:
        """Headline "Total EVs": follows search and filters."""
        return len(self.filtered())

    # ---------------- Aggregate views (full dataset) ----------------
    def _full(self, kind: str, compute: Callable[[Sequence[VehicleRecord]], Any]) -> Any:
        return self.cache.get(self.version, kind, lambda: compute(self.records))

    def summary(self) -> stats.SummaryStats:
        return self._full("summary", stats.summary_statistics)

    def filter_options(self) -> FilterOptions:
        return self._full("options", build_filter_options)

    def make_distribution(self) -> List[aggregates.DistributionEntry]:
        return self._full(("makes", self.top_makes), lambda d: aggregates.make_distribution(d, self.top_makes))

    def county_distribution(self) -> List[aggregates.CountyEntry]:
        return self._full("counties", aggregates.county_distribution)

    def range_by_make(self) -> List[aggregates.MakeRangeEntry]:
        return self._full("range_by_make", aggregates.range_by_make)

    def model_year_distribution(self) -> List[aggregates.ModelYearEntry]:
        return self._full("model_years", aggregates.model_year_distribution)

    def growth_rates(self) -> List[aggregates.GrowthPoint]:
        return self._full("growth", aggregates.growth_rates)

    def range_evolution(self) -> List[aggregates.YearEntry]:
        return self._full("evolution", aggregates.range_evolution)

    def year_share(self) -> List[aggregates.YearShare]:
        return self._full("year_share", aggregates.year_share)

    def make_growth(self) -> List[aggregates.MakeGrowth]:
        return self._full("make_growth", aggregates.make_growth)

    def range_highlights(self) -> aggregates.RangeHighlights:
        return self._full("highlights", aggregates.range_highlights)

    # ---------------- Export ----------------
    def export_csv(self, path: Optional[str] = None) -> str:
        """Serialize the filtered view as CSV text; also write it to `path` if given."""
        text = to_csv_text(self.filtered())
        if path:
            with open(path, "w", newline="", encoding="utf-8") as f:
                f.write(text)
        return text

    # ---------------- Reload ----------------
    def _begin_reload(self) -> Optional[FilterCriteria]:
        """Mark a load in flight and hand back the criteria to carry over (None if refused)."""
        if self.loading:
            logger.warning("Reload requested while another load is in progress; ignored")
            return None
        self.loading = True
        criteria = self.state.criteria
        self.state = ViewState(sort_field=self.state.sort_field,
                               sort_direction=self.state.sort_direction,
                               page_size=self.state.page_size)
        return criteria

    def _install(self, outcome: ReloadOutcome) -> bool:
        if outcome.ok:
            self.records = outcome.dataset
            self.version += 1
            self.cache.clear()
            logger.info("Installed dataset version %d (%d records)", self.version, len(self.records))
        self.state.criteria = outcome.criteria
        self.session = outcome.session
        return outcome.ok

    def reload(self, load: Callable[[], Sequence[VehicleRecord]]) -> bool:
        """Replace the dataset with `load()`.

        Returns True on success. Returns False if the load failed (the old
        dataset stays, filters are cleared) or another load is in progress.
        """
        criteria = self._begin_reload()
        if criteria is None:
            return False
        try:
            outcome = reload_dataset(load, self.records, criteria, self.session)
        finally:
            self.loading = False
        return self._install(outcome)

    async def reload_async(self, load: Callable[[], Awaitable[Sequence[VehicleRecord]]]) -> bool:
        """`reload` for a coroutine loader; the `loading` flag refuses overlapping calls."""
        criteria = self._begin_reload()
        if criteria is None:
            return False
        try:
            outcome = await reload_dataset_async(load, self.records, criteria, self.session)
        finally:
            self.loading = False
        return self._install(outcome)
