"""
Filter session (keeping filters across a dataset reload)
========================================================

A reload throws the current view away and fetches the data again. If the
user had filters set, they should come back once the new data is in, but
only if the load worked.

The session is a small immutable value with two states:

    Idle     active=False, saved=None
    Pending  active=True,  saved=<criteria>

Transitions return a NEW session:

    on_criteria_change(c)  non-empty c -> Pending(c), empty c -> Idle
    on_reload_start(c)     snapshot c if it is non-empty
    on_reload_success()    -> (criteria to reapply or None, Idle)
    on_reload_failure()    -> Idle, saved criteria are dropped
    cleared()              -> Idle

`reload_dataset` (and `reload_dataset_async`) drive one reload through these
transitions.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple
import logging

from .loader import IngestionFailure
from .models import EMPTY_CRITERIA, FilterCriteria, VehicleRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSession:
    active: bool = False
    saved: Optional[FilterCriteria] = None

    @property
    def pending(self) -> bool:
        return self.active and self.saved is not None

    def on_criteria_change(self, criteria: FilterCriteria) -> "FilterSession":
        if criteria.is_empty():
            return IDLE
        return FilterSession(active=True, saved=criteria)

    def on_reload_start(self, criteria: FilterCriteria) -> "FilterSession":
        if criteria.is_empty():
            return self
        return FilterSession(active=True, saved=criteria)

    def on_reload_success(self) -> Tuple[Optional[FilterCriteria], "FilterSession"]:
        return (self.saved if self.pending else None), IDLE

    def on_reload_failure(self) -> "FilterSession":
        return IDLE

    def cleared(self) -> "FilterSession":
        return IDLE


IDLE = FilterSession()


@dataclass(frozen=True)
class ReloadOutcome:
    """Result of one reload: what the engine should install next."""
    ok: bool
    dataset: List[VehicleRecord]
    criteria: FilterCriteria
    session: FilterSession
    error: Optional[IngestionFailure] = None


def reload_dataset(
    load: Callable[[], Sequence[VehicleRecord]],
    dataset: Sequence[VehicleRecord],
    criteria: FilterCriteria,
    session: FilterSession,
) -> ReloadOutcome:
    """Reload the dataset, carrying filters through `session`.

    On failure the previous dataset is kept, filters stay cleared and the
    session goes back to Idle. The failure is logged, never raised.
    """
    session = session.on_reload_start(criteria)
    try:
        fresh = list(load())
    except Exception as e:
        return _failed(dataset, session, _as_failure(e))
    return _succeeded(fresh, session)


async def reload_dataset_async(
    load: Callable[[], Awaitable[Sequence[VehicleRecord]]],
    dataset: Sequence[VehicleRecord],
    criteria: FilterCriteria,
    session: FilterSession,
) -> ReloadOutcome:
    """Same as `reload_dataset` for a coroutine loader."""
    session = session.on_reload_start(criteria)
    try:
        fresh = list(await load())
    except Exception as e:
        return _failed(dataset, session, _as_failure(e))
    return _succeeded(fresh, session)


def _as_failure(error: Exception) -> IngestionFailure:
    if isinstance(error, IngestionFailure):
        return error
    failure = IngestionFailure(f"Loader failed: {error}")
    failure.__cause__ = error
    return failure


def _failed(dataset: Sequence[VehicleRecord], session: FilterSession, error: IngestionFailure) -> ReloadOutcome:
    logger.exception("Dataset reload failed")
    return ReloadOutcome(ok=False, dataset=list(dataset), criteria=EMPTY_CRITERIA,
                         session=session.on_reload_failure(), error=error)


def _succeeded(fresh: List[VehicleRecord], session: FilterSession) -> ReloadOutcome:
    restored, session = session.on_reload_success()
    if restored is not None:
        logger.info("Restoring filters after reload")
    return ReloadOutcome(ok=True, dataset=fresh, criteria=restored or EMPTY_CRITERIA, session=session)
