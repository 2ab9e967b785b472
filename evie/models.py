"""
Data model (VehicleRecord, FilterCriteria)
==========================================

Each row of the EV population file becomes one `VehicleRecord`. Values are
kept exactly as text (stripped), the way they arrive from the CSV. Numbers are
parsed on demand with `parse_int`, so an unreadable range never breaks a view:
it simply counts as 0.

Records are immutable (`frozen=True`): filters, sorts and aggregates build new
lists and never edit the loaded dataset.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace as _dc_replace
from typing import Dict, FrozenSet, Iterable, Optional
import re

# canonical field name -> attribute
FIELDS: Dict[str, str] = {
    "Make": "make",
    "Model": "model",
    "ModelYear": "model_year",
    "ElectricRange": "electric_range",
    "ElectricVehicleType": "ev_type",
    "County": "county",
    "City": "city",
}

# canonical field name -> header text in the source CSV
CSV_HEADERS: Dict[str, str] = {
    "Make": "Make",
    "Model": "Model",
    "ModelYear": "Model Year",
    "ElectricRange": "Electric Range",
    "ElectricVehicleType": "Electric Vehicle Type",
    "County": "County",
    "City": "City",
}

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_int(text: object) -> int:
    """Parse the leading integer of a field, 0 if there is none.

    "215" -> 215, "12.9" -> 12, "215 mi" -> 215, "" / "n/a" / None -> 0.
    """
    if text is None:
        return 0
    m = _INT_PREFIX.match(str(text))
    return int(m.group(1)) if m else 0


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


_ATTR_BY_NORM: Dict[str, str] = {}
for _name, _attr in FIELDS.items():
    _ATTR_BY_NORM[_norm(_name)] = _attr
    _ATTR_BY_NORM[_norm(CSV_HEADERS[_name])] = _attr
    _ATTR_BY_NORM[_norm(_attr)] = _attr
_ATTR_BY_NORM["type"] = "ev_type"
_ATTR_BY_NORM["year"] = "model_year"
_ATTR_BY_NORM["range"] = "electric_range"


def resolve_field(name: str) -> str:
    """Map a field name ("ModelYear", "Model Year", "model_year", "year") to the attribute."""
    attr = _ATTR_BY_NORM.get(_norm(name))
    if attr is None:
        raise ValueError(f"Unknown field {name!r}. Known: {', '.join(FIELDS)}")
    return attr


@dataclass(frozen=True)
class VehicleRecord:
    """One registered electric vehicle."""
    make: str = ""
    model: str = ""
    model_year: str = ""
    electric_range: str = ""
    ev_type: str = ""
    county: str = ""
    city: str = ""

    @property
    def year(self) -> int:
        return parse_int(self.model_year)

    @property
    def range(self) -> int:
        return parse_int(self.electric_range)

    @property
    def make_model(self) -> str:
        # identity of a model across makes ("Tesla" + "Model 3")
        return self.make + self.model

    def value(self, name: str) -> str:
        return getattr(self, resolve_field(name))

    def values(self) -> Iterable[str]:
        for attr in FIELDS.values():
            yield getattr(self, attr)

    def as_row(self) -> Dict[str, str]:
        """Record as {CSV header: text}, the shape used for export."""
        return {CSV_HEADERS[name]: getattr(self, attr) for name, attr in FIELDS.items()}


@dataclass(frozen=True)
class RangeBounds:
    """Inclusive electric-range bounds; None means unbounded on that side."""
    min: Optional[int] = None
    max: Optional[int] = None

    def is_set(self) -> bool:
        return self.min is not None or self.max is not None


@dataclass(frozen=True)
class FilterCriteria:
    """Categorical + range filters. An empty set puts no constraint on its dimension."""
    makes: FrozenSet[str] = field(default_factory=frozenset)
    years: FrozenSet[str] = field(default_factory=frozenset)
    types: FrozenSet[str] = field(default_factory=frozenset)
    range: RangeBounds = field(default_factory=RangeBounds)

    def is_empty(self) -> bool:
        return not (self.makes or self.years or self.types or self.range.is_set())

    def replace(self, **changes) -> "FilterCriteria":
        for k in ("makes", "years", "types"):
            if k in changes:
                changes[k] = frozenset(changes[k])
        return _dc_replace(self, **changes)


EMPTY_CRITERIA = FilterCriteria()
