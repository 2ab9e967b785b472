"""
Dataset loader (CSV/XLSX -> VehicleRecord list) and CSV export
==============================================================

This module reads the EV population export and converts each row into a
`VehicleRecord`.

Key ideas:
- We try multiple possible column names because exports vary
  ("Model Year", "ModelYear", "model_year" all work).
- Every cell is read as text; numbers are parsed later, on demand.
- Any failure to read the source is raised as `IngestionFailure` so the
  engine has exactly one thing to catch at the reload boundary.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
import csv
import io
import logging
import re

import pandas as pd

from .models import CSV_HEADERS, FIELDS, VehicleRecord

logger = logging.getLogger(__name__)

REQUIRED = ("Make", "Model", "ModelYear")


class IngestionFailure(RuntimeError):
    """The dataset could not be fetched or parsed."""


def _to_str(x) -> str:
    if x is None:
        return ""
    try:
        if pd.isna(x):
            return ""
    except (TypeError, ValueError):
        pass
    return str(x).strip()


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(columns: Sequence[str], *names: str) -> Optional[str]:
    cols = list(columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    return None


def _column_map(columns: Sequence[str]) -> Dict[str, Optional[str]]:
    """Resolve each canonical field to a source column (None if absent)."""
    out: Dict[str, Optional[str]] = {}
    for name, attr in FIELDS.items():
        out[name] = _col(columns, CSV_HEADERS[name], name, attr)
    missing = [n for n in REQUIRED if out[n] is None]
    if missing:
        raise KeyError(f"Missing required column(s) {missing}. Available={list(columns)}")
    return out


def records_from_rows(rows: Iterable[Mapping[str, object]]) -> List[VehicleRecord]:
    """Convert field-keyed rows (as a CSV tokenizer yields them) into records.

    Rows where every recognised field is blank are skipped; they come from
    trailing newlines in the source file.
    """
    rows = list(rows)
    if not rows:
        return []
    columns: List[str] = []
    for r in rows:
        for k in r.keys():
            if k not in columns:
                columns.append(k)
    cmap = _column_map(columns)

    records: List[VehicleRecord] = []
    for r in rows:
        values = {
            FIELDS[name]: (_to_str(r.get(col)) if col else "")
            for name, col in cmap.items()
        }
        if not any(values.values()):
            continue
        records.append(VehicleRecord(**values))
    return records


def _read_frame(source: str) -> pd.DataFrame:
    if str(source).lower().endswith((".xlsx", ".xlsm")):
        return pd.read_excel(source, engine="openpyxl", dtype=str)
    return pd.read_csv(source, dtype=str, keep_default_na=False)


def load_dataset(source: str) -> List[VehicleRecord]:
    """Load the EV population file at `source` (local path or URL).

    Raises:
        IngestionFailure: the source could not be read, or a required
        column (Make, Model, Model Year) is missing.
    """
    try:
        df = _read_frame(source)
        df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
        records = records_from_rows(df.to_dict(orient="records"))
    except Exception as e:
        raise IngestionFailure(f"Could not load dataset from {source}: {e}") from e
    logger.info("Loaded %d records from %s", len(records), source)
    return records


def to_csv_text(records: Iterable[VehicleRecord]) -> str:
    """Serialize records with the same header as the source file."""
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow([CSV_HEADERS[name] for name in FIELDS])
    for r in records:
        w.writerow(list(r.values()))
    return buf.getvalue()
