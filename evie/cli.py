"""
EVIE Command Line Interface (CLI)
=================================

This file provides the interactive terminal dashboard you run like:

    python -m evie.cli --csv "Electric_Vehicle_Population_Data.csv"

It demonstrates:
- Argument parsing (argparse)
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to engine methods (search, filters, sort, views)

The CLI never modifies the source file. It loads it into memory and works on
views of that in-memory dataset.
"""

from __future__ import annotations
import argparse
import logging
import shlex
from functools import partial
from typing import Iterable, List

from .config import DEFAULT_DATA_PATH, EXPORT_FILENAME, LOG_FORMAT
from .engine import EVIE
from .loader import load_dataset
from .filters import criteria_from_dict
from .models import VehicleRecord

HELP_TEXT = """
EVIE commands (grouped)
-----------------------

1) Overview
   help
   stats                            (headline cards)
   options                          (values available for filters)

2) Table view
   search "<text>"                  (example: search tesla; search "" clears)
   filter make "<Make>" [...]       (example: filter make TESLA NISSAN)
   filter year <year> [...]         (example: filter year 2020 2021)
   filter type "<EV type>" [...]
   filter range <min|-> <max|->     (example: filter range 100 -)
   clear                            (drop all filters)
   sort <field> [asc|desc]          (example: sort ElectricRange desc)
   page <n> [size]                  (pages start at 1)
   show

3) Charts (computed over the whole dataset)
   makes | counties | ranges | years
   growth | evolution | share | makegrowth | highlights

4) Data
   export ["<out.csv>"]             (default: ev_data_export.csv)
   reload

5) Exit
   quit
"""


def main(argv: List[str] | None = None) -> None:
    """Entry point for the EVIE CLI.

    1) Load dataset
    2) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="evie", description="Electric vehicle population explorer")
    ap.add_argument("--csv", default=DEFAULT_DATA_PATH, help="Path or URL of the EV population CSV (or .xlsx)")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    engine = EVIE(dataset_path=args.csv)
    print("Loading dataset...")
    if engine.reload(partial(load_dataset, args.csv)):
        print(f"Loaded {len(engine.records)} vehicles. Type 'help' for commands.")
    else:
        print("Could not load the dataset. Use 'reload' to try again.")

    while True:
        try:
            line = input("evie> ")
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(engine, line)
        except Exception as e:
            print(f"Error: {e}")


def handle(engine: EVIE, line: str) -> None:
    """Handle one CLI command line by calling the matching engine method."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP_TEXT)
        return

    if cmd == "stats":
        s = engine.summary()
        print(f"Total EVs: {engine.total_filtered:,} ({s.oldest_year} - {s.newest_year})")
        print(f"Vehicle diversity: {s.unique_models} models | {s.unique_makes} makes")
        print(f"Range: avg {s.average_range} mi | median {s.median_range} | min {s.min_range} | max {s.max_range}")
        print(f"Geographic coverage: {s.unique_counties} counties | {s.unique_cities} cities")
        return

    if cmd == "options":
        o = engine.filter_options()
        print("Makes: " + ", ".join(o.makes))
        print("Years: " + ", ".join(o.years))
        print("Types: " + ", ".join(o.types))
        print(f"Range: {o.range_min} - {o.range_max}")
        return

    if cmd == "search":
        engine.set_search(" ".join(parts[1:]))
        print(f"Search={engine.state.search_term!r}. Size={engine.total_filtered}")
        return

    if cmd == "filter":
        kind = parts[1].lower()
        if kind == "range":
            bounds = criteria_from_dict({"range": {"min": parts[2], "max": parts[3]}}).range
            engine.set_filter("range", bounds)
        elif kind in ("make", "year", "type"):
            engine.set_filter(kind, parts[2:])
        else:
            raise ValueError("filter kind must be: make, year, type, range")
        print(f"Filtered {kind}. Size={engine.total_filtered}")
        return

    if cmd == "clear":
        engine.clear_filters()
        print(f"Filters cleared. Size={engine.total_filtered}")
        return

    if cmd == "sort":
        direction = parts[2].lower() if len(parts) >= 3 else None
        engine.sort_by(parts[1], direction)
        print(f"Sorted by {engine.state.sort_field} ({engine.state.sort_direction}).")
        _print_rows(engine.page_rows())
        return

    if cmd == "page":
        if len(parts) >= 3:
            engine.set_page_size(int(parts[2]))
        engine.set_page(int(parts[1]) - 1)
        _print_page(engine)
        return

    if cmd == "show":
        _print_page(engine)
        return

    if cmd == "makes":
        for e in engine.make_distribution():
            print(f"{e.name:<24} {e.value:>8,} {e.percentage:>6}%")
        return

    if cmd == "counties":
        for e in engine.county_distribution():
            print(f"{e.name:<24} {e.value:>8,} {e.percentage:>6}%  avg range {e.avg_range}  makes {e.unique_makes}")
        return

    if cmd == "ranges":
        for e in engine.range_by_make():
            print(f"{e.make:<24} avg {e.average_range:>4} mi  models {e.model_count:>3}  years {e.year_span:>2}"
                  f"  vehicles {e.total_vehicles:>7,}  share {e.market_share}%")
        return

    if cmd == "years":
        for e in engine.model_year_distribution():
            print(f"{e.year:<6} {e.count:>8,} {e.percentage:>6}%  avg range {e.avg_range}")
        return

    if cmd == "growth":
        for p in engine.growth_rates():
            print(f"{p.year:<6} {p.total:>8,}  {p.growth:+.1f}%")
        return

    if cmd == "evolution":
        for y in engine.range_evolution():
            print(f"{y.year:<6} avg {y.average_range:>4}  median {y.median_range:>4}  models {y.model_count:>4}"
                  f"  vehicles {y.total_vehicles:,}")
        return

    if cmd == "share":
        for y in engine.year_share():
            print(f"{y.year:<6} {y.count:>8,} {y.share:>6}%")
        return

    if cmd == "makegrowth":
        for m in engine.make_growth():
            print(f"{m.make:<24} {m.previous_year}->{m.year}  {m.previous_count:,}->{m.count:,}  {m.growth:+.1f}%")
        return

    if cmd == "highlights":
        h = engine.range_highlights()
        print(f"Latest average range ({h.latest_year}): {h.latest_average_range} miles")
        print(f"Range improvement: {h.range_improvement:+.1f}%")
        print(f"Total models ({h.latest_year}): {h.latest_model_count}")
        return

    if cmd == "export":
        out_path = parts[1] if len(parts) >= 2 else EXPORT_FILENAME
        if engine.total_filtered == 0:
            print("Nothing to export: current view is empty.")
            return
        engine.export_csv(out_path)
        print(f"Exported {engine.total_filtered} rows to {out_path}")
        return

    if cmd == "reload":
        if not engine.dataset_path:
            print("No dataset source configured.")
            return
        if engine.reload(partial(load_dataset, engine.dataset_path)):
            print(f"Reloaded {len(engine.records)} vehicles. Size={engine.total_filtered}")
        else:
            print("Reload failed; keeping the previous data.")
        return

    print("Unknown command. Type 'help'.")


def _print_page(engine: EVIE) -> None:
    s = engine.state
    print(f"Page {s.page + 1}/{max(engine.pages(), 1)} ({engine.total_filtered} rows, {s.page_size} per page)")
    _print_rows(engine.page_rows())


def _print_rows(rows: Iterable[VehicleRecord]) -> None:
    for r in rows:
        print(f"{r.make} {r.model} | {r.model_year} | {r.ev_type} | range={r.electric_range} | {r.city}, {r.county}")


if __name__ == "__main__":
    main()
