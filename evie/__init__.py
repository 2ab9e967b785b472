"""
EVIE package
============

This package contains the Electric Vehicle Insight Engine (EVIE).

- The CLI entry point is in `evie/cli.py`.
- The core engine (view state, reload, memoized views) is in `evie/engine.py`.
- Filtering is in `evie/filters.py`; aggregate views are in `evie/aggregates.py`
  and `evie/stats.py`.
- Dataset loading and CSV export are in `evie/loader.py`.
"""

__version__ = '0.1.0'
