"""
Sorting primitives
==================

An explicit merge sort used by the table view. It is stable, so re-sorting an
already sorted list by the same key returns it unchanged.
"""

from __future__ import annotations
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")


def merge_sort(arr: Sequence[T], key: Callable[[T], object] = lambda x: x, descending: bool = False) -> List[T]:
    """Stable merge sort; always returns a new list."""
    if len(arr) <= 1:
        return list(arr)
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, descending=descending)
    right = merge_sort(arr[mid:], key=key, descending=descending)
    return _merge(left, right, key=key, descending=descending)


def _merge(left: List[T], right: List[T], key: Callable[[T], object], descending: bool) -> List[T]:
    out: List[T] = []
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # ties go left so equal keys keep their order
        take_left = not (a < b) if descending else not (b < a)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out
