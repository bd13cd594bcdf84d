# Copyright 2017-present Kensho Technologies, LLC.
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar


T = TypeVar("T")
VT = TypeVar("VT")


def map_in_order(function: Callable[[T], VT], items: Sequence[T], max_workers: int) -> List[VT]:
    """Apply the function to every item, on up to max_workers threads, keeping input order.

    Results are returned in the order of the items rather than in completion order, so callers
    see the same output regardless of how many workers were used. An exception raised for any item
    propagates to the caller once the pool has shut down.
    """
    if max_workers < 1:
        raise ValueError("Expected max_workers to be positive, but got {}.".format(max_workers))
    if max_workers == 1 or len(items) <= 1:
        return [function(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(function, items))
