# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Fan-out/join helper for issuing independent requests concurrently."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, List, Sequence


def _gather(calls: Sequence[Callable[[], Any]], max_workers: int = 8) -> List[Any]:
    """
    Run every callable concurrently and wait for all of them.

    Results are returned in submission order. Every call runs to completion
    before the first raised exception (in submission order) is re-raised.

    :param calls: Zero-argument callables to run.
    :param max_workers: Upper bound on concurrently running calls.
    :return: The callables' return values.
    :rtype: list
    """
    if not calls:
        return []
    if len(calls) == 1:
        return [calls[0]()]
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(calls)))) as executor:
        futures = [executor.submit(call) for call in calls]
        wait(futures)
    return [f.result() for f in futures]
