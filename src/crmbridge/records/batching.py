"""Fixed-size windows over identifier sequences.

Requests that carry an ``ids`` list are split into windows of at most
BATCH_SIZE identifiers. Windows keep input order and never overlap, so
concatenating them gives back the original sequence.
"""

from typing import Any, Iterable, Iterator, List, Sequence

BATCH_SIZE = 100


def batched(ids: Iterable[Any], size: int = BATCH_SIZE) -> Iterator[List[Any]]:
    """Yield consecutive windows of at most ``size`` items."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")

    batch: List[Any] = []
    for item in ids:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def join_ids(ids: Sequence[Any]) -> str:
    """Comma-joined query parameter value."""
    return ",".join(str(i) for i in ids)
