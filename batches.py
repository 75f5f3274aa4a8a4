from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

CANONICAL_SIZES: Tuple[int, ...] = (1, 10, 50, 100, 500, 1000)
STATEMENT_SEPARATOR = "; "


def sizes_for_length(max_count: int, canonical: Iterable[int] = CANONICAL_SIZES) -> List[int]:
    """
    Canonical sample sizes for a corpus of max_count statements.
    A corpus whose size falls strictly between 500 and 1000 also gets its
    own size as the last point, so its natural ceiling is measured.
    """
    base = sorted(set(canonical))
    if 500 < max_count < 1000:
        sizes = [s for s in base if s <= max_count]
        if max_count not in sizes:
            sizes.append(max_count)
        return sizes
    return base


def sizes_for(statements: Sequence[str], canonical: Iterable[int] = CANONICAL_SIZES) -> List[int]:
    return sizes_for_length(len(statements), canonical)


def batch_of(statements: Sequence[str], size: int) -> str:
    """
    Join the first min(size, len) statements into one multi-statement text
    """
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    subset = list(statements)[:size]
    return STATEMENT_SEPARATOR.join(subset)


def batches_for(statements: Sequence[str], canonical: Iterable[int] = CANONICAL_SIZES) -> List[Tuple[int, str]]:
    return [(size, batch_of(statements, size)) for size in sizes_for(statements, canonical)]
