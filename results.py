"""
Assemble timing records into a result table:

  group -> backend key -> sample size -> Measurement

Store layout: <root>/<group>/<backend>/<size>/new/estimates.json. Only sizes
the current corpora would produce are read, so directories left over from
older corpus snapshots never leak into the table.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

from backends import Backend
from batches import sizes_for_length
from corpus import GROUPS
from estimates import Measurement, read_measurement
from settings import Settings

logger = logging.getLogger(__name__)

BackendResults = Dict[int, Measurement]
GroupResults = Dict[str, BackendResults]
ResultTable = Dict[str, GroupResults]


class ResultStoreError(Exception):
    """The result store is missing or holds nothing usable."""


def allowed_sizes(group: str, settings: Settings, corpus_lengths: Optional[Mapping[str, int]] = None) -> Set[int]:
    length = (corpus_lengths or {}).get(group)
    if length:
        return set(sizes_for_length(length, settings.canonical_sizes))
    # corpus not at hand: accept every ceiling a shipped dataset can produce
    return set(settings.canonical_sizes) | set(settings.known_corpus_maxima)


def _read_backend(backend_path: Path, sizes: Set[int]) -> BackendResults:
    backend_results: BackendResults = {}
    for entry in sorted(backend_path.iterdir()):
        name = entry.name
        if not entry.is_dir():
            continue
        # only the literal decimal size: no "1_000", " 10", "010" or "+10"
        if not (name.isascii() and name.isdigit()) or name != str(int(name)):
            continue
        size = int(name)
        if size not in sizes:
            logger.debug("skipping stale size directory %s", entry)
            continue
        measurement = read_measurement(entry)
        if measurement is not None:
            backend_results[size] = measurement
    return backend_results


def aggregate(
    store_root: Path,
    settings: Settings,
    backends: Iterable[Backend],
    corpus_lengths: Optional[Mapping[str, int]] = None,
) -> ResultTable:
    store_root = Path(store_root)
    backend_keys = [b.key for b in backends]
    table: ResultTable = {}
    if not store_root.is_dir():
        return table

    for group in GROUPS:
        group_path = store_root / group
        if not group_path.is_dir():
            continue
        sizes = allowed_sizes(group, settings, corpus_lengths)

        group_results: GroupResults = {}
        for key in backend_keys:
            backend_path = group_path / key
            if not backend_path.is_dir():
                continue
            backend_results = _read_backend(backend_path, sizes)
            if backend_results:
                group_results[key] = backend_results

        if group_results:
            table[group] = group_results

    return table


def load_results(
    settings: Settings,
    backends: Iterable[Backend],
    corpus_lengths: Optional[Mapping[str, int]] = None,
) -> ResultTable:
    root = Path(settings.store_root)
    if not root.exists():
        raise ResultStoreError(
            f"Benchmark results not found at {root}. "
            "Run the measurement phase first (sqlbench-run) to generate benchmark data."
        )
    table = aggregate(root, settings, backends, corpus_lengths)
    if not table:
        raise ResultStoreError(f"No benchmark results found under {root}.")
    return table


def table_sizes(group_results: GroupResults) -> List[int]:
    sizes: Set[int] = set()
    for backend_results in group_results.values():
        sizes.update(backend_results)
    return sorted(sizes)


def format_results(table: ResultTable, backends: Iterable[Backend]) -> str:
    backends = list(backends)
    lines = ["Benchmark results:", "=================="]
    for group in GROUPS:
        group_results = table.get(group)
        if not group_results:
            continue
        lines.append("")
        lines.append(f"{group}:")
        lines.append("-" * (len(group) + 1))
        for size in table_sizes(group_results):
            lines.append("")
            lines.append(f"  {size} statements:")
            for backend in backends:
                m = group_results.get(backend.key, {}).get(size)
                if m is not None:
                    lines.append(f"    {backend.label:24}: {m.mean_ms:.3f} ± {m.std_dev_ms:.3f} ms")
    return "\n".join(lines)


SUMMARY_FIELDS = ["group", "backend", "size", "mean_ns", "std_dev_ns", "mean_ms", "std_dev_ms"]


def write_summary_csv(table: ResultTable, path: Path, backends: Iterable[Backend]) -> int:
    """
    One row per (group, backend, size) cell. Returns the number of rows written
    """
    order = [b.key for b in backends]
    rows = 0
    with Path(path).open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS)
        w.writeheader()
        for group in GROUPS:
            group_results = table.get(group, {})
            for key in order:
                for size, m in sorted(group_results.get(key, {}).items()):
                    w.writerow({
                        "group": group,
                        "backend": key,
                        "size": size,
                        "mean_ns": m.mean_ns,
                        "std_dev_ns": m.std_dev_ns,
                        "mean_ms": m.mean_ms,
                        "std_dev_ms": m.std_dev_ms,
                    })
                    rows += 1
    return rows
