"""
Timing runs: every backend parses every batch size of every benchmark group.

Outputs (under the settings' store_root):
  <group>/<backend>/<size>/new/estimates.json   (mean / median / std_dev ...)

Trials run one after another, never concurrently.

How to run:
  python bench.py
  python bench.py --groups select,dml --backends sqlglot,sqlparse --samples 20
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import math
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from backends import Backend, BackendRegistry, available_registry
from batches import batch_of, sizes_for
from corpus import GROUPS, load_groups
from estimates import RECORD_DIR, RECORD_FILE
from settings import Settings, configure_logging, default_config_path, load_settings

logger = logging.getLogger(__name__)


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: float) -> float:
    return ns / 1_000_000.0


@dataclass
class TrialSummary:
    group: str
    backend: str
    size: int
    samples: int
    iterations: int
    mean_ns: float
    median_ns: float
    std_dev_ns: float
    median_abs_dev_ns: float
    standard_error_ns: float


def summarize(group: str, backend: str, size: int, samples_ns: List[float], iterations: int) -> TrialSummary:
    """
    Per-iteration statistics over the collected samples
    """
    if not samples_ns:
        raise ValueError("at least one sample is required")
    mean = statistics.mean(samples_ns)
    median = statistics.median(samples_ns)
    if len(samples_ns) == 1:
        std_dev = 0.0
    else:
        std_dev = statistics.stdev(samples_ns)
    mad = statistics.median([abs(s - median) for s in samples_ns])
    return TrialSummary(
        group=group,
        backend=backend,
        size=size,
        samples=len(samples_ns),
        iterations=iterations,
        mean_ns=mean,
        median_ns=median,
        std_dev_ns=std_dev,
        median_abs_dev_ns=mad,
        standard_error_ns=std_dev / math.sqrt(len(samples_ns)),
    )


def _estimate(point: float, standard_error: float) -> Dict[str, object]:
    # normal approximation of the 95% interval
    half = 1.96 * standard_error
    return {
        "confidence_interval": {
            "confidence_level": 0.95,
            "lower_bound": point - half,
            "upper_bound": point + half,
        },
        "point_estimate": point,
        "standard_error": standard_error,
    }


def estimates_document(summary: TrialSummary) -> Dict[str, object]:
    se = summary.standard_error_ns
    return {
        "mean": _estimate(summary.mean_ns, se),
        "median": _estimate(summary.median_ns, se),
        "median_abs_dev": _estimate(summary.median_abs_dev_ns, 0.0),
        "slope": None,
        "std_dev": _estimate(summary.std_dev_ns, 0.0),
    }


def write_estimates(size_dir: Path, summary: TrialSummary) -> Path:
    out_dir = Path(size_dir) / RECORD_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / RECORD_FILE
    with path.open("w", encoding="utf-8") as f:
        json.dump(estimates_document(summary), f)
    return path


# Trial runner

def calibrate_iterations(backend: Backend, sql: str, target_sample_ms: float) -> int:
    """
    Warm up once and pick how many calls make one sample last about target_sample_ms
    """
    t0 = now_ns()
    backend.parse(sql)
    elapsed = max(1, now_ns() - t0)
    return max(1, int(target_sample_ms * 1_000_000.0 / elapsed))


def time_backend(backend: Backend, sql: str, samples: int, iterations: int) -> List[float]:
    out: List[float] = []
    for _ in range(samples):
        t0 = now_ns()
        for _ in range(iterations):
            backend.parse(sql)
        out.append((now_ns() - t0) / iterations)
    return out


def run_group(group: str, statements: Sequence[str], backends: BackendRegistry, settings: Settings) -> List[TrialSummary]:
    if not statements:
        logger.warning("No statements for group '%s', skipping", group)
        return []

    summaries: List[TrialSummary] = []
    for size in sizes_for(statements, settings.canonical_sizes):
        sql = batch_of(statements, size)
        for backend in backends:
            iterations = calibrate_iterations(backend, sql, settings.target_sample_ms)
            samples_ns = time_backend(backend, sql, settings.samples, iterations)
            summary = summarize(group, backend.key, size, samples_ns, iterations)
            write_estimates(Path(settings.store_root) / group / backend.key / str(size), summary)
            summaries.append(summary)
            print(f"{group:7} {backend.key:10} {size:5}: "
                  f"{ns_to_ms(summary.mean_ns):.3f} ± {ns_to_ms(summary.std_dev_ns):.3f} ms")
    return summaries


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Time SQL parser backends over the statement corpora")
    ap.add_argument("--config", type=str, default=default_config_path(), help="INI settings file")
    ap.add_argument("--groups", type=str, default=",".join(GROUPS), help="Comma-separated benchmark groups")
    ap.add_argument("--backends", type=str, default=None, help="Comma-separated backend keys (default: all available)")
    ap.add_argument("--samples", type=int, default=None, help="Samples per trial (overrides settings)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    configure_logging(args.verbose)
    settings = load_settings(args.config)
    if args.samples is not None:
        if args.samples < 1:
            ap.error("--samples must be positive")
        settings = dataclasses.replace(settings, samples=args.samples)

    groups = parse_csv_list(args.groups)
    unknown = [g for g in groups if g not in GROUPS]
    if unknown:
        ap.error("unknown groups: " + ", ".join(unknown))

    registry = available_registry()
    try:
        backends = registry.select(parse_csv_list(args.backends) if args.backends else None)
    except KeyError as exc:
        logger.error("%s (available: %s)", exc.args[0], ", ".join(registry.keys()) or "none")
        return 2
    if not len(backends):
        logger.error("No parser backends available; install at least one of the parser libraries.")
        return 2

    corpora = load_groups(settings.data_dir)
    summaries: List[TrialSummary] = []
    for group in groups:
        summaries.extend(run_group(group, corpora[group].statements, backends, settings))

    if not summaries:
        logger.error("No trials ran; check that the corpus files exist in %s", settings.data_dir)
        return 1
    print(f"Wrote {len(summaries)} records under {settings.store_root}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
