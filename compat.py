"""
Per-statement compatibility of each backend with the statement corpora.

How to run:
  python compat.py
  python compat.py --backends sqlglot,pglast --shared
  python compat.py --csv results/compat.csv
"""

from __future__ import annotations

import argparse
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from backends import Backend, BackendRegistry, available_registry, is_valid_for_all
from corpus import GROUP_TITLES, Corpus, load_groups
from settings import configure_logging, default_config_path, load_settings

logger = logging.getLogger(__name__)

# DML is the union of the others, so it adds nothing to acceptance counts
COMPAT_GROUPS = ("select", "insert", "update", "delete")
SHARED_KEY = "all"


@dataclass(frozen=True)
class CompatReport:
    corpus: str
    backend: str
    accepted: int
    total: int

    @property
    def percentage(self) -> Optional[float]:
        if self.total == 0:
            return None
        return 100.0 * self.accepted / self.total

    def format_percentage(self) -> str:
        pct = self.percentage
        if pct is None:
            return "no data"
        return f"{pct:.1f}%"


def compatibility(statements: Iterable[str], predicate: Callable[[str], bool]) -> Tuple[int, int]:
    accepted = 0
    total = 0
    for stmt in statements:
        total += 1
        if predicate(stmt):
            accepted += 1
    return accepted, total


def check_compat(corpus: Corpus, backend: Backend) -> CompatReport:
    accepted, total = compatibility(corpus, backend.is_valid)
    return CompatReport(corpus.name, backend.key, accepted, total)


def shared_compatibility(corpus: Corpus, backends: Iterable[Backend]) -> CompatReport:
    selected = list(backends)
    accepted, total = compatibility(corpus, lambda sql: is_valid_for_all(sql, selected))
    return CompatReport(corpus.name, SHARED_KEY, accepted, total)


def format_report(report: CompatReport) -> str:
    name = GROUP_TITLES.get(report.corpus, report.corpus)
    return f"  {name}: {report.accepted}/{report.total} ({report.format_percentage()})"


def write_reports_csv(reports: Sequence[CompatReport], path: Path) -> None:
    fields = ["corpus", "backend", "accepted", "total", "percentage"]
    with Path(path).open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in reports:
            pct = r.percentage
            w.writerow({
                "corpus": r.corpus,
                "backend": r.backend,
                "accepted": r.accepted,
                "total": r.total,
                "percentage": "" if pct is None else f"{pct:.1f}",
            })


def run_compat(corpora: Sequence[Corpus], backends: BackendRegistry, shared: bool = False) -> List[CompatReport]:
    reports: List[CompatReport] = []
    for i, backend in enumerate(backends):
        if i:
            print()
        print(f"{backend.label} compatibility:")
        for corpus in corpora:
            report = check_compat(corpus, backend)
            reports.append(report)
            print(format_report(report))

    if shared and len(backends) > 1:
        print()
        print("Accepted by all of: " + ", ".join(b.label for b in backends))
        for corpus in corpora:
            report = shared_compatibility(corpus, backends)
            reports.append(report)
            print(format_report(report))
    return reports


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Per-statement parser compatibility over the corpora")
    ap.add_argument("--config", type=str, default=default_config_path(), help="INI settings file")
    ap.add_argument("--data_dir", type=str, default=None, help="Directory holding the corpus files")
    ap.add_argument("--backends", type=str, default=None, help="Comma-separated backend keys (default: all available)")
    ap.add_argument("--shared", action="store_true", help="Also count statements accepted by every selected backend")
    ap.add_argument("--csv", type=str, default=None, help="Write the reports to this CSV file")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    configure_logging(args.verbose)
    settings = load_settings(args.config)
    data_dir = Path(args.data_dir) if args.data_dir else settings.data_dir

    registry = available_registry()
    try:
        backends = registry.select(parse_csv_list(args.backends) if args.backends else None)
    except KeyError as exc:
        logger.error("%s (available: %s)", exc.args[0], ", ".join(registry.keys()) or "none")
        return 2
    if not len(backends):
        logger.error("No parser backends available; install at least one of the parser libraries.")
        return 2

    groups = load_groups(data_dir)
    corpora = [groups[g] for g in COMPAT_GROUPS]
    reports = run_compat(corpora, backends, shared=args.shared)

    if args.csv:
        write_reports_csv(reports, Path(args.csv))
        print(f"\nWrote {len(reports)} reports to {args.csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
