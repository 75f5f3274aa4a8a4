"""
Read timing records written by the measurement phase.

A record is <size_dir>/new/estimates.json, shaped like:

  {"mean": {"confidence_interval": {...}, "point_estimate": 12345.0, ...},
   "median": {...}, ..., "std_dev": {..., "point_estimate": 67.0, ...}}

Only mean and std_dev point estimates are needed, so the record is not
decoded as JSON: each value is found by substring search (first occurrence
of the container key, then the first "point_estimate" after it). A record
reordered so another object's point_estimate comes first after the
container key yields that value instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

RECORD_DIR = "new"
RECORD_FILE = "estimates.json"

MEAN_KEY = '"mean"'
STD_DEV_KEY = '"std_dev"'
POINT_ESTIMATE_KEY = '"point_estimate"'

NS_PER_MS = 1_000_000.0


@dataclass(frozen=True)
class Measurement:
    mean_ns: float
    std_dev_ns: float = 0.0

    @property
    def mean_ms(self) -> float:
        return self.mean_ns / NS_PER_MS

    @property
    def std_dev_ms(self) -> float:
        return self.std_dev_ns / NS_PER_MS

    @property
    def upper_ms(self) -> float:
        return (self.mean_ns + self.std_dev_ns) / NS_PER_MS


def extract_field(text: str, container_key: str, field_key: str = POINT_ESTIMATE_KEY) -> Optional[float]:
    start = text.find(container_key)
    if start < 0:
        return None
    rest = text[start:]

    field_start = rest.find(field_key)
    if field_start < 0:
        return None
    value_text = rest[field_start + len(field_key):].lstrip()
    if value_text.startswith(":"):
        value_text = value_text[1:]

    # numeral runs to the next comma or closing brace
    ends = [i for i in (value_text.find(","), value_text.find("}")) if i >= 0]
    if not ends:
        return None
    try:
        return float(value_text[:min(ends)].strip())
    except ValueError:
        return None


def extract_mean_and_std_dev(text: str) -> Optional[Tuple[float, float]]:
    mean = extract_field(text, MEAN_KEY)
    if mean is None:
        return None
    std_dev = extract_field(text, STD_DEV_KEY)
    return mean, (std_dev if std_dev is not None else 0.0)


def record_path(size_dir: Path) -> Path:
    return Path(size_dir) / RECORD_DIR / RECORD_FILE


def read_measurement(size_dir: Path) -> Optional[Measurement]:
    path = record_path(size_dir)
    if not path.is_file():
        logger.debug("no record at %s", path)
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("unreadable record %s: %s", path, exc)
        return None

    parsed = extract_mean_and_std_dev(text)
    if parsed is None:
        logger.debug("no mean estimate in %s", path)
        return None
    mean, std_dev = parsed
    return Measurement(mean_ns=mean, std_dev_ns=std_dev)
