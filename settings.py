"""
Run configuration shared by the benchmark, compatibility and plotting tools.

Settings come from dataclass defaults, optionally an INI file, then a few
environment overrides:

  [paths]   data_dir, store_root, output_file
  [sizes]   canonical_sizes, known_corpus_maxima   (comma separated)
  [layout]  columns, panel_width, panel_height, header_height, dpi, title
  [timing]  samples, target_sample_ms
"""

from __future__ import annotations

import configparser
import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

CONFIG_ENV = "SQLBENCH_CONFIG"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path(".")
    store_root: Path = Path("results/timings")
    output_file: Path = Path("benchmark_results.svg")

    canonical_sizes: Tuple[int, ...] = (1, 10, 50, 100, 500, 1000)
    # Maxima of the shipped INSERT/UPDATE/DELETE datasets
    known_corpus_maxima: Tuple[int, ...] = (933, 983, 992)

    columns: int = 3
    panel_width: int = 400
    panel_height: int = 300
    header_height: int = 100
    y_headroom: float = 1.15
    x_domain: Tuple[float, float] = (1.0, 1000.0)
    cap_fraction: float = 0.08
    dpi: int = 100
    title: str = "SQL Parser Benchmark Comparison"

    samples: int = 50
    target_sample_ms: float = 20.0


def load_settings(path: Optional[str] = None) -> Settings:
    settings = Settings()
    if path:
        parser = configparser.ConfigParser()
        if not parser.read(path):
            raise FileNotFoundError(f"Config file not found: {path}")
        settings = _apply_config(settings, parser)
    return env_override(settings)


def _apply_config(settings: Settings, parser: configparser.ConfigParser) -> Settings:
    changes: Dict[str, object] = {}

    paths = _section_to_dict(parser, "paths")
    for key in ("data_dir", "store_root", "output_file"):
        if key in paths:
            changes[key] = Path(paths[key])

    sizes = _section_to_dict(parser, "sizes")
    for key in ("canonical_sizes", "known_corpus_maxima"):
        if key in sizes:
            changes[key] = _to_int_tuple(sizes[key], key)

    layout = _section_to_dict(parser, "layout")
    for key in ("columns", "panel_width", "panel_height", "header_height", "dpi"):
        if key in layout:
            changes[key] = _to_int(layout[key], key)
    if "title" in layout:
        changes["title"] = layout["title"]

    timing = _section_to_dict(parser, "timing")
    if "samples" in timing:
        changes["samples"] = _to_int(timing["samples"], "samples")
    if "target_sample_ms" in timing:
        try:
            changes["target_sample_ms"] = float(timing["target_sample_ms"])
        except ValueError:
            raise ValueError(f"Invalid number for target_sample_ms: {timing['target_sample_ms']!r}")

    return dataclasses.replace(settings, **changes)


def env_override(settings: Settings) -> Settings:
    """
    Let the environment relocate inputs and outputs without editing config files.
    """
    changes: Dict[str, object] = {}
    data_dir = os.environ.get("SQLBENCH_DATA_DIR")
    store_root = os.environ.get("SQLBENCH_STORE_ROOT")
    output = os.environ.get("SQLBENCH_OUTPUT")
    if data_dir:
        changes["data_dir"] = Path(data_dir)
    if store_root:
        changes["store_root"] = Path(store_root)
    if output:
        changes["output_file"] = Path(output)
    if not changes:
        return settings
    return dataclasses.replace(settings, **changes)


def default_config_path() -> Optional[str]:
    return os.environ.get(CONFIG_ENV) or None


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _section_to_dict(parser: configparser.ConfigParser, section: str) -> Dict[str, str]:
    if not parser.has_section(section):
        return {}
    return {k: v for k, v in parser.items(section)}


def _to_int(value: str, key: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid integer for {key}: {value!r}")


def _to_int_tuple(value: str, key: str) -> Tuple[int, ...]:
    return tuple(_to_int(part, key) for part in value.split(",") if part.strip())
