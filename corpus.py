"""
Statement corpora: one SQL statement per line, empty lines ignored.

Files:
  spider_select.txt   real-world text-to-SQL SELECT queries (Spider)
  gretel_*.txt        synthetic SELECT/INSERT/UPDATE/DELETE (Gretel)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

logger = logging.getLogger(__name__)

SPIDER_SELECT_FILE = "spider_select.txt"
GRETEL_SELECT_FILE = "gretel_select.txt"
GRETEL_INSERT_FILE = "gretel_insert.txt"
GRETEL_UPDATE_FILE = "gretel_update.txt"
GRETEL_DELETE_FILE = "gretel_delete.txt"

DATASET_FILES: Dict[str, str] = {
    "spider_select": SPIDER_SELECT_FILE,
    "gretel_select": GRETEL_SELECT_FILE,
    "gretel_insert": GRETEL_INSERT_FILE,
    "gretel_update": GRETEL_UPDATE_FILE,
    "gretel_delete": GRETEL_DELETE_FILE,
}

# Benchmark groups in panel order, with their chart titles
GROUPS: Tuple[str, ...] = ("select", "insert", "update", "delete", "dml")
GROUP_TITLES: Dict[str, str] = {
    "select": "SELECT",
    "insert": "INSERT",
    "update": "UPDATE",
    "delete": "DELETE",
    "dml": "All DML",
}


@dataclass(frozen=True)
class Corpus:
    name: str
    statements: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self) -> Iterator[str]:
        return iter(self.statements)

    @classmethod
    def combine(cls, name: str, *parts: "Corpus") -> "Corpus":
        stmts: List[str] = []
        for part in parts:
            stmts.extend(part.statements)
        return cls(name, tuple(stmts))


def load_statements(path: Union[str, Path]) -> List[str]:
    path = Path(path)
    if not path.exists():
        logger.warning("%s not found", path)
        return []
    text = path.read_text(encoding="utf-8")
    return [line for line in text.splitlines() if line]


def load(dataset: str, data_dir: Union[str, Path] = ".") -> Corpus:
    filename = DATASET_FILES[dataset]
    return Corpus(dataset, tuple(load_statements(Path(data_dir) / filename)))


def load_groups(data_dir: Union[str, Path] = ".") -> Dict[str, Corpus]:
    """
    Load every benchmark group, reading each dataset file once
    """
    spider_select = load("spider_select", data_dir)
    gretel_select = load("gretel_select", data_dir)

    select = Corpus.combine("select", spider_select, gretel_select)
    insert = Corpus("insert", load("gretel_insert", data_dir).statements)
    update = Corpus("update", load("gretel_update", data_dir).statements)
    delete = Corpus("delete", load("gretel_delete", data_dir).statements)
    dml = Corpus.combine("dml", select, insert, update, delete)

    return {"select": select, "insert": insert, "update": update, "delete": delete, "dml": dml}


def load_group(group: str, data_dir: Union[str, Path] = ".") -> Corpus:
    if group == "select":
        return Corpus.combine("select", load("spider_select", data_dir), load("gretel_select", data_dir))
    if group in ("insert", "update", "delete"):
        return Corpus(group, load("gretel_" + group, data_dir).statements)
    if group == "dml":
        return load_groups(data_dir)["dml"]
    raise KeyError(f"unknown benchmark group: {group}")
