from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from backends import Backend
from estimates import RECORD_DIR, RECORD_FILE

RECORD_TEMPLATE = (
    '{"mean":{"confidence_interval":{"confidence_level":0.95,"lower_bound":%(mean)s,"upper_bound":%(mean)s},'
    '"point_estimate":%(mean)s,"standard_error":1.0},'
    '"median":{"confidence_interval":{"confidence_level":0.95,"lower_bound":1.0,"upper_bound":2.0},'
    '"point_estimate":%(mean)s,"standard_error":1.0},'
    '"median_abs_dev":{"confidence_interval":{"confidence_level":0.95,"lower_bound":0.0,"upper_bound":1.0},'
    '"point_estimate":0.5,"standard_error":0.1},'
    '"slope":null,'
    '"std_dev":{"confidence_interval":{"confidence_level":0.95,"lower_bound":0.0,"upper_bound":1.0},'
    '"point_estimate":%(sd)s,"standard_error":0.1}}'
)


def record_text(mean: float, sd: float) -> str:
    return RECORD_TEMPLATE % {"mean": repr(float(mean)), "sd": repr(float(sd))}


class FakeBackend(Backend):
    module = "fake"

    def __init__(self, key: str = "fake", accept: Optional[Callable[[str], bool]] = None, color: str = "#123456"):
        self.key = key
        self.label = key.title()
        self.color = color
        self.accept = accept or (lambda sql: True)
        self.calls = []

    def parse(self, sql: str):
        self.calls.append(sql)
        return sql if self.accept(sql) else None


@pytest.fixture
def make_record(tmp_path: Path):
    """
    Write <root>/<group>/<backend>/<size>/new/estimates.json; raw text wins over mean/sd
    """
    def _make(group: str, backend: str, size, mean: float = 1000.0, sd: float = 0.0,
              text: Optional[str] = None, root: Optional[Path] = None) -> Path:
        base = Path(root) if root is not None else tmp_path / "store"
        record_dir = base / group / backend / str(size) / RECORD_DIR
        record_dir.mkdir(parents=True, exist_ok=True)
        path = record_dir / RECORD_FILE
        path.write_text(text if text is not None else record_text(mean, sd), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def store(tmp_path: Path) -> Path:
    root = tmp_path / "store"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("SQLBENCH_CONFIG", "SQLBENCH_DATA_DIR", "SQLBENCH_STORE_ROOT", "SQLBENCH_OUTPUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_backend():
    return FakeBackend
