import logging

import pytest

from corpus import (
    GRETEL_DELETE_FILE,
    GRETEL_INSERT_FILE,
    GRETEL_SELECT_FILE,
    GRETEL_UPDATE_FILE,
    SPIDER_SELECT_FILE,
    Corpus,
    load,
    load_group,
    load_groups,
    load_statements,
)


@pytest.fixture
def data_dir(tmp_path):
    files = {
        SPIDER_SELECT_FILE: "SELECT 1\n\nSELECT 2\n",
        GRETEL_SELECT_FILE: "SELECT 3\n",
        GRETEL_INSERT_FILE: "INSERT INTO t VALUES (1)\n",
        GRETEL_UPDATE_FILE: "UPDATE t SET a = 1\nUPDATE t SET a = 2\n",
        GRETEL_DELETE_FILE: "DELETE FROM t\n",
    }
    for name, text in files.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path


def test_load_statements_drops_empty_lines(data_dir):
    assert load_statements(data_dir / SPIDER_SELECT_FILE) == ["SELECT 1", "SELECT 2"]


def test_missing_file_warns_and_is_empty(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="corpus"):
        assert load_statements(tmp_path / "nope.txt") == []
    assert "nope.txt not found" in caplog.text


def test_load_named_dataset(data_dir):
    corpus = load("gretel_update", data_dir)
    assert corpus.name == "gretel_update"
    assert len(corpus) == 2
    assert list(corpus) == ["UPDATE t SET a = 1", "UPDATE t SET a = 2"]


def test_load_unknown_dataset():
    with pytest.raises(KeyError):
        load("mysql_select")


def test_combine_preserves_order():
    a = Corpus("a", ("1", "2"))
    b = Corpus("b", ("3",))
    combined = Corpus.combine("ab", a, b)
    assert combined.statements == ("1", "2", "3")
    assert a.statements == ("1", "2")


def test_groups_select_and_dml(data_dir):
    groups = load_groups(data_dir)
    assert list(groups) == ["select", "insert", "update", "delete", "dml"]
    assert groups["select"].statements == ("SELECT 1", "SELECT 2", "SELECT 3")
    assert groups["dml"].statements == (
        "SELECT 1", "SELECT 2", "SELECT 3",
        "INSERT INTO t VALUES (1)",
        "UPDATE t SET a = 1", "UPDATE t SET a = 2",
        "DELETE FROM t",
    )


def test_load_group_matches_load_groups(data_dir):
    groups = load_groups(data_dir)
    for name in groups:
        assert load_group(name, data_dir) == groups[name]


def test_load_group_unknown(data_dir):
    with pytest.raises(KeyError):
        load_group("merge", data_dir)


def test_missing_corpora_give_empty_groups(tmp_path):
    groups = load_groups(tmp_path)
    assert all(len(c) == 0 for c in groups.values())
