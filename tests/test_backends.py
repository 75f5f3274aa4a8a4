import pytest

from backends import (
    BACKEND_TYPES,
    BackendRegistry,
    PglastBackend,
    SqlglotBackend,
    SqloxideBackend,
    SqlparseBackend,
    available_registry,
    default_registry,
    is_valid_for_all,
)


def test_default_registry_order_and_identity():
    registry = default_registry()
    assert registry.keys() == ["sqloxide", "pglast", "sqlglot", "sqlparse"]
    assert len(registry) == len(BACKEND_TYPES)
    for backend in registry:
        assert backend.label
        assert backend.color.startswith("#")


def test_registry_get_and_select():
    registry = default_registry()
    assert isinstance(registry.get("pglast"), PglastBackend)
    assert registry.select(["sqlparse", "sqlglot"]).keys() == ["sqlparse", "sqlglot"]
    assert registry.select(None).keys() == registry.keys()
    assert "sqlglot" in registry
    with pytest.raises(KeyError):
        registry.get("oracle")


def test_registry_rejects_duplicates(fake_backend):
    registry = BackendRegistry([fake_backend("a")])
    with pytest.raises(ValueError):
        registry.register(fake_backend("a"))
    with pytest.raises(ValueError):
        registry.register(fake_backend(""))


def test_registry_accepts_new_backends(fake_backend):
    registry = default_registry()
    registry.register(fake_backend("duckdb"))
    assert registry.keys()[-1] == "duckdb"


def test_available_registry_only_importable():
    registry = available_registry()
    assert "sqlglot" in registry
    assert "sqlparse" in registry
    for backend in registry:
        assert type(backend).is_available()


def test_is_valid_for_all_short_circuits(fake_backend):
    reject = fake_backend("reject", accept=lambda s: False)
    never = fake_backend("never")
    assert not is_valid_for_all("SELECT 1", [reject, never])
    assert never.calls == []
    assert is_valid_for_all("SELECT 1", [fake_backend("a"), fake_backend("b")])


def test_is_valid_for_all_empty_selection():
    assert is_valid_for_all("anything", [])


def test_sqlglot_backend():
    backend = SqlglotBackend()
    assert backend.is_valid("SELECT a, b FROM t WHERE a = 1")
    assert backend.is_valid("SELECT 1; SELECT 2")
    assert not backend.is_valid("SELECT (1")
    assert backend.parse("SELECT (1") is None


def test_sqlparse_backend():
    backend = SqlparseBackend()
    assert backend.is_valid("SELECT a FROM t")
    assert len(backend.parse("SELECT 1; SELECT 2")) == 2


def test_pglast_backend():
    pytest.importorskip("pglast")
    backend = PglastBackend()
    assert backend.is_valid("SELECT a FROM t WHERE a = 1")
    assert not backend.is_valid("SELEC a FROM t")


def test_sqloxide_backend():
    pytest.importorskip("sqloxide")
    backend = SqloxideBackend()
    assert backend.is_valid("SELECT a FROM t WHERE a = 1")
    assert not backend.is_valid("SELEC a FROM t")
