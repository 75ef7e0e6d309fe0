import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from utils.storage_backend import (
    InMemoryBackend,
    SQLAlchemyBackend,
    StorageError,
    StorageQuotaExceeded,
    ensure_history_table,
)


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ensure_history_table(engine)
    yield engine
    engine.dispose()


def test_kv_table_is_created(sqlite_engine):
    assert "kv_store" in inspect(sqlite_engine).get_table_names()
    # idempotent
    ensure_history_table(sqlite_engine)


def test_sqlalchemy_backend_roundtrip(sqlite_engine):
    backend = SQLAlchemyBackend(sessionmaker(bind=sqlite_engine))

    assert backend.get("history") is None
    backend.set("history", '{"version":1,"items":[]}')
    backend.set("history", '{"version":1,"items":[1]}')
    assert backend.get("history") == '{"version":1,"items":[1]}'

    backend.remove("history")
    backend.remove("history")
    assert backend.get("history") is None


def test_sqlalchemy_errors_become_storage_errors():
    engine = create_engine("sqlite://", poolclass=StaticPool)
    backend = SQLAlchemyBackend(sessionmaker(bind=engine))
    # Tabelle fehlt
    with pytest.raises(StorageError):
        backend.get("history")


def test_in_memory_quota():
    backend = InMemoryBackend(quota_bytes=10)
    backend.set("a", "12345")
    backend.set("a", "1234567890")
    with pytest.raises(StorageQuotaExceeded):
        backend.set("b", "x")
    assert backend.get("b") is None


def test_in_memory_unavailable():
    backend = InMemoryBackend(available=False)
    with pytest.raises(StorageError):
        backend.set("a", "1")
    with pytest.raises(StorageError):
        backend.get("a")
