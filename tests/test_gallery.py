from datetime import datetime, timedelta, timezone

import psycopg2
import psycopg2.extras
import pytest

from Vibe_Builder.app_generator import APP_SOURCE_PATH
from Vibe_Builder.exceptions import GalleryStoreError
from Vibe_Builder.models import AppData, PublicGalleryEntry, Settings
from Vibe_Builder.simple_database import (
    InMemoryGalleryStore, PostgresGalleryStore, create_gallery_store, publish_app,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_entry(app_id, minutes=0, title=None):
    return PublicGalleryEntry(
        id=app_id,
        title=title or app_id,
        theme="minimal",
        layout="dual",
        description="",
        thumbnail="data:image/svg+xml,",
        files={"src/App.tsx": "app"},
        createdAt=BASE_TIME + timedelta(minutes=minutes),
    )


def make_app_data(title="Grocery Todo"):
    return AppData(
        title=title,
        description="Track what to buy",
        appType="todo",
        code={"App": "export default () => null;"},
        config={"theme": "playful", "layout": "dual", "features": ["Add items"]},
    )


class Clock:
    def __init__(self):
        self.now = BASE_TIME

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


def test_list_is_newest_first():
    store = InMemoryGalleryStore()
    clock = Clock()
    first = publish_app(store, "A", make_app_data("A"), clock=clock)
    second = publish_app(store, "B", make_app_data("B"), clock=clock)

    assert [entry.title for entry in store.list()] == ["B", "A"]
    assert second.createdAt > first.createdAt


def test_list_respects_limit():
    store = InMemoryGalleryStore()
    for i in range(5):
        store.append(make_entry(f"app-{i}", minutes=i))

    assert [entry.id for entry in store.list(2)] == ["app-4", "app-3"]
    assert store.list(0) == []


def test_oldest_entries_are_pruned_at_capacity():
    store = InMemoryGalleryStore(max_entries=3)
    for i in range(5):
        store.append(make_entry(f"app-{i}", minutes=i))

    assert [entry.id for entry in store.list()] == ["app-4", "app-3", "app-2"]
    assert store.get("app-0") is None


def test_equal_timestamps_list_latest_append_first():
    store = InMemoryGalleryStore()
    store.append(make_entry("A"))
    store.append(make_entry("B"))

    assert [entry.id for entry in store.list()] == ["B", "A"]


def test_pruning_keeps_latest_append_on_equal_timestamps():
    store = InMemoryGalleryStore(max_entries=2)
    for app_id in ("A", "B", "C"):
        store.append(make_entry(app_id))

    assert [entry.id for entry in store.list()] == ["C", "B"]


def test_get_and_remove():
    store = InMemoryGalleryStore()
    store.append(make_entry("keep"))

    assert store.get("keep").id == "keep"
    assert store.get("missing") is None
    assert store.remove("keep") is True
    assert store.remove("keep") is False
    assert store.list() == []


def test_publish_builds_entry_from_app_data():
    store = InMemoryGalleryStore()
    entry = publish_app(store, "Grocery Todo", make_app_data(), clock=Clock())

    assert len(entry.id) == 13
    assert entry.theme == "playful"
    assert entry.layout == "dual"
    assert entry.description == "Track what to buy"
    assert entry.thumbnail.startswith("data:image/svg+xml,")
    assert entry.files[APP_SOURCE_PATH] == "export default () => null;"
    assert entry.featured is False
    assert store.get(entry.id) == entry


def test_publish_without_code_is_rejected():
    store = InMemoryGalleryStore()
    with pytest.raises(ValueError):
        publish_app(store, "Empty", AppData(title="Empty"))
    assert store.list() == []


def test_backend_selection():
    assert isinstance(create_gallery_store(Settings()), InMemoryGalleryStore)
    assert isinstance(create_gallery_store(Settings(gallery_backend="postgres")), PostgresGalleryStore)


# -------------------
# Postgres store
# -------------------

class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 0

    def execute(self, query, params=()):
        if self.conn.error is not None:
            raise self.conn.error
        self.conn.queries.append((" ".join(query.split()), params))
        self.rowcount = self.conn.rowcount

    def fetchall(self):
        return self.conn.rows

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None


class FakeConnection:
    def __init__(self, rows=None, rowcount=1, error=None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.queries = []
        self.committed = self.rolled_back = self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


def postgres_store(conn):
    return PostgresGalleryStore(Settings(gallery_backend="postgres"), connect=lambda **kwargs: conn)


def test_postgres_creates_table_then_inserts():
    conn = FakeConnection()
    store = postgres_store(conn)
    store.append(make_entry("abc"))

    assert conn.queries[0][0].startswith("CREATE TABLE IF NOT EXISTS vibe_public_apps")
    insert, params = conn.queries[1]
    assert insert.startswith("INSERT INTO vibe_public_apps")
    assert params[0] == "abc"
    assert isinstance(params[6], psycopg2.extras.Json)
    assert conn.committed and conn.closed


def test_postgres_list_maps_rows():
    row = ("abc", "Title", "techy", "quad", "desc", "thumb", '{"src/App.tsx": "app"}', BASE_TIME, False)
    conn = FakeConnection(rows=[row])
    entries = postgres_store(conn).list(10)

    assert entries == [PublicGalleryEntry(
        id="abc", title="Title", theme="techy", layout="quad", description="desc",
        thumbnail="thumb", files={"src/App.tsx": "app"}, createdAt=BASE_TIME, featured=False,
    )]
    query, params = conn.queries[-1]
    assert "ORDER BY created_at DESC LIMIT %s" in query
    assert params == (10,)


def test_postgres_get_and_remove():
    assert postgres_store(FakeConnection(rows=[])).get("nope") is None
    assert postgres_store(FakeConnection(rowcount=1)).remove("abc") is True
    assert postgres_store(FakeConnection(rowcount=0)).remove("abc") is False


def test_postgres_errors_roll_back_and_close():
    conn = FakeConnection(error=psycopg2.OperationalError("connection reset"))

    with pytest.raises(GalleryStoreError):
        postgres_store(conn).list()
    assert conn.rolled_back and conn.closed
