"""
Gallery storage for published apps

GalleryStore is the interface the API depends on. InMemoryGalleryStore is the
default; PostgresGalleryStore uses psycopg2 directly.
"""
import json
import uuid
import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

import psycopg2
import psycopg2.extras

from .exceptions import GalleryStoreError
from .models import AppData, PublicGalleryEntry, Settings
from .app_generator import generate_thumbnail, project_files_for

MAX_LISTED_APPS = 50


class GalleryStore(ABC):
    """Append-only collection of published apps"""

    @abstractmethod
    def append(self, entry: PublicGalleryEntry) -> None:
        ...

    @abstractmethod
    def list(self, limit: int = MAX_LISTED_APPS) -> List[PublicGalleryEntry]:
        """Newest first, at most `limit` entries"""

    @abstractmethod
    def get(self, app_id: str) -> Optional[PublicGalleryEntry]:
        ...

    @abstractmethod
    def remove(self, app_id: str) -> bool:
        ...


class InMemoryGalleryStore(GalleryStore):

    def __init__(self, max_entries: int = MAX_LISTED_APPS):
        self.max_entries = max_entries
        # id -> (append sequence, entry); the sequence orders entries with equal createdAt
        self._entries: Dict[str, Tuple[int, PublicGalleryEntry]] = {}
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def _newest_first(self) -> List[PublicGalleryEntry]:
        ranked = sorted(self._entries.values(), key=lambda item: (item[1].createdAt, item[0]), reverse=True)
        return [entry for _, entry in ranked]

    def append(self, entry: PublicGalleryEntry) -> None:
        with self._lock:
            self._entries[entry.id] = (next(self._sequence), entry)
            if len(self._entries) > self.max_entries:
                for stale in self._newest_first()[self.max_entries:]:
                    del self._entries[stale.id]

    def list(self, limit: int = MAX_LISTED_APPS) -> List[PublicGalleryEntry]:
        with self._lock:
            return self._newest_first()[:max(0, limit)]

    def get(self, app_id: str) -> Optional[PublicGalleryEntry]:
        with self._lock:
            item = self._entries.get(app_id)
            return item[1] if item else None

    def remove(self, app_id: str) -> bool:
        with self._lock:
            return self._entries.pop(app_id, None) is not None


class PostgresGalleryStore(GalleryStore):
    """Gallery rows in the vibe_public_apps table"""

    TABLE = "vibe_public_apps"
    COLUMNS = "id, title, theme, layout, description, thumbnail, files, created_at, featured"

    def __init__(self, settings: Settings, connect: Optional[Callable] = None):
        self.settings = settings
        self._connect = connect or psycopg2.connect
        self._table_ready = False

    def get_db_connection(self):
        return self._connect(
            host=self.settings.postgres_host,
            port=self.settings.postgres_port,
            database=self.settings.postgres_db,
            user=self.settings.postgres_user,
            password=self.settings.postgres_password.get_secret_value(),
        )

    def _execute(self, query: str, params=(), fetch: Optional[str] = None):
        conn = None
        try:
            conn = self.get_db_connection()
            cursor = conn.cursor()
            if not self._table_ready:
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {self.TABLE} (
                        id TEXT PRIMARY KEY,
                        title TEXT NOT NULL,
                        theme TEXT NOT NULL,
                        layout TEXT NOT NULL,
                        description TEXT NOT NULL,
                        thumbnail TEXT NOT NULL,
                        files JSONB NOT NULL,
                        created_at TIMESTAMPTZ NOT NULL,
                        featured BOOLEAN NOT NULL DEFAULT FALSE
                    )
                """)
            cursor.execute(query, params)
            if fetch == "all":
                result = cursor.fetchall()
            elif fetch == "one":
                result = cursor.fetchone()
            else:
                result = cursor.rowcount
            conn.commit()
            self._table_ready = True
            return result
        except psycopg2.Error as e:
            if conn is not None:
                conn.rollback()
            print(f"❌ Gallery database error: {e}")
            raise GalleryStoreError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def _row_to_entry(row) -> PublicGalleryEntry:
        files = row[6]
        if isinstance(files, (str, bytes, bytearray)):
            files = json.loads(files)
        return PublicGalleryEntry(
            id=row[0],
            title=row[1],
            theme=row[2],
            layout=row[3],
            description=row[4],
            thumbnail=row[5],
            files=files or {},
            createdAt=row[7],
            featured=bool(row[8]),
        )

    def append(self, entry: PublicGalleryEntry) -> None:
        self._execute(
            f"INSERT INTO {self.TABLE} ({self.COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                entry.id, entry.title, entry.theme, entry.layout, entry.description,
                entry.thumbnail, psycopg2.extras.Json(entry.files), entry.createdAt, entry.featured,
            ),
        )

    def list(self, limit: int = MAX_LISTED_APPS) -> List[PublicGalleryEntry]:
        rows = self._execute(
            f"SELECT {self.COLUMNS} FROM {self.TABLE} ORDER BY created_at DESC LIMIT %s",
            (max(0, limit),),
            fetch="all",
        )
        return [self._row_to_entry(row) for row in rows or []]

    def get(self, app_id: str) -> Optional[PublicGalleryEntry]:
        row = self._execute(
            f"SELECT {self.COLUMNS} FROM {self.TABLE} WHERE id = %s",
            (app_id,),
            fetch="one",
        )
        return self._row_to_entry(row) if row else None

    def remove(self, app_id: str) -> bool:
        return self._execute(f"DELETE FROM {self.TABLE} WHERE id = %s", (app_id,)) > 0


def create_gallery_store(settings: Settings) -> GalleryStore:
    if settings.gallery_backend == "postgres":
        print(f"🗄️ Gallery backend: postgres at {settings.postgres_host}:{settings.postgres_port}")
        return PostgresGalleryStore(settings)
    return InMemoryGalleryStore(max_entries=settings.gallery_limit)


def generate_app_id() -> str:
    return uuid.uuid4().hex[:13]


def publish_app(store: GalleryStore, title: str, app_data: AppData,
                clock: Optional[Callable[[], datetime]] = None) -> PublicGalleryEntry:
    """Assign id and timestamp, build the thumbnail and append to the store"""
    clock = clock or (lambda: datetime.now(timezone.utc))
    theme = app_data.config.theme
    entry = PublicGalleryEntry(
        id=generate_app_id(),
        title=title,
        theme=theme,
        layout=app_data.config.layout,
        description=app_data.description,
        thumbnail=generate_thumbnail(theme, title),
        files=project_files_for(app_data),
        createdAt=clock(),
        featured=False,
    )
    store.append(entry)
    print(f"✅ Published app {entry.id}: {title[:50]}")
    return entry
