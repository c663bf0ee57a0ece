"""In-memory collaborators and Redis used across the tests."""

import asyncio
import fnmatch
import itertools
import time
from typing import Any, Mapping

from app.wizard.collaborators import NotificationError, PersistenceError, StorageError


class FakeStorage:
    """Records uploads; `fail_on` names files whose upload raises.

    `delays` maps file names to seconds spent in flight before the upload
    lands (or fails).
    """

    def __init__(self, fail_on: set[str] | None = None, delays: Mapping[str, float] | None = None):
        self.delays = dict(delays or {})
        self.objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[str] = []
        self.removed: list[tuple[str, str]] = []
        self.fail_on = fail_on or set()

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        self.calls.append(path)
        for name, seconds in self.delays.items():
            if path.endswith(name):
                await asyncio.sleep(seconds)
        if any(path.endswith(name) for name in self.fail_on):
            raise StorageError("quota exceeded")
        self.objects[(bucket, path)] = data
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"https://files.test/{bucket}/{path}"

    async def remove(self, bucket: str, path: str) -> None:
        self.removed.append((bucket, path))
        self.objects.pop((bucket, path), None)


class FakePersistence:
    """Dict-of-tables store; `fail_on` names tables whose insert raises."""

    def __init__(self, fail_on: set[str] | None = None, rows: Mapping[str, list[dict]] | None = None):
        self.tables: dict[str, dict[str, dict]] = {}
        self.log: list[tuple[str, str]] = []
        self.fail_on = fail_on or set()
        self._ids = itertools.count(1)
        for table, table_rows in (rows or {}).items():
            for row in table_rows:
                self.tables.setdefault(table, {})[row["id"]] = dict(row)

    async def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        self.log.append(("insert", table))
        if table in self.fail_on:
            raise PersistenceError(f'insert or update on table "{table}" violates a constraint')
        row = {"id": f"{table}-{next(self._ids)}", **record}
        self.tables.setdefault(table, {})[row["id"]] = row
        return dict(row)

    async def update(self, table: str, id: str, patch: Mapping[str, Any]) -> None:
        self.log.append(("update", table))
        if f"update:{table}" in self.fail_on:
            raise PersistenceError(f"could not update {table}")
        row = self.tables.get(table, {}).get(id)
        if row is None:
            raise PersistenceError(f"{table} {id} not found")
        row.update(patch)

    async def select(self, table: str, filters: Mapping[str, Any]) -> list[dict]:
        return [
            dict(row)
            for row in self.tables.get(table, {}).values()
            if all(row.get(k) == v for k, v in filters.items())
        ]

    async def delete(self, table: str, id: str) -> None:
        self.log.append(("delete", table))
        self.tables.get(table, {}).pop(id, None)

    def rows(self, table: str) -> list[dict]:
        return list(self.tables.get(table, {}).values())


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, dict]] = []
        self.fail = fail

    async def send_invite_email(self, to: str, template_data: Mapping[str, Any]) -> None:
        if self.fail:
            raise NotificationError("mail service returned 503")
        self.sent.append((to, dict(template_data)))


class FakeRedis:
    """The subset of redis.asyncio.Redis the app uses."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.expiry: dict[str, float] = {}

    def _alive(self, key: str) -> bool:
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self.data.pop(key, None)
            self.expiry.pop(key, None)
        return key in self.data

    async def ping(self) -> bool:
        return True

    async def get(self, key: str):
        return self.data[key] if self._alive(key) else None

    async def set(self, key: str, value, ex: int | None = None):
        self.data[key] = value
        if ex:
            self.expiry[key] = time.monotonic() + ex
        return True

    async def setex(self, key: str, ttl: int, value):
        return await self.set(key, value, ex=ttl)

    async def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        deadline = self.expiry.get(key)
        return -1 if deadline is None else int(round(deadline - time.monotonic()))

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    async def scan_iter(self, match: str = "*"):
        for key in list(self.data):
            if self._alive(key) and fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self):
        pass
