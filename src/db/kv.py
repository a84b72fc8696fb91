# src/db/kv.py
from __future__ import annotations

import asyncio
import json
import weakref
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Mapping, Optional

from db.database import connect

# ---------------------------
# Per-key locks
# ---------------------------

# One lock table per event loop, since asyncio locks cannot cross loops.
# Entries are never evicted: a table holds one lock per distinct key ever
# locked, i.e. the fixed shop keys plus one cart key per user. Tables go
# away with their loop.
_LOCKS: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[str, asyncio.Lock]]" = (
    weakref.WeakKeyDictionary()
)


def get_lock(key: str) -> asyncio.Lock:
    locks = _LOCKS.setdefault(asyncio.get_running_loop(), {})
    if key not in locks:
        locks[key] = asyncio.Lock()
    return locks[key]


@asynccontextmanager
async def locked(*keys: str):
    """Hold the locks for every given key.

    Locks are taken in sorted order so overlapping callers cannot deadlock.
    """
    locks = [get_lock(k) for k in sorted(dict.fromkeys(keys))]
    acquired: List[asyncio.Lock] = []
    try:
        for lock in locks:
            await lock.acquire()
            acquired.append(lock)
        yield
    finally:
        for lock in reversed(acquired):
            lock.release()


# ---------------------------
# Store operations
# ---------------------------


def _encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


async def get(key: str, default: Any = None) -> Any:
    """Return the decoded value stored under key, or default when absent."""
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    if row is None:
        return default
    return json.loads(row[0])


async def set(key: str, value: Any) -> None:
    async with connect() as conn:
        await conn.execute(
            "INSERT INTO kv(key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
            (key, _encode(value)),
        )
        await conn.commit()


async def set_many(items: Mapping[str, Any], delete: Iterable[str] = ()) -> None:
    """Write every entry, then remove every key in `delete`, in one transaction.

    Entries are written in the mapping's order. Either all changes land or,
    on failure, none do.
    """
    payload = [(k, _encode(v)) for k, v in items.items()]
    doomed = [(k,) for k in delete]
    async with connect() as conn:
        try:
            for key, value in payload:
                await conn.execute(
                    "INSERT INTO kv(key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                    (key, value),
                )
            if doomed:
                await conn.executemany("DELETE FROM kv WHERE key = ?;", doomed)
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise


async def delete(key: str) -> bool:
    """Remove key. Returns True if something was deleted."""
    async with connect() as conn:
        cur = await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
        await conn.commit()
        return cur.rowcount > 0


async def delete_many(keys: Iterable[str]) -> int:
    keys = list(keys)
    if not keys:
        return 0
    async with connect() as conn:
        cur = await conn.executemany(
            "DELETE FROM kv WHERE key = ?;", [(k,) for k in keys]
        )
        await conn.commit()
        return cur.rowcount


async def keys(prefix: Optional[str] = None) -> List[str]:
    """List stored keys, optionally only those starting with prefix."""
    async with connect() as conn:
        if prefix is None:
            cur = await conn.execute("SELECT key FROM kv ORDER BY key;")
        else:
            cur = await conn.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key;",
                (len(prefix), prefix),
            )
        rows = await cur.fetchall()
        await cur.close()
    return [row[0] for row in rows]
