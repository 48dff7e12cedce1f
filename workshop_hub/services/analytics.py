"""Workshop analytics counters backed by Upstash Redis with in-memory fallback."""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Dict, Optional, Protocol, Sequence, cast

import httpx

from workshop_hub.core.config import get_settings

COUNTER_NAMES = ("total_views", "registrations", "cancellations", "completions")


class AnalyticsCounter(Protocol):
    """Contract for the analytics sink."""

    def increment(self, name: str, amount: int = 1) -> None:
        ...

    def record_view(self, workshop_id: int) -> None:
        ...

    def snapshot(self) -> Dict[str, object]:
        ...

    def reset(self) -> None:
        ...


@dataclass
class InMemoryAnalyticsCounter(AnalyticsCounter):
    """Thread-safe process-local counters."""

    def __post_init__(self) -> None:
        self._counters: Dict[str, int] = {name: 0 for name in COUNTER_NAMES}
        self._views: Dict[int, int] = {}
        self._lock = RLock()

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + amount

    def record_view(self, workshop_id: int) -> None:
        with self._lock:
            self._views[workshop_id] = self._views.get(workshop_id, 0) + 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            data: Dict[str, object] = dict(self._counters)
            data["popular_workshops"] = {str(key): value for key, value in self._views.items()}
            return data

    def reset(self) -> None:
        with self._lock:
            self._counters = {name: 0 for name in COUNTER_NAMES}
            self._views.clear()


class RedisAnalyticsCounter(AnalyticsCounter):
    """Counters stored in Redis through the Upstash REST API."""

    def __init__(self, *, url: str, token: str, prefix: str) -> None:
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=5.0,
        )
        self._prefix = prefix
        self._views_key = f"{self._prefix}:analytics:views"

    def increment(self, name: str, amount: int = 1) -> None:
        self._execute("INCRBY", self._counter_key(name), str(amount))

    def record_view(self, workshop_id: int) -> None:
        self._execute("HINCRBY", self._views_key, str(workshop_id), "1")

    def snapshot(self) -> Dict[str, object]:
        keys = [self._counter_key(name) for name in COUNTER_NAMES]
        values = cast(Sequence[Optional[str]], self._execute("MGET", *keys) or [])
        data: Dict[str, object] = {
            name: int(value) if value is not None else 0
            for name, value in zip(COUNTER_NAMES, list(values) + [None] * len(COUNTER_NAMES))
        }
        # HGETALL comes back as a flat [field, value, field, value, ...] list.
        flat = list(cast(Sequence[str], self._execute("HGETALL", self._views_key) or []))
        data["popular_workshops"] = {flat[i]: int(flat[i + 1]) for i in range(0, len(flat) - 1, 2)}
        return data

    def reset(self) -> None:
        self._execute("DEL", self._views_key, *[self._counter_key(name) for name in COUNTER_NAMES])

    def _counter_key(self, name: str) -> str:
        return f"{self._prefix}:analytics:{name}"

    def _execute(self, *command: str) -> Optional[object]:
        response = self._client.post("/", json=list(command))
        response.raise_for_status()
        payload = response.json()
        return payload.get("result")


_shared_counter: Optional[AnalyticsCounter] = None


def get_analytics_counter() -> AnalyticsCounter:
    """Return the process-wide analytics counter."""

    global _shared_counter
    if _shared_counter is not None:
        return _shared_counter

    settings = get_settings()
    if settings.redis_url and settings.redis_token:
        _shared_counter = RedisAnalyticsCounter(
            url=settings.redis_url,
            token=settings.redis_token,
            prefix=settings.redis_analytics_prefix,
        )
    else:
        _shared_counter = InMemoryAnalyticsCounter()
    return _shared_counter


def set_analytics_counter(counter: Optional[AnalyticsCounter]) -> None:
    """Override the cached counter (primarily for tests)."""

    global _shared_counter
    _shared_counter = counter
