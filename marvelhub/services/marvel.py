# marvelhub/services/marvel.py
import asyncio
import hashlib
import logging
import threading
import time
from typing import Any

import aiohttp

from marvelhub.config import MarvelKey

logger = logging.getLogger(__name__)


class MarvelApiError(Exception):
    pass


class MarvelServerError(MarvelApiError):
    pass


class KeyPool:
    """
    Round-robin pool of Marvel API key pairs.

    A key is used until it has served `max_uses_per_key` requests or the
    API rate-limits it, then the next key takes over.
    """

    def __init__(self, keys: list[MarvelKey], max_uses_per_key: int = 1000):
        if not keys:
            raise ValueError("KeyPool needs at least one key")
        self.keys = list(keys)
        self.max_uses_per_key = max_uses_per_key
        self.current_index = 0
        self.usage_count = 0
        self._lock = threading.Lock()

    def current(self) -> MarvelKey:
        with self._lock:
            return self.keys[self.current_index]

    def rotate(self) -> None:
        with self._lock:
            self._rotate()

    def record_use(self) -> None:
        with self._lock:
            self.usage_count += 1
            if self.usage_count >= self.max_uses_per_key:
                self._rotate()

    def _rotate(self) -> None:
        self.current_index = (self.current_index + 1) % len(self.keys)
        self.usage_count = 0
        logger.info("Rotated to Marvel API key index %s", self.current_index)


def request_hash(ts: str, key: MarvelKey) -> str:
    return hashlib.md5((ts + key.private_key + key.public_key).encode("utf-8")).hexdigest()


def _thumbnail_url(thumb: dict) -> str | None:
    path = thumb.get("path")
    if not path:
        return None
    extension = thumb.get("extension")
    return f"{path}.{extension}" if extension else path


class MarvelClient:
    def __init__(
        self,
        http: aiohttp.ClientSession,
        key_pool: KeyPool,
        base_url: str = "https://gateway.marvel.com/v1/public",
        cache_ttl: float = 3600,
        cache_max_entries: int = 1024,
        retries: int = 3,
        retry_delay: float = 1.0,
        rate_limit_delay: float = 2.0,
    ):
        self.http = http
        self.key_pool = key_pool
        self.base_url = base_url.rstrip("/")
        self.cache_ttl = cache_ttl
        self.cache_max_entries = cache_max_entries
        self.retries = retries
        self.retry_delay = retry_delay
        self.rate_limit_delay = rate_limit_delay
        self._cache: dict[str, tuple[float, Any]] = {}

    def _cached(self, url: str):
        hit = self._cache.get(url)
        if hit is None:
            return None
        stored_at, payload = hit
        if time.monotonic() - stored_at > self.cache_ttl:
            self._cache.pop(url, None)
            return None
        return payload

    def _store(self, url: str, payload) -> None:
        now = time.monotonic()
        expired = [k for k, (stored_at, _) in self._cache.items() if now - stored_at > self.cache_ttl]
        for k in expired:
            del self._cache[k]
        self._cache.pop(url, None)
        # Oldest first, dicts keep insertion order
        while len(self._cache) >= self.cache_max_entries:
            del self._cache[next(iter(self._cache))]
        self._cache[url] = (now, payload)

    async def request(self, path: str, params: dict | None = None) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        params = dict(params or {})
        cache_key = url + "?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()))

        cached = self._cached(cache_key)
        if cached is not None:
            return cached

        for attempt in range(1, self.retries + 1):
            key = self.key_pool.current()
            ts = str(int(time.time() * 1000))
            signed = {**params, "ts": ts, "apikey": key.public_key, "hash": request_hash(ts, key)}

            try:
                async with self.http.get(url, params=signed) as resp:
                    self.key_pool.record_use()

                    if resp.status == 429:
                        logger.warning("Marvel API rate limit on key %s", self.key_pool.current_index)
                        self.key_pool.rotate()
                        await asyncio.sleep(self.rate_limit_delay)
                        continue
                    if resp.status == 404:
                        payload = {"code": 404, "data": {"results": []}}
                    elif resp.status >= 500:
                        raise MarvelServerError(f"Marvel API server error: {resp.status}")
                    elif resp.status >= 400:
                        raise MarvelApiError(f"Marvel API request rejected: {resp.status}")
                    else:
                        payload = await resp.json()
            except (aiohttp.ClientError, MarvelServerError) as exc:
                logger.error("Marvel API request failed (attempt %s): %s", attempt, exc)
                if attempt >= self.retries:
                    raise MarvelApiError(str(exc)) from exc
                self.key_pool.rotate()
                await asyncio.sleep(self.retry_delay * attempt)
                continue

            self._store(cache_key, payload)
            return payload

        raise MarvelApiError("Marvel API rate limit exhausted all retries")

    async def get_character(self, character_id: int) -> dict | None:
        payload = await self.request(f"characters/{int(character_id)}")
        results = (payload.get("data") or {}).get("results") or []
        if not results:
            return None

        hero = results[0]
        thumb = hero.get("thumbnail") or {}
        return {
            "id": hero["id"],
            "name": hero.get("name", ""),
            "description": hero.get("description", ""),
            "thumbnail": _thumbnail_url(thumb),
        }
