"""Best-effort read-through cache over Django's cache framework.

Cache failures never break a request: every backend error is logged and
treated as a miss.  Values must be JSON-friendly (services store
``dto.model_dump(mode="json")`` and rebuild the DTO on a hit).

Groups of keys that cannot be enumerated (paged listings) are
invalidated by bumping a namespace version that is embedded in each key.
Versions are seeded from a nanosecond timestamp, so an evicted version
key never brings back pages cached under an older version.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import structlog
from django.conf import settings
from django.core.cache import caches

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


class ReadThroughCache:
    """Thin wrapper adding TTL defaults and failure isolation."""

    def __init__(self, alias: str = "default", default_ttl: Optional[int] = None) -> None:
        self._alias = alias
        self._default_ttl = (
            default_ttl
            if default_ttl is not None
            else getattr(settings, "CACHE_DEFAULT_TTL", DEFAULT_TTL_SECONDS)
        )

    @property
    def _backend(self):
        return caches[self._alias]

    def get(self, key: str) -> Any:
        try:
            value = self._backend.get(key)
        except Exception as exc:
            logger.warning("cache.get_failed", key=key, error=str(exc))
            return None
        logger.debug("cache.hit" if value is not None else "cache.miss", key=key)
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            self._backend.set(key, value, ttl if ttl is not None else self._default_ttl)
        except Exception as exc:
            logger.warning("cache.set_failed", key=key, error=str(exc))

    def delete(self, *keys: str) -> None:
        try:
            self._backend.delete_many(list(keys))
        except Exception as exc:
            logger.warning("cache.delete_failed", keys=list(keys), error=str(exc))

    def get_or_set(
        self, key: str, loader: Callable[[], Any], ttl: Optional[int] = None
    ) -> Any:
        """Return the cached value or call ``loader`` and cache its result.

        ``None`` results are never cached, so a missing entity is looked up
        again on the next call.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = loader()
        if value is not None:
            self.set(key, value, ttl)
        return value

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    def namespace_key(self, namespace: str, suffix: str) -> str:
        return f"{namespace}:v{self._namespace_version(namespace)}:{suffix}"

    def invalidate_namespace(self, namespace: str) -> None:
        version_key = f"{namespace}:version"
        try:
            try:
                self._backend.incr(version_key)
            except ValueError:
                self._backend.set(version_key, time.time_ns(), None)
        except Exception as exc:
            logger.warning("cache.invalidate_failed", namespace=namespace, error=str(exc))
            return
        logger.info("cache.namespace_invalidated", namespace=namespace)

    def _namespace_version(self, namespace: str) -> int:
        version_key = f"{namespace}:version"
        try:
            version = self._backend.get(version_key)
            if version is None:
                self._backend.add(version_key, time.time_ns(), None)
                version = self._backend.get(version_key)
        except Exception as exc:
            logger.warning("cache.version_failed", namespace=namespace, error=str(exc))
            return 0
        return int(version or 0)
