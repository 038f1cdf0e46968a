"""Key-value persistence adapters."""

from redis import Redis, RedisError

from console_config.exceptions import PersistenceError


class InMemoryKeyValueStore:
    """Process-local store used for development and tests."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]


class RedisKeyValueStore:
    """
    Redis-backed store.

    Logical keys are namespaced as ``{namespace}:{key}`` so several
    deployments can share one Redis database. The client must be created
    with ``decode_responses=True``.

    Redis errors are re-raised as :class:`PersistenceError`.
    """

    def __init__(self, redis: Redis, namespace: str = "console"):
        self.redis = redis
        self.namespace = namespace

    def _make_key(self, key: str) -> str:
        """Create the namespaced Redis key."""
        return f"{self.namespace}:{key}" if self.namespace else key

    def _strip_key(self, redis_key: str) -> str:
        if self.namespace and redis_key.startswith(f"{self.namespace}:"):
            return redis_key[len(self.namespace) + 1 :]
        return redis_key

    def get(self, key: str) -> str | None:
        try:
            return self.redis.get(self._make_key(key))
        except RedisError as exc:
            raise PersistenceError("get", key, str(exc)) from exc

    def set(self, key: str, value: str) -> bool:
        try:
            return bool(self.redis.set(self._make_key(key), value))
        except RedisError as exc:
            raise PersistenceError("set", key, str(exc)) from exc

    def delete(self, key: str) -> bool:
        try:
            return self.redis.delete(self._make_key(key)) > 0
        except RedisError as exc:
            raise PersistenceError("delete", key, str(exc)) from exc

    def keys(self, prefix: str = "") -> list[str]:
        """Enumerate keys starting with *prefix* using SCAN (non-blocking)."""
        pattern = f"{self._make_key(prefix)}*"
        try:
            return [self._strip_key(k) for k in self.redis.scan_iter(match=pattern)]
        except RedisError as exc:
            raise PersistenceError("scan", prefix, str(exc)) from exc
