import time
from typing import Any, Optional

import redis


class FakeRedisError(redis.RedisError):
    """Redis error carrying a numeric code."""

    def __init__(self, message: str, code: int = 0) -> None:
        super().__init__(message)
        self.code = code


class FakeRedis:
    """In memory stand-in for a redis.Redis client."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.decode_responses = False

    def get(self, key: str) -> Optional[Any]:
        return self.store.get(key)

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self.store[key] = value
        return True

    def mset(self, mapping: dict[str, Any]) -> bool:
        self.store.update(mapping)
        return True

    def hset(
        self,
        name: str,
        key: Optional[str] = None,
        value: Any = None,
        mapping: Optional[dict] = None,
    ) -> int:
        items = dict(mapping or {})
        if key is not None:
            items[key] = value
        self.store.setdefault(name, {}).update(items)
        return len(items)

    def slow_get(self, key: str, delay: float = 0.01) -> Optional[Any]:
        time.sleep(delay)
        return self.store.get(key)

    def fail(self, code: int = 5, message: str = "oops") -> None:
        raise FakeRedisError(message, code)

    def broken(self) -> None:
        raise ValueError("not a redis error")
