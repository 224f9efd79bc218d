"""In-process keyed locks.

Operations on one customer's cart (and on one coupon's usage counter) are
serialized by taking the lock for that key; unrelated keys never block each
other. Entries are reference counted and dropped once no holder remains.
"""

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager


class KeyedLock:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


@contextmanager
def hold_all(*pairs: tuple[KeyedLock, str | None]) -> Iterator[None]:
    """Acquire several keyed locks in the given order, skipping ``None`` keys."""
    with ExitStack() as stack:
        for registry, key in pairs:
            if key is not None:
                stack.enter_context(registry.hold(key))
        yield


customer_locks = KeyedLock("customer")
coupon_locks = KeyedLock("coupon")
