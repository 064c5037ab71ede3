"""Bounded free-list pool for the stateful validation nodes.

Validating a large object creates one validator, one node state and one
predicate surface per navigation or predicate step. The pool keeps those
instances around so repeated validations do not churn the allocator.

Free lists are confined to the thread that released the instances, so two
threads validating at the same time never share pooled objects. Resetting an
instance before reuse is the responsibility of its owner, not the pool.
"""

from __future__ import annotations

import logging
import threading
import weakref
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_pools: "weakref.WeakSet[ObjectPool]" = weakref.WeakSet()


class ObjectPool(Generic[T]):
    """Generic bounded free list.

    Args:
        factory: Called with a generated instance name when the pool is empty
        max_size: Maximum number of idle instances kept per thread
        name: Pool name (for logging/debugging)

    Example:
        ```python
        pool = ObjectPool(lambda name: bytearray(64), max_size=4, name="buffers")
        buf = pool.acquire()
        ...
        pool.release(buf)
        ```
    """

    def __init__(self, factory: Callable[[str], T], max_size: int = 10, name: str = ""):
        self._factory = factory
        self._max_size = max_size
        self._name = name
        self._created_count = 0
        self._count_lock = threading.Lock()
        self._local = threading.local()
        _pools.add(self)

    @property
    def name(self) -> str:
        """Get pool name."""
        return self._name

    @property
    def max_size(self) -> int:
        """Maximum number of idle instances kept per thread."""
        return self._max_size

    @max_size.setter
    def max_size(self, max_size: int) -> None:
        self._max_size = max_size
        free = self._free
        if len(free) > max_size:
            del free[max_size:]

    @property
    def created_count(self) -> int:
        """Number of instances the factory has produced so far."""
        return self._created_count

    @property
    def size(self) -> int:
        """Number of idle instances available to the current thread."""
        return len(self._free)

    @property
    def _free(self) -> List[T]:
        free = getattr(self._local, "free", None)
        if free is None:
            free = []
            self._local.free = free
        return free

    def acquire(self) -> T:
        """Return a recycled instance, or a new one when none is idle."""
        free = self._free
        if free:
            return free.pop()
        with self._count_lock:
            self._created_count += 1
            count = self._created_count
        logger.debug(f"Pool {self._name} creating instance #{count}")
        return self._factory(f"{self._name}-{count}")

    def release(self, instance: T) -> None:
        """Return an instance to the free list; surplus instances are dropped."""
        free = self._free
        if len(free) < self._max_size:
            free.append(instance)

    def clear(self) -> None:
        """Drop every idle instance held for the current thread."""
        self._free.clear()


def set_pool_max_size(max_size: int) -> None:
    """Set the capacity of every pool created so far.

    Args:
        max_size: Maximum number of idle instances kept per thread
    """
    for pool in list(_pools):
        pool.max_size = max_size
    logger.debug(f"Pool capacity set to {max_size} for {len(_pools)} pools")
