import logging
import threading
from typing import Any, Callable, Dict, List, Mapping

logger = logging.getLogger(__name__)


class SingletonCache:
    """Shared instances of singleton beans, by canonical bean name.

    Creation goes through one re-entrant lock for the whole cache, so at most
    one instance is ever created per name. Creating one singleton may look up
    others on the same thread while the lock is held.

    Attributes:
        _instances: Cached instances by bean name.
        _lock: Serializes creation of every singleton of the owning factory.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._instances: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def get_or_create(self, bean_name: str, factory: Callable[[], Any]) -> Any:
        """Return the cached instance, or create and cache it under the lock.

        Args:
            bean_name: Canonical bean name.
            factory: Creates the instance on a cache miss.

        Returns:
            The one shared instance for the name.

        Example:
            >>> cache = SingletonCache()
            >>> first = cache.get_or_create("dog", Dog)
            >>> cache.get_or_create("dog", Dog) is first
            True
        """
        with self._lock:
            if bean_name not in self._instances:
                instance = factory()
                self._instances[bean_name] = instance
                logger.info("Cached shared instance of singleton bean '%s'", bean_name)
            return self._instances[bean_name]

    def contains(self, bean_name: str) -> bool:
        with self._lock:
            return bean_name in self._instances

    def evict(self, instances: Mapping[str, Any]) -> List[str]:
        """Drop cached entries that still hold the given instances.

        Entries cached for the same names with other instances are kept.

        Args:
            instances: Instances by bean name, usually the in-flight map of a failed lookup.

        Returns:
            The evicted bean names.
        """
        with self._lock:
            evicted = [
                name
                for name, instance in instances.items()
                if name in self._instances and self._instances[name] is instance
            ]
            for name in evicted:
                del self._instances[name]
        if evicted:
            logger.info("Evicted singletons %s created during a failed bean creation", evicted)
        return evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
