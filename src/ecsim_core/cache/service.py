# src/ecsim_core/cache/service.py
"""
Two-scope memoization service shared by node generation and the op-amp
operating-point search.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, Hashable, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheScope(str, Enum):
    """Lifetime of a cached entry."""
    RUN = 'run'
    PROCESS = 'process'


ScopeLike = Union[CacheScope, str]


class SimulationCache:
    """
    Memoizes simulation artifacts in two scopes.

    - RUN entries live as long as this instance. The op-amp operating point of one
      schematic state is stored here, keyed by topology plus every numeric component
      value, so a parameter edit can never hit a stale entry.
    - PROCESS entries are shared by every instance in the interpreter. Node generation
      depends on topology alone and is stored here.

    Hits and misses are counted per scope for each instance.
    """
    _process_entries: Dict[Hashable, Any] = {}

    def __init__(self):
        self._run_entries: Dict[Hashable, Any] = {}
        self._counters: Dict[CacheScope, Dict[str, int]] = {
            scope: {'hits': 0, 'misses': 0} for scope in CacheScope
        }
        logger.debug("SimulationCache instance created.")

    def _entries(self, scope: CacheScope) -> Dict[Hashable, Any]:
        if scope is CacheScope.RUN:
            return self._run_entries
        return type(self)._process_entries

    def get(self, key: Hashable, scope: ScopeLike = CacheScope.RUN) -> Any:
        """Returns the entry stored under `key`, or None on a miss."""
        scope = CacheScope(scope)
        entries = self._entries(scope)
        outcome = 'hits' if key in entries else 'misses'
        self._counters[scope][outcome] += 1
        logger.debug(f"Cache {outcome[:-1].upper()} in '{scope.value}' scope for key {str(key)[:120]}")
        return entries.get(key)

    def put(self, key: Hashable, value: Any, scope: ScopeLike = CacheScope.RUN):
        scope = CacheScope(scope)
        entries = self._entries(scope)
        if key in entries:
            logger.warning(f"Overwriting an existing '{scope.value}' cache entry.")
        entries[key] = value

    def get_or_compute(self, key: Hashable, compute: Callable[[], T], scope: ScopeLike = CacheScope.RUN) -> T:
        """Returns the cached entry for `key`, computing and storing it on a miss."""
        cached = self.get(key, scope)
        if cached is not None:
            return cached
        value = compute()
        self.put(key, value, scope)
        return value

    def get_stats(self) -> Dict[str, Dict[str, int]]:
        """Copies of the per-scope hit and miss counters, keyed 'run' and 'process'."""
        return {scope.value: dict(counter) for scope, counter in self._counters.items()}

    @classmethod
    def clear_process_cache(cls):
        """Forgets every process-scope entry, forcing node generation to run again."""
        cls._process_entries.clear()
        logger.info("Cleared the process-level cache.")
