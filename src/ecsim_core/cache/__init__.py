# src/ecsim_core/cache/__init__.py
"""
Exposes the public interface of the cache package.
"""
from .keys import CurrentKey, VoltageDropKey, create_operating_point_key, create_topology_key
from .service import CacheScope, SimulationCache

__all__ = [
    "CacheScope",
    "SimulationCache",
    "CurrentKey",
    "VoltageDropKey",
    "create_operating_point_key",
    "create_topology_key",
]
