# src/ecsim_core/results/__init__.py
"""
Exposes the public interface of the results (query) layer.
"""
from .base import ResultsCacheBase
from .bias import BiasResults
from .power import NO_POWER, PowerInformation, PowerType
from .time import TimeResults

__all__ = [
    "ResultsCacheBase",
    "BiasResults",
    "TimeResults",
    "NO_POWER",
    "PowerInformation",
    "PowerType",
]
