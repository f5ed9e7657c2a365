# src/ecsim_core/results/base.py
"""
Query-layer mechanics shared by the phasor-domain and time-domain results.

Voltage drops and component currents are computed lazily on first request and
memoized together with their negation, so asking for the reverse direction never
recomputes and `drop(a, b) == -drop(b, a)` holds exactly.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional

from ..cache.keys import CurrentKey, VoltageDropKey
from ..components.base import ComponentBase
from ..constants import GROUND_NODE_INDEX
from ..signals.base import TSignal, negate
from .power import NO_POWER, PowerInformation

logger = logging.getLogger(__name__)


class ResultsCacheBase(ABC, Generic[TSignal]):
    """
    Generic memoizing query layer over one signal domain.

    Subclasses supply the domain's zero signal and the uncached computations; this
    class owns the memo tables, the negation-aware storage and the statistics.
    """

    def __init__(self):
        self._node_count = 0
        self._voltage_drops: Dict[VoltageDropKey, TSignal] = {}
        self._currents: Dict[CurrentKey, Optional[TSignal]] = {}
        self._powers: Dict[str, PowerInformation] = {}
        self._stats = {'hits': 0, 'misses': 0}

    # --- Lifecycle ---

    def _clear_caches(self) -> None:
        self._voltage_drops.clear()
        self._currents.clear()
        self._powers.clear()
        self._stats = {'hits': 0, 'misses': 0}
        logger.debug(f"{type(self).__name__}: caches cleared.")

    @property
    def node_count(self) -> int:
        return self._node_count

    def is_valid_node(self, index: int) -> bool:
        return GROUND_NODE_INDEX <= index < self._node_count

    def get_stats(self) -> Dict[str, int]:
        """Voltage-drop cache hits and misses since the last load."""
        return dict(self._stats)

    # --- Domain hooks ---

    @abstractmethod
    def zero_signal(self) -> TSignal:
        ...

    @abstractmethod
    def _compute_voltage_drop(self, node_a: int, node_b: int) -> TSignal:
        ...

    @abstractmethod
    def _compute_current(self, component: ComponentBase) -> Optional[TSignal]:
        """Current from terminal A to terminal B, or the MNA branch current for active elements."""
        ...

    @abstractmethod
    def _active_current(self, active_index: int) -> Optional[TSignal]:
        ...

    @abstractmethod
    def _compute_power(self, component: ComponentBase) -> PowerInformation:
        ...

    # --- Queries ---

    def try_get_voltage_drop(self, node_a: int, node_b: int) -> Optional[TSignal]:
        """V(node_a) - V(node_b), or None if either index is out of range."""
        if not (self.is_valid_node(node_a) and self.is_valid_node(node_b)):
            return None
        key = VoltageDropKey(node_a, node_b)
        cached = self._voltage_drops.get(key)
        if cached is not None:
            self._stats['hits'] += 1
            return cached

        self._stats['misses'] += 1
        if node_a == node_b:
            drop = self.zero_signal()
            self._voltage_drops[key] = drop
            return drop
        drop = self._compute_voltage_drop(node_a, node_b)
        self._voltage_drops[key] = drop
        self._voltage_drops[key.reversed()] = negate(drop)
        return drop

    def get_voltage_drop_or_zero(self, node_a: int, node_b: int) -> TSignal:
        drop = self.try_get_voltage_drop(node_a, node_b)
        return self.zero_signal() if drop is None else drop

    def get_node_potential(self, node_index: int) -> Optional[TSignal]:
        """Potential relative to the reference node."""
        return self.try_get_voltage_drop(node_index, GROUND_NODE_INDEX)

    def get_current(self, component: ComponentBase, reverse: bool = False) -> Optional[TSignal]:
        """
        Current through `component`: from terminal A to terminal B for passives and
        current sources, the MNA branch current for voltage sources and op-amps.
        `reverse` flips the direction. None if the component carries no defined current.
        """
        key = CurrentKey(component.instance_id, reverse)
        if key in self._currents:
            return self._currents[key]
        forward = self._compute_current(component)
        if forward is None:
            self._currents[key] = None
            self._currents[key.reversed()] = None
            return None
        backward = negate(forward)
        self._currents[CurrentKey(component.instance_id, False)] = forward
        self._currents[CurrentKey(component.instance_id, True)] = backward
        return backward if reverse else forward

    def get_current_or_zero(self, active_index: int, reverse: bool = False) -> TSignal:
        """The branch current of active element `active_index`, or zero if unknown."""
        current = self._active_current(active_index)
        if current is None:
            return self.zero_signal()
        return negate(current) if reverse else current

    def get_power(self, component: ComponentBase) -> PowerInformation:
        cached = self._powers.get(component.instance_id)
        if cached is None:
            cached = self._compute_power(component)
            self._powers[component.instance_id] = cached
        return cached

    def _terminal_drop(self, component: ComponentBase, first: str, second: str) -> TSignal:
        node_a = component.terminal(first).node_index
        node_b = component.terminal(second).node_index
        if node_a is None or node_b is None:
            return self.zero_signal()
        return self.get_voltage_drop_or_zero(node_a, node_b)

    def _power_fallback(self) -> PowerInformation:
        return NO_POWER
