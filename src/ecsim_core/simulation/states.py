# src/ecsim_core/simulation/states.py
"""
Per-source solution states and their superposition.

A `PhasorState` is the solution of one per-source MNA matrix. `PartialStates`
collects the states of a run and combines them into one `PhasorSignal` per node and
per active element: DC-kind states add into the DC part, AC states become phasors
keyed by their source description.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import numpy as np

from ..signals.descriptions import SourceDescription
from ..signals.phasor import PhasorSignal
from ..signals.time_domain import TimeDomainSignal
from ..signals.waveforms import WaveformBuilder
from .exceptions import MnaInputError
from .matrix import MnaSolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhasorState:
    """Complex node potentials and active-element currents produced by one source."""
    source: SourceDescription
    node_potentials: np.ndarray
    active_currents: np.ndarray

    @classmethod
    def from_solution(cls, source: SourceDescription, solution: MnaSolution) -> "PhasorState":
        return cls(source, np.array(solution.node_potentials, dtype=np.complex128), np.array(solution.active_currents, dtype=np.complex128))

    @property
    def node_count(self) -> int:
        return int(self.node_potentials.shape[0])

    @property
    def active_count(self) -> int:
        return int(self.active_currents.shape[0])


@dataclass(frozen=True)
class InstantaneousState:
    """Real node potentials and active-element currents at one instant."""
    time: float
    node_potentials: Dict[int, float]
    active_currents: Dict[int, float]


@dataclass(frozen=True)
class WaveformState:
    """Node potentials and active-element currents rendered as waveforms."""
    node_potentials: Dict[int, TimeDomainSignal]
    active_currents: Dict[int, TimeDomainSignal]


class PartialStates:
    """The per-source states of one simulation, combined on request."""

    def __init__(self, node_count: int, active_count: int):
        self.node_count = node_count
        self.active_count = active_count
        self._states: Dict[SourceDescription, PhasorState] = {}

    def add_state(self, state: PhasorState) -> None:
        if state.node_count != self.node_count or state.active_count != self.active_count:
            raise MnaInputError(
                context=str(state.source),
                details=(
                    f"State dimensions ({state.node_count} nodes, {state.active_count} active) do not match "
                    f"the run ({self.node_count} nodes, {self.active_count} active)."
                ),
            )
        if state.source in self._states:
            raise MnaInputError(context=str(state.source), details="A state for this source has already been added.")
        self._states[state.source] = state

    def __iter__(self) -> Iterator[PhasorState]:
        return iter(self._states.values())

    def __len__(self) -> int:
        return len(self._states)

    def get(self, source: SourceDescription) -> Optional[PhasorState]:
        return self._states.get(source)

    @property
    def sources(self) -> List[SourceDescription]:
        return list(self._states)

    def _combine(self, kind: str) -> List[PhasorSignal]:
        size = self.node_count if kind == 'node' else self.active_count
        dc = np.zeros(size)
        phasors: List[Dict[SourceDescription, complex]] = [{} for _ in range(size)]
        for state in self._states.values():
            values = state.node_potentials if kind == 'node' else state.active_currents
            if state.source.is_dc:
                dc += np.real(values)
            else:
                for index in range(size):
                    phasors[index][state.source] = complex(values[index])
        return [PhasorSignal(dc[index], phasors[index]) for index in range(size)]

    def combined_node_potentials(self) -> Dict[int, PhasorSignal]:
        return dict(enumerate(self._combine('node')))

    def combined_active_currents(self) -> Dict[int, PhasorSignal]:
        return dict(enumerate(self._combine('active')))

    def instantaneous(self, time: float) -> InstantaneousState:
        """Evaluates the superposed solution at time `time` (sine convention)."""
        def at(signal: PhasorSignal) -> float:
            value = signal.dc
            for description, phasor in signal.phasors.items():
                value += abs(phasor) * math.sin(2.0 * math.pi * description.frequency * time + float(np.angle(phasor)))
            return value

        return InstantaneousState(
            time=time,
            node_potentials={index: at(signal) for index, signal in self.combined_node_potentials().items()},
            active_currents={index: at(signal) for index, signal in self.combined_active_currents().items()},
        )

    def to_waveforms(self, builder: WaveformBuilder) -> WaveformState:
        return WaveformState(
            node_potentials={index: builder.build(signal) for index, signal in self.combined_node_potentials().items()},
            active_currents={index: builder.build(signal) for index, signal in self.combined_active_currents().items()},
        )
