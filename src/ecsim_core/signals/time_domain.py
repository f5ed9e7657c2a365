# src/ecsim_core/signals/time_domain.py
import logging
import math
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)


class TimeDomainSignal:
    """
    A discretized waveform: equally spaced samples starting at `start_time`.

    Instances are immutable. The sample array is copied on construction and marked
    read-only.
    """

    def __init__(self, samples, time_step: float, start_time: float = 0.0):
        if time_step < 0:
            raise ValueError(f"Time step must be non-negative, got {time_step}.")
        values = np.array(samples, dtype=float).reshape(-1)
        values.setflags(write=False)
        self._samples = values
        self._time_step = float(time_step)
        self._start_time = float(start_time)

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @property
    def time_step(self) -> float:
        return self._time_step

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def sample_count(self) -> int:
        return int(self._samples.size)

    def times(self) -> np.ndarray:
        return self._start_time + self._time_step * np.arange(self.sample_count, dtype=float)

    def zero_like(self) -> "TimeDomainSignal":
        return TimeDomainSignal(np.zeros(self.sample_count), self._time_step, self._start_time)

    # --- Interpreter ---

    def maximum(self) -> float:
        return float(np.max(self._samples)) if self.sample_count else 0.0

    def minimum(self) -> float:
        return float(np.min(self._samples)) if self.sample_count else 0.0

    def rms(self) -> float:
        if not self.sample_count:
            return 0.0
        return math.sqrt(float(np.sum(self._samples ** 2)) / self.sample_count)

    def average(self) -> float:
        return float(np.mean(self._samples)) if self.sample_count else 0.0

    # --- Algebra ---

    def negate(self) -> "TimeDomainSignal":
        return TimeDomainSignal(-self._samples, self._time_step, self._start_time)

    def __neg__(self) -> "TimeDomainSignal":
        return self.negate()

    def _check_axis(self, other: "TimeDomainSignal"):
        if (self.sample_count, self._time_step, self._start_time) != (other.sample_count, other._time_step, other._start_time):
            raise ValueError(
                "Time-domain signals must share a time axis: "
                f"({self.sample_count}, {self._time_step}, {self._start_time}) vs "
                f"({other.sample_count}, {other._time_step}, {other._start_time})."
            )

    def __add__(self, other: "TimeDomainSignal") -> "TimeDomainSignal":
        if not isinstance(other, TimeDomainSignal):
            return NotImplemented
        self._check_axis(other)
        return TimeDomainSignal(self._samples + other._samples, self._time_step, self._start_time)

    def __sub__(self, other: "TimeDomainSignal") -> "TimeDomainSignal":
        if not isinstance(other, TimeDomainSignal):
            return NotImplemented
        self._check_axis(other)
        return TimeDomainSignal(self._samples - other._samples, self._time_step, self._start_time)

    def __mul__(self, other: Union["TimeDomainSignal", float]) -> "TimeDomainSignal":
        """Sample-wise product (e.g. v(t)·i(t)) or scaling by a constant."""
        if isinstance(other, TimeDomainSignal):
            self._check_axis(other)
            return TimeDomainSignal(self._samples * other._samples, self._time_step, self._start_time)
        if isinstance(other, (int, float)):
            return TimeDomainSignal(self._samples * float(other), self._time_step, self._start_time)
        return NotImplemented

    __rmul__ = __mul__

    # --- Value semantics ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeDomainSignal):
            return NotImplemented
        return (
            self._time_step == other._time_step
            and self._start_time == other._start_time
            and np.array_equal(self._samples, other._samples)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (f"TimeDomainSignal(samples={self.sample_count}, time_step={self._time_step:.6g}, "
                f"start_time={self._start_time:.6g})")
