# src/ecsim_core/signals/base.py
"""
Shared contract for the two signal representations.

`PhasorSignal` and `TimeDomainSignal` form a closed, tagged union (`Signal`). Both
expose the same interpreter surface (maximum, minimum, RMS, average) and the same
`negate()` operation, so the query layer and the info-display registry can work on
either without knowing which one they hold.
"""
from enum import Flag
from typing import TYPE_CHECKING, Protocol, TypeVar, Union, runtime_checkable

if TYPE_CHECKING:
    from .phasor import PhasorSignal
    from .time_domain import TimeDomainSignal


class SignalType(Flag):
    """Describes what a phasor signal is composed of."""
    EMPTY = 0
    DC = 1
    SINGLE_AC = 2
    MULTIPLE_AC = 4
    AC = SINGLE_AC | MULTIPLE_AC


@runtime_checkable
class SignalInterpreter(Protocol):
    """The characteristic values every signal kind can report."""

    def maximum(self) -> float:
        ...

    def minimum(self) -> float:
        ...

    def rms(self) -> float:
        ...

    def average(self) -> float:
        ...

    def negate(self) -> "SignalInterpreter":
        ...


Signal = Union["PhasorSignal", "TimeDomainSignal"]
TSignal = TypeVar("TSignal", "PhasorSignal", "TimeDomainSignal")


def negate(signal: TSignal) -> TSignal:
    """Returns a new signal of the same kind with every component sign-flipped."""
    return signal.negate()


def zero_like(signal: TSignal) -> TSignal:
    """Returns the zero signal of the same kind (and time axis, for waveforms)."""
    return signal.zero_like()
