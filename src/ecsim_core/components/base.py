# src/ecsim_core/components/base.py

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence, Type, Union

from ..geometry import Position
from .exceptions import ComponentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class TerminalKey:
    """Stable identity of a terminal: the owning component id plus the terminal name."""
    component_id: str
    name: str

    def __str__(self) -> str:
        return f"{self.component_id}.{self.name}"


class Terminal:
    """
    A connection point of a component, placed on the schematic plane.

    `node_index` is assigned when a node generation result is applied to the
    schematic; it stays None until then. Terminals never hold a reference to a
    node object, only its index.
    """

    def __init__(self, component_id: str, name: str, position: Position):
        self.component_id = component_id
        self.name = name
        self.position = position
        self.node_index: Optional[int] = None

    @property
    def key(self) -> TerminalKey:
        return TerminalKey(self.component_id, self.name)

    def __repr__(self) -> str:
        return f"Terminal('{self.key}', at=({self.position.x:g}, {self.position.y:g}), node={self.node_index})"


class ComponentBase(ABC):
    """
    The abstract base class for all schematic components.

    It owns identity and terminals. What a component contributes to an analysis is
    expressed through the capability protocols in `capabilities.py`, which the
    simulation core checks with `isinstance`.
    """
    component_type_str: ClassVar[str] = "BaseComponent"

    def __init__(self, instance_id: str, positions: Mapping[str, Union[Position, Sequence[float]]]):
        self.instance_id: str = instance_id
        declared = type(self).declare_terminals()
        missing = [name for name in declared if name not in positions]
        unknown = [name for name in positions if name not in declared]
        if missing or unknown:
            raise ComponentError(
                component_id=instance_id,
                details=(
                    f"Terminal layout does not match {type(self).__name__}: expected {declared}, "
                    f"missing {missing}, unknown {unknown}."
                )
            )
        self.terminals: Dict[str, Terminal] = {
            name: Terminal(instance_id, name, Position.of(positions[name])) for name in declared
        }
        logger.debug(f"Initialized {type(self).__name__} '{self.instance_id}'")

    @property
    def component_type(self) -> str:
        return type(self).component_type_str

    def terminal(self, name: str) -> Terminal:
        try:
            return self.terminals[name]
        except KeyError:
            raise ComponentError(
                component_id=self.instance_id,
                details=f"{type(self).__name__} has no terminal '{name}'. Terminals: {list(self.terminals)}."
            ) from None

    def node_indices(self) -> List[Optional[int]]:
        return [terminal.node_index for terminal in self.terminals.values()]

    @classmethod
    @abstractmethod
    def declare_terminals(cls) -> List[str]:
        """Declare the canonical, string-based names of the component's terminals."""
        pass

    @classmethod
    @abstractmethod
    def declare_parameters(cls) -> Dict[str, str]:
        """Declare parameter names and their canonical SI units as strings."""
        pass

    @classmethod
    def required_parameters(cls) -> List[str]:
        """The declared parameters whose constructor argument has no default."""
        signature = inspect.signature(cls.__init__)
        return [
            name for name in cls.declare_parameters()
            if name in signature.parameters and signature.parameters[name].default is inspect.Parameter.empty
        ]

    @classmethod
    def from_parameters(
        cls,
        instance_id: str,
        positions: Mapping[str, Union[Position, Sequence[float]]],
        parameters: Mapping[str, float],
    ) -> "ComponentBase":
        """Builds an instance from parameter magnitudes already converted to SI units."""
        undeclared = sorted(set(parameters) - set(cls.declare_parameters()))
        if undeclared:
            raise ComponentError(
                component_id=instance_id,
                details=f"Undeclared parameter(s) {undeclared} for {cls.__name__}. Declared: {list(cls.declare_parameters())}."
            )
        missing = [name for name in cls.required_parameters() if name not in parameters]
        if missing:
            raise ComponentError(
                component_id=instance_id,
                details=f"Missing required parameter(s) {missing} for {cls.__name__}."
            )
        return cls(instance_id, positions, **parameters)

    def __str__(self) -> str:
        return f"{type(self).__name__}('{self.instance_id}')"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(instance_id='{self.instance_id}')"


class TwoTerminalBase(ComponentBase):
    """A component with terminals 'A' and 'B'."""

    @classmethod
    def declare_terminals(cls) -> List[str]:
        return ['A', 'B']

    @property
    def terminal_a(self) -> Terminal:
        return self.terminals['A']

    @property
    def terminal_b(self) -> Terminal:
        return self.terminals['B']


# --- Global Component Registry and Decorator ---

COMPONENT_REGISTRY: Dict[str, Type[ComponentBase]] = {}


def register_component(type_str: str):
    """
    A class decorator to register a component class in the global component registry,
    making it available to the schematic builder.
    """
    def decorator(cls: Type[ComponentBase]):
        if not issubclass(cls, ComponentBase):
            raise TypeError(f"Class {cls.__name__} must inherit from ComponentBase.")

        terminals = cls.declare_terminals()
        if not isinstance(terminals, list) or not all(isinstance(t, str) and t for t in terminals):
            raise TypeError(
                f"Component class '{cls.__name__}' violates API contract. "
                f"declare_terminals() must return a list of non-empty strings, but returned: {terminals}."
            )
        if len(set(terminals)) != len(terminals):
            raise TypeError(
                f"Component class '{cls.__name__}' violates API contract. "
                f"declare_terminals() must return unique names, but found duplicates in: {terminals}."
            )

        params = cls.declare_parameters()
        if not isinstance(params, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in params.items()):
            raise TypeError(
                f"Component class '{cls.__name__}' violates API contract. "
                f"declare_parameters() must return a Dict[str, str], but returned a value of type '{type(params).__name__}'."
            )

        if type_str in COMPONENT_REGISTRY:
            logger.warning(f"Component type '{type_str}' is being redefined/overwritten.")
        cls.component_type_str = type_str
        COMPONENT_REGISTRY[type_str] = cls
        logger.debug(f"Registered component type '{type_str}' -> {cls.__name__}")
        return cls
    return decorator
