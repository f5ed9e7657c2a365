# src/ecsim_core/parser/__init__.py
from .raw_data import (
    ParsedComponentData,
    ParsedSchematic,
    ParsedWireData,
)
from .parser import SchematicParser
from .exceptions import ParsingError, SchemaValidationError

__all__ = [
    # IR Data Structures
    "ParsedComponentData",
    "ParsedSchematic",
    "ParsedWireData",
    # Parser and Exceptions
    "SchematicParser",
    "ParsingError",
    "SchemaValidationError",
]
