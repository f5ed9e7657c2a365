# src/ecsim_core/schematic/__init__.py
from .schematic import Schematic
from .wire import Wire

__all__ = ["Schematic", "Wire"]
