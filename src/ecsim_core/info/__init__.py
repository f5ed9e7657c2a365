# src/ecsim_core/info/__init__.py
from .registry import (
    InfoSection,
    SignalSummary,
    describe_component,
    get_info_sections,
    register_info_sections,
)

__all__ = [
    "InfoSection",
    "SignalSummary",
    "describe_component",
    "get_info_sections",
    "register_info_sections",
]
