"""
Utility modules for core functionality.

Modules:
- decorators: Timing helpers
- enum_converter: Enum parsing and conversion
- params_processor: Parameter processing utilities
"""

from .decorators import timer
from .enum_converter import parse_enum
from .params_processor import merge_params, prepare_params

__all__ = [
    "timer",
    "parse_enum",
    "prepare_params",
    "merge_params",
]
