"""
Enum conversion utilities.

Provides standardized methods for converting between enums and strings,
with support for case-insensitive parsing.
"""

from typing import Any, Optional, Type, TypeVar

T = TypeVar("T")


def parse_enum(
    value: Any, enum_class: Type[T], default: Optional[T] = None, normalize: bool = True
) -> T:
    """
    Parse value to enum, falling back to ``default``.

    Args:
        value: Value to parse (string, enum, or None)
        enum_class: Enum class to parse to
        default: Value returned for None / unknown input; if None, unknown
            input raises ValueError instead
        normalize: Whether to lowercase and strip strings before parsing

    Returns:
        Parsed enum value or default

    Example:
        >>> parse_enum("Balanced", CompressionMode)
        <CompressionMode.BALANCED: 'balanced'>
        >>> parse_enum("image/jpg", ImageFormat)  # doctest: +SKIP
        ValueError
    """
    if isinstance(value, enum_class):
        return value

    if value is None:
        if default is None:
            raise ValueError(f"Missing value for {enum_class.__name__}")
        return default

    try:
        str_value = value.strip().lower() if normalize and isinstance(value, str) else value
        return enum_class(str_value)
    except (ValueError, AttributeError):
        if default is None:
            allowed = ", ".join(str(member.value) for member in enum_class)
            raise ValueError(
                f"Invalid {enum_class.__name__}: {value!r} (expected one of {allowed})"
            )
        return default

