"""
Parameter processing utilities.

Handles preparation of processing parameters, providing unified
parameter handling across all algorithms and the processing service.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def prepare_params(params: Optional[T], params_class: Type[T], **overrides: Any) -> T:
    """
    Prepare processing parameters with default initialization.

    If params is None, creates a new instance from defaults plus any
    keyword overrides. If params is already an instance, overrides are
    applied on a validated copy.

    Args:
        params: Parameters instance or None
        params_class: Pydantic parameter class for defaults
        **overrides: Field values that take precedence (None values ignored)

    Returns:
        Initialized parameters instance

    Example:
        >>> params = prepare_params(None, InpaintParams, iterations=3)
        >>> # Returns InpaintParams(iterations=3, radius=3)
    """
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if params is None:
        return params_class(**overrides)
    if not overrides:
        return params
    return params_class(**merge_params(params.model_dump(), overrides))


def merge_params(base_params: Dict[str, Any], override_params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two parameter dictionaries.

    Override params take precedence over base params.

    Example:
        >>> base = {"iterations": 5, "radius": 3}
        >>> merge_params(base, {"radius": 2})
        {'iterations': 5, 'radius': 2}
    """
    result = base_params.copy()
    result.update(override_params)
    return result
