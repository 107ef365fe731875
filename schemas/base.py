"""
Base schemas shared by all processing parameter models.
"""

from pydantic import BaseModel, ConfigDict


class BaseProcessingParams(BaseModel):
    """
    Common base for algorithm parameter models.

    Parameter models are immutable once validated; use ``model_copy`` or
    ``core.utils.params_processor.prepare_params`` to derive variants.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)
