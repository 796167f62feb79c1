"""Base Pydantic model configuration for pkpass metadata models.

All metadata sub-models inherit from PkPassBaseModel to ensure consistent behavior:
- Immutability (frozen=True) for predictability
- Strict validation (extra="forbid") to catch typos and invalid fields
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class PkPassBaseModel(BaseModel):
    """Base model for pass metadata entities.

    Example:
        >>> class Point(PkPassBaseModel):
        ...     x: int
        >>> Point(x=1).x
        1
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
        validate_assignment=True,
    )
