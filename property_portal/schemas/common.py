"""
Shared schema base classes.
The public API speaks camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human-readable result")
    success: Optional[bool] = Field(None, description="Set on endpoints that report a success flag")


def require_text(value: Optional[str], field_name: str) -> str:
    """Strip a string field and reject blanks."""
    if value is None or not str(value).strip():
        raise ValueError(f"{field_name} is required")
    return str(value).strip()
