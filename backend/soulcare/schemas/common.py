from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body with camelCase wire names and snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_document(self, *, exclude_unset: bool = False) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset)


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def require_fields(model: BaseModel, *fields: str) -> None:
    """Raise 400 ``"<Field> is required"`` for the first blank field."""
    for field in fields:
        value = getattr(model, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{_label(field)} is required",
            )


def split_tags(value: Any) -> list[str]:
    """Accept a list or a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(item) for item in value]
    return [item.strip() for item in items if item and item.strip()]


__all__ = ["CamelModel", "require_fields", "split_tags"]
