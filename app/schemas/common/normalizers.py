# app/schemas/common/normalizers.py

import math
import re
import typing
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, model_validator

# Strings a form sends for an emptied input. Treated as "not supplied".
BLANK_MARKERS = {"null", "undefined"}

UUID_PATTERN = (
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-8][0-9a-fA-F]{3}"
    r"-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
)
UUID_RE = re.compile(UUID_PATTERN)


def is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() == "" or value in BLANK_MARKERS
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, Decimal):
        return value.is_nan()
    return False


def _is_numeric_annotation(annotation) -> bool:
    if annotation is bool:
        return False
    if isinstance(annotation, type) and issubclass(annotation, (int, float, Decimal)):
        return True
    return any(_is_numeric_annotation(arg) for arg in typing.get_args(annotation))


def drop_blank_fields(data: Any, numeric_fields: frozenset = frozenset()) -> Any:
    if not isinstance(data, dict):
        return data

    cleaned = {}
    for key, value in data.items():
        if is_blank(value):
            continue
        if key in numeric_fields and isinstance(value, str) and value.strip().lower() == "nan":
            continue
        cleaned[key] = value
    return cleaned


def ensure_uuid(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not UUID_RE.match(value):
        raise ValueError(
            f"{field_name} must be a valid UUID "
            "(8-4-4-4-12 hexadecimal, e.g. 123e4567-e89b-42d3-a456-426614174000)"
        )
    return value.lower()


class NormalizedModel(BaseModel):
    """
    Request schema base.

    Blank form values ("", whitespace, "null", "undefined", NaN) are removed
    before validation so they behave like an omitted key. An explicit JSON
    null survives and reaches the service as a deliberate clear.
    """

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        numeric_fields = frozenset(
            name
            for name, field in cls.model_fields.items()
            if _is_numeric_annotation(field.annotation)
        )
        return drop_blank_fields(data, numeric_fields)

    def supplied(
        self,
        *,
        include: set[str] | None = None,
        exclude: set[str] | None = None,
    ) -> dict:
        """Fields the caller actually sent, explicit nulls included."""
        return self.model_dump(exclude_unset=True, include=include, exclude=exclude)
