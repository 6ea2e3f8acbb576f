"""Validated boundary models: catalog entries and requested items."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from catmatch.errors import InvalidRequestError

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


class CatalogEntry(BaseModel):
    """A product in the catalog. Read-only to the engine."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    description: str | None = None
    brand: str | None = None
    category: str | None = None
    category_path: str | None = None
    unit_of_measure: str
    unit_price: Decimal
    supplier: str
    availability: str = "In Stock"
    is_eco: bool = False
    contract: str | None = None
    specifications: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RequestedItem(BaseModel):
    """A line item a buyer asked for, already parsed from its source."""

    model_config = _MODEL_CONFIG

    name: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    unit_of_measure: str | None = None
    description: str | None = None
    estimated_price: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("estimated_price", mode="before")
    @classmethod
    def _price_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def parse(cls, data: RequestedItem | dict[str, Any]) -> RequestedItem:
        """Validate a raw record, raising InvalidRequestError when malformed."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise InvalidRequestError(
                f"requested item must be a mapping, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'item'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidRequestError(f"invalid requested item: {problems}") from e

    def search_text(self) -> str:
        """Name and description joined with a space; description omitted if absent."""
        return " ".join(part for part in (self.name, self.description) if part)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
