from typing import Any

from pydantic import BaseModel, Field


class AutofillProposal(BaseModel):
    """A single value suggested for a declaration field."""

    field_name: str = Field(..., description="Declaration field the value targets")
    label: str = Field(..., description="Human-readable field label")
    value: Any = None
    confidence: float = Field(..., ge=0, le=1)
    source: str = Field(..., description="Where in the document the value came from")
    applied: bool = False
    skip_reason: str | None = Field(None, description="Why the value was not applied")


class ExtractedItem(BaseModel):
    """Commodity line as extracted, before it becomes a LineItem."""

    description: str | None = None
    hs_code: str | None = None
    origin_country_code: str | None = None
    quantity: float | None = None
    unit_code: str | None = None
    package_quantity: int | None = None
    packaging_type: str | None = None
    gross_weight: float | None = None
    net_weight: float | None = None
    price: float | None = None
    currency: str | None = None
    customs_value: float | None = None
    procedure_code: str | None = None
    vin_number: str | None = None
    brand: str | None = None
    model: str | None = None
    year_of_manufacture: str | None = None
    condition: str | None = None


class DeclarationPatch(BaseModel):
    """Non-destructive set of changes proposed for a declaration."""

    fields: list[AutofillProposal] = Field(default_factory=list)
    form_data: dict[str, Any] = Field(default_factory=dict)
    items_data: list[ExtractedItem] = Field(default_factory=list)
    unmapped_data: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.0
