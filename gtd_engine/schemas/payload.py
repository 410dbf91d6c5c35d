"""Extraction payloads as produced by the document-analysis service.

Two shapes exist: the older flat "legacy" payload and the graph-oriented
"structured" payload. Both accept the service's camelCase keys as well as
snake_case.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# --- Legacy shape ---


class LegacyParty(PayloadModel):
    name: str | None = None
    address: str | None = None
    country: str | None = None
    tin: str | None = None


class LegacyItem(PayloadModel):
    description: str | None = None
    quantity: float | None = None
    weight: float | None = None
    price: float | None = None
    currency: str | None = None
    origin: str | None = None
    hs_code: str | None = None
    vin_number: str | None = None
    brand: str | None = None
    model: str | None = None


class LegacyFinancial(PayloadModel):
    total_amount: float | None = None
    currency: str | None = None
    incoterms: str | None = None
    delivery_place: str | None = None


class LegacyTransport(PayloadModel):
    mode: str | None = None
    container_numbers: list[str] = Field(default_factory=list)
    vehicle_plates: list[str] = Field(default_factory=list)


class LegacyPayload(PayloadModel):
    kind: Literal["legacy"] = "legacy"
    exporter: LegacyParty | None = None
    consignee: LegacyParty | None = None
    items: list[LegacyItem] = Field(default_factory=list)
    financial: LegacyFinancial | None = None
    transport: LegacyTransport | None = None
    document_number: str | None = None
    document_date: str | None = None
    confidence: float = Field(..., ge=0, le=1)


# --- Structured shape ---


class StructuredParty(PayloadModel):
    name_and_address: str | None = None
    name: str | None = None
    address: str | None = None
    country_code: str | None = None
    country_num_code: str | None = None
    tin: str | None = None
    is_broker: bool | None = None


class StructuredVehicle(PayloadModel):
    plate_number: str | None = None
    trailer_number: str | None = None
    country_code: str | None = None


class StructuredTransport(PayloadModel):
    same_as_departure: bool | None = None
    count: int | None = None
    type: str | None = None
    vehicles: list[StructuredVehicle] = Field(default_factory=list)


class StructuredDelivery(PayloadModel):
    incoterms_code: str | None = None
    incoterms_num_code: str | None = None
    place: str | None = None
    payment_form_code: str | None = None
    shipment_form_code: str | None = None


class StructuredBank(PayloadModel):
    tin: str | None = None
    mfo: str | None = None
    bank_name: str | None = None
    bank_address: str | None = None


class StructuredDocument(PayloadModel):
    code: str | None = None
    short_name: str | None = None
    number: str | None = None
    date: str | None = None


class StructuredPrincipal(PayloadModel):
    position: str | None = None
    name: str | None = None
    tin: str | None = None


class StructuredDetails(PayloadModel):
    place: str | None = None
    signatory_name: str | None = None
    phone: str | None = None


class StructuredItem(PayloadModel):
    description: str | None = None
    brand: str | None = None
    model: str | None = None
    vin_number: str | None = None
    year_of_manufacture: str | None = None
    condition: Literal["new", "used"] | None = None
    package_quantity: int | None = None
    packaging_type: str | None = None
    hs_code: str | None = None
    origin_country_code: str | None = None
    gross_weight: float | None = None
    net_weight: float | None = None
    quantity: float | None = None
    unit_code: str | None = None
    price: float | None = None
    currency_code: str | None = None
    customs_value: float | None = None
    procedure_code: str | None = None


class StructuredPayload(PayloadModel):
    kind: Literal["structured"] = "structured"
    declaration_type: str | None = None
    declaration_type_code: str | None = None
    exporter: StructuredParty | None = None
    consignee: StructuredParty | None = None
    financial_responsible: StructuredParty | None = None
    declarant: StructuredParty | None = None
    first_destination_country: str | None = None
    trading_country_code: str | None = None
    offshore_indicator: str | None = None
    dispatch_country_code: str | None = None
    dispatch_country_num_code: str | None = None
    origin_country_code: str | None = None
    destination_country_code: str | None = None
    destination_country_num_code: str | None = None
    transport_departure: StructuredTransport | None = None
    transport_border: StructuredTransport | None = None
    container_indicator: str | None = None
    delivery: StructuredDelivery | None = None
    invoice_currency: str | None = None
    total_invoice_amount: float | None = None
    transaction_nature_code: str | None = None
    border_transport_mode: str | None = None
    inland_transport_mode: str | None = None
    loading_place: str | None = None
    bank_details: StructuredBank | None = None
    border_customs_code: str | None = None
    goods_location_code: str | None = None
    goods_location_address: str | None = None
    items: list[StructuredItem] = Field(default_factory=list)
    documents: list[StructuredDocument] = Field(default_factory=list)
    principal: StructuredPrincipal | None = None
    declaration_details: StructuredDetails | None = None
    document_number: str | None = None
    document_date: str | None = None
    confidence: float = Field(..., ge=0, le=1)
    warnings: list[str] = Field(default_factory=list)


ExtractionPayload = Annotated[
    Union[LegacyPayload, StructuredPayload],
    Field(discriminator="kind"),
]
