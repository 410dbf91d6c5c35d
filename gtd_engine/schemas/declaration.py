from pydantic import BaseModel, Field

from gtd_engine.regime_resolver.catalog import CustomsRegime


def is_empty_value(value) -> bool:
    """A field counts as filled unless it is None, blank text or an empty list."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class LineItem(BaseModel):
    """One commodity line (graphs 31–47)."""

    model_config = {"from_attributes": True}

    item_number: int = Field(1, ge=1, description="1-based position on the declaration")
    description: str | None = Field(None, description="Goods description (graph 31)")
    hs_code: str | None = Field(None, description="10-digit HS code (graph 33)")
    origin_country_code: str | None = Field(None, description="ISO alpha-2 origin (graph 34)")
    package_quantity: int = Field(1, ge=0, description="Number of packages (graph 31)")
    package_type: str | None = None
    marks_numbers: str | None = Field(None, description="Marks, VIN or serial number")
    gross_weight: float = Field(0.0, ge=0, description="Gross weight, kg (graph 35)")
    net_weight: float = Field(0.0, ge=0, description="Net weight, kg (graph 38)")
    quantity: float = Field(1.0, ge=0, description="Quantity in supplementary units (graph 41)")
    supplementary_unit: str | None = "796"
    item_price: float = Field(0.0, ge=0, description="Invoice price in invoice currency (graph 42)")
    customs_value: float = Field(0.0, ge=0, description="Customs value, national currency (graph 45)")
    customs_value_derived: bool = Field(
        False, description="Customs value was computed from the item price, not entered"
    )
    statistical_value: float = Field(0.0, ge=0, description="Statistical value (graph 46)")
    preference_code: str | None = Field(None, description="Preference code (graph 36)")
    procedure_code: str | None = Field(None, description="Procedure code (graph 37)")
    previous_procedure_code: str = "00"
    movement_code: str = "000"
    duty_rate: float = 0.0
    duty_amount: float = 0.0
    vat_rate: float = 0.0
    vat_amount: float = 0.0
    fee_amount: float = 0.0
    total_payment: float = 0.0
    additional_info: str | None = Field(None, description="Documents presented (graph 44)")


class Declaration(BaseModel):
    """Cargo customs declaration (ГТД) field set."""

    model_config = {"from_attributes": True}

    # Graph 1
    regime: CustomsRegime | None = None
    declaration_type_code: str | None = None

    # Participants (graphs 2, 8, 9, 14, 54)
    exporter_name: str | None = None
    exporter_address: str | None = None
    exporter_country: str | None = None
    exporter_tin: str | None = None
    consignee_name: str | None = None
    consignee_address: str | None = None
    consignee_country: str | None = None
    consignee_tin: str | None = None
    financial_responsible_name: str | None = None
    financial_responsible_address: str | None = None
    financial_responsible_tin: str | None = None
    declarant_name: str | None = None
    declarant_address: str | None = None
    declarant_tin: str | None = None
    declarant_type: str | None = None
    declarant_phone: str | None = None
    declarant_signature: str | None = None
    principal_position: str | None = None
    principal_name: str | None = None
    principal_tin: str | None = None
    reference_number: str | None = None
    declaration_place: str | None = None

    # Countries (graphs 11, 15–17)
    first_destination_country: str | None = None
    trading_country: str | None = None
    trading_country_code: str | None = None
    offshore_indicator: str | None = None
    dispatch_country: str | None = None
    dispatch_country_code: str | None = None
    origin_country: str | None = None
    destination_country: str | None = None
    destination_country_code: str | None = None

    # Transport (graphs 18, 19, 21, 25–27, 29, 30)
    transport_count: int | None = None
    departure_transport_type: str | None = None
    departure_transport_number: str | None = None
    transport_nationality: str | None = None
    border_transport_type: str | None = None
    border_transport_mode: str | None = None
    inland_transport_mode: str | None = None
    border_transport_same_as_departure: bool | None = None
    container_indicator: str | None = None
    container_numbers: list[str] = Field(default_factory=list)
    loading_place: str | None = None
    border_customs_code: str | None = None
    goods_location_code: str | None = None
    goods_location_address: str | None = None

    # Financial (graphs 20, 22–24, 28, 47, B)
    incoterms: str | None = None
    incoterms_num_code: str | None = None
    delivery_place: str | None = None
    payment_form_code: str | None = None
    shipment_form_code: str | None = None
    currency: str | None = None
    exchange_rate: float | None = Field(None, ge=0)
    transaction_nature: str | None = None
    bank_tin: str | None = None
    bank_mfo: str | None = None
    bank_name: str | None = None
    bank_address: str | None = None

    # Aggregates, written by the calculation engine only
    total_invoice_amount: float | None = None
    total_customs_value: float | None = None
    total_packages: int | None = None
    total_duty_amount: float | None = None
    total_vat_amount: float | None = None
    total_fee_amount: float | None = None
    total_payment: float | None = None

    items: list[LineItem] = Field(default_factory=list)

    def is_field_empty(self, field_name: str) -> bool:
        return is_empty_value(getattr(self, field_name, None))


DECLARATION_FIELDS = frozenset(Declaration.model_fields) - {"items"}
