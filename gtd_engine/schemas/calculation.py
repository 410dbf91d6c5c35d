from pydantic import BaseModel, Field

from gtd_engine.regime_resolver.catalog import CustomsRegime
from gtd_engine.schemas.declaration import Declaration


class CalculationResponse(BaseModel):
    declaration: Declaration
    sheet_count: int = Field(..., description="Form sheets needed for the item count")
    advisories: list[str] = []


class DutyCalculationRequest(BaseModel):
    """Single-item payment estimate."""

    hs_code: str = Field(..., min_length=10, max_length=10, pattern=r"^\d{10}$")
    customs_value: float = Field(..., gt=0, description="Customs value, national currency")
    quantity: float = Field(..., gt=0)
    origin_country: str = Field(..., min_length=2, max_length=2)
    regime: CustomsRegime = CustomsRegime.IMPORT


class DutyCalculationResponse(BaseModel):
    hs_code: str
    customs_value: float
    preference_code: str
    preference_type: str
    duty_rate: float
    duty_amount: float
    vat_rate: float
    vat_amount: float
    fee_amount: float
    total_payment: float


class DutyRatesResponse(BaseModel):
    hs_code: str | None
    duty_rate: float
    vat_rate: float
    excise_rate: float
    description: str | None = None
    found: bool


class ExchangeRateResponse(BaseModel):
    currency: str
    rate: float
    source: str
