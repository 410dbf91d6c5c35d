"""
Declaration endpoints.

Apply a regime, propagate derived fields and compute customs payments for a
declaration held by the caller. Nothing is persisted here.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from gtd_engine.dependencies import get_calculation_engine, get_regime_resolver
from gtd_engine.duty_calculator.engine import (
    CalculationEngine,
    calculate_item,
    lookup_duty_rates,
    preference_type,
    sheet_count,
)
from gtd_engine.normalizer.codes import normalize_currency_code
from gtd_engine.normalizer.reference import FALLBACK_EXCHANGE_RATES, NATIONAL_CURRENCY
from gtd_engine.regime_resolver.catalog import regime_from_name
from gtd_engine.regime_resolver.resolver import (
    LoadState,
    RegimeResolver,
    ResolverOutcome,
    disabled_fields,
    missing_required_fields,
)
from gtd_engine.schemas.calculation import (
    CalculationResponse,
    DutyCalculationRequest,
    DutyCalculationResponse,
    DutyRatesResponse,
    ExchangeRateResponse,
)
from gtd_engine.schemas.declaration import Declaration, LineItem

router = APIRouter()


class ResolveRegimeRequest(BaseModel):
    declaration: Declaration
    regime: str = Field(..., description="Regime value, Russian name, abbreviation or procedure code")
    previous_regime: str | None = None
    state: LoadState = LoadState.READY


class PropagateRequest(BaseModel):
    declaration: Declaration
    state: LoadState = LoadState.READY


class ResolverResponse(BaseModel):
    declaration: Declaration
    applied: dict = {}
    skipped: dict = {}
    hints: dict[str, str] = {}
    disabled_graphs: list[str] = []
    disabled_fields: list[str] = []
    missing_required_fields: list[str] = []


def _to_response(outcome: ResolverOutcome) -> ResolverResponse:
    declaration = outcome.declaration
    return ResolverResponse(
        declaration=declaration,
        applied=outcome.applied,
        skipped=outcome.skipped,
        hints=outcome.hints,
        disabled_graphs=outcome.disabled_graphs,
        disabled_fields=disabled_fields(declaration.regime),
        missing_required_fields=missing_required_fields(declaration),
    )


@router.post("/resolve-regime", response_model=ResolverResponse)
async def resolve_regime(
    request: ResolveRegimeRequest,
    resolver: RegimeResolver = Depends(get_regime_resolver),
) -> ResolverResponse:
    """Apply a regime change: procedure codes and auto-fill of empty fields."""
    regime = regime_from_name(request.regime)
    if regime is None:
        raise HTTPException(status_code=422, detail=f"Unknown customs regime: {request.regime}")

    previous = None
    if request.previous_regime:
        previous = regime_from_name(request.previous_regime)
        if previous is None:
            raise HTTPException(
                status_code=422, detail=f"Unknown customs regime: {request.previous_regime}"
            )

    outcome = resolver.resolve(
        request.declaration, regime, previous_regime=previous, state=request.state
    )
    return _to_response(outcome)


@router.post("/propagate", response_model=ResolverResponse)
async def propagate_fields(
    request: PropagateRequest,
    resolver: RegimeResolver = Depends(get_regime_resolver),
) -> ResolverResponse:
    """Fill derived fields (countries, numeric codes, transport modes) that are empty."""
    return _to_response(resolver.propagate(request.declaration, state=request.state))


@router.post("/calculate", response_model=CalculationResponse)
async def calculate_declaration(
    declaration: Declaration,
    engine: CalculationEngine = Depends(get_calculation_engine),
) -> CalculationResponse:
    """Recompute customs value, payments and totals for every item."""
    result = engine.recalculate(declaration)
    return CalculationResponse(
        declaration=result,
        sheet_count=sheet_count(len(result.items)),
        advisories=engine.advisories(result),
    )


@router.post("/calculate-duties", response_model=DutyCalculationResponse)
async def calculate_duties(
    request: DutyCalculationRequest,
    engine: CalculationEngine = Depends(get_calculation_engine),
) -> DutyCalculationResponse:
    """Estimate payments for a single item with a known customs value."""
    item = LineItem(
        hs_code=request.hs_code,
        origin_country_code=request.origin_country.upper(),
        quantity=request.quantity,
        customs_value=request.customs_value,
    )
    result = calculate_item(item, regime=request.regime, rates=engine.rates)
    return DutyCalculationResponse(
        hs_code=request.hs_code,
        customs_value=result.customs_value,
        preference_code=result.preference_code,
        preference_type=preference_type(result.preference_code),
        duty_rate=result.duty_rate,
        duty_amount=result.duty_amount,
        vat_rate=result.vat_rate,
        vat_amount=result.vat_amount,
        fee_amount=result.fee_amount,
        total_payment=result.total_payment,
    )


@router.get("/duty-rates", response_model=DutyRatesResponse)
async def get_duty_rates(
    hs_code: str = Query(..., min_length=2, description="HS code or its first digits"),
    engine: CalculationEngine = Depends(get_calculation_engine),
) -> DutyRatesResponse:
    """Duty, VAT and excise rates for an HS code; defaults with found=false."""
    return DutyRatesResponse(**lookup_duty_rates(hs_code, engine.rates))


@router.get("/exchange-rates/{currency}", response_model=ExchangeRateResponse)
async def get_exchange_rate(currency: str) -> ExchangeRateResponse:
    """Reference rate to the national currency used when no live rate is supplied."""
    code = normalize_currency_code(currency)
    if code == NATIONAL_CURRENCY:
        return ExchangeRateResponse(currency=code, rate=1.0, source="national")

    rate = FALLBACK_EXCHANGE_RATES.get(code or "")
    if rate is None:
        raise HTTPException(status_code=404, detail=f"No reference rate for currency: {currency}")
    return ExchangeRateResponse(currency=code, rate=rate, source="fallback")
