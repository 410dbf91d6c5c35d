"""
Customs regime reference endpoints.

List regimes with their procedure codes, auto-fill values and disabled graphs.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from gtd_engine.regime_resolver.catalog import (
    REGIME_DEFINITIONS,
    CustomsRegime,
    get_regime_config,
    regime_from_name,
)
from gtd_engine.regime_resolver.resolver import disabled_fields

router = APIRouter()


class RegimeResponse(BaseModel):
    regime: str
    procedure_code: str
    abbreviation: str
    name: str
    direction: str
    auto_fill: dict[str, str] = {}
    hints: dict[str, str] = {}
    disabled_graphs: list[str] = []
    disabled_fields: list[str] = []


def _to_response(regime: CustomsRegime) -> RegimeResponse:
    definition = REGIME_DEFINITIONS[regime]
    config = get_regime_config(regime)
    return RegimeResponse(
        regime=regime.value,
        procedure_code=definition.procedure_code,
        abbreviation=definition.abbreviation,
        name=definition.name,
        direction=definition.direction.value,
        auto_fill=dict(config.auto_fill),
        hints=dict(config.hints),
        disabled_graphs=sorted(config.disabled_graphs),
        disabled_fields=disabled_fields(regime),
    )


@router.get("", response_model=list[RegimeResponse])
async def list_regimes() -> list[RegimeResponse]:
    return [_to_response(regime) for regime in CustomsRegime]


@router.get("/{name}", response_model=RegimeResponse)
async def get_regime(name: str) -> RegimeResponse:
    """Look up a regime by enum value, Russian name, abbreviation or procedure code."""
    regime = regime_from_name(name)
    if regime is None:
        raise HTTPException(status_code=404, detail=f"Unknown customs regime: {name}")
    return _to_response(regime)
