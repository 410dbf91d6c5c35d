from datetime import datetime, timezone

from fastapi import APIRouter

from gtd_engine.config import settings
from gtd_engine.normalizer.reference import DUTY_RATES_BY_HS_GROUP
from gtd_engine.regime_resolver.catalog import REGIME_DEFINITIONS
from gtd_engine.schemas.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    # Reference data is static; an empty table means a broken build
    status = "healthy" if REGIME_DEFINITIONS and DUTY_RATES_BY_HS_GROUP else "degraded"

    return HealthResponse(
        status=status,
        regimes=len(REGIME_DEFINITIONS),
        duty_rate_groups=len(DUTY_RATES_BY_HS_GROUP),
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
        version="0.1.0",
    )
