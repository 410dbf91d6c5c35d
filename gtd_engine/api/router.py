from fastapi import APIRouter

from gtd_engine.api.v1 import autofill, declarations, health, regimes

api_router = APIRouter()

api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(regimes.router, prefix="/v1/regimes", tags=["regimes"])
api_router.include_router(declarations.router, prefix="/v1/declarations", tags=["declarations"])
api_router.include_router(autofill.router, prefix="/v1/autofill", tags=["autofill"])
