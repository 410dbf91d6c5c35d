from gtd_engine.schemas.autofill import AutofillProposal, DeclarationPatch, ExtractedItem
from gtd_engine.schemas.calculation import CalculationResponse, DutyCalculationRequest
from gtd_engine.schemas.declaration import Declaration, LineItem
from gtd_engine.schemas.health import HealthResponse
from gtd_engine.schemas.payload import LegacyPayload, StructuredPayload

__all__ = [
    "AutofillProposal",
    "CalculationResponse",
    "Declaration",
    "DeclarationPatch",
    "DutyCalculationRequest",
    "ExtractedItem",
    "HealthResponse",
    "LegacyPayload",
    "LineItem",
    "StructuredPayload",
]
