"""
Autofill endpoints.

Turn extraction results from one or more documents into a reviewable patch for
the caller's declaration.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from gtd_engine.autofill_mapper.ingest import ingest_payload
from gtd_engine.autofill_mapper.items import build_line_items
from gtd_engine.autofill_mapper.mapper import merge_payloads
from gtd_engine.autofill_mapper.proposals import create_field_hints
from gtd_engine.autofill_mapper.validation import validate_payload
from gtd_engine.config import settings
from gtd_engine.exceptions import PayloadShapeError
from gtd_engine.regime_resolver.catalog import get_regime_definition
from gtd_engine.schemas.autofill import DeclarationPatch
from gtd_engine.schemas.declaration import Declaration, LineItem

logger = logging.getLogger("gtd.api.autofill")

router = APIRouter()


class AutofillRequest(BaseModel):
    payloads: list[Any] = Field(..., min_length=1, description="Raw extraction results")
    current: Declaration | None = Field(None, description="Declaration being edited")
    overwrite_existing: bool = False
    min_confidence: float | None = Field(None, ge=0, le=1)


class AutofillResponse(BaseModel):
    patch: DeclarationPatch
    line_items: list[LineItem] = []
    hints: dict[str, str] = {}


class ValidationIssueResponse(BaseModel):
    field: str
    message: str
    value: Any = None


class PayloadValidationResponse(BaseModel):
    kind: str
    is_valid: bool
    errors: list[ValidationIssueResponse] = []
    warnings: list[ValidationIssueResponse] = []


def _shape_error(e: PayloadShapeError) -> HTTPException:
    return HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})


@router.post("/preview", response_model=AutofillResponse)
async def preview_autofill(request: AutofillRequest) -> AutofillResponse:
    """Map and merge payloads without touching fields the user already filled."""
    min_confidence = (
        request.min_confidence
        if request.min_confidence is not None
        else settings.autofill_min_confidence
    )
    try:
        patch = merge_payloads(
            request.payloads,
            request.current,
            overwrite_existing=request.overwrite_existing,
            min_confidence=min_confidence,
        )
    except PayloadShapeError as e:
        logger.warning("Rejected extraction payload: %s", e)
        raise _shape_error(e) from e

    procedure_code = None
    if request.current is not None and request.current.regime is not None:
        procedure_code = get_regime_definition(request.current.regime).procedure_code

    line_items = build_line_items(
        patch.items_data,
        documents=patch.unmapped_data.get("documents_string"),
        procedure_code=procedure_code,
    )
    return AutofillResponse(
        patch=patch,
        line_items=line_items,
        hints=create_field_hints(patch.fields),
    )


@router.post("/validate", response_model=PayloadValidationResponse)
async def validate_extraction(payload: dict[str, Any]) -> PayloadValidationResponse:
    """Advisory checks on a single extraction payload."""
    try:
        typed = ingest_payload(payload)
    except PayloadShapeError as e:
        raise _shape_error(e) from e

    result = validate_payload(typed, low_confidence_threshold=settings.low_confidence_threshold)
    return PayloadValidationResponse(
        kind=typed.kind,
        is_valid=result.is_valid,
        errors=[ValidationIssueResponse(**vars(issue)) for issue in result.errors],
        warnings=[ValidationIssueResponse(**vars(issue)) for issue in result.warnings],
    )
