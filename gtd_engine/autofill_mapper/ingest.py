"""Payload ingestion: decide the payload shape once, then validate it."""

import json
import logging
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError

from gtd_engine.exceptions import PayloadShapeError
from gtd_engine.schemas.payload import ExtractionPayload, LegacyPayload, StructuredPayload

logger = logging.getLogger("gtd.autofill_mapper.ingest")

PAYLOAD_KINDS = ("legacy", "structured")

# Top-level keys only the structured shape carries
STRUCTURED_KEYS = frozenset({
    "delivery",
    "dispatchCountryCode", "dispatch_country_code",
    "transportDeparture", "transport_departure",
    "financialResponsible", "financial_responsible",
    "bankDetails", "bank_details",
    "declarationTypeCode", "declaration_type_code",
})

# Party keys only the structured shape carries
STRUCTURED_PARTY_KEYS = frozenset({
    "nameAndAddress", "name_and_address", "countryCode", "country_code",
})

_payload_adapter = TypeAdapter(ExtractionPayload)


def sniff_kind(raw: Mapping[str, Any]) -> str:
    """Structured if the payload has combined name+address or country-code keyed fields."""
    declared = raw.get("kind")
    if declared in PAYLOAD_KINDS:
        return declared

    if STRUCTURED_KEYS.intersection(raw):
        return "structured"

    for party in ("exporter", "consignee"):
        block = raw.get(party)
        if isinstance(block, Mapping) and STRUCTURED_PARTY_KEYS.intersection(block):
            return "structured"

    return "legacy"


def ingest_payload(raw: Any) -> LegacyPayload | StructuredPayload:
    """Turn a raw extraction result into a typed payload.

    Raises PayloadShapeError if it is not an object or does not validate.
    """
    if isinstance(raw, (LegacyPayload, StructuredPayload)):
        return raw
    if not isinstance(raw, Mapping):
        raise PayloadShapeError(
            f"Extraction payload must be an object, got {type(raw).__name__}"
        )

    kind = sniff_kind(raw)
    try:
        payload = _payload_adapter.validate_python({**raw, "kind": kind})
    except ValidationError as e:
        raise PayloadShapeError(
            f"Malformed {kind} payload: {e.error_count()} validation error(s)",
            errors=json.loads(e.json(include_url=False)),
        ) from e

    logger.debug("Ingested %s payload (confidence=%.2f)", kind, payload.confidence)
    return payload
