"""Autofill mapper: extraction payloads -> proposals and a non-destructive patch.

Flow: ingest (shape decided once) -> per-payload candidates from the field-rule
tables -> merge across documents -> conflict policy against the current
declaration.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from gtd_engine.autofill_mapper.field_rules import rules_for
from gtd_engine.autofill_mapper.ingest import ingest_payload
from gtd_engine.autofill_mapper.items import (
    dedupe_items,
    documents_string,
    extract_items,
    negative_fields,
)
from gtd_engine.schemas.autofill import AutofillProposal, DeclarationPatch, ExtractedItem
from gtd_engine.schemas.declaration import Declaration, is_empty_value
from gtd_engine.schemas.payload import StructuredPayload

logger = logging.getLogger("gtd.autofill_mapper")

ALREADY_FILLED = "already_filled"
SKIPPED_LOW_CONFIDENCE = "skipped_due_to_low_confidence"


@dataclass
class CandidateField:
    field: str
    label: str
    value: Any
    confidence: float
    source: str


@dataclass
class PayloadCandidates:
    """Everything one (or several merged) payloads propose, before conflict policy."""

    fields: dict[str, CandidateField] = field(default_factory=dict)
    items: list[ExtractedItem] = field(default_factory=list)
    unmapped: dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0


def extract_candidates(payload) -> PayloadCandidates:
    """Run the payload's field-rule table once, keeping non-empty values."""
    candidates = PayloadCandidates(confidence=payload.confidence)

    for rule in rules_for(payload):
        if not rule.applies(payload):
            continue
        value = rule.extract(payload)
        if is_empty_value(value):
            continue
        candidates.fields[rule.field] = CandidateField(
            field=rule.field,
            label=rule.label,
            value=value,
            confidence=round(payload.confidence * rule.confidence_factor, 4),
            source=rule.source,
        )

    candidates.items = extract_items(payload)

    if payload.document_date:
        candidates.unmapped["document_date"] = payload.document_date
    if isinstance(payload, StructuredPayload):
        documents = documents_string(payload.documents)
        if documents:
            candidates.unmapped["documents_string"] = documents
        if payload.warnings:
            candidates.unmapped["warnings"] = list(payload.warnings)

    return candidates


def merge_candidates(candidates: list[PayloadCandidates]) -> PayloadCandidates:
    """Combine candidates from several documents.

    The most confident payload is the base; the others only backfill fields the
    base lacks, most confident first. Items are pooled in input order and
    deduplicated; confidence is the mean of all inputs.
    """
    if not candidates:
        raise ValueError("At least one extraction payload is required")

    by_confidence = sorted(candidates, key=lambda c: c.confidence, reverse=True)
    merged = PayloadCandidates(
        fields=dict(by_confidence[0].fields),
        unmapped=dict(by_confidence[0].unmapped),
    )

    for other in by_confidence[1:]:
        for name, candidate in other.fields.items():
            merged.fields.setdefault(name, candidate)
        for key, value in other.unmapped.items():
            merged.unmapped.setdefault(key, value)

    pooled = [item for c in candidates for item in c.items]
    merged.items = dedupe_items(pooled)
    merged.confidence = sum(c.confidence for c in candidates) / len(candidates)

    if len(pooled) != len(merged.items):
        logger.info("Dropped %d duplicate item(s) while merging", len(pooled) - len(merged.items))
    return merged


def _current_value(current: Declaration | Mapping[str, Any] | None, name: str):
    if current is None:
        return None
    if isinstance(current, Mapping):
        return current.get(name)
    return getattr(current, name, None)


def _item_advisories(items: list[ExtractedItem]) -> list[str]:
    advisories = []
    for index, item in enumerate(items, start=1):
        negative = negative_fields(item)
        if negative:
            advisories.append(f"Item {index}: negative {', '.join(negative)} ignored")
            continue
        if item.gross_weight and item.net_weight and item.gross_weight < item.net_weight:
            advisories.append(
                f"Item {index}: gross weight {item.gross_weight} is less than net weight {item.net_weight}"
            )
    return advisories


def build_patch(
    candidates: PayloadCandidates,
    current: Declaration | Mapping[str, Any] | None = None,
    *,
    overwrite_existing: bool = False,
) -> DeclarationPatch:
    """Apply the conflict policy: filled fields are proposed but not written."""
    patch = DeclarationPatch(
        items_data=list(candidates.items),
        unmapped_data=dict(candidates.unmapped),
        confidence=candidates.confidence,
    )

    for candidate in candidates.fields.values():
        filled = not is_empty_value(_current_value(current, candidate.field))
        apply = overwrite_existing or not filled
        patch.fields.append(AutofillProposal(
            field_name=candidate.field,
            label=candidate.label,
            value=candidate.value,
            confidence=candidate.confidence,
            source=candidate.source,
            applied=apply,
            skip_reason=None if apply else ALREADY_FILLED,
        ))
        if apply:
            patch.form_data[candidate.field] = candidate.value

    advisories = _item_advisories(candidates.items)
    if advisories:
        patch.unmapped_data["advisories"] = advisories
    return patch


def skipped_patch(confidences: list[float], min_confidence: float) -> DeclarationPatch:
    logger.info(
        "All %d payload(s) below min confidence %.2f, nothing applied",
        len(confidences), min_confidence,
    )
    return DeclarationPatch(
        unmapped_data={SKIPPED_LOW_CONFIDENCE: True},
        confidence=max(confidences, default=0.0),
    )


def merge_payloads(
    raw_payloads: list,
    current: Declaration | Mapping[str, Any] | None = None,
    *,
    overwrite_existing: bool = False,
    min_confidence: float = 0.0,
) -> DeclarationPatch:
    """Turn one or more extraction payloads into a single declaration patch.

    Payloads below `min_confidence` are ignored. Raises PayloadShapeError for
    malformed payloads and ValueError for an empty list.
    """
    if not raw_payloads:
        raise ValueError("At least one extraction payload is required")

    payloads = [ingest_payload(raw) for raw in raw_payloads]
    accepted = [p for p in payloads if p.confidence >= min_confidence]
    if not accepted:
        return skipped_patch([p.confidence for p in payloads], min_confidence)

    merged = merge_candidates([extract_candidates(p) for p in accepted])
    patch = build_patch(merged, current, overwrite_existing=overwrite_existing)
    logger.info(
        "Autofill from %d payload(s): %d proposal(s), %d applied, %d item(s)",
        len(accepted), len(patch.fields), len(patch.form_data), len(patch.items_data),
    )
    return patch


def map_payload(
    raw_payload,
    current: Declaration | Mapping[str, Any] | None = None,
    *,
    overwrite_existing: bool = False,
    min_confidence: float = 0.0,
) -> DeclarationPatch:
    return merge_payloads(
        [raw_payload],
        current,
        overwrite_existing=overwrite_existing,
        min_confidence=min_confidence,
    )
