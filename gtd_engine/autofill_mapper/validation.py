"""Advisory checks on extraction payloads.

Nothing here blocks mapping; errors and warnings are shown to the person
reviewing the proposals.
"""

import re
from dataclasses import dataclass, field

from gtd_engine.normalizer.codes import (
    LEGAL_ENTITY_TIN_LENGTH,
    normalize_country_code,
    normalize_currency_code,
)
from gtd_engine.schemas.payload import LegacyPayload, StructuredPayload

HIGH_CONFIDENCE = 0.9
MEDIUM_CONFIDENCE = 0.7

_DATE_FORMATS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{2}\.\d{2}\.\d{4}$"),
)


@dataclass
class ValidationIssue:
    field: str
    message: str
    value: object = None


@dataclass
class PayloadValidation:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def confidence_level(confidence: float) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _check_tin(result: PayloadValidation, path: str, value: str | None) -> None:
    if not value:
        return
    digits = re.sub(r"\D", "", value)
    if len(digits) != LEGAL_ENTITY_TIN_LENGTH:
        result.errors.append(ValidationIssue(path, "ИНН должен содержать 9 цифр", value))


def _check_country(result: PayloadValidation, path: str, value: str | None) -> None:
    if value and normalize_country_code(value) is None:
        result.errors.append(ValidationIssue(path, "Не удалось определить код страны (ISO)", value))


def _check_currency(result: PayloadValidation, path: str, value: str | None) -> None:
    if value and normalize_currency_code(value) is None:
        result.errors.append(ValidationIssue(path, "Код валюты должен быть 3 буквы (ISO)", value))


def _check_item(result: PayloadValidation, index: int, item, origin: str | None, currency: str | None) -> None:
    prefix = f"items[{index}]"
    if not item.description:
        result.warnings.append(ValidationIssue(f"{prefix}.description", "Отсутствует описание товара"))

    digits = re.sub(r"\D", "", item.hs_code or "")
    if item.hs_code and len(digits) != 10:
        result.warnings.append(
            ValidationIssue(f"{prefix}.hs_code", "Код ТН ВЭД должен содержать 10 цифр", item.hs_code)
        )

    if item.price is not None and item.price < 0:
        result.errors.append(ValidationIssue(f"{prefix}.price", "Цена не может быть отрицательной", item.price))

    _check_country(result, f"{prefix}.origin", origin)
    _check_currency(result, f"{prefix}.currency", currency)


def validate_payload(
    payload: LegacyPayload | StructuredPayload,
    *,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> PayloadValidation:
    result = PayloadValidation()

    if isinstance(payload, StructuredPayload):
        for party in ("exporter", "consignee", "financial_responsible", "declarant"):
            block = getattr(payload, party)
            if block is not None:
                _check_tin(result, f"{party}.tin", block.tin)
                _check_country(result, f"{party}.country_code", block.country_code)
        for index, item in enumerate(payload.items):
            _check_item(result, index, item, item.origin_country_code, item.currency_code)
            if item.gross_weight and item.net_weight and item.gross_weight < item.net_weight:
                result.warnings.append(ValidationIssue(
                    f"items[{index}].gross_weight", "Вес брутто меньше веса нетто", item.gross_weight,
                ))
    else:
        if payload.exporter is not None:
            _check_country(result, "exporter.country", payload.exporter.country)
        if payload.consignee is not None:
            _check_tin(result, "consignee.tin", payload.consignee.tin)
            _check_country(result, "consignee.country", payload.consignee.country)
        for index, item in enumerate(payload.items):
            _check_item(result, index, item, item.origin, item.currency)

    if payload.document_date and not any(p.match(payload.document_date) for p in _DATE_FORMATS):
        result.warnings.append(
            ValidationIssue("document_date", "Неверный формат даты", payload.document_date)
        )

    if payload.confidence < low_confidence_threshold:
        result.warnings.append(ValidationIssue(
            "confidence",
            f"Низкая уверенность распознавания ({payload.confidence:.0%})",
            payload.confidence,
        ))

    return result
