"""Commodity lines from extraction payloads: normalization, dedup, LineItem building."""

from gtd_engine.normalizer.codes import (
    normalize_country_code,
    normalize_currency_code,
    normalize_hs_code,
    truncate,
)
from gtd_engine.schemas.autofill import ExtractedItem
from gtd_engine.schemas.declaration import LineItem
from gtd_engine.schemas.payload import (
    LegacyItem,
    LegacyPayload,
    StructuredDocument,
    StructuredItem,
    StructuredPayload,
)

DESCRIPTION_MAX_LENGTH = 2000
NET_WEIGHT_RATIO = 0.95
DEFAULT_PROCEDURE_CODE = "40"
NO_NUMBER = "Б/Н"

NUMERIC_FIELDS = (
    "price", "customs_value", "gross_weight", "net_weight", "quantity", "package_quantity",
)


def _from_legacy(item: LegacyItem) -> ExtractedItem:
    return ExtractedItem(
        description=item.description,
        hs_code=normalize_hs_code(item.hs_code),
        origin_country_code=normalize_country_code(item.origin),
        quantity=item.quantity,
        gross_weight=item.weight,
        price=item.price,
        currency=normalize_currency_code(item.currency),
        vin_number=item.vin_number,
        brand=item.brand,
        model=item.model,
    )


def _from_structured(item: StructuredItem) -> ExtractedItem:
    return ExtractedItem(
        description=item.description,
        hs_code=normalize_hs_code(item.hs_code),
        origin_country_code=normalize_country_code(item.origin_country_code),
        quantity=item.quantity,
        unit_code=item.unit_code,
        package_quantity=item.package_quantity,
        packaging_type=item.packaging_type,
        gross_weight=item.gross_weight,
        net_weight=item.net_weight,
        price=item.price,
        currency=normalize_currency_code(item.currency_code),
        customs_value=item.customs_value,
        procedure_code=item.procedure_code,
        vin_number=item.vin_number,
        brand=item.brand,
        model=item.model,
        year_of_manufacture=item.year_of_manufacture,
        condition=item.condition,
    )


def extract_items(payload: LegacyPayload | StructuredPayload) -> list[ExtractedItem]:
    if isinstance(payload, StructuredPayload):
        return [_from_structured(item) for item in payload.items]
    return [_from_legacy(item) for item in payload.items]


def _vin(item: ExtractedItem) -> str:
    return (item.vin_number or "").strip().upper()


def is_same_item(a: ExtractedItem, b: ExtractedItem) -> bool:
    """Same non-empty VIN, otherwise equal description and price."""
    if _vin(a) and _vin(b):
        return _vin(a) == _vin(b)
    description_a = (a.description or "").strip().lower()
    description_b = (b.description or "").strip().lower()
    return bool(description_a) and description_a == description_b and a.price == b.price


def dedupe_items(items: list[ExtractedItem]) -> list[ExtractedItem]:
    """Drop repeated items, keeping the first occurrence and input order."""
    unique: list[ExtractedItem] = []
    for item in items:
        if not any(is_same_item(item, kept) for kept in unique):
            unique.append(item)
    return unique


def documents_string(documents: list[StructuredDocument]) -> str | None:
    """Graph 44 line: "{code} {short name} № {number} от {date}; ..."."""
    parts = []
    for document in documents:
        text = " ".join(part for part in (document.code, document.short_name) if part)
        text = f"{text} № {document.number or NO_NUMBER} от {document.date or 'дата'}"
        parts.append(text.strip())
    return "; ".join(parts) or None


def describe_item(item: ExtractedItem) -> str:
    """Description enriched with brand, VIN, year and condition when missing."""
    description = item.description or "Товар"
    lowered = description.lower()

    if item.vin_number and item.vin_number.lower() not in lowered:
        description = f"{description}, VIN: {item.vin_number}"
    if item.brand and item.brand.lower() not in lowered:
        description = f"{item.brand} {description}"
    if item.year_of_manufacture and item.year_of_manufacture not in description:
        description = f"{description}, {item.year_of_manufacture} г.в."

    lowered = description.lower()
    if item.condition == "new" and "новый" not in lowered and "new" not in lowered:
        description = f"{description}, новый"
    elif item.condition == "used" and "б/у" not in lowered and "used" not in lowered:
        description = f"{description}, б/у"

    return description


def negative_fields(item: ExtractedItem) -> list[str]:
    """Numeric fields holding a negative amount; these are dropped when building a LineItem."""
    return [name for name in NUMERIC_FIELDS if (getattr(item, name) or 0) < 0]


def build_line_item(
    item: ExtractedItem,
    index: int,
    *,
    documents: str | None = None,
    procedure_code: str | None = None,
) -> LineItem:
    item = item.model_copy(update={name: None for name in negative_fields(item)})
    gross = item.gross_weight or 0.0
    net = item.net_weight or round(gross * NET_WEIGHT_RATIO, 2)
    return LineItem(
        item_number=index + 1,
        description=truncate(describe_item(item), DESCRIPTION_MAX_LENGTH),
        hs_code=item.hs_code,
        origin_country_code=item.origin_country_code,
        package_quantity=item.package_quantity or 1,
        package_type=item.packaging_type,
        marks_numbers=item.vin_number,
        gross_weight=gross,
        net_weight=net,
        quantity=item.quantity or 1,
        supplementary_unit=item.unit_code or "796",
        item_price=item.price or 0.0,
        customs_value=item.customs_value or 0.0,
        procedure_code=procedure_code or item.procedure_code or DEFAULT_PROCEDURE_CODE,
        additional_info=documents,
    )


def build_line_items(
    items: list[ExtractedItem],
    *,
    documents: str | None = None,
    procedure_code: str | None = None,
) -> list[LineItem]:
    return [
        build_line_item(item, index, documents=documents, procedure_code=procedure_code)
        for index, item in enumerate(items)
    ]
