"""Field-rule tables: which payload value feeds which declaration field.

Each rule names the target field, a label and source for the proposal, an
extractor that returns an already-normalized value (or None), a confidence
factor applied to the payload confidence and an optional applicability check.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

from gtd_engine.autofill_mapper.splitter import split_name_and_address
from gtd_engine.normalizer.codes import (
    country_numeric_code,
    incoterms_num_code,
    normalize_code,
    normalize_country_code,
    normalize_currency_code,
    normalize_declaration_type,
    normalize_incoterms,
    normalize_tin,
    normalize_transport_mode,
    truncate,
)
from gtd_engine.regime_resolver.catalog import CustomsRegime, regime_from_name
from gtd_engine.schemas.payload import LegacyPayload, StructuredParty, StructuredPayload

NAME_MAX_LENGTH = 200
ADDRESS_MAX_LENGTH = 500
PLACE_MAX_LENGTH = 255
DEFAULT_OFFSHORE_INDICATOR = "2"
DEFAULT_SHIPMENT_FORM = "01"
HOME_COUNTRY = "UZ"

CONTAINER_NUMBER = re.compile(r"^[A-Z]{4}\d{7}$")

_TYPE_TO_REGIME = {
    "IMPORT": CustomsRegime.IMPORT,
    "EXPORT": CustomsRegime.EXPORT,
    "TRANSIT": CustomsRegime.TRANSIT,
}


@dataclass(frozen=True)
class FieldRule:
    field: str
    label: str
    source: str
    extract: Callable[[Any], Any]
    confidence_factor: float = 1.0
    when: Callable[[Any], bool] | None = None

    def applies(self, payload) -> bool:
        return self.when is None or self.when(payload)


# --- Shared helpers ---


def _party_parts(party: StructuredParty | None) -> tuple[str | None, str | None]:
    """(name, address) of a structured party, splitting combined text if needed."""
    if party is None:
        return None, None
    if party.name or party.address:
        return (
            truncate(party.name, NAME_MAX_LENGTH),
            truncate(party.address, ADDRESS_MAX_LENGTH),
        )
    if party.name_and_address:
        name, address = split_name_and_address(party.name_and_address)
        return truncate(name, NAME_MAX_LENGTH), truncate(address, ADDRESS_MAX_LENGTH)
    return None, None


def _party_name(attr: str) -> Callable[[StructuredPayload], str | None]:
    return lambda p: _party_parts(getattr(p, attr))[0]


def _party_address(attr: str) -> Callable[[StructuredPayload], str | None]:
    return lambda p: _party_parts(getattr(p, attr))[1]


def _party_tin(attr: str) -> Callable[[StructuredPayload], str | None]:
    def extract(p):
        party = getattr(p, attr)
        return normalize_tin(party.tin) if party else None
    return extract


def _party_country(attr: str) -> Callable[[StructuredPayload], str | None]:
    def extract(p):
        party = getattr(p, attr)
        if party is None:
            return None
        return normalize_country_code(party.country_code or party.country_num_code)
    return extract


def _structured_regime(p: StructuredPayload) -> str | None:
    regime = regime_from_name(p.declaration_type_code) or regime_from_name(p.declaration_type)
    if regime is None and p.declaration_type:
        regime = _TYPE_TO_REGIME[normalize_declaration_type(p.declaration_type).value]
    return regime.value if regime else None


def _vehicle_numbers(p: StructuredPayload) -> str | None:
    transport = p.transport_departure
    if transport is None:
        return None
    numbers = []
    for vehicle in transport.vehicles:
        plate = "/".join(part for part in (vehicle.plate_number, vehicle.trailer_number) if part)
        if plate:
            numbers.append(plate)
    return ", ".join(numbers) or None


def _vehicle_country(p: StructuredPayload) -> str | None:
    transport = p.transport_departure
    if transport is None or not transport.vehicles:
        return None
    return normalize_country_code(transport.vehicles[0].country_code)


def _delivery(attr: str, normalize: Callable[[Any], Any] = lambda v: v):
    def extract(p: StructuredPayload):
        if p.delivery is None:
            return None
        return normalize(getattr(p.delivery, attr))
    return extract


def _bank(attr: str, normalize: Callable[[Any], Any] = lambda v: v):
    def extract(p: StructuredPayload):
        if p.bank_details is None:
            return None
        return normalize(getattr(p.bank_details, attr))
    return extract


def _no_items(p) -> bool:
    return not p.items


STRUCTURED_RULES: tuple[FieldRule, ...] = (
    FieldRule("regime", "Тип декларации", "Графа 1", _structured_regime),
    FieldRule(
        "declaration_type_code", "Код режима", "Графа 1",
        lambda p: normalize_code(p.declaration_type_code, 2),
    ),
    FieldRule("exporter_name", "Экспортер", "Графа 2", _party_name("exporter")),
    FieldRule("exporter_address", "Адрес экспортера", "Графа 2", _party_address("exporter")),
    FieldRule("exporter_country", "Страна экспортера", "Графа 2", _party_country("exporter")),
    FieldRule("exporter_tin", "ИНН экспортера", "Графа 2", _party_tin("exporter")),
    FieldRule("consignee_name", "Получатель", "Графа 8", _party_name("consignee")),
    FieldRule("consignee_address", "Адрес получателя", "Графа 8", _party_address("consignee")),
    FieldRule("consignee_country", "Страна получателя", "Графа 8", _party_country("consignee")),
    FieldRule("consignee_tin", "ИНН получателя", "Графа 8", _party_tin("consignee")),
    FieldRule(
        "financial_responsible_name", "Лицо, ответственное за фин. урегулирование", "Графа 9",
        _party_name("financial_responsible"),
    ),
    FieldRule(
        "financial_responsible_address", "Адрес лица по графе 9", "Графа 9",
        _party_address("financial_responsible"),
    ),
    FieldRule(
        "financial_responsible_tin", "ИНН лица по графе 9", "Графа 9",
        _party_tin("financial_responsible"),
    ),
    FieldRule("declarant_name", "Декларант", "Графа 14", _party_name("declarant")),
    FieldRule("declarant_address", "Адрес декларанта", "Графа 14", _party_address("declarant")),
    FieldRule("declarant_tin", "ИНН декларанта", "Графа 14", _party_tin("declarant")),
    FieldRule(
        "declarant_type", "Тип декларанта", "Графа 14",
        lambda p: "BROKER" if p.declarant and p.declarant.is_broker else None,
    ),
    FieldRule(
        "first_destination_country", "Первая страна назначения", "Графа 10",
        lambda p: normalize_country_code(p.first_destination_country),
    ),
    FieldRule(
        "trading_country", "Торгующая страна", "Графа 11",
        lambda p: normalize_country_code(p.trading_country_code),
    ),
    FieldRule(
        "offshore_indicator", "Признак оффшора", "Графа 11",
        lambda p: p.offshore_indicator or DEFAULT_OFFSHORE_INDICATOR,
        when=lambda p: bool(p.trading_country_code),
    ),
    FieldRule(
        "dispatch_country", "Страна отправления", "Графа 15",
        lambda p: normalize_country_code(p.dispatch_country_code or p.dispatch_country_num_code),
    ),
    FieldRule(
        "dispatch_country_code", "Код страны отправления", "Графа 15а",
        lambda p: p.dispatch_country_num_code or country_numeric_code(p.dispatch_country_code),
    ),
    FieldRule(
        "origin_country", "Страна происхождения", "Графа 16",
        lambda p: normalize_country_code(p.origin_country_code),
    ),
    FieldRule(
        "destination_country", "Страна назначения", "Графа 17",
        lambda p: normalize_country_code(
            p.destination_country_code or p.destination_country_num_code
        ),
    ),
    FieldRule(
        "destination_country_code", "Код страны назначения", "Графа 17а",
        lambda p: p.destination_country_num_code or country_numeric_code(p.destination_country_code),
    ),
    FieldRule(
        "transport_count", "Количество транспортных средств", "Графа 18",
        lambda p: p.transport_departure.count if p.transport_departure else None,
    ),
    FieldRule(
        "departure_transport_type", "Вид транспорта при отправлении", "Графа 18",
        lambda p: normalize_transport_mode(p.transport_departure.type) if p.transport_departure else None,
    ),
    FieldRule("departure_transport_number", "Номер транспортного средства", "Графа 18", _vehicle_numbers),
    FieldRule("transport_nationality", "Страна регистрации ТС", "Графа 18", _vehicle_country),
    FieldRule("container_indicator", "Контейнер", "Графа 19", lambda p: p.container_indicator),
    FieldRule("incoterms", "Условия поставки", "Графа 20", _delivery("incoterms_code", normalize_incoterms)),
    FieldRule(
        "incoterms_num_code", "Код условий поставки", "Графа 20",
        lambda p: (p.delivery.incoterms_num_code or incoterms_num_code(p.delivery.incoterms_code))
        if p.delivery else None,
    ),
    FieldRule(
        "delivery_place", "Место поставки", "Графа 20",
        _delivery("place", lambda v: truncate(v, PLACE_MAX_LENGTH)),
    ),
    FieldRule(
        "payment_form_code", "Форма расчетов", "Графа 20", _delivery("payment_form_code"),
        confidence_factor=0.9,
    ),
    FieldRule(
        "shipment_form_code", "Форма отправки", "Графа 20",
        _delivery("shipment_form_code", lambda v: v or DEFAULT_SHIPMENT_FORM),
        confidence_factor=0.9,
    ),
    FieldRule(
        "border_transport_same_as_departure", "Транспорт на границе без изменений", "Графа 21",
        lambda p: p.transport_border.same_as_departure if p.transport_border else None,
    ),
    FieldRule(
        "border_transport_type", "Транспорт на границе", "Графа 21",
        lambda p: normalize_transport_mode(p.transport_border.type) if p.transport_border else None,
    ),
    FieldRule(
        "currency", "Валюта договора", "Графа 22",
        lambda p: normalize_currency_code(p.invoice_currency),
    ),
    FieldRule(
        "total_invoice_amount", "Общая фактурная стоимость", "Графа 22",
        lambda p: p.total_invoice_amount,
        when=_no_items,
    ),
    FieldRule(
        "transaction_nature", "Характер сделки", "Графа 24",
        lambda p: normalize_code(p.transaction_nature_code, 3),
        confidence_factor=0.9,
    ),
    FieldRule(
        "border_transport_mode", "Вид транспорта на границе", "Графа 25",
        lambda p: normalize_transport_mode(p.border_transport_mode),
    ),
    FieldRule(
        "inland_transport_mode", "Вид транспорта внутри страны", "Графа 26",
        lambda p: normalize_transport_mode(p.inland_transport_mode),
    ),
    FieldRule(
        "loading_place", "Место погрузки/разгрузки", "Графа 27",
        lambda p: truncate(p.loading_place, PLACE_MAX_LENGTH),
        confidence_factor=0.8,
    ),
    FieldRule("bank_tin", "ИНН банка", "Графа 28", _bank("tin", normalize_tin)),
    FieldRule("bank_mfo", "МФО банка", "Графа 28", _bank("mfo", lambda v: normalize_code(v, 5))),
    FieldRule(
        "bank_name", "Наименование банка", "Графа 28",
        _bank("bank_name", lambda v: truncate(v, NAME_MAX_LENGTH)),
    ),
    FieldRule(
        "bank_address", "Адрес банка", "Графа 28",
        _bank("bank_address", lambda v: truncate(v, ADDRESS_MAX_LENGTH)),
    ),
    FieldRule(
        "border_customs_code", "Таможня на границе", "Графа 29",
        lambda p: normalize_code(p.border_customs_code, 8),
        confidence_factor=0.8,
    ),
    FieldRule(
        "goods_location_code", "Местонахождение товаров", "Графа 30",
        lambda p: normalize_code(p.goods_location_code, 10),
        confidence_factor=0.8,
    ),
    FieldRule(
        "goods_location_address", "Адрес местонахождения товаров", "Графа 30",
        lambda p: truncate(p.goods_location_address, ADDRESS_MAX_LENGTH),
        confidence_factor=0.8,
    ),
    FieldRule(
        "principal_position", "Должность руководителя", "Графа 54",
        lambda p: p.principal.position if p.principal else None,
    ),
    FieldRule(
        "principal_name", "Руководитель", "Графа 54",
        lambda p: truncate(p.principal.name, NAME_MAX_LENGTH) if p.principal else None,
    ),
    FieldRule(
        "principal_tin", "ПИНФЛ руководителя", "Графа 54",
        lambda p: normalize_tin(p.principal.tin, personal=True) if p.principal else None,
    ),
    FieldRule(
        "declaration_place", "Место составления декларации", "Графа 54",
        lambda p: truncate(p.declaration_details.place, PLACE_MAX_LENGTH) if p.declaration_details else None,
    ),
    FieldRule(
        "declarant_signature", "Подписант", "Графа 54",
        lambda p: truncate(p.declaration_details.signatory_name, NAME_MAX_LENGTH)
        if p.declaration_details else None,
    ),
    FieldRule(
        "declarant_phone", "Телефон", "Графа 54",
        lambda p: p.declaration_details.phone if p.declaration_details else None,
    ),
    FieldRule("reference_number", "Номер документа", "Документ", lambda p: p.document_number),
)


# --- Legacy shape ---


def _legacy_exporter_country(p: LegacyPayload) -> str | None:
    return normalize_country_code(p.exporter.country) if p.exporter else None


def _legacy_containers(p: LegacyPayload) -> list[str] | None:
    if p.transport is None:
        return None
    numbers = [n.strip().upper() for n in p.transport.container_numbers if n]
    return [n for n in numbers if CONTAINER_NUMBER.match(n)] or None


def _legacy_plates(p: LegacyPayload) -> str | None:
    if p.transport is None:
        return None
    return ", ".join(plate.strip() for plate in p.transport.vehicle_plates if plate and plate.strip()) or None


def _legacy_financial(attr: str, normalize: Callable[[Any], Any] = lambda v: v):
    def extract(p: LegacyPayload):
        if p.financial is None:
            return None
        return normalize(getattr(p.financial, attr))
    return extract


LEGACY_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "exporter_name", "Экспортер", "Инвойс (экспортер)",
        lambda p: truncate(p.exporter.name, NAME_MAX_LENGTH) if p.exporter else None,
    ),
    FieldRule(
        "exporter_address", "Адрес экспортера", "Инвойс (экспортер)",
        lambda p: truncate(p.exporter.address, ADDRESS_MAX_LENGTH) if p.exporter else None,
    ),
    FieldRule("exporter_country", "Страна экспортера", "Инвойс (экспортер)", _legacy_exporter_country),
    FieldRule(
        "dispatch_country", "Страна отправления", "Инвойс (экспортер)", _legacy_exporter_country,
        confidence_factor=0.95,
    ),
    FieldRule(
        "consignee_name", "Получатель", "Инвойс (получатель)",
        lambda p: truncate(p.consignee.name, NAME_MAX_LENGTH) if p.consignee else None,
    ),
    FieldRule(
        "consignee_address", "Адрес получателя", "Инвойс (получатель)",
        lambda p: truncate(p.consignee.address, ADDRESS_MAX_LENGTH) if p.consignee else None,
    ),
    FieldRule(
        "consignee_tin", "ИНН получателя", "Инвойс (получатель)",
        lambda p: normalize_tin(p.consignee.tin) if p.consignee else None,
        confidence_factor=0.95,
    ),
    FieldRule(
        "consignee_country", "Страна получателя", "Инвойс (получатель)",
        lambda p: normalize_country_code(p.consignee.country) or HOME_COUNTRY if p.consignee else None,
    ),
    FieldRule(
        "total_invoice_amount", "Общая фактурная стоимость", "Инвойс (итого)",
        _legacy_financial("total_amount"),
        when=_no_items,
    ),
    FieldRule("currency", "Валюта договора", "Инвойс (итого)", _legacy_financial("currency", normalize_currency_code)),
    FieldRule(
        "incoterms", "Условия поставки", "Инвойс (условия)",
        _legacy_financial("incoterms", normalize_incoterms),
        confidence_factor=0.95,
    ),
    FieldRule(
        "incoterms_num_code", "Код условий поставки", "Инвойс (условия)",
        _legacy_financial("incoterms", incoterms_num_code),
        confidence_factor=0.95,
    ),
    FieldRule(
        "delivery_place", "Место поставки", "Инвойс (условия)",
        _legacy_financial("delivery_place", lambda v: truncate(v, PLACE_MAX_LENGTH)),
        confidence_factor=0.95,
    ),
    FieldRule(
        "container_numbers", "Номера контейнеров", "CMR (транспорт)", _legacy_containers,
        confidence_factor=0.85,
    ),
    FieldRule(
        "container_indicator", "Контейнер", "CMR (транспорт)",
        lambda p: "1" if _legacy_containers(p) else None,
        confidence_factor=0.85,
    ),
    FieldRule("departure_transport_number", "Номер транспортного средства", "CMR (транспорт)", _legacy_plates),
    FieldRule(
        "departure_transport_type", "Вид транспорта при отправлении", "CMR (транспорт)",
        lambda p: normalize_transport_mode(p.transport.mode) if p.transport else None,
    ),
    FieldRule(
        "transport_count", "Количество транспортных средств", "CMR (транспорт)",
        lambda p: 1 if _legacy_plates(p) else None,
        confidence_factor=0.9,
    ),
    FieldRule(
        "origin_country", "Страна происхождения", "Инвойс (товары)",
        lambda p: normalize_country_code(p.items[0].origin) if p.items else None,
        confidence_factor=0.9,
    ),
    FieldRule(
        "trading_country", "Торгующая страна", "Инвойс (экспортер)", _legacy_exporter_country,
        confidence_factor=0.85,
    ),
    FieldRule("reference_number", "Номер документа", "Документ", lambda p: p.document_number),
)


def rules_for(payload) -> tuple[FieldRule, ...]:
    if isinstance(payload, StructuredPayload):
        return STRUCTURED_RULES
    return LEGACY_RULES
