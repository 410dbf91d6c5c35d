"""Customs regime catalog: static, read-only reference data.

Each regime carries its procedure code (graph 1 / graph 37), the fields it
auto-fills, per-graph hints and the graphs that must stay empty for it.
"""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from gtd_engine.normalizer.codes import DeclarationType


class CustomsRegime(str, enum.Enum):
    EXPORT = "export"
    REEXPORT = "reexport"
    TEMP_EXPORT = "temp_export"
    IMPORT = "import"
    REIMPORT = "reimport"
    TEMP_IMPORT = "temp_import"
    TRANSIT = "transit"
    PROCESSING_INSIDE = "processing_inside"
    PROCESSING_OUTSIDE = "processing_outside"
    TEMP_STORAGE = "temp_storage"
    FREE_ZONE = "free_zone"
    DUTY_FREE_SHOP = "duty_free_shop"
    FREE_WAREHOUSE = "free_warehouse"
    CUSTOMS_WAREHOUSE = "customs_warehouse"
    ABANDONMENT = "abandonment"
    DESTRUCTION = "destruction"


@dataclass(frozen=True)
class RegimeDefinition:
    """Identity of a regime on the form."""

    procedure_code: str
    abbreviation: str
    name: str
    direction: DeclarationType


@dataclass(frozen=True)
class RegimeConfig:
    """Field behaviour a regime imposes on the declaration."""

    auto_fill: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    hints: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    disabled_graphs: frozenset[str] = frozenset()
    required_graphs: frozenset[str] | None = None


REGIME_DEFINITIONS: Mapping[CustomsRegime, RegimeDefinition] = MappingProxyType({
    CustomsRegime.EXPORT: RegimeDefinition("10", "ЭК", "Экспорт", DeclarationType.EXPORT),
    CustomsRegime.REEXPORT: RegimeDefinition("11", "РЭ", "Реэкспорт", DeclarationType.EXPORT),
    CustomsRegime.TEMP_EXPORT: RegimeDefinition("12", "ВЭ", "Временный вывоз", DeclarationType.EXPORT),
    CustomsRegime.IMPORT: RegimeDefinition("40", "ИМ", "Импорт", DeclarationType.IMPORT),
    CustomsRegime.REIMPORT: RegimeDefinition("41", "РИ", "Реимпорт", DeclarationType.IMPORT),
    CustomsRegime.TEMP_IMPORT: RegimeDefinition("42", "ВВ", "Временный ввоз", DeclarationType.IMPORT),
    CustomsRegime.PROCESSING_INSIDE: RegimeDefinition("51", "ПВ", "Переработка на тер.", DeclarationType.IMPORT),
    CustomsRegime.PROCESSING_OUTSIDE: RegimeDefinition("61", "ПЭ", "Переработка вне тер.", DeclarationType.EXPORT),
    CustomsRegime.TEMP_STORAGE: RegimeDefinition("70", "ТС", "Временное хранение", DeclarationType.IMPORT),
    CustomsRegime.FREE_ZONE: RegimeDefinition("71", "СТ", "Свободная таможенная зона", DeclarationType.IMPORT),
    CustomsRegime.DUTY_FREE_SHOP: RegimeDefinition("72", "БТ", "Беспошлинная торговля", DeclarationType.IMPORT),
    CustomsRegime.FREE_WAREHOUSE: RegimeDefinition("73", "СС", "Свободный склад", DeclarationType.IMPORT),
    CustomsRegime.CUSTOMS_WAREHOUSE: RegimeDefinition("74", "СВХ", "Таможенный склад", DeclarationType.IMPORT),
    CustomsRegime.ABANDONMENT: RegimeDefinition("75", "ОГ", "Отказ в пользу государства", DeclarationType.IMPORT),
    CustomsRegime.DESTRUCTION: RegimeDefinition("76", "УН", "Уничтожение", DeclarationType.IMPORT),
    CustomsRegime.TRANSIT: RegimeDefinition("80", "ТТ", "Транзит", DeclarationType.TRANSIT),
})

# Regimes exempt from import duty and VAT
EXPORT_FAMILY = frozenset({
    CustomsRegime.EXPORT,
    CustomsRegime.REEXPORT,
    CustomsRegime.TEMP_EXPORT,
})

_EXPORT_DISABLED = frozenset({"4", "6", "10", "16", "21", "27", "36", "51", "52", "53"})

_EXPORT_REQUIRED = frozenset({
    "1", "2", "3", "5", "7", "8", "9", "11", "12", "13", "14", "17", "17a", "18",
    "19", "20", "22", "23", "24", "25", "26", "28", "29", "30", "31", "32", "33",
    "34", "35", "37", "38", "39", "40", "41", "42", "43", "44", "45", "46", "47",
    "48", "49", "50", "54",
})

_IMPORT_REQUIRED = frozenset({
    "1", "2", "3", "5", "7", "8", "9", "11", "12", "13", "14", "15", "15a", "18",
    "19", "20", "21", "22", "23", "24", "25", "26", "28", "29", "30", "31", "32",
    "33", "34", "35", "37", "38", "39", "40", "41", "42", "43", "44", "45", "46",
    "47", "48", "49", "50", "54",
})

# Graphs checked for completeness when a regime gives no explicit list
DEFAULT_REQUIRED_GRAPHS = frozenset({"1", "2", "8", "14", "22", "23", "25", "29", "30", "54"})

_UZ_DISPATCH = {"dispatch_country": "UZ", "dispatch_country_code": "860"}
_UZ_DESTINATION = {"destination_country": "UZ", "destination_country_code": "860"}

REGIME_CONFIGS: Mapping[CustomsRegime, RegimeConfig] = MappingProxyType({
    CustomsRegime.EXPORT: RegimeConfig(
        auto_fill=MappingProxyType({**_UZ_DISPATCH, "exporter_country": "UZ"}),
        hints=MappingProxyType({
            "2": "Экспортер — резидент Узбекистана",
            "8": "Получатель — иностранное лицо",
            "9": "Лицо, ответственное за финансовое урегулирование",
        }),
        disabled_graphs=_EXPORT_DISABLED,
        required_graphs=_EXPORT_REQUIRED,
    ),
    CustomsRegime.REEXPORT: RegimeConfig(
        auto_fill=MappingProxyType({**_UZ_DISPATCH, "exporter_country": "UZ"}),
        hints=MappingProxyType({
            "2": "Экспортер — лицо, осуществляющее реэкспорт",
            "8": "Получатель — иностранное лицо",
            "9": "Лицо, ответственное за финансовое урегулирование",
        }),
        disabled_graphs=_EXPORT_DISABLED | {"39", "43", "48"},
        required_graphs=_EXPORT_REQUIRED - {"39", "43", "48"},
    ),
    CustomsRegime.IMPORT: RegimeConfig(
        hints=MappingProxyType({
            "2": "Экспортер — иностранное лицо (отправитель товаров)",
            "8": "Получатель — резидент Узбекистана (импортёр)",
            "9": "Лицо, ответственное за финансовое урегулирование (резидент РУз)",
        }),
        disabled_graphs=frozenset({"4", "6", "10", "16", "27", "51", "52", "53"}),
        required_graphs=_IMPORT_REQUIRED,
    ),
    CustomsRegime.REIMPORT: RegimeConfig(
        auto_fill=MappingProxyType(dict(_UZ_DESTINATION)),
        hints=MappingProxyType({
            "2": "Экспортер — лицо, которому возвращаются товары",
            "8": "Получатель — резидент Узбекистана",
        }),
    ),
    CustomsRegime.TEMP_EXPORT: RegimeConfig(
        auto_fill=MappingProxyType({"exporter_country": "UZ"}),
        hints=MappingProxyType({
            "2": "Экспортер — резидент Узбекистана (лицо, временно вывозящее товары)",
            "8": "Получатель — иностранное лицо (временный)",
            "9": "Лицо, получившее разрешение на временный вывоз товаров",
        }),
        disabled_graphs=frozenset({"4", "6", "10", "16", "27", "39", "48", "51", "52", "53"}),
        required_graphs=(_EXPORT_REQUIRED | {"21", "36"}) - {"39", "48"},
    ),
    CustomsRegime.TEMP_IMPORT: RegimeConfig(
        auto_fill=MappingProxyType(dict(_UZ_DESTINATION)),
        hints=MappingProxyType({
            "2": "Экспортер — иностранное лицо",
            "8": "Получатель — резидент Узбекистана (временно)",
        }),
    ),
    CustomsRegime.TRANSIT: RegimeConfig(
        hints=MappingProxyType({
            "2": "Отправитель транзитного груза",
            "8": "Получатель транзитного груза",
        }),
        disabled_graphs=frozenset({"9"}),
    ),
    CustomsRegime.PROCESSING_INSIDE: RegimeConfig(
        auto_fill=MappingProxyType(dict(_UZ_DESTINATION)),
        hints=MappingProxyType({
            "2": "Экспортер — иностранное лицо",
            "8": "Получатель — лицо, осуществляющее переработку",
        }),
    ),
    CustomsRegime.PROCESSING_OUTSIDE: RegimeConfig(
        auto_fill=MappingProxyType(dict(_UZ_DISPATCH)),
        hints=MappingProxyType({
            "2": "Экспортер — резидент Узбекистана",
            "8": "Получатель — иностранное лицо (переработчик)",
        }),
    ),
})

EMPTY_CONFIG = RegimeConfig()

# Graph number -> declaration fields it holds
GRAPH_FIELDS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "1": ("regime", "declaration_type_code"),
    "2": ("exporter_name", "exporter_address"),
    "8": ("consignee_name", "consignee_address"),
    "9": ("financial_responsible_name",),
    "11": ("trading_country",),
    "14": ("declarant_name",),
    "15": ("dispatch_country",),
    "15a": ("dispatch_country_code",),
    "16": ("origin_country",),
    "17": ("destination_country",),
    "17a": ("destination_country_code",),
    "18": ("departure_transport_number",),
    "19": ("container_indicator",),
    "20": ("incoterms",),
    "21": ("border_transport_type",),
    "22": ("currency", "total_invoice_amount"),
    "23": ("exchange_rate",),
    "24": ("transaction_nature",),
    "25": ("border_transport_mode",),
    "26": ("inland_transport_mode",),
    "27": ("loading_place",),
    "28": ("bank_name",),
    "29": ("border_customs_code",),
    "30": ("goods_location_code",),
    "54": ("declaration_place",),
})


def get_regime_config(regime: CustomsRegime) -> RegimeConfig:
    return REGIME_CONFIGS.get(regime, EMPTY_CONFIG)


def get_regime_definition(regime: CustomsRegime) -> RegimeDefinition:
    return REGIME_DEFINITIONS[regime]


def is_export_family(regime: CustomsRegime | None) -> bool:
    return regime in EXPORT_FAMILY


def regime_from_name(value: str | None) -> CustomsRegime | None:
    """Resolve an enum value, Russian name, abbreviation or procedure code."""
    if value is None:
        return None
    if isinstance(value, CustomsRegime):
        return value

    cleaned = str(value).strip()
    if not cleaned:
        return None

    lowered = cleaned.lower()
    for regime in CustomsRegime:
        if lowered in (regime.value, regime.name.lower()):
            return regime

    upper = cleaned.upper()
    for regime, definition in REGIME_DEFINITIONS.items():
        if lowered == definition.name.lower() or upper == definition.abbreviation:
            return regime
        if cleaned == definition.procedure_code:
            return regime

    return None
