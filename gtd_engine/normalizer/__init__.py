from gtd_engine.normalizer.codes import (
    DeclarationType,
    country_numeric_code,
    incoterms_num_code,
    normalize_code,
    normalize_country_code,
    normalize_currency_code,
    normalize_declaration_type,
    normalize_hs_code,
    normalize_incoterms,
    normalize_tin,
    normalize_transport_mode,
    parse_rate,
    truncate,
)

__all__ = [
    "DeclarationType",
    "country_numeric_code",
    "incoterms_num_code",
    "normalize_code",
    "normalize_country_code",
    "normalize_currency_code",
    "normalize_declaration_type",
    "normalize_hs_code",
    "normalize_incoterms",
    "normalize_tin",
    "normalize_transport_mode",
    "parse_rate",
    "truncate",
]
