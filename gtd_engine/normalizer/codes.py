"""Normalizers: raw extracted or typed values -> canonical codes used on the ГТД.

Every function here is total: unrecognized input yields None (or a documented
default), never an exception. All of them are idempotent, so feeding a
normalized value back in returns it unchanged.
"""

import enum
import logging
import math
import re

from gtd_engine.normalizer.reference import (
    COUNTRY_NAMES,
    CURRENCY_NAMES,
    DECLARATION_TYPE_ABBREVIATIONS,
    DECLARATION_TYPE_CODES,
    DEFAULT_TRANSPORT_MODE,
    INCOTERMS,
    INCOTERMS_NUM_CODES,
    ISO_TO_NUMERIC,
    NUMERIC_TO_ISO,
    TRANSPORT_MODE_CODES,
    TRANSPORT_MODE_KEYWORDS,
)

logger = logging.getLogger("gtd.normalizer")

LEGAL_ENTITY_TIN_LENGTH = 9
PINFL_LENGTH = 14
HS_CODE_LENGTH = 10

_INCOTERMS_PREFIX = re.compile(r"^(%s)" % "|".join(INCOTERMS))
_TRAILING_UNIT = re.compile(r"[A-Za-zА-Яа-яЁё].*$")


class DeclarationType(str, enum.Enum):
    """Direction of goods movement (graph 1, first subdivision)."""

    IMPORT = "IMPORT"
    EXPORT = "EXPORT"
    TRANSIT = "TRANSIT"


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_country_code(value: str | None) -> str | None:
    """Return the ISO alpha-2 code for a code, numeric code or country name.

    "860" -> "UZ", "Uzbekistan" -> "UZ", "uz" -> "UZ". The form's "000"
    placeholder and unknown numeric codes yield None.
    """
    cleaned = _clean(value)
    if not cleaned:
        return None

    upper = cleaned.upper()
    if re.fullmatch(r"[A-Z]{2}", upper):
        return upper

    if cleaned.isdigit() and len(cleaned) <= 3:
        iso = NUMERIC_TO_ISO.get(cleaned.zfill(3))
        if iso is None:
            logger.debug("Unknown numeric country code %r", cleaned)
        return iso

    named = COUNTRY_NAMES.get(cleaned.lower())
    if named:
        return named

    letters = re.sub(r"[^A-Z]", "", upper)
    if len(letters) >= 2:
        logger.debug("Country %r not in reference table, using %r", cleaned, letters[:2])
        return letters[:2]

    logger.debug("Cannot convert %r to a country code", cleaned)
    return None


def country_numeric_code(value: str | None) -> str | None:
    """ISO alpha-2 (or anything normalize_country_code accepts) -> 3-digit code."""
    iso = normalize_country_code(value)
    if iso is None:
        return None
    return ISO_TO_NUMERIC.get(iso)


def normalize_currency_code(value: str | None) -> str | None:
    """Return an ISO 4217 code for a code, currency name or symbol.

    Unrecognized text longer than three characters falls back to USD, the
    usual invoicing currency of the extracted documents.
    """
    cleaned = _clean(value)
    if not cleaned:
        return None

    named = CURRENCY_NAMES.get(cleaned.lower())
    if named:
        return named

    if re.fullmatch(r"[A-Za-z]{3}", cleaned):
        return cleaned.upper()

    if len(cleaned) > 3:
        logger.warning("Unknown currency %r, defaulting to USD", cleaned)
        return "USD"

    return None


def normalize_incoterms(value: str | None) -> str | None:
    """Extract the Incoterms term: "FOB Shanghai" -> "FOB"."""
    cleaned = _clean(value).upper()
    if not cleaned:
        return None

    match = _INCOTERMS_PREFIX.match(cleaned)
    if match:
        return match.group(1)

    if len(cleaned) <= 3:
        return cleaned

    return None


def incoterms_num_code(value: str | None) -> str | None:
    term = normalize_incoterms(value)
    if term is None:
        return None
    return INCOTERMS_NUM_CODES.get(term)


def normalize_declaration_type(value: str | DeclarationType | None) -> DeclarationType:
    """Map Cyrillic abbreviations, procedure codes and English names to a type.

    Empty and unrecognized input defaults to IMPORT, the most common
    declaration kind.
    """
    if isinstance(value, DeclarationType):
        return value

    cleaned = _clean(value).upper()
    if not cleaned:
        return DeclarationType.IMPORT

    if cleaned in DeclarationType.__members__:
        return DeclarationType[cleaned]

    if cleaned in DECLARATION_TYPE_ABBREVIATIONS:
        return DeclarationType(DECLARATION_TYPE_ABBREVIATIONS[cleaned])

    if cleaned in DECLARATION_TYPE_CODES:
        return DeclarationType(DECLARATION_TYPE_CODES[cleaned])

    logger.debug("Unknown declaration type %r, defaulting to IMPORT", cleaned)
    return DeclarationType.IMPORT


def parse_rate(value) -> float | None:
    """Parse a rate: "12%" -> 12.0, "4 БРВ" -> 4.0, "12,5" -> 12.5."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)

    cleaned = re.sub(r"[%\s]", "", str(value))
    cleaned = _TRAILING_UNIT.sub("", cleaned).replace(",", ".")
    if not cleaned:
        return None

    try:
        parsed = float(cleaned)
    except ValueError:
        return None
    return None if math.isnan(parsed) else parsed


def truncate(value: str | None, max_len: int) -> str | None:
    cleaned = _clean(value)
    if not cleaned:
        return None
    return cleaned[:max_len].strip()


def normalize_code(value: str | None, max_len: int) -> str | None:
    """Keep alphanumerics only, uppercase, cut to max_len."""
    cleaned = re.sub(r"[^A-Za-z0-9]", "", _clean(value)).upper()[:max_len]
    return cleaned or None


def normalize_tin(value: str | None, *, personal: bool = False) -> str | None:
    """Digits only, capped at 9 (legal entity INN) or 14 (personal PINFL).

    No checksum validation is performed.
    """
    length = PINFL_LENGTH if personal else LEGAL_ENTITY_TIN_LENGTH
    digits = re.sub(r"\D", "", _clean(value))[:length]
    return digits or None


def normalize_hs_code(value: str | None) -> str | None:
    """Digits only, cut to 10 and right-padded with zeros."""
    digits = re.sub(r"\D", "", _clean(value))[:HS_CODE_LENGTH]
    if not digits:
        return None
    return digits.ljust(HS_CODE_LENGTH, "0")


def normalize_transport_mode(value: str | None) -> str | None:
    """Free-text transport description -> 2-digit transport mode code.

    Known codes pass through; unrecognized text defaults to road transport.
    """
    cleaned = _clean(value).upper()
    if not cleaned:
        return None

    if cleaned in TRANSPORT_MODE_CODES:
        return cleaned

    for code, keywords in TRANSPORT_MODE_KEYWORDS:
        if any(keyword in cleaned for keyword in keywords):
            return code

    return DEFAULT_TRANSPORT_MODE
