"""Heuristic split of a combined "name + address" party string."""

import re

# Markers that usually open the address part, tried in order
ADDRESS_PATTERNS = [
    re.compile(r"(?:,\s*)?(No\.?\s*\d)", re.IGNORECASE),
    re.compile(r"(?:,\s*)?(\d+\s*[a-z]?\s*,)", re.IGNORECASE),
    re.compile(r"(?:,\s*)?(Add(?:ress)?[.:]\s*)", re.IGNORECASE),
    re.compile(
        r"(?:,\s*)?(\d+\s+\w+\s+(?:street|road|avenue|blvd|st\.|rd\.|ave\.))",
        re.IGNORECASE,
    ),
    re.compile(r"(?:\.\s+)(No\.?\s*\d)", re.IGNORECASE),
]

# Legal-form suffixes that usually close the company name
COMPANY_END_PATTERNS = [
    re.compile(r"((?:CO\.?,?\s*)?LTD\.?)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(LLC)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(INC\.?)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(CORP\.?)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(ООО)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(МЧЖ)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(ЗАО)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(ОАО)\s*[,.]?\s*", re.IGNORECASE),
    re.compile(r"(АО)\s*[,.]?\s*", re.IGNORECASE),
]

# Minimum text that must follow a legal-form suffix to count as an address
MIN_ADDRESS_TAIL = 5


def _split_at(text: str, index: int) -> tuple[str, str | None]:
    name = re.sub(r"[,.\s]+$", "", text[:index].strip())
    address = re.sub(r"^[,.\s]+", "", text[index:].strip()).strip()
    return name, address or None


def split_name_and_address(text: str | None) -> tuple[str, str | None]:
    """Split "ACME LTD, No.5 Main Road" into ("ACME LTD", "No.5 Main Road").

    Returns (name, address); address is None when no boundary is found.
    """
    if not text or not text.strip():
        return "", None

    for pattern in ADDRESS_PATTERNS:
        match = pattern.search(text)
        if match:
            if match.start() > 0:
                return _split_at(text, match.start())
            break

    for pattern in COMPANY_END_PATTERNS:
        match = pattern.search(text)
        if match and match.end() < len(text) - MIN_ADDRESS_TAIL:
            name, address = _split_at(text, match.end())
            if address:
                return name, address

    return text.strip(), None
