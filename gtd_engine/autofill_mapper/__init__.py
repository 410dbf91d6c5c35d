from gtd_engine.autofill_mapper.ingest import ingest_payload, sniff_kind
from gtd_engine.autofill_mapper.mapper import map_payload, merge_payloads
from gtd_engine.autofill_mapper.splitter import split_name_and_address
from gtd_engine.autofill_mapper.validation import confidence_level, validate_payload

__all__ = [
    "confidence_level",
    "ingest_payload",
    "map_payload",
    "merge_payloads",
    "sniff_kind",
    "split_name_and_address",
    "validate_payload",
]
