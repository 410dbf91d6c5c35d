"""Tests for extraction payload ingestion, mapping and merging."""

import pytest

from gtd_engine.autofill_mapper import (
    confidence_level,
    ingest_payload,
    map_payload,
    merge_payloads,
    sniff_kind,
    split_name_and_address,
    validate_payload,
)
from gtd_engine.autofill_mapper.items import (
    build_line_items,
    dedupe_items,
    describe_item,
    documents_string,
    negative_fields,
)
from gtd_engine.autofill_mapper.mapper import ALREADY_FILLED, SKIPPED_LOW_CONFIDENCE
from gtd_engine.autofill_mapper.parties import (
    copy_consignee_to_financial,
    copy_exporter_to_declarant,
)
from gtd_engine.autofill_mapper.proposals import (
    create_field_hints,
    filter_proposals_by_confidence,
    group_proposals_by_level,
    group_proposals_by_source,
    has_applied_data,
)
from gtd_engine.exceptions import PayloadShapeError
from gtd_engine.schemas.autofill import ExtractedItem
from gtd_engine.schemas.declaration import Declaration
from gtd_engine.schemas.payload import LegacyPayload, StructuredDocument, StructuredPayload


def _proposal(patch, name):
    return next(p for p in patch.fields if p.field_name == name)


# ── Ingestion ──


class TestIngest:
    """Tests for payload shape detection and validation."""

    def test_sniff_structured(self, structured_payload):
        assert sniff_kind(structured_payload) == "structured"

    def test_sniff_legacy(self, legacy_payload):
        assert sniff_kind(legacy_payload) == "legacy"

    def test_sniff_by_party_keys(self):
        raw = {"exporter": {"nameAndAddress": "ACME"}, "confidence": 0.5}
        assert sniff_kind(raw) == "structured"

    def test_explicit_kind_wins(self, structured_payload):
        assert sniff_kind({**structured_payload, "kind": "legacy"}) == "legacy"

    def test_ingest_returns_typed_payload(self, structured_payload, legacy_payload):
        assert isinstance(ingest_payload(structured_payload), StructuredPayload)
        assert isinstance(ingest_payload(legacy_payload), LegacyPayload)

    def test_ingest_accepts_snake_case(self):
        payload = ingest_payload({"document_number": "X-1", "confidence": 0.7})
        assert payload.document_number == "X-1"

    def test_non_object_rejected(self):
        with pytest.raises(PayloadShapeError):
            ingest_payload(["not", "a", "payload"])

    def test_missing_confidence_rejected(self, legacy_payload):
        del legacy_payload["confidence"]
        with pytest.raises(PayloadShapeError) as exc_info:
            ingest_payload(legacy_payload)
        assert exc_info.value.errors
        assert exc_info.value.errors[0]["loc"][-1] == "confidence"

    def test_confidence_out_of_range_rejected(self, structured_payload):
        structured_payload["confidence"] = 1.5
        with pytest.raises(PayloadShapeError):
            ingest_payload(structured_payload)


# ── Name/address splitting ──


class TestSplitNameAndAddress:
    """Tests for split_name_and_address."""

    def test_splits_at_street_number(self):
        name, address = split_name_and_address(
            "SHANGHAI AUTO TRADING CO., LTD. No.568 Jinshajiang Road, Shanghai"
        )
        assert name == "SHANGHAI AUTO TRADING CO., LTD"
        assert address == "No.568 Jinshajiang Road, Shanghai"

    def test_splits_after_legal_form(self):
        name, address = split_name_and_address("Broker Service LLC, Tashkent city")
        assert name == "Broker Service LLC"
        assert address == "Tashkent city"

    def test_address_keyword(self):
        name, address = split_name_and_address("Global Parts FZE Address: Jebel Ali, Dubai")
        assert name == "Global Parts FZE"
        assert address == "Address: Jebel Ali, Dubai"

    def test_no_boundary_keeps_whole_name(self):
        assert split_name_and_address("Avto Import") == ("Avto Import", None)

    def test_short_tail_is_not_an_address(self):
        assert split_name_and_address("Acme LLC, UZ") == ("Acme LLC, UZ", None)

    def test_empty(self):
        assert split_name_and_address(None) == ("", None)
        assert split_name_and_address("   ") == ("", None)


# ── Single-payload mapping ──


class TestStructuredMapping:
    """Tests for mapping the structured payload shape."""

    def test_parties(self, structured_payload):
        form = map_payload(structured_payload).form_data
        assert form["exporter_name"] == "SHANGHAI AUTO TRADING CO., LTD"
        assert form["exporter_address"] == "No.568 Jinshajiang Road, Shanghai"
        assert form["exporter_country"] == "CN"
        assert "exporter_tin" not in form
        assert form["consignee_tin"] == "301234567"
        assert form["consignee_country"] == "UZ"
        assert form["declarant_name"] == "Broker Service LLC"
        assert form["declarant_type"] == "BROKER"

    def test_regime_and_countries(self, structured_payload):
        form = map_payload(structured_payload).form_data
        assert form["regime"] == "import"
        assert form["declaration_type_code"] == "40"
        assert form["trading_country"] == "CN"
        assert form["offshore_indicator"] == "2"
        assert form["dispatch_country"] == "CN"
        assert form["dispatch_country_code"] == "156"
        assert form["destination_country"] == "UZ"
        assert form["destination_country_code"] == "860"

    def test_transport_and_delivery(self, structured_payload):
        form = map_payload(structured_payload).form_data
        assert form["transport_count"] == 1
        assert form["departure_transport_type"] == "30"
        assert form["departure_transport_number"] == "01A123BC/01XA1234"
        assert form["transport_nationality"] == "UZ"
        assert form["container_indicator"] == "0"
        assert form["incoterms"] == "FCA"
        assert form["incoterms_num_code"] == "12"
        assert form["shipment_form_code"] == "01"
        assert form["currency"] == "USD"
        assert form["reference_number"] == "SA-2024-15"

    def test_totals_not_proposed_when_items_present(self, structured_payload):
        structured_payload["totalInvoiceAmount"] = 25000
        assert "total_invoice_amount" not in map_payload(structured_payload).form_data

    def test_totals_proposed_without_items(self, structured_payload):
        structured_payload["totalInvoiceAmount"] = 25000
        structured_payload["items"] = []
        assert map_payload(structured_payload).form_data["total_invoice_amount"] == 25000

    def test_confidence_factor_applied(self, structured_payload):
        patch = map_payload(structured_payload)
        assert _proposal(patch, "exporter_name").confidence == 0.92
        assert _proposal(patch, "payment_form_code").confidence == pytest.approx(0.828)

    def test_items_and_documents(self, structured_payload):
        patch = map_payload(structured_payload)
        assert len(patch.items_data) == 1
        item = patch.items_data[0]
        assert item.hs_code == "8703800000"
        assert item.origin_country_code == "CN"
        assert item.currency == "USD"
        assert patch.unmapped_data["documents_string"] == (
            "04021 INV № SA-2024-15 от 12.03.2024; 02015 CMR № Б/Н от 14.03.2024"
        )
        assert patch.unmapped_data["document_date"] == "2024-03-12"


class TestLegacyMapping:
    """Tests for mapping the legacy payload shape."""

    def test_fields(self, legacy_payload):
        form = map_payload(legacy_payload).form_data
        assert form["exporter_name"] == "Global Motors FZE"
        assert form["exporter_address"] == "Jebel Ali, Dubai"
        assert form["exporter_country"] == "AE"
        assert form["dispatch_country"] == "AE"
        assert form["trading_country"] == "AE"
        assert form["consignee_country"] == "UZ"
        assert form["currency"] == "USD"
        assert form["incoterms"] == "CIF"
        assert form["incoterms_num_code"] == "32"
        assert form["origin_country"] == "US"

    def test_transport(self, legacy_payload):
        form = map_payload(legacy_payload).form_data
        assert form["container_numbers"] == ["MSCU1234567"]
        assert form["container_indicator"] == "1"
        assert form["departure_transport_number"] == "01A777AA"
        assert form["departure_transport_type"] == "30"
        assert form["transport_count"] == 1

    def test_item_hs_code_padded(self, legacy_payload):
        item = map_payload(legacy_payload).items_data[0]
        assert item.hs_code == "8703230000"
        assert item.vin_number == "1G1ZD5ST0LF000001"

    def test_sources_name_the_document(self, legacy_payload):
        patch = map_payload(legacy_payload)
        assert _proposal(patch, "exporter_name").source == "Инвойс (экспортер)"
        assert _proposal(patch, "trading_country").confidence == pytest.approx(0.68)


# ── Conflict policy ──


class TestConflictPolicy:
    """Tests for non-destructive application against the current declaration."""

    def test_filled_field_is_proposed_not_applied(self, legacy_payload):
        patch = map_payload(legacy_payload, Declaration(exporter_name="Existing Exporter"))
        proposal = _proposal(patch, "exporter_name")
        assert proposal.applied is False
        assert proposal.skip_reason == ALREADY_FILLED
        assert proposal.value == "Global Motors FZE"
        assert "exporter_name" not in patch.form_data
        assert patch.form_data["exporter_address"] == "Jebel Ali, Dubai"

    def test_blank_string_counts_as_empty(self, legacy_payload):
        patch = map_payload(legacy_payload, Declaration(exporter_name="   "))
        assert _proposal(patch, "exporter_name").applied is True

    def test_overwrite_existing(self, legacy_payload):
        patch = map_payload(
            legacy_payload, Declaration(exporter_name="Existing Exporter"), overwrite_existing=True
        )
        assert patch.form_data["exporter_name"] == "Global Motors FZE"

    def test_current_as_mapping(self, legacy_payload):
        patch = map_payload(legacy_payload, {"currency": "EUR"})
        assert "currency" not in patch.form_data
        assert _proposal(patch, "currency").skip_reason == ALREADY_FILLED

    def test_form_data_matches_applied_proposals(self, structured_payload):
        patch = map_payload(structured_payload, Declaration(currency="EUR", incoterms="DAP"))
        applied = {p.field_name for p in patch.fields if p.applied}
        assert applied == set(patch.form_data)


# ── Merging ──


class TestMergePayloads:
    """Tests for merging several payloads into one patch."""

    def test_mean_confidence(self, structured_payload, legacy_payload):
        patch = merge_payloads([structured_payload, legacy_payload])
        assert patch.confidence == pytest.approx(0.86)

    def test_most_confident_payload_is_base(self, structured_payload, legacy_payload):
        patch = merge_payloads([legacy_payload, structured_payload])
        assert patch.form_data["exporter_name"] == "SHANGHAI AUTO TRADING CO., LTD"
        assert patch.form_data["incoterms"] == "FCA"

    def test_other_payloads_backfill(self, structured_payload, legacy_payload):
        patch = merge_payloads([structured_payload, legacy_payload])
        assert patch.form_data["container_numbers"] == ["MSCU1234567"]
        assert patch.form_data["origin_country"] == "US"

    def test_items_pooled_in_input_order(self, structured_payload, legacy_payload):
        patch = merge_payloads([legacy_payload, structured_payload])
        assert [i.vin_number for i in patch.items_data] == [
            "1G1ZD5ST0LF000001", "LGXCE4CB0P0123456",
        ]

    def test_same_vin_deduplicated(self, structured_payload, legacy_payload):
        legacy_payload["items"][0]["vinNumber"] = "lgxce4cb0p0123456"
        patch = merge_payloads([structured_payload, legacy_payload])
        assert len(patch.items_data) == 1
        assert patch.items_data[0].hs_code == "8703800000"

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError):
            merge_payloads([])

    def test_malformed_payload_rejected(self, structured_payload):
        with pytest.raises(PayloadShapeError):
            merge_payloads([structured_payload, "garbage"])

    def test_all_below_min_confidence(self, structured_payload):
        patch = merge_payloads([structured_payload], min_confidence=0.95)
        assert patch.unmapped_data == {SKIPPED_LOW_CONFIDENCE: True}
        assert patch.fields == []
        assert patch.form_data == {}
        assert patch.confidence == 0.92

    def test_low_confidence_payload_dropped(self, structured_payload, legacy_payload):
        patch = merge_payloads([structured_payload, legacy_payload], min_confidence=0.85)
        assert patch.confidence == pytest.approx(0.92)
        assert "container_numbers" not in patch.form_data

    def test_repeated_merge_is_identical(self, structured_payload, legacy_payload):
        legacy_payload["confidence"] = 0.6
        first = merge_payloads([structured_payload, legacy_payload])
        second = merge_payloads([structured_payload, legacy_payload])
        assert first == second

    def test_equal_confidence_disjoint_payloads_commute(self):
        parties = {"exporter": {"name": "Global Motors FZE", "country": "AE"}, "confidence": 0.7}
        terms = {
            "financial": {"currency": "EUR", "incoterms": "CIF Tashkent"},
            "documentNumber": "GM-778",
            "confidence": 0.7,
        }
        forward = merge_payloads([parties, terms])
        backward = merge_payloads([terms, parties])
        assert forward.form_data == backward.form_data
        assert forward.form_data["exporter_name"] == "Global Motors FZE"
        assert forward.form_data["currency"] == "EUR"
        assert forward.form_data["incoterms"] == "CIF"
        assert {p.field_name: p for p in forward.fields} == {p.field_name: p for p in backward.fields}
        assert forward.unmapped_data == backward.unmapped_data
        assert forward.confidence == backward.confidence == pytest.approx(0.7)


# ── Items ──


class TestItems:
    """Tests for item dedup, descriptions and LineItem building."""

    def test_dedupe_by_description_and_price(self):
        items = [
            ExtractedItem(description="Tyres", price=100),
            ExtractedItem(description="tyres ", price=100),
            ExtractedItem(description="Tyres", price=120),
        ]
        assert len(dedupe_items(items)) == 2

    def test_items_without_description_kept(self):
        items = [ExtractedItem(price=100), ExtractedItem(price=100)]
        assert len(dedupe_items(items)) == 2

    def test_describe_item_enrichment(self):
        item = ExtractedItem(
            description="Легковой автомобиль", brand="BYD",
            vin_number="LGXCE4CB0P0123456", year_of_manufacture="2024", condition="new",
        )
        assert describe_item(item) == (
            "BYD Легковой автомобиль, VIN: LGXCE4CB0P0123456, 2024 г.в., новый"
        )

    def test_describe_item_does_not_repeat(self):
        item = ExtractedItem(description="BYD Song, б/у", brand="byd", condition="used")
        assert describe_item(item) == "BYD Song, б/у"

    def test_documents_string_empty(self):
        assert documents_string([]) is None

    def test_documents_string_placeholders(self):
        document = StructuredDocument(code="04021")
        assert documents_string([document]) == "04021 № Б/Н от дата"

    def test_build_line_items(self, structured_payload):
        patch = map_payload(structured_payload)
        line_items = build_line_items(
            patch.items_data,
            documents=patch.unmapped_data["documents_string"],
            procedure_code="42",
        )
        assert len(line_items) == 1
        line = line_items[0]
        assert line.item_number == 1
        assert line.procedure_code == "42"
        assert line.gross_weight == 2100
        assert line.net_weight == 1995.0
        assert line.item_price == 25000
        assert line.marks_numbers == "LGXCE4CB0P0123456"
        assert line.additional_info.startswith("04021 INV")

    def test_negative_amounts_dropped_from_line_item(self):
        item = ExtractedItem(description="Bolt", price=-100, gross_weight=-2, package_quantity=-1)
        line = build_line_items([item])[0]
        assert line.item_price == 0
        assert line.gross_weight == 0
        assert line.package_quantity == 1
        assert negative_fields(item) == ["price", "gross_weight", "package_quantity"]

    def test_negative_amounts_reported_as_advisory(self):
        patch = map_payload({"confidence": 0.9, "items": [{"description": "Bolt", "price": -100}]})
        assert patch.unmapped_data["advisories"] == ["Item 1: negative price ignored"]

    def test_build_line_items_default_procedure(self):
        line = build_line_items([ExtractedItem(description="Parts")])[0]
        assert line.procedure_code == "40"
        assert line.origin_country_code is None


# ── Proposal helpers and validation ──


class TestProposalHelpers:
    """Tests for hints, filtering and grouping of proposals."""

    def test_field_hints_only_for_applied(self, structured_payload):
        patch = map_payload(structured_payload, Declaration(currency="EUR"))
        hints = create_field_hints(patch.fields)
        assert hints["exporter_country"] == "Графа 2 (уверенность: 92%)"
        assert "currency" not in hints

    def test_filter_by_confidence(self, legacy_payload):
        patch = map_payload(legacy_payload)
        kept = filter_proposals_by_confidence(patch.fields, 0.8)
        assert all(p.confidence >= 0.8 for p in kept)
        assert "trading_country" not in {p.field_name for p in kept}

    def test_group_by_source(self, legacy_payload):
        groups = group_proposals_by_source(map_payload(legacy_payload).fields)
        assert set(groups) == {"Инвойс", "CMR", "Документ"}

    def test_group_by_level(self, legacy_payload):
        groups = group_proposals_by_level(map_payload(legacy_payload).fields)
        assert "trading_country" in {p.field_name for p in groups["low"]}
        assert "exporter_name" in {p.field_name for p in groups["medium"]}

    def test_confidence_level(self):
        assert confidence_level(0.95) == "high"
        assert confidence_level(0.7) == "medium"
        assert confidence_level(0.69) == "low"

    def test_has_applied_data(self, legacy_payload):
        assert has_applied_data(map_payload(legacy_payload))
        assert not has_applied_data(merge_payloads([legacy_payload], min_confidence=0.9))


class TestValidatePayload:
    """Tests for advisory payload validation."""

    def test_clean_structured_payload(self, structured_payload):
        result = validate_payload(ingest_payload(structured_payload))
        assert result.is_valid
        assert result.warnings == []

    def test_short_hs_code_is_warning(self, legacy_payload):
        result = validate_payload(ingest_payload(legacy_payload))
        assert result.is_valid
        assert [w.field for w in result.warnings] == ["items[0].hs_code"]

    def test_bad_tin_and_currency_are_errors(self, legacy_payload):
        legacy_payload["consignee"]["tin"] = "12345"
        legacy_payload["items"][0]["currency"] = "zz"
        result = validate_payload(ingest_payload(legacy_payload))
        assert not result.is_valid
        assert {e.field for e in result.errors} == {"consignee.tin", "items[0].currency"}

    def test_low_confidence_warning(self, legacy_payload):
        legacy_payload["confidence"] = 0.5
        result = validate_payload(ingest_payload(legacy_payload))
        assert "confidence" in {w.field for w in result.warnings}

    def test_bad_date_format_warning(self, structured_payload):
        structured_payload["documentDate"] = "March 12"
        result = validate_payload(ingest_payload(structured_payload))
        assert "document_date" in {w.field for w in result.warnings}


# ── Party copying ──


class TestCopyParty:
    """Tests for copying participant blocks between graphs."""

    def test_exporter_to_declarant_keeps_filled(self):
        declaration = Declaration(
            exporter_name="ACME", exporter_address="Tashkent", exporter_tin="301234567",
            declarant_name="Kept",
        )
        result = copy_exporter_to_declarant(declaration)
        assert result.declarant_name == "Kept"
        assert result.declarant_address == "Tashkent"
        assert result.declarant_tin == "301234567"

    def test_overwrite(self):
        declaration = Declaration(consignee_name="Avto Import", financial_responsible_name="Old")
        result = copy_consignee_to_financial(declaration, overwrite_existing=True)
        assert result.financial_responsible_name == "Avto Import"
