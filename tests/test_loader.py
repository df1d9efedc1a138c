"""Tests for YAML loading and structural validation."""

import pytest

from bmml.loader import _error_path, coerce_document, load_document, parse_document
from bmml.models import Document, EntityKind, StructuralError


class TestParseDocument:
    def test_file_fixture(self, bmml_file):
        doc = load_document(bmml_file)
        assert doc.meta.name == "Marketplace"
        assert [cs.id for cs in doc.customer_segments] == ["cs-buyers", "cs-sellers"]
        assert doc.fits[0].for_.customer_segments == ["cs-buyers", "cs-ghost"]

    def test_unquoted_date_becomes_string(self, bmml_file):
        assert load_document(bmml_file).meta.created == "2026-01-05"

    def test_null_collection_is_empty(self, bmml_file):
        assert load_document(bmml_file).costs == []

    def test_float_version(self):
        doc = parse_document("version: 2.0\nmeta:\n  name: X\n")
        assert doc.version == "2.0"

    def test_for_and_from_aliases(self):
        doc = parse_document(
            "version: '2.0'\n"
            "meta: {name: X}\n"
            "revenue_streams:\n"
            "  - id: rs-1\n"
            "    from: {customer_segments: [cs-a]}\n"
            "    for: {value_propositions: [vp-a]}\n"
        )
        stream = doc.revenue_streams[0]
        assert stream.from_.customer_segments == ["cs-a"]
        assert stream.for_.value_propositions == ["vp-a"]
        assert stream.kind is EntityKind.REVENUE_STREAM

    def test_null_relation_fields(self):
        doc = parse_document(
            "version: '2.0'\n"
            "meta: {name: X}\n"
            "channels:\n"
            "  - id: ch-1\n"
            "    name:\n"
            "    for:\n"
            "      customer_segments:\n"
        )
        channel = doc.channels[0]
        assert channel.name is None
        assert channel.display_name == "ch-1"
        assert channel.for_.customer_segments == []

    def test_blank_name_falls_back_to_id(self):
        doc = parse_document(
            "version: '2.0'\n"
            "meta: {name: X}\n"
            "channels:\n"
            "  - id: ch-1\n"
            "    name: '   '\n"
        )
        assert doc.channels[0].display_name == "ch-1"

    def test_profile_items_carried(self):
        doc = parse_document(
            "version: '2.0'\n"
            "meta: {name: X}\n"
            "customer_segments:\n"
            "  - id: cs-a\n"
            "    name: A\n"
            "    jobs: [{id: job-1, description: Get paid}]\n"
        )
        assert doc.customer_segments[0].jobs[0].description == "Get paid"
        assert [e.id for e in doc.all_entities()] == ["cs-a"]


class TestStructuralErrors:
    def test_invalid_yaml(self):
        with pytest.raises(StructuralError, match="Invalid YAML"):
            parse_document("meta: [unclosed")

    def test_non_mapping_root(self):
        with pytest.raises(StructuralError) as exc:
            parse_document("- just\n- a list\n")
        assert exc.value.errors == [("/", "document root must be a mapping")]

    def test_empty_text(self):
        with pytest.raises(StructuralError):
            parse_document("")

    def test_wrong_version(self):
        with pytest.raises(StructuralError) as exc:
            parse_document("version: '1.0'\nmeta: {name: X}\n")
        assert exc.value.errors[0][0] == "/version"

    def test_missing_meta(self):
        with pytest.raises(StructuralError) as exc:
            parse_document("version: '2.0'\n")
        assert ("/meta", "Field required") in exc.value.errors

    def test_collection_not_a_list(self):
        with pytest.raises(StructuralError) as exc:
            coerce_document({"version": "2.0", "meta": {"name": "X"}, "channels": "ch-1"})
        assert exc.value.errors[0][0] == "/channels"

    def test_error_path_nested(self):
        with pytest.raises(StructuralError) as exc:
            coerce_document({
                "version": "2.0",
                "meta": {"name": "X"},
                "fits": [{"id": "fit-1", "for": {"customer_segments": "cs-a"}}],
            })
        assert exc.value.errors[0][0] == "/fits/0/for/customer_segments"

    def test_message_summarises(self):
        with pytest.raises(StructuralError, match="Malformed BMML document: /meta"):
            coerce_document({"version": "2.0"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_document(tmp_path / "nope.bmml")

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "latin1.bmml"
        path.write_bytes(b"version: '2.0'\nmeta:\n  name: \"\xff\xfe\"\n")
        with pytest.raises(StructuralError, match="Not UTF-8") as exc:
            load_document(path)
        assert exc.value.errors[0][0] == "/"


class TestCoerce:
    def test_document_passes_through(self, marketplace_doc):
        assert coerce_document(marketplace_doc) is marketplace_doc

    def test_mapping_validated(self):
        doc = coerce_document({"version": "2.0", "meta": {"name": "X"}})
        assert isinstance(doc, Document)

    def test_error_path_root(self):
        assert _error_path(()) == "/"
        assert _error_path(("fits", 0, "id")) == "/fits/0/id"


class TestEntityKind:
    def test_from_id(self):
        assert EntityKind.from_id("cs-buyers") is EntityKind.CUSTOMER_SEGMENT
        assert EntityKind.from_id("cost-hosting") is EntityKind.COST
        assert EntityKind.from_id("zz-nope") is None

    def test_collection(self):
        assert EntityKind.KEY_ACTIVITY.collection == "key_activities"
        assert EntityKind.FIT.prefix == "fit"
