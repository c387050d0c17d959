"""Tests for the document parser with line tracking."""

import pytest

from funfacts.loader.yaml_parser import (
    DocumentParseError,
    parse_document,
    parse_document_file,
    parse_json,
    parse_yaml_with_lines,
)


class TestParseYamlWithLines:
    """Tests for parse_yaml_with_lines function."""

    def test_returns_data_and_line_map_from_valid_yaml(self):
        source = "transport . km:\n  par défaut: 1000\n"
        document = parse_yaml_with_lines(source)
        assert document.data == {"transport . km": {"par défaut": 1000}}
        assert document.line_map[("transport . km",)] == (1, 1)
        assert document.line_map[("transport . km", "par défaut")] == (2, 3)

    def test_dotted_names_are_single_path_segments(self):
        source = "a . b:\n  formule: 1\nc:\n  formule: 2\n"
        document = parse_yaml_with_lines(source)
        assert ("a . b", "formule") in document.line_map
        assert document.line_map[("c",)][0] == 3

    def test_tracks_sequence_items(self):
        source = (
            "total:\n"
            "  formule:\n"
            "    variations:\n"
            "      - si: x\n"
            "        alors: 1\n"
            "      - sinon: 2\n"
        )
        document = parse_yaml_with_lines(source)
        assert document.line_map[("total", "formule", "variations", "0", "si")] == (4, 9)
        assert document.line_map[("total", "formule", "variations", "1", "sinon")][0] == 6

    def test_records_duplicate_keys(self):
        source = "a:\n  formule: 1\nb: 2\na:\n  formule: 3\n"
        document = parse_yaml_with_lines(source)
        assert document.duplicates == [(("a",), 4)]
        assert document.data["a"] == {"formule": 3}

    def test_nested_duplicates_keep_their_path(self):
        source = "a:\n  formule: 1\n  formule: 2\n"
        document = parse_yaml_with_lines(source)
        assert document.duplicates == [(("a", "formule"), 3)]

    def test_empty_document(self):
        document = parse_yaml_with_lines("# only a comment\n")
        assert document.data is None
        assert document.line_map == {}

    def test_yaml_syntax_error_raises_document_parse_error(self):
        source = "a:\n  formule: [1, 2\n"
        with pytest.raises(DocumentParseError) as exc_info:
            parse_yaml_with_lines(source, filename="rules.yaml")
        err = exc_info.value
        assert err.line is not None
        assert err.column is not None
        assert err.filename == "rules.yaml"


class TestParseJson:
    """Tests for JSON inputs."""

    def test_valid_json(self):
        document = parse_json('{"a": {"formule": 1}}')
        assert document.data == {"a": {"formule": 1}}
        assert document.line_map == {}
        assert document.duplicates == []

    def test_invalid_json_has_position(self):
        with pytest.raises(DocumentParseError) as exc_info:
            parse_json('{\n  "a": ,\n}')
        assert exc_info.value.line == 2

    def test_parse_document_dispatches_on_suffix(self):
        assert parse_document('{"a": 1}', filename="rules.JSON").data == {"a": 1}
        assert parse_document("a: 1\n", filename="rules.yaml").line_map == {("a",): (1, 1)}


class TestParseDocumentFile:
    """Tests for parse_document_file."""

    def test_reads_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("a: 1\n", encoding="utf-8")
        assert parse_document_file(path).data == {"a": 1}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_document_file(tmp_path / "missing.yaml")
