"""Document parser with line tracking for rich error reporting.

Provides a PyYAML loader that records the source position of every
mapping key, so validation errors can point at the exact rule in the
model file. Dotted names contain dots and spaces, so positions are
keyed by tuple paths, e.g. ``("transport . voiture", "formule")``.
JSON documents are parsed with the json module and carry no positions.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

LinePath = tuple[str, ...]
LineMap = dict[LinePath, tuple[int, int]]


class DocumentParseError(Exception):
    """Raised when a YAML or JSON document cannot be parsed.

    Attributes:
        line: 1-indexed line number where the error occurred.
        column: 1-indexed column number where the error occurred.
        message: Human-readable description of the syntax error.
        filename: Name of the file being parsed, or '<string>'.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        filename: str = "<string>",
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(message)


class LineTrackingLoader(yaml.SafeLoader):
    """YAML SafeLoader subclass that captures positions of keys and list items.

    Fills line_map with (line, column) tuples, 1-indexed, and records
    keys that appear twice in the same mapping in duplicates.
    """

    def __init__(self, stream: str) -> None:
        super().__init__(stream)
        self.line_map: LineMap = {}
        self.duplicates: list[tuple[LinePath, int]] = []
        self._prefix_stack: list[str] = []

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        """Override to capture line numbers for every key in the mapping."""
        self.flatten_mapping(node)
        result: dict[Any, Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            line = key_node.start_mark.line + 1
            col = key_node.start_mark.column + 1

            if isinstance(key, str):
                path = (*self._prefix_stack, key)
                if key in result:
                    self.duplicates.append((path, line))
                self.line_map[path] = (line, col)

            # Nested mappings and sequences need the key on the path
            if isinstance(key, str) and isinstance(
                value_node, (yaml.MappingNode, yaml.SequenceNode)
            ):
                self._prefix_stack.append(key)
                value = self.construct_object(value_node, deep=deep)
                self._prefix_stack.pop()
            else:
                value = self.construct_object(value_node, deep=deep)

            result[key] = value

        return result

    def construct_sequence(self, node: yaml.SequenceNode, deep: bool = False) -> list[Any]:
        """Override to track list item indices in the key path."""
        result = []
        for idx, child_node in enumerate(node.value):
            self._prefix_stack.append(str(idx))
            self.line_map[tuple(self._prefix_stack)] = (
                child_node.start_mark.line + 1,
                child_node.start_mark.column + 1,
            )
            if isinstance(child_node, yaml.MappingNode):
                item = self.construct_mapping(child_node, deep=deep)
            else:
                item = self.construct_object(child_node, deep=deep)
            self._prefix_stack.pop()
            result.append(item)
        return result

    def construct_yaml_map(self, node: yaml.MappingNode) -> Any:
        data = self.construct_mapping(node, deep=True)
        yield data

    def construct_yaml_seq(self, node: yaml.SequenceNode) -> Any:
        data = self.construct_sequence(node, deep=True)
        yield data


LineTrackingLoader.add_constructor(
    "tag:yaml.org,2002:map",
    LineTrackingLoader.construct_yaml_map,
)

LineTrackingLoader.add_constructor(
    "tag:yaml.org,2002:seq",
    LineTrackingLoader.construct_yaml_seq,
)


class ParsedDocument:
    """A parsed document with its key positions and duplicate keys."""

    def __init__(
        self,
        data: Any,
        line_map: LineMap | None = None,
        duplicates: list[tuple[LinePath, int]] | None = None,
    ) -> None:
        self.data = data
        self.line_map = line_map or {}
        self.duplicates = duplicates or []


def parse_yaml_with_lines(source: str, filename: str = "<string>") -> ParsedDocument:
    """Parse a YAML string, keeping key positions.

    Raises:
        DocumentParseError: If the YAML contains syntax errors.
    """
    try:
        loader = LineTrackingLoader(source)
        try:
            data = loader.get_single_data()
        finally:
            loader.dispose()
    except yaml.YAMLError as e:
        line = None
        column = None
        if getattr(e, "problem_mark", None) is not None:
            line = e.problem_mark.line + 1
            column = e.problem_mark.column + 1
        raise DocumentParseError(
            message=str(e),
            line=line,
            column=column,
            filename=filename,
        ) from e

    return ParsedDocument(data, loader.line_map, loader.duplicates)


def parse_json(source: str, filename: str = "<string>") -> ParsedDocument:
    """Parse a JSON string.

    Raises:
        DocumentParseError: If the JSON is malformed.
    """
    try:
        data = json.loads(source)
    except json.JSONDecodeError as e:
        raise DocumentParseError(
            message=e.msg,
            line=e.lineno,
            column=e.colno,
            filename=filename,
        ) from e
    return ParsedDocument(data)


def parse_document(source: str, filename: str = "<string>") -> ParsedDocument:
    """Parse source as JSON when filename ends in .json, else as YAML."""
    if filename.lower().endswith(".json"):
        return parse_json(source, filename=filename)
    return parse_yaml_with_lines(source, filename=filename)


def parse_document_file(filepath: Path) -> ParsedDocument:
    """Read and parse a YAML or JSON file.

    Raises:
        DocumentParseError: If the file contains syntax errors.
        FileNotFoundError: If the file does not exist.
    """
    content = filepath.read_text(encoding="utf-8")
    return parse_document(content, filename=str(filepath))
