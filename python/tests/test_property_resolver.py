"""Tests for property reference detection and resolution."""

import pytest
from pombump.property_resolver import PropertyResolver, extract_property_reference


class FakeLookup:
    """In-memory stand-in for the project tree search."""

    def __init__(self, values):
        self.values = values
        self.calls = []

    def resolve(self, name):
        self.calls.append(name)
        if name in self.values:
            return self.values[name], True
        return None, False


class TestExtractPropertyReference:
    """Tests for extract_property_reference."""

    def test_simple_reference(self):
        assert extract_property_reference("${jackson.version}") == (True, "jackson.version")

    def test_whitespace_is_preserved(self):
        """Whitespace inside the delimiters is part of the name."""
        assert extract_property_reference("${ prop.with.spaces }") == (True, " prop.with.spaces ")

    def test_nested_reference_unwraps_once(self):
        assert extract_property_reference("${${nested}}") == (True, "${nested}")

    @pytest.mark.parametrize("version", [
        "1.0-${suffix}",
        "${prefix}-1.0",
        " ${padded}",
        "${padded} ",
        "${incomplete",
        "incomplete}",
        "$jackson.version",
        "${}",
        "",
        "2.15.2",
        "4.1.118.Final",
    ])
    def test_literals(self, version):
        """Anything but a whole-string ${name} is a literal version."""
        assert extract_property_reference(version) == (False, "")

    def test_none_is_literal(self):
        assert extract_property_reference(None) == (False, "")


class TestPropertyResolver:
    """Tests for PropertyResolver."""

    def test_local_property(self):
        resolver = PropertyResolver({"netty.version": "4.1.94.Final"})
        assert resolver.resolve("netty.version") == ("4.1.94.Final", True)

    def test_local_property_wins_over_lookup(self):
        lookup = FakeLookup({"netty.version": "4.0.0"})
        resolver = PropertyResolver({"netty.version": "4.1.94.Final"}, lookup)

        assert resolver.resolve("netty.version") == ("4.1.94.Final", True)
        assert lookup.calls == []

    def test_falls_back_to_lookup(self):
        lookup = FakeLookup({"slf4j.version": "2.0.9"})
        resolver = PropertyResolver({}, lookup)

        assert resolver.resolve("slf4j.version") == ("2.0.9", True)
        assert lookup.calls == ["slf4j.version"]

    def test_undefined_property(self):
        resolver = PropertyResolver(None, FakeLookup({}))
        assert resolver.resolve("missing") == (None, False)

    def test_undefined_without_lookup(self):
        assert PropertyResolver().resolve("missing") == (None, False)

    def test_self_reference_is_not_expanded(self):
        """Values are returned verbatim; circular definitions never loop."""
        resolver = PropertyResolver({"prop1": "${prop2}", "prop2": "${prop1}"})
        assert resolver.resolve("prop1") == ("${prop2}", True)
