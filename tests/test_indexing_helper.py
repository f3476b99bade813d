"""
Tests for the indexing helpers exposed to expressions.
"""
import base64

import pytest

from contentsearch.eel.indexing_helper import (
    IndexingHelper,
    build_all_path_prefixes,
    convert_nodes_to_identifiers,
    convert_nodes_to_property,
    extract_html_tags,
    extract_into,
    extract_node_type_names_and_supertypes,
    index_asset,
    strip_tags,
)
from contentsearch.repository import BytesAsset, FileAsset, NodeType
from contentsearch.utils import NodeTypeCycleError, UnsupportedAssetType

from conftest import make_node, make_node_type


class TestBuildAllPathPrefixes:
    """Tests for build_all_path_prefixes."""

    def test_empty_path(self):
        """Test that an empty path has no prefixes."""
        assert build_all_path_prefixes("") == []

    def test_root_path(self):
        """Test that the root path is its own only prefix."""
        assert build_all_path_prefixes("/") == ["/"]

    def test_absolute_path(self):
        """Test prefixes of an absolute path, shallowest first."""
        assert build_all_path_prefixes("/a/b") == ["/", "/a", "/a/b"]

    def test_deep_absolute_path(self):
        """Test that the first prefix is the root and the last the path itself."""
        prefixes = build_all_path_prefixes("/sites/acme/news/2024")

        assert prefixes[0] == "/"
        assert prefixes[-1] == "/sites/acme/news/2024"
        assert len(prefixes) == 5

    def test_relative_path(self):
        """Test that relative paths have no root element and no leading slash."""
        assert build_all_path_prefixes("a/b") == ["a", "a/b"]

    def test_multiple_leading_slashes(self):
        """Test that repeated leading slashes are collapsed."""
        assert build_all_path_prefixes("//a/b") == ["/", "/a", "/a/b"]

    def test_helper_method(self):
        """Test the IndexingHelper method delegates."""
        assert IndexingHelper().build_all_path_prefixes("/x") == ["/", "/x"]


class TestExtractNodeTypeNamesAndSupertypes:
    """Tests for the supertype hierarchy flattening."""

    def test_single_type(self):
        """Test a type without supertypes."""
        assert extract_node_type_names_and_supertypes(NodeType("A")) == ["A"]

    def test_diamond(self):
        """Test that a shared supertype is listed once, after its first path."""
        d = NodeType("D")
        b = NodeType("B", [d])
        c = NodeType("C", [d])
        a = NodeType("A", [b, c])

        assert extract_node_type_names_and_supertypes(a) == ["A", "B", "D", "C"]

    def test_preorder(self):
        """Test that supertypes of a supertype come before its next sibling."""
        e = NodeType("E")
        d = NodeType("D", [e])
        b = NodeType("B", [d])
        c = NodeType("C")
        a = NodeType("A", [b, c])

        assert extract_node_type_names_and_supertypes(a) == ["A", "B", "D", "E", "C"]

    def test_repeated_diamonds(self):
        """Test that names stay unique under repeated multiple inheritance."""
        base = NodeType("Base")
        left = NodeType("Left", [base])
        right = NodeType("Right", [base])
        middle = NodeType("Middle", [left, right])
        top = NodeType("Top", [middle, left, right, base])

        names = extract_node_type_names_and_supertypes(top)

        assert names == ["Top", "Middle", "Left", "Base", "Right"]
        assert len(names) == len(set(names))

    def test_cycle_is_rejected(self):
        """Test that a supertype cycle raises instead of looping forever."""
        a = NodeType("A")
        b = NodeType("B", [a])
        a.declared_super_types.append(b)

        with pytest.raises(NodeTypeCycleError) as exc_info:
            extract_node_type_names_and_supertypes(a)

        assert exc_info.value.cycle == ["A", "B", "A"]

    def test_registry_hierarchy(self, registry):
        """Test flattening of node types loaded through the registry."""
        names = extract_node_type_names_and_supertypes(registry.get("Acme:Page"))

        assert names == ["Acme:Page", "Acme:Document", "Acme:Node", "Acme:Content"]


class TestExtractHtmlTags:
    """Tests for splitting HTML into fulltext buckets."""

    def test_heading_and_text(self):
        """Test that headings and body text end up in separate buckets."""
        parts = extract_html_tags("<h1>Title</h1>Body <b>text</b>")

        assert parts == {"text": " Body text ", "h1": " Title "}

    def test_no_merged_words(self):
        """Test that stripping tags never glues adjacent words together."""
        parts = extract_html_tags("<p>one</p><p>two</p><span>three</span>")

        assert parts["text"].split() == ["one", "two", "three"]

    def test_empty_input(self):
        """Test that empty input gives an empty text bucket."""
        assert extract_html_tags("") == {"text": ""}

    def test_none_input(self):
        """Test that None is treated like an empty string."""
        assert extract_html_tags(None) == {"text": ""}

    def test_plain_text(self):
        """Test that text without markup only collapses whitespace."""
        assert extract_html_tags("Hello \n\t World") == {"text": "Hello World"}

    def test_multiple_headings_same_level(self):
        """Test that headings of one level are appended, each with a space."""
        parts = extract_html_tags("<h2>One</h2>between<h2>Two</h2>")

        assert parts["h2"] == " One Two "
        assert parts["text"] == " between "

    def test_heading_levels_not_cross_matched(self):
        """Test that a heading only closes with the same level."""
        parts = extract_html_tags("<h2>Sub</h3>still h2</h2>")

        assert parts["h2"] == " Sub still h2 "
        assert "h3" not in parts

    def test_case_insensitive_tags(self):
        """Test that upper case heading tags are recognised."""
        parts = extract_html_tags("<H3 class='x'>Loud</H3>quiet")

        assert parts["h3"] == " Loud "
        assert parts["text"] == " quiet"

    def test_heading_attributes_are_stripped(self):
        """Test that attributes of heading tags do not leak into buckets."""
        parts = extract_html_tags('<h1 id="top">Title</h1>')

        assert parts["h1"] == " Title "

    def test_unicode_whitespace(self):
        """Test that unicode whitespace is collapsed as well."""
        parts = extract_html_tags("Grüße  aus Köln")

        assert parts["text"] == "Grüße aus Köln"

    def test_heading_across_lines_stays_text(self):
        """Test that a heading element spanning lines is not matched."""
        parts = extract_html_tags("<h1>First\nSecond</h1>")

        assert parts == {"text": " First Second "}

    def test_headings_in_order(self):
        """Test that text before, between and after headings is kept in order."""
        parts = extract_html_tags("intro<h1>A</h1>middle<h2>B</h2>outro")

        assert parts["text"].split() == ["intro", "middle", "outro"]
        assert parts["h1"].strip() == "A"
        assert parts["h2"].strip() == "B"

    def test_angle_bracket_in_attribute(self):
        """Test that a ">" inside a quoted attribute does not end the tag."""
        assert extract_html_tags("<a title='1>2'>link</a>") == {"text": " link "}

    def test_angle_bracket_in_heading_attribute(self):
        """Test that a ">" inside a quoted heading attribute does not leak into the bucket."""
        parts = extract_html_tags('<h1 title="a>b">Title</h1>rest')

        assert parts == {"text": " rest", "h1": " Title "}

    def test_unclosed_tag(self):
        """Test that an unclosed tag swallows the rest of the input."""
        assert extract_html_tags("x <y more") == {"text": "x "}


class TestStripTags:
    """Tests for the tag stripper."""

    def test_strip_all(self):
        """Test that all tags and comments are removed."""
        assert strip_tags("<p>a<!-- c --><br/>b</p>") == "ab"

    def test_keep_allowed(self):
        """Test that allowed tags are kept."""
        assert strip_tags("<div><h1>x</h1></div>", ["h1"]) == "<h1>x</h1>"

    def test_lone_angle_bracket(self):
        """Test that a "<" followed by a space is not a tag."""
        assert strip_tags("1 < 2") == "1 < 2"

    def test_quoted_angle_bracket(self):
        """Test that quoted attribute values may contain ">"."""
        assert strip_tags("""<a title="x>y" data-q='>'>link</a>""") == "link"

    def test_quoted_angle_bracket_allowed_tag(self):
        """Test that an allowed tag is kept whole when an attribute contains ">"."""
        assert strip_tags('<h2 title="a>b">x</h2><b>y</b>', ["h2"]) == '<h2 title="a>b">x</h2>y'

    def test_unclosed_tag(self):
        """Test that an unclosed tag runs to the end of the string."""
        assert strip_tags("x <y z") == "x "

    def test_unclosed_quote(self):
        """Test that an unclosed quote inside a tag runs to the end of the string."""
        assert strip_tags("a<b title='x>y") == "a"


class TestExtractInto:
    """Tests for extract_into."""

    def test_single_bucket(self):
        """Test that the value is put into the named bucket."""
        assert extract_into("h2", "Heading") == {"h2": "Heading"}


class TestIndexAsset:
    """Tests for the asset encoder."""

    def test_none(self):
        """Test that None stays None."""
        assert index_asset(None) is None

    def test_single_asset(self):
        """Test that an asset is base64 encoded."""
        asset = BytesAsset(b"hello world", filename="hello.txt")

        assert index_asset(asset) == base64.b64encode(b"hello world").decode("ascii")

    def test_list_keeps_order(self):
        """Test that lists are encoded element by element, in order."""
        first = BytesAsset(b"first")
        second = BytesAsset(b"second")

        result = index_asset([first, second])

        assert result == [
            base64.b64encode(b"first").decode("ascii"),
            base64.b64encode(b"second").decode("ascii"),
        ]

    def test_nested_list_with_none(self):
        """Test nested lists and None elements."""
        assert index_asset([[BytesAsset(b"x")], None]) == [["eA=="], None]

    def test_file_asset(self, tmp_path):
        """Test that file assets are read from disk."""
        path = tmp_path / "doc.bin"
        path.write_bytes(b"\x00\x01\x02")

        assert index_asset(FileAsset(path)) == "AAEC"

    def test_unsupported_type(self):
        """Test that other values are rejected with their type name."""
        with pytest.raises(UnsupportedAssetType) as exc_info:
            index_asset(42)

        assert exc_info.value.type_name == "int"
        assert "int" in str(exc_info.value)
        assert exc_info.value.code == 1437555909


class TestConvertNodes:
    """Tests for converting node lists."""

    def test_identifiers(self):
        """Test that node identifiers are returned in order."""
        node_type = make_node_type("A")
        nodes = [make_node(node_type, identifier="n1"), make_node(node_type, identifier="n2")]

        assert convert_nodes_to_identifiers(nodes) == ["n1", "n2"]

    def test_property_values(self):
        """Test that property values are returned, None where unset."""
        node_type = make_node_type("A")
        nodes = [make_node(node_type, {"title": "One"}), make_node(node_type)]

        assert convert_nodes_to_property(nodes, "title") == ["One", None]

    def test_generator_input(self):
        """Test that any iterable of nodes is accepted."""
        node_type = make_node_type("A")
        nodes = (make_node(node_type, identifier=f"n{i}") for i in range(2))

        assert convert_nodes_to_identifiers(nodes) == ["n0", "n1"]

    @pytest.mark.parametrize("value", [None, 5, "nodes", {"a": 1}])
    def test_not_a_node_list(self, value):
        """Test that anything but a list of nodes gives an empty list."""
        assert convert_nodes_to_identifiers(value) == []
        assert convert_nodes_to_property(value, "title") == []

    def test_allows_all_methods(self):
        """Test that every helper method is callable from expressions."""
        assert IndexingHelper().allows_call_of_method("index_asset") is True
