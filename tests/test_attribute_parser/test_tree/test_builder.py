"""Tests for the tag tree builder and tree data structures."""

import pytest

from attribute_parser.shared import (
    DiagnosticSeverity,
    MarkupSyntaxError,
    MismatchedCloseError,
    TreeConfig,
    UnclosedTagError,
)
from attribute_parser.tokenization import LineTokenizer
from attribute_parser.tree import ParseResult, TagNode, TagTree, TagTreeBuilder


def build(lines, config=None):
    """Tokenize and build a tree from markup lines."""
    return TagTreeBuilder(config).build(LineTokenizer().tokenize(lines))


class TestTagNode:
    """Test TagNode behavior."""

    def test_node_defaults(self):
        """Test a new node has no attributes and no children."""
        node = TagNode("a")

        assert node.name == "a"
        assert node.attributes == {}
        assert node.children == []

    def test_name_is_immutable(self):
        """Test the tag name cannot be reassigned."""
        node = TagNode("a")

        with pytest.raises(AttributeError):
            node.name = "b"

    def test_empty_name_rejected(self):
        """Test nodes require a non-empty name."""
        with pytest.raises(ValueError, match="Tag name cannot be empty"):
            TagNode("")

    def test_find_child_returns_first_match(self):
        """Test find_child picks the first child in document order."""
        first = TagNode("b", {"n": "1"})
        second = TagNode("b", {"n": "2"})
        parent = TagNode("a", children=[first, TagNode("c"), second])

        assert parent.find_child("b") is first
        assert parent.find_children("b") == [first, second]
        assert parent.find_child("missing") is None

    def test_attribute_access(self):
        """Test attribute helpers."""
        node = TagNode("a", {"x": "1"})

        assert node.get_attribute("x") == "1"
        assert node.get_attribute("y") is None
        assert node.get_attribute("y", "default") == "default"
        assert node.has_attribute("x")
        assert not node.has_attribute("y")

    def test_append_child_type_check(self):
        """Test only TagNode instances can be appended."""
        with pytest.raises(TypeError):
            TagNode("a")._append_child("b")

    def test_to_dict(self):
        """Test dictionary conversion."""
        node = TagNode("a", {"x": "1"}, [TagNode("b")])

        assert node.to_dict() == {
            "name": "a",
            "attributes": {"x": "1"},
            "children": [{"name": "b", "attributes": {}}],
        }


class TestTreeBuilding:
    """Test building trees from well-formed markup."""

    def test_single_tag(self):
        """Test a root-only document."""
        result = build(['<tag1 value="value">', "</tag1>"])

        assert isinstance(result, ParseResult)
        assert result.root.name == "tag1"
        assert result.root.attributes == {"value": "value"}
        assert result.tree.root_closed is True

    def test_nested_tags(self):
        """Test children are attached under the open tag."""
        result = build(["<a>", '<b value="hello">', "</b>", "</a>"])

        child = result.root.find_child("b")
        assert child is not None
        assert child.get_attribute("value") == "hello"
        assert result.root.attributes == {}

    def test_children_keep_document_order(self):
        """Test sibling order matches input order."""
        result = build(["<a>", "<c>", "</c>", "<b>", "</b>", "<c>", "</c>", "</a>"])

        assert [child.name for child in result.root.children] == ["c", "b", "c"]

    def test_node_count_equals_opening_tags(self):
        """Test total node count equals the number of opening tags."""
        lines = [
            "<a>", "<b>", "<c>", "</c>", "</b>", "<d>", "<e>", "</e>", "</d>", "</a>",
        ]
        result = build(lines)

        assert result.node_count == 5
        assert result.performance.nodes_created == 5
        assert result.performance.lines_processed == len(lines)

    def test_duplicate_attribute_last_write_wins(self):
        """Test repeated keys keep the last value and are diagnosed."""
        result = build(['<a k="1" k="2">', "</a>"])

        assert result.root.attributes == {"k": "2"}
        infos = result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
        assert len(infos) == 1
        assert infos[0].line_number == 1
        assert infos[0].details == {"previous": "1", "value": "2"}

    def test_closed_root_has_no_warning(self):
        """Test a properly closed document carries no warnings."""
        result = build(["<a>", "<b>", "</b>", "</a>"])

        assert result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING) == []

    def test_top_level_sibling_attaches_to_root(self):
        """Test a tag opened after the root closes becomes a root child."""
        result = build(["<a>", "</a>", '<b x="1">', "</b>"])

        assert result.root.name == "a"
        assert [child.name for child in result.root.children] == ["b"]
        debug = result.get_diagnostics_by_severity(DiagnosticSeverity.DEBUG)
        assert any("closed root" in diag.message for diag in debug)

    def test_root_closed_twice(self):
        """Test closing the root again is tolerated and diagnosed."""
        result = build(["<a>", "</a>", "</a>"])

        assert result.root.name == "a"
        debug = result.get_diagnostics_by_severity(DiagnosticSeverity.DEBUG)
        assert any("more than once" in diag.message for diag in debug)

    def test_unclosed_root_is_accepted_by_default(self):
        """Test the cursor resting at an unclosed root is not an error."""
        result = build(["<a>", "<b>", "</b>"])

        assert result.root.name == "a"
        assert result.tree.root_closed is False
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert [diag.message for diag in warnings] == ["Root tag <a> was never closed"]

    def test_empty_document(self):
        """Test no lines produce an empty tree."""
        result = build([])

        assert result.root is None
        assert result.tree.is_empty
        assert result.node_count == 0
        assert result.diagnostics[0].message.startswith("No markup lines")

    def test_builder_is_reusable(self):
        """Test a builder instance can build several documents."""
        builder = TagTreeBuilder()
        tokenizer = LineTokenizer()

        first = builder.build(tokenizer.tokenize(["<a>", "</a>"]))
        second = builder.build(tokenizer.tokenize(["<b>", "</b>"]))

        assert first.root.name == "a"
        assert second.root.name == "b"
        assert first.root.children == []

    def test_summary(self):
        """Test the summary dictionary."""
        result = build(['<a x="1">', '<b y="2">', "</b>", "</a>"])
        summary = result.summary()

        assert summary["root"] == "a"
        assert summary["node_count"] == 2
        assert summary["attribute_count"] == 2
        assert summary["max_depth"] == 1
        assert summary["performance"]["nodes_created"] == 2


class TestStructuralErrors:
    """Test fatal structure violations."""

    def test_mismatched_close(self):
        """Test closing a tag that is not the open one."""
        with pytest.raises(MismatchedCloseError) as exc_info:
            build(["<a>", "<b>", "</a>"])

        error = exc_info.value
        assert error.line_number == 3
        assert error.found == "a"
        assert error.expected == "b"
        assert error.format_diagnostic() == (
            "Line 3\n\tClosing a tag that is not open: a"
        )

    def test_close_before_any_open(self):
        """Test a closing tag with nothing open."""
        with pytest.raises(MismatchedCloseError) as exc_info:
            build(["</a>"])

        assert exc_info.value.line_number == 1
        assert exc_info.value.expected is None

    def test_missing_closing_tag(self):
        """Test input ending with a non-root tag still open."""
        with pytest.raises(UnclosedTagError) as exc_info:
            build(["<a>", "<b>", "<c>", "</c>"])

        error = exc_info.value
        assert error.line_number is None
        assert error.open_tags == ["a", "b"]
        assert error.format_diagnostic() == "Missing closing tag"

    def test_require_root_closed(self):
        """Test strict root closing."""
        config = TreeConfig(require_root_closed=True)

        with pytest.raises(UnclosedTagError) as exc_info:
            build(["<a>", "<b>", "</b>"], config)
        assert exc_info.value.open_tags == ["a"]

        assert build(["<a>", "</a>"], config).root.name == "a"

    def test_syntax_error_propagates_from_stream(self):
        """Test tokenizer errors surface through build()."""
        with pytest.raises(MarkupSyntaxError) as exc_info:
            build(["<a>", "<tag value=novalue>", "</a>"])

        assert exc_info.value.line_number == 2

    def test_cursor_does_not_leak_after_error(self):
        """Test the open stack is cleared after a failed build."""
        builder = TagTreeBuilder()

        with pytest.raises(MismatchedCloseError):
            builder.build(LineTokenizer().tokenize(["<a>", "<b>", "</a>"]))

        assert builder._open_stack == []


class TestTagTree:
    """Test TagTree traversal and rendering."""

    @pytest.fixture
    def tree(self):
        lines = ['<a x="1">', "<b>", '<c y="2" z="3">', "</c>", "</b>", "<d>", "</d>", "</a>"]
        return build(lines).tree

    def test_iter_nodes_document_order(self, tree):
        """Test depth-first document order."""
        assert [node.name for node in tree.iter_nodes()] == ["a", "b", "c", "d"]

    def test_iter_with_depth(self, tree):
        """Test depths reported during traversal."""
        assert [(n.name, d) for n, d in tree.iter_with_depth()] == [
            ("a", 0), ("b", 1), ("c", 2), ("d", 1)
        ]

    def test_statistics(self, tree):
        """Test node, attribute and depth statistics."""
        assert tree.node_count == 4
        assert tree.attribute_count == 3
        assert tree.max_depth == 2

    def test_render(self, tree):
        """Test rendering back to indented markup."""
        assert tree.render() == "\n".join([
            '<a x="1">',
            "  <b>",
            '    <c y="2" z="3">',
            "    </c>",
            "  </b>",
            "  <d>",
            "  </d>",
            "</a>",
        ])

    def test_render_reparses_to_same_tree(self, tree):
        """Test rendered markup parses back into an equal structure."""
        rebuilt = build(tree.render().splitlines()).tree

        assert rebuilt.to_dict() == tree.to_dict()

    def test_empty_tree(self):
        """Test an empty tree renders to nothing."""
        tree = TagTree()

        assert tree.render() == ""
        assert list(tree.iter_nodes()) == []
        assert tree.max_depth == 0
        assert tree.to_dict()["root"] is None
