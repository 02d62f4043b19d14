"""
Tests for tree rendering and graph validation.
"""

import pytest

from procgraph.inspect_utils import (
    print_process_tree,
    render_process_node,
    render_process_tree,
    to_networkx,
    validate_process_graph,
)


@pytest.fixture
def pipeline(builder):
    cube = builder.load_collection("S2", None, None)
    cube = builder.reduce_dimension(cube, lambda data, builder: builder.min(data), "t")
    builder.set_result(builder.save_result(cube, "GTiff"))
    return builder


class TestRenderTree:
    """ASCII trees of process graphs."""

    def test_tree(self, pipeline):
        """Callbacks are drawn below their node."""
        assert render_process_tree(pipeline) == "\n".join(
            [
                "Process (graph)",
                "|-- Process.loadc1 :: load_collection",
                "|-- Process.reduc1 :: reduce_dimension",
                "|   +-- Process.reduc1.reducer (graph)",
                "|       +-- Process.reduc1.reducer.min1 :: min [result]",
                "+-- Process.saver1 :: save_result [result]",
            ]
        )

    def test_serialized_input(self, pipeline):
        """Serialized processes render the same way, named by their id."""
        pipeline.set_metadata(id="composite")
        text = render_process_tree(pipeline.to_dict())
        assert text.splitlines()[0] == "composite (graph)"
        assert render_process_tree(pipeline.to_dict()["process_graph"]).startswith("Process")

    def test_print(self, pipeline, capsys):
        """print_process_tree writes the rendered tree."""
        print_process_tree(pipeline)
        assert "Process.saver1 :: save_result [result]" in capsys.readouterr().out

    def test_invalid_source(self):
        """Only builders and mappings are accepted."""
        with pytest.raises(TypeError):
            render_process_tree(["add1"])


class TestRenderNode:
    """Details of a single node or graph."""

    def test_node(self, pipeline):
        """Arguments are listed, callbacks summarized."""
        lines = render_process_node(pipeline, "reduc1").splitlines()
        assert lines[:3] == ["Node Process.reduc1", "Process: reduce_dimension", "Result: no"]
        assert '  data: {"from_node": "loadc1"}' in lines
        assert "  reducer: <callback>" in lines
        assert '  dimension: "t"' in lines
        assert "  - reducer (1 nodes)" in lines

    def test_nested_node(self, pipeline):
        """Nested nodes are addressed by dotted paths."""
        text = render_process_node(pipeline, "Process.reduc1.reducer.min1")
        assert "Process: min" in text
        assert "Result: yes" in text

    def test_root(self, pipeline):
        """The empty path is the root graph."""
        pipeline.add_parameter({"name": "size", "description": "", "schema": {}})
        lines = render_process_node(pipeline, "").splitlines()
        assert lines[0] == "Graph Process"
        assert "  size: <required>" in lines
        assert "  - saver1 :: save_result [result]" in lines

    def test_unknown_path(self, pipeline):
        """Unknown paths raise KeyError."""
        with pytest.raises(KeyError):
            render_process_node(pipeline, "nope")


class TestGraphValidation:
    """Structural checks of serialized processes."""

    def test_valid(self, pipeline):
        """A built process has no problems."""
        assert validate_process_graph(pipeline) == []

    def test_to_networkx(self, pipeline):
        """Edges follow from_node references."""
        graph = to_networkx(pipeline)
        assert set(graph.edges) == {("loadc1", "reduc1"), ("reduc1", "saver1")}
        assert graph.nodes["saver1"]["result"] is True
        assert graph.nodes["reduc1"]["process_id"] == "reduce_dimension"

    def test_parent_reference_in_callback(self, builder):
        """Callbacks may reference nodes of enclosing graphs."""
        offset = builder.add(1, 2)
        builder.set_result(builder.apply(None, lambda x, builder: builder.multiply(x, offset)))
        assert validate_process_graph(builder) == []

    def test_dangling_reference(self):
        """References to missing nodes are reported."""
        problems = validate_process_graph(
            {"a": {"process_id": "add", "arguments": {"x": {"from_node": "b"}}, "result": True}}
        )
        assert problems == ["Node 'b' referenced by a does not exist"]

    def test_cycle_and_results(self):
        """Cycles and missing result markers are reported."""
        problems = validate_process_graph(
            {
                "process_graph": {
                    "a": {"process_id": "add", "arguments": {"x": {"from_node": "b"}}},
                    "b": {"process_id": "add", "arguments": {"x": {"from_node": "a"}}},
                }
            }
        )
        assert len(problems) == 2
        assert "contains a cycle" in problems[0]
        assert "exactly one result node, found 0" in problems[1]

    def test_nested_problems(self):
        """Callbacks are validated recursively."""
        problems = validate_process_graph(
            {
                "r": {
                    "process_id": "reduce_dimension",
                    "arguments": {"reducer": {"process_graph": {"m": {"process_id": "min"}}}},
                    "result": True,
                }
            }
        )
        assert problems == [
            "Process graph in callback 'r.reducer' must have exactly one result node, found 0"
        ]
