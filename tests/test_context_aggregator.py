"""
Tests for context aggregation over the graph.
"""

import pytest

from haven.shared import NodeType, NodeNotFoundError
from haven.services.context_aggregator import ContextAggregator, ContextCategory
from haven.services.graph_store import GraphStore

from conftest import make_node


@pytest.fixture
def aggregator(note_graph):
    return ContextAggregator(note_graph, default_max_depth=2)


class TestBuildContext:

    def test_isolated_node_gives_empty_bundle(self, graph):
        graph.add_node(make_node("solo", content="alone"))

        bundle = ContextAggregator(graph).build_context("solo")

        assert bundle.is_empty
        assert bundle.text == ""
        assert bundle.visited_node_ids == ["solo"]

    def test_unknown_focal_node(self, aggregator):
        with pytest.raises(NodeNotFoundError):
            aggregator.build_context("missing")

    def test_negative_depth_rejected(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.build_context("n1", max_depth=-1)

    def test_depth_limit(self, aggregator):
        one_hop = aggregator.build_context("n1", max_depth=1)
        two_hops = aggregator.build_context("n1", max_depth=2)

        assert one_hop.visited_node_ids == ["n1", "n2"]
        assert two_hops.visited_node_ids == ["n1", "n2", "n3"]
        assert [e.depth for e in two_hops.entries] == [1, 2]

    def test_zero_depth_visits_only_focal(self, aggregator):
        bundle = aggregator.build_context("n1", max_depth=0)

        assert bundle.visited_node_ids == ["n1"]
        assert bundle.is_empty

    def test_traversal_ignores_edge_direction(self, aggregator):
        bundle = aggregator.build_context("n3", max_depth=2)

        assert bundle.visited_node_ids == ["n3", "n2", "n1"]

    def test_cycle_visits_each_node_once(self, graph):
        for node_id in ("a", "b", "c"):
            graph.add_node(make_node(node_id, content=node_id))
        graph.connect("a", "b")
        graph.connect("b", "c")
        graph.connect("c", "a")
        graph.connect("a", "b", label="again")

        bundle = ContextAggregator(graph).build_context("a", max_depth=5)

        assert sorted(bundle.visited_node_ids) == ["a", "b", "c"]
        assert len(bundle.visited_node_ids) == 3
        assert [e.node_id for e in bundle.entries] == ["b", "c"]

    def test_build_is_deterministic(self, aggregator):
        first = aggregator.build_context("n2")
        second = aggregator.build_context("n2")

        assert first.text == second.text
        assert first.visited_node_ids == second.visited_node_ids

    def test_include_focal(self, aggregator):
        bundle = aggregator.build_context("n1", max_depth=1, include_focal=True)

        assert bundle.entries[0].category == ContextCategory.FOCAL
        assert bundle.text.startswith("### Selected Node Content\n### Note 1\ncontent 1")


class TestProjections:

    def test_categories_render_in_priority_order(self, graph):
        graph.add_node(make_node("focal", content="center"))
        graph.add_node(make_node("img", NodeType.IMAGE, label="Diagram", url="http://img"))
        graph.add_node(make_node("doc", NodeType.DOC, label="Paper", url="http://doc"))
        graph.add_node(make_node("note", label="Idea", content="a thought"))
        graph.add_node(make_node("ai", NodeType.AI, result="looks like a chart"))
        for other in ("img", "doc", "note", "ai"):
            graph.connect("focal", other)

        text = ContextAggregator(graph).build_context("focal", max_depth=1).text

        assert text == (
            "### Idea\na thought\n\n"
            "### AI Vision Analysis\nlooks like a chart\n\n"
            "### Document: Paper\n[Document Reference: http://doc]\n\n"
            "### Image: Diagram\n[Visual Reference: http://img]"
        )

    def test_empty_note_is_traversed_but_not_projected(self, graph):
        graph.add_node(make_node("a", content="start"))
        graph.add_node(make_node("empty"))
        graph.add_node(make_node("far", label="Far", content="beyond"))
        graph.connect("a", "empty")
        graph.connect("empty", "far")

        bundle = ContextAggregator(graph).build_context("a", max_depth=2)

        assert bundle.visited_node_ids == ["a", "empty", "far"]
        assert [e.node_id for e in bundle.entries] == ["far"]

    def test_audio_includes_transcript(self, graph):
        graph.add_node(make_node("a", content="start"))
        graph.add_node(make_node("clip", NodeType.AUDIO, label="Interview", url="http://a",
                                 metadata={'transcript': "hello there"}))
        graph.connect("a", "clip")

        text = ContextAggregator(graph).build_context("a", max_depth=1).text

        assert text == "### Audio: Interview\n[Audio Reference: http://a]\n[Transcript: hello there]"

    def test_custom_projector_override(self, note_graph):
        aggregator = ContextAggregator(
            note_graph,
            projectors={NodeType.NOTE.value: lambda node: (ContextCategory.NOTE, node.id.upper())},
        )

        assert aggregator.build_context("n1", max_depth=2).text == "N2\n\nN3"


class TestSelectionBundle:

    def test_selection_bundle_tags_ids(self, note_graph):
        bundle = ContextAggregator(note_graph).build_selection_bundle(["n1", "missing", "n3"])

        assert bundle == "[ID: n1] [Type: noteNode] content 1\n---\n[ID: n3] [Type: noteNode] content 3"

    def test_empty_selection(self):
        assert ContextAggregator(GraphStore()).build_selection_bundle([]) == ""
