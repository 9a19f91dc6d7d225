"""
Tests for auto-linking: JSON extraction, edge inference and the service.
"""

import json

import pytest

from haven.shared import AIError, EdgeStyle, MalformedResponseError, ResponseFormat, get_metrics
from haven.services.auto_link import (
    AutoLinkInferencer, AutoLinkService, RejectionReason, extract_json_object,
)

from conftest import FakeGateway, make_node


@pytest.fixture
def two_nodes(graph):
    graph.add_node(make_node("A", content="claim"))
    graph.add_node(make_node("B", content="evidence"))
    return graph


def payload(*edges):
    return json.dumps({"edges": list(edges)})


class TestExtraction:

    def test_object_wrapped_in_prose_and_fences(self):
        raw = 'Sure! Here you go:\n```json\n{"edges": [{"source": "A", "target": "B"}]}\n```\nDone.'

        assert extract_json_object(raw) == {"edges": [{"source": "A", "target": "B"}]}

    def test_braces_inside_strings(self):
        raw = 'x {"edges": [{"source": "A", "target": "B", "label": "uses }"}]} y'

        assert extract_json_object(raw)["edges"][0]["label"] == "uses }"

    def test_skips_invalid_leading_braces(self):
        raw = 'set {a, b} then {"edges": []}'

        assert extract_json_object(raw) == {"edges": []}

    def test_undecodable_span_is_skipped_whole(self):
        raw = '{"edges": [{"source": "A", "target": "B", "label": "x"},], "inner": {"k": 1}}'

        assert extract_json_object(raw) is None

    def test_object_after_undecodable_span(self):
        raw = '{"edges": [{"source": "A"},]} then {"edges": []}'

        assert extract_json_object(raw) == {"edges": []}

    @pytest.mark.parametrize("raw", ["", "no json here", "{unclosed", "[1, 2]"])
    def test_nothing_to_extract(self, raw):
        assert extract_json_object(raw) is None


class TestInferencer:

    def test_creates_labelled_inferred_edge(self, two_nodes):
        result = AutoLinkInferencer().infer(
            payload({"source": "A", "target": "B", "label": "claims"}), two_nodes
        )

        assert len(result.created) == 1
        edge = result.created[0]
        assert (edge.source, edge.target, edge.label) == ("A", "B", "claims")
        assert edge.style == EdgeStyle.INFERRED
        assert two_nodes.get_edge(edge.id) is edge
        assert result.message == "Created 1 connections between nodes."

    def test_unknown_endpoint_rejected_without_raising(self, graph):
        graph.add_node(make_node("A"))

        result = AutoLinkInferencer().infer(
            payload({"source": "A", "target": "B", "label": "claims"}), graph
        )

        assert result.created == []
        assert len(result.rejected) == 1
        assert result.rejected[0].reason == RejectionReason.UNKNOWN_NODE
        assert graph.edges() == []
        assert result.message == "No connections found."

    def test_partial_success(self, two_nodes):
        two_nodes.add_node(make_node("C"))
        raw = payload(
            {"source": "A", "target": "B", "label": "supports"},
            {"source": "A", "target": "Z"},
            {"source": "C", "target": "C"},
            {"source": "", "target": "B"},
            "not an object",
            {"source": "B", "target": "C", "label": None},
        )

        result = AutoLinkInferencer().infer(raw, two_nodes)

        assert [(e.source, e.target) for e in result.created] == [("A", "B"), ("B", "C")]
        assert result.rejection_counts() == {
            "unknown_node": 1,
            "self_loop": 1,
            "malformed": 2,
        }
        assert len(two_nodes.edges()) == 2

    def test_duplicate_proposals_rejected(self, two_nodes):
        two_nodes.connect("A", "B", label="claims")

        result = AutoLinkInferencer().infer(
            payload(
                {"source": "A", "target": "B", "label": "claims"},
                {"source": "A", "target": "B", "label": "cites"},
            ),
            two_nodes,
        )

        assert [e.label for e in result.created] == ["cites"]
        assert result.rejected[0].reason == RejectionReason.DUPLICATE

    def test_unlabelled_proposal_beside_labelled_edge(self, two_nodes):
        two_nodes.connect("A", "B", label="claims")

        result = AutoLinkInferencer().infer(payload({"source": "A", "target": "B"}), two_nodes)

        assert len(result.created) == 1
        assert result.created[0].label is None
        assert result.rejected == []
        assert len(two_nodes.find_edges("A", "B")) == 2

    def test_unlabelled_duplicate_rejected(self, two_nodes):
        two_nodes.connect("A", "B")

        result = AutoLinkInferencer().infer(payload({"source": "A", "target": "B"}), two_nodes)

        assert result.created == []
        assert result.rejected[0].reason == RejectionReason.DUPLICATE

    def test_numeric_ids_are_coerced(self, graph):
        graph.add_node(make_node("1"))
        graph.add_node(make_node("2"))

        result = AutoLinkInferencer().infer('{"edges": [{"source": 1, "target": 2}]}', graph)

        assert [(e.source, e.target) for e in result.created] == [("1", "2")]

    def test_self_loops_when_allowed(self, two_nodes):
        result = AutoLinkInferencer(allow_self_loops=True).infer(
            payload({"source": "A", "target": "A", "label": "refines"}), two_nodes
        )

        assert len(result.created) == 1

    @pytest.mark.parametrize("raw", ["I could not find anything.", '{"links": []}', '{"edges": "A-B"}'])
    def test_malformed_response(self, two_nodes, raw):
        result = AutoLinkInferencer().infer(raw, two_nodes)

        assert result.malformed
        assert result.created == []
        assert two_nodes.edges() == []
        assert get_metrics().get_counter('autolink_malformed_responses') == 1

    def test_parse_raises_for_missing_edges(self):
        with pytest.raises(MalformedResponseError):
            AutoLinkInferencer().parse('{"nodes": []}')


class TestAutoLinkService:

    @pytest.mark.asyncio
    async def test_auto_connect(self, two_nodes):
        gateway = FakeGateway(default=payload({"source": "A", "target": "B", "label": "supports"}))
        service = AutoLinkService(two_nodes, gateway)

        result = await service.auto_connect(["A", "B"])

        assert len(result.created) == 1
        request = gateway.requests[0]
        assert request.response_format == ResponseFormat.JSON
        assert "[ID: A] [Type: noteNode] claim" in request.context_bundle
        assert "[ID: B] [Type: noteNode] evidence" in request.context_bundle
        assert get_metrics().get_counter('generation_calls_total') == 1

    @pytest.mark.asyncio
    async def test_empty_selection_skips_generation(self, two_nodes):
        gateway = FakeGateway()

        result = await AutoLinkService(two_nodes, gateway).auto_connect(["missing"])

        assert result.created == []
        assert gateway.requests == []

    @pytest.mark.asyncio
    async def test_gateway_failure_propagates_and_leaves_graph(self, two_nodes, failing_gateway):
        with pytest.raises(AIError):
            await AutoLinkService(two_nodes, failing_gateway).auto_connect(["A", "B"])

        assert two_nodes.edges() == []

    @pytest.mark.asyncio
    async def test_malformed_output_is_no_result(self, two_nodes):
        gateway = FakeGateway(default="Sorry, I can't help with that.")

        result = await AutoLinkService(two_nodes, gateway).auto_connect(["A", "B"])

        assert result.malformed
        assert result.message == "No connections found."
