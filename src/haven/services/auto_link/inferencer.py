"""
Turns a generator's relationship proposals into graph edges.

Partial success is the normal case: each candidate is checked on its own and
bad ones are reported back instead of aborting the batch.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from ...shared import (
    get_logger, get_metrics, Edge, EdgeStyle,
    InvalidReferenceError, MalformedResponseError,
)
from ..graph_store import GraphStore
from .extraction import extract_json_object
from .models import AutoLinkResult, EdgeCandidate, RejectedEdge, RejectionReason


class AutoLinkInferencer:
    """
    Parses edge proposals and applies the valid ones to a GraphStore.

    Created edges carry ``EdgeStyle.INFERRED`` so they can be told apart from
    edges drawn by the user.
    """

    def __init__(self, allow_self_loops: bool = False):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.allow_self_loops = allow_self_loops

    def parse(self, raw_response: str) -> List[Any]:
        """
        Extract the raw ``edges`` list from generation output.

        Raises:
            MalformedResponseError: when no JSON object with an ``edges`` list is found
        """
        payload = extract_json_object(raw_response or "")
        if payload is None:
            raise MalformedResponseError("No JSON object found in response", raw_response=raw_response)

        edges = payload.get('edges')
        if not isinstance(edges, list):
            raise MalformedResponseError("Response JSON has no 'edges' list", raw_response=raw_response)
        return edges

    def infer(self, raw_response: str, graph: GraphStore) -> AutoLinkResult:
        """
        Apply the edges proposed in ``raw_response`` to ``graph``.

        Never raises for bad output: an unparseable response yields an empty
        result flagged ``malformed``.
        """
        try:
            raw_edges = self.parse(raw_response)
        except MalformedResponseError as e:
            self.logger.warning(f"Auto-link response could not be parsed: {e}")
            self.metrics.record_auto_link(0, 0, malformed=True)
            return AutoLinkResult(malformed=True)

        result = AutoLinkResult()
        for raw in raw_edges:
            self._apply_candidate(raw, graph, result)

        self.metrics.record_auto_link(len(result.created), len(result.rejected))
        self.logger.info(
            f"Auto-link applied {len(result.created)} edges, rejected {len(result.rejected)}"
        )
        return result

    def _apply_candidate(self, raw: Any, graph: GraphStore, result: AutoLinkResult) -> None:
        if not isinstance(raw, dict):
            result.rejected.append(RejectedEdge(
                reason=RejectionReason.MALFORMED,
                detail="Edge entry is not an object",
                raw=raw,
            ))
            return

        try:
            candidate = EdgeCandidate.model_validate(raw)
        except ValidationError as e:
            result.rejected.append(RejectedEdge(
                reason=RejectionReason.MALFORMED,
                detail=f"Invalid edge entry: {e.error_count()} error(s)",
                raw=raw,
            ))
            return

        rejection: Dict[str, Any] = {
            'source': candidate.source,
            'target': candidate.target,
            'label': candidate.label,
            'raw': raw,
        }

        if candidate.source == candidate.target and not self.allow_self_loops:
            result.rejected.append(RejectedEdge(
                reason=RejectionReason.SELF_LOOP,
                detail=f"Edge would connect {candidate.source} to itself",
                **rejection,
            ))
            return

        edge = Edge(
            source=candidate.source,
            target=candidate.target,
            label=candidate.label,
            style=EdgeStyle.INFERRED,
        )

        if graph.find_edges(edge.source, edge.target, label=edge.label):
            result.rejected.append(RejectedEdge(
                reason=RejectionReason.DUPLICATE,
                detail="An identical edge already exists",
                **rejection,
            ))
            return

        try:
            result.created.append(graph.add_edge(edge))
        except InvalidReferenceError as e:
            result.rejected.append(RejectedEdge(
                reason=RejectionReason.UNKNOWN_NODE,
                detail=str(e),
                **rejection,
            ))
