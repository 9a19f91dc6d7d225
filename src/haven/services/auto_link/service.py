"""
Auto-connect workflow: selection -> generation -> inferred edges.
"""

import time
from typing import Iterable, Optional

from ...shared import (
    get_logger, get_metrics, AIError,
    GenerationGateway, GenerationRequest, ResponseFormat,
)
from ..context_aggregator import ContextAggregator
from ..graph_store import GraphStore
from .inferencer import AutoLinkInferencer
from .models import AutoLinkResult


DEFAULT_AUTO_LINK_INSTRUCTION = (
    "Identify meaningful relationships between the nodes below. "
    'Respond with JSON of the form {"edges": [{"source": "<id>", "target": "<id>", '
    '"label": "<1-3 words>"}]} using only the listed ids.'
)


class AutoLinkService:
    """
    Asks the generation gateway for relationships among selected nodes and
    writes the valid ones back as inferred edges.
    """

    def __init__(self,
                 graph: GraphStore,
                 gateway: GenerationGateway,
                 aggregator: Optional[ContextAggregator] = None,
                 inferencer: Optional[AutoLinkInferencer] = None):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.graph = graph
        self.gateway = gateway
        self.aggregator = aggregator or ContextAggregator(graph)
        self.inferencer = inferencer or AutoLinkInferencer()

    async def auto_connect(self,
                           node_ids: Iterable[str],
                           instruction: Optional[str] = None) -> AutoLinkResult:
        """
        Infer and apply edges among ``node_ids``.

        Raises:
            AIError: when the gateway call fails (the graph is left untouched)
        """
        node_ids = list(node_ids)
        bundle = self.aggregator.build_selection_bundle(node_ids)
        if not bundle:
            self.logger.info("Auto-connect skipped: selection is empty")
            return AutoLinkResult()

        request = GenerationRequest(
            instruction=instruction or DEFAULT_AUTO_LINK_INSTRUCTION,
            context_bundle=bundle,
            response_format=ResponseFormat.JSON,
            metadata={'operation': 'auto_link', 'node_count': len(node_ids)},
        )

        start_time = time.time()
        try:
            raw_response = await self.gateway.generate(request)
        except AIError:
            self.metrics.record_generation_call('auto_link', time.time() - start_time, success=False)
            self.logger.error(f"Auto-connect generation failed for {len(node_ids)} nodes")
            raise
        self.metrics.record_generation_call('auto_link', time.time() - start_time)

        result = self.inferencer.infer(raw_response, self.graph)
        self.logger.info(result.message)
        return result
