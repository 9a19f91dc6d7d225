"""
Sequential batch runner for node transformations.

One generation call per node, strictly in the order given, with a fixed delay
between calls to respect upstream rate limits. A failing node is logged and
reported; the run moves on to the next one.
"""

import asyncio
import time
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional

from ...shared import (
    get_logger, get_metrics, get_settings,
    GenerationGateway, GenerationRequest, HavenError, Node, TransformationError,
)
from ..context_aggregator import ContextAggregator
from ..context_aggregator.projections import selection_text
from ..graph_store import GraphStore
from .derived import DerivedNodeWriter
from .models import BatchProgress, BatchReport, StepResult, StepStatus, TransformAction


Sleep = Callable[[float], Awaitable[None]]


class BatchPipelineRunner:
    """
    Applies a TransformAction across a list of nodes, one at a time.

    Cancellation is cooperative: the abort event is checked between steps and
    an in-flight generation call always runs to completion.
    """

    def __init__(self,
                 graph: GraphStore,
                 gateway: GenerationGateway,
                 aggregator: Optional[ContextAggregator] = None,
                 inter_call_delay: Optional[float] = None,
                 sleep: Sleep = asyncio.sleep):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.graph = graph
        self.gateway = gateway
        self.aggregator = aggregator or ContextAggregator(graph)
        self.writer = DerivedNodeWriter(graph)
        self.inter_call_delay = (
            get_settings().batch_inter_call_delay_seconds if inter_call_delay is None else inter_call_delay
        )
        self._sleep = sleep
        self._progress = BatchProgress()

    @property
    def progress(self) -> str:
        """``"{completed}/{total}"`` for the current or last run."""
        return str(self._progress)

    async def run(self,
                  node_ids: Iterable[str],
                  action: TransformAction,
                  abort: Optional[asyncio.Event] = None) -> AsyncIterator[StepResult]:
        """
        Transform each node in order, yielding a StepResult after every step.

        Args:
            node_ids: Nodes to transform, in call order
            action: Transformation to apply
            abort: Optional event; once set, no further steps start
        """
        node_ids = list(node_ids)
        self._progress = BatchProgress(completed=0, total=len(node_ids))
        self.logger.info(f"Starting batch {action.name} over {len(node_ids)} nodes")

        for index, node_id in enumerate(node_ids):
            if index > 0 and self.inter_call_delay > 0 and not self._aborted(abort):
                await self._sleep(self.inter_call_delay)

            if self._aborted(abort):
                self.logger.info(
                    f"Batch {action.name} aborted at {self.progress}; "
                    f"{len(node_ids) - index} nodes not attempted"
                )
                return

            result = await self._run_step(node_id, action)
            self._progress.completed += 1
            result.progress = self.progress
            yield result

        self.logger.info(f"Batch {action.name} finished at {self.progress}")

    async def run_to_completion(self,
                                node_ids: Iterable[str],
                                action: TransformAction,
                                abort: Optional[asyncio.Event] = None,
                                on_progress: Optional[Callable[[StepResult], None]] = None) -> BatchReport:
        """
        Drive ``run`` to the end and summarize the outcome.

        ``on_progress`` is called after each step, e.g. to refresh a progress
        indicator.
        """
        node_ids = list(node_ids)
        results: List[StepResult] = []

        async for result in self.run(node_ids, action, abort=abort):
            results.append(result)
            if on_progress is not None:
                on_progress(result)

        skipped = node_ids[len(results):]
        report = BatchReport(
            action=action.name,
            total=len(node_ids),
            results=results,
            aborted=bool(skipped),
            skipped_node_ids=skipped,
        )
        self.logger.info(f"Batch {action.name}: {report.summary}")
        return report

    @staticmethod
    def _aborted(abort: Optional[asyncio.Event]) -> bool:
        return abort is not None and abort.is_set()

    async def _run_step(self, node_id: str, action: TransformAction) -> StepResult:
        try:
            node = self.graph.get_node(node_id)
            if node is None:
                raise TransformationError(f"Node not found: {node_id}", node_id=node_id)

            request = self._build_request(node, action)
            output = await self._generate(node_id, request)

            derived_node_id = None
            if action.create_derived_node:
                try:
                    derived_node_id = self.writer.write(node, output, action).id
                except HavenError as e:
                    raise TransformationError(f"Could not write derived node: {e}", node_id=node_id)

            self.metrics.record_batch_step(action.name, success=True)
            return StepResult(
                node_id=node_id,
                status=StepStatus.SUCCESS,
                output=output,
                derived_node_id=derived_node_id,
            )

        except TransformationError as e:
            self.logger.error(f"Batch {action.name} failed for node {node_id}: {e}")
            self.metrics.record_batch_step(action.name, success=False)
            return StepResult(node_id=node_id, status=StepStatus.FAILURE, error=str(e))

    async def _generate(self, node_id: str, request: GenerationRequest) -> str:
        start_time = time.time()
        try:
            output = await self.gateway.generate(request)
        except Exception as e:
            self.metrics.record_generation_call('batch', time.time() - start_time, success=False)
            raise TransformationError(f"Generation failed: {e}", node_id=node_id) from e

        self.metrics.record_generation_call('batch', time.time() - start_time)
        if not output or not output.strip():
            raise TransformationError("Generation returned no output", node_id=node_id)
        return output.strip()

    def _build_request(self, node: Node, action: TransformAction) -> GenerationRequest:
        content = node.data.content
        if not content:
            if action.require_content:
                raise TransformationError(f"Node {node.id} has no content", node_id=node.id)
            content = selection_text(node)

        context = content
        if action.include_context:
            bundle = self.aggregator.build_context(node.id, max_depth=action.context_depth)
            if not bundle.is_empty:
                context = f"{content}\n\n{bundle.text}"

        instruction = action.instruction
        if action.platform:
            instruction = f"{instruction}\n\nTarget platform: {action.platform}"

        return GenerationRequest(
            instruction=instruction,
            context_bundle=context,
            response_format=action.response_format,
            metadata={'sourceNodeId': node.id, 'action': action.name},
        )
