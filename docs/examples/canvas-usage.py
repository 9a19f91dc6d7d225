"""
Example usage of the Haven orchestration engine.

Builds a small canvas, assembles context for a note, auto-links a selection,
repurposes notes in a batch and walks a staged item through its lifecycle.
A scripted gateway stands in for Gemini so the example runs offline; swap in
``get_generation_gateway()`` to use the configured model.
"""

import asyncio
import json

from haven.shared import (
    setup_logging, GenerationGateway, GenerationRequest, Node, NodeType, StagingItemType,
)
from haven.services.auto_link import AutoLinkService
from haven.services.batch_pipeline import BatchPipelineRunner, TransformAction
from haven.services.context_aggregator import ContextAggregator
from haven.services.graph_store import GraphStore
from haven.services.lifecycle import LifecycleManager
from haven.services.processor_registry import build_default_registry


class ScriptedGateway(GenerationGateway):
    """Answers auto-link requests with fixed edges and everything else with an echo."""

    def __init__(self, edges):
        self.edges = edges

    async def generate(self, request: GenerationRequest) -> str:
        if request.metadata.get('operation') == 'auto_link':
            return f"Here are the links:\n```json\n{json.dumps({'edges': self.edges})}\n```"
        return f"[{request.metadata.get('action')}] {request.context_bundle[:60]}"


def build_canvas() -> GraphStore:
    graph = GraphStore()
    idea = graph.add_node(Node(id="idea", type_tag=NodeType.NOTE,
                               data={'label': "Idea", 'content': "Short-form video for launch week"}))
    graph.add_node(Node(id="brief", type_tag=NodeType.DOC,
                        data={'label': "Brand brief", 'url': "https://example.com/brief.pdf"}))
    graph.add_node(Node(id="moodboard", type_tag=NodeType.IMAGE,
                        data={'label': "Moodboard", 'url': "https://example.com/mood.png"}))
    graph.connect(idea.id, "brief", label="follows")
    return graph


def demonstrate_context(graph: GraphStore):
    print("=== Context for 'idea' ===")
    print(ContextAggregator(graph).build_context("idea").text)
    print()

    registry = build_default_registry()
    print("Processors for 'idea':", registry.resolve(graph.get_node("idea")))
    print("Default processor:", registry.resolve_default(graph.get_node("idea")))
    print()


async def demonstrate_generation(graph: GraphStore):
    gateway = ScriptedGateway(edges=[
        {"source": "moodboard", "target": "idea", "label": "inspires"},
        {"source": "moodboard", "target": "nowhere", "label": "ignored"},
    ])

    result = await AutoLinkService(graph, gateway).auto_connect(["idea", "brief", "moodboard"])
    print("=== Auto-link ===")
    print(result.message, result.rejection_counts())
    print()

    action = TransformAction(
        name="FORMAT_PLATFORM",
        instruction="Rewrite for the platform.",
        platform="linkedin",
        create_derived_node=True,
    )
    runner = BatchPipelineRunner(graph, gateway, inter_call_delay=0)
    report = await runner.run_to_completion(
        ["idea", "brief"], action,
        on_progress=lambda step: print(f"  {step.progress} {step.node_id}: {step.status}"),
    )
    print("=== Batch ===")
    print(report.summary)
    print()


def demonstrate_lifecycle(graph: GraphStore):
    manager = LifecycleManager()
    item = manager.ingest(StagingItemType.LINK, content="https://example.com/article",
                          metadata={'title': "Reference article"})
    print("=== Lifecycle ===")
    print(item.id, manager.get_state(item.id))

    archived = manager.archive(item.id)
    print("Archived as", archived.id, "- visible items:", len(manager.list_items()))

    restored = manager.restore(archived.id)
    print("Restored", restored.id, manager.get_state(restored.id))

    node = manager.promote(restored.id, graph=graph)
    print("Promoted to node", node.id, node.type_tag)


def main():
    setup_logging()
    graph = build_canvas()
    demonstrate_context(graph)
    asyncio.run(demonstrate_generation(graph))
    demonstrate_lifecycle(graph)
    print(f"\nCanvas now has {len(graph)} nodes and {len(graph.edges())} edges")


if __name__ == "__main__":
    main()
