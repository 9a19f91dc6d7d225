"""
Domain services for Haven.

Contains the main business logic services:
- graph_store: In-memory node/edge graph with referential integrity
- context_aggregator: Bounded neighborhood traversal into context bundles
- processor_registry: Capability-based dispatch of processing behaviors
- auto_link: Generation output turned back into graph edges
- batch_pipeline: Sequential transformation of node sets
- lifecycle: Aging, archiving and restoring of staged content
"""
