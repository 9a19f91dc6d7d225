"""
Data models for the Context Aggregator.
"""

from enum import Enum
from typing import Dict, List

from pydantic import Field

from ...shared.models.base import BaseModel


class ContextCategory(str, Enum):
    """Projection categories, declared in rendering priority order."""
    FOCAL = "focal"
    NOTE = "note"
    ANALYSIS = "analysis"
    DOCUMENT = "document"
    LINK = "link"
    MEDIA = "media"


CATEGORY_ORDER: List[ContextCategory] = list(ContextCategory)


class ContextEntry(BaseModel):
    """Text contributed by one visited node."""

    node_id: str = Field(..., description="Node the text was projected from")
    category: ContextCategory = Field(..., description="Projection category")
    text: str = Field(..., description="Projected text")
    depth: int = Field(default=0, ge=0, description="Hops from the focal node")


class ContextBundle(BaseModel):
    """
    Read-only aggregate of a focal node's neighborhood.

    Entries are kept in discovery order. ``text`` groups them by category in
    fixed priority order, so the rendering depends only on graph structure.
    """

    model_config = {
        "frozen": True,
        "use_enum_values": True,
        "extra": "forbid",
    }

    focal_node_id: str = Field(..., description="Node the traversal started from")
    max_depth: int = Field(..., ge=0, description="Hop limit used")
    entries: List[ContextEntry] = Field(default_factory=list, description="Projected entries in discovery order")
    visited_node_ids: List[str] = Field(default_factory=list, description="Nodes visited in BFS order, focal first")

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def by_category(self) -> Dict[str, List[ContextEntry]]:
        grouped: Dict[str, List[ContextEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(ContextCategory(entry.category).value, []).append(entry)
        return grouped

    @property
    def text(self) -> str:
        """Deterministic rendering used as the generation context."""
        grouped = self.by_category()
        sections = []
        for category in CATEGORY_ORDER:
            entries = grouped.get(category.value)
            if entries:
                sections.append("\n\n".join(entry.text for entry in entries))
        return "\n\n".join(sections).strip()

    def __str__(self) -> str:
        return self.text
