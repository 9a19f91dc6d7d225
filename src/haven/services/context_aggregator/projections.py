"""
Type-specific textual projections of canvas nodes.

A projector turns a node into a ``(category, text)`` pair, or None when the
node has nothing to contribute (an empty note, an analysis without result).
"""

import json
from typing import Callable, Dict, Optional, Tuple

from ...shared import Node, NodeType
from .models import ContextCategory


Projection = Tuple[ContextCategory, str]
Projector = Callable[[Node], Optional[Projection]]


def _transcript_marker(node: Node) -> str:
    transcript = node.data.metadata.get('transcript')
    if transcript:
        return f"\n[Transcript: {transcript}]"
    return ""


def project_note(node: Node) -> Optional[Projection]:
    if not node.data.content:
        return None
    return ContextCategory.NOTE, f"### {node.data.label or 'Connected Note'}\n{node.data.content}"


def project_analysis(node: Node) -> Optional[Projection]:
    result = node.data.extra_field('result')
    if not result:
        return None
    return ContextCategory.ANALYSIS, f"### AI Vision Analysis\n{result}"


def project_document(node: Node) -> Optional[Projection]:
    lines = [f"### Document: {node.data.label or 'Untitled'}"]
    if node.data.url:
        lines.append(f"[Document Reference: {node.data.url}]")
    if node.data.content:
        lines.append(node.data.content)
    return ContextCategory.DOCUMENT, "\n".join(lines)


def project_link(node: Node) -> Optional[Projection]:
    lines = [f"### Link: {node.data.label or node.data.url or 'Untitled'}"]
    if node.data.url:
        lines.append(f"[Link: {node.data.url}]")
    if node.data.content:
        lines.append(node.data.content)
    return ContextCategory.LINK, "\n".join(lines)


def project_image(node: Node) -> Optional[Projection]:
    return (
        ContextCategory.MEDIA,
        f"### Image: {node.data.label or 'Untitled'}\n[Visual Reference: {node.data.url}]",
    )


def project_audio(node: Node) -> Optional[Projection]:
    return (
        ContextCategory.MEDIA,
        f"### Audio: {node.data.label or 'Untitled'}\n[Audio Reference: {node.data.url}]"
        + _transcript_marker(node),
    )


def project_video(node: Node) -> Optional[Projection]:
    return (
        ContextCategory.MEDIA,
        f"### Video: {node.data.label or 'Untitled'}\n[Video Reference: {node.data.url}]"
        + _transcript_marker(node),
    )


def project_generated(node: Node) -> Optional[Projection]:
    """Generated artifacts (course, quiz, script, ...) read like documents."""
    if not node.data.content:
        return None
    kind = NodeType(node.type_tag).name.title()
    return ContextCategory.DOCUMENT, f"### {kind}: {node.data.label or 'Untitled'}\n{node.data.content}"


DEFAULT_PROJECTORS: Dict[str, Projector] = {
    NodeType.NOTE.value: project_note,
    NodeType.AI.value: project_analysis,
    NodeType.DOC.value: project_document,
    NodeType.LINK.value: project_link,
    NodeType.IMAGE.value: project_image,
    NodeType.AUDIO.value: project_audio,
    NodeType.VIDEO.value: project_video,
}


def project_node(node: Node, projectors: Dict[str, Projector]) -> Optional[Projection]:
    """Project a node with the table, falling back to the generated-artifact projection."""
    projector = projectors.get(node.type_tag, project_generated)
    return projector(node)


def selection_text(node: Node) -> str:
    """
    One-line description of a node for selection payloads.

    Mirrors what the canvas sends when several nodes are orchestrated together.
    """
    tag = node.type_tag
    label = node.data.label
    if tag == NodeType.NOTE.value:
        return node.data.content or ""
    if tag in (NodeType.DOC.value, NodeType.IMAGE.value, NodeType.LINK.value):
        kind = NodeType(tag).name.title()
        return f"{kind}: {label} ({node.data.url})"
    if tag in (NodeType.AUDIO.value, NodeType.VIDEO.value):
        kind = NodeType(tag).name.title()
        return f"{kind}: {label} (TRANSCRIPT: {json.dumps(node.data.metadata, sort_keys=True)})"
    if tag == NodeType.AI.value:
        return f"Analysis: {node.data.extra_field('result') or label}"
    if node.data.content:
        return f"{label}: {node.data.content}" if label else node.data.content
    return label
