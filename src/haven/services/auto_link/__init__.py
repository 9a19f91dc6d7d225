"""
Auto-Link service for Haven.

Parses relationship proposals from generation output and applies them to the
graph as inferred edges, reporting rejected candidates alongside.
"""

from .extraction import extract_json_object, find_json_object
from .inferencer import AutoLinkInferencer
from .models import AutoLinkResult, EdgeCandidate, RejectedEdge, RejectionReason
from .service import AutoLinkService, DEFAULT_AUTO_LINK_INSTRUCTION

__all__ = [
    "AutoLinkInferencer",
    "AutoLinkService",
    "AutoLinkResult",
    "EdgeCandidate",
    "RejectedEdge",
    "RejectionReason",
    "DEFAULT_AUTO_LINK_INSTRUCTION",
    "extract_json_object",
    "find_json_object",
]
