"""
AI infrastructure for Haven.
"""

from .gateway import (
    GenerationGateway,
    GenerationRequest,
    GeminiGateway,
    ResponseFormat,
    get_generation_gateway,
)

__all__ = [
    "GenerationGateway",
    "GenerationRequest",
    "GeminiGateway",
    "ResponseFormat",
    "get_generation_gateway",
]
