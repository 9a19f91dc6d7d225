"""
Default capability table for the canvas inspector.

Order matters: the first matching entry is the behavior shown when a node is
selected, so specialized processors come before general writing tools.
"""

from ...shared import NodeType
from .registry import ProcessorRegistry


DEFAULT_PROCESSORS = [
    ("production-processor", "Production Manager", (NodeType.PRODUCTION,)),
    ("campaign-processor", "Campaign Builder", (NodeType.CAMPAIGN,)),
    ("angle-processor", "Angle Generator", (NodeType.ANGLE,)),
    ("storyboard-processor", "Storyboard Designer", (NodeType.STORYBOARD,)),
    ("script-processor", "Story Builder", (NodeType.SCRIPT,)),
    ("workflow-processor", "Workflow", (NodeType.WORKFLOW,)),
    ("calendar-processor", "Schedule", (NodeType.NOTE, NodeType.COURSE)),
    ("course-processor", "Course Manager", (NodeType.COURSE,)),
    ("quiz-processor", "Quiz", (NodeType.QUIZ,)),
    ("writing-processor", "Writing Assistant", (NodeType.NOTE, NodeType.DOC)),
    ("bilingual-editor", "Bilingual Editor", (NodeType.NOTE, NodeType.DOC)),
    ("article-builder", "Article Builder", (NodeType.NOTE, NodeType.DOC)),
    ("transcription-processor", "Transcription Agent", (NodeType.AUDIO, NodeType.VIDEO)),
    ("summary-processor", "Summarizer", (NodeType.DOC, NodeType.LINK)),
    ("brainstorm-processor", "Brainstorm",
     (NodeType.COURSE, NodeType.NOTE, NodeType.QUIZ, NodeType.DOC)),
    ("image-processor", "Image Processor", (NodeType.IMAGE,)),
]


def build_default_registry() -> ProcessorRegistry:
    """Registry pre-loaded with the canvas processors."""
    registry = ProcessorRegistry()
    for behavior_id, display_name, type_tags in DEFAULT_PROCESSORS:
        registry.register_for_types(behavior_id, display_name, *type_tags)
    return registry
