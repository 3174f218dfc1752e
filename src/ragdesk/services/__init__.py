"""Service layer orchestrations for ragdesk."""

from .assistant import AssistantService, build_assistant
from .pipeline import PipelineConfig, PipelineState, RAGPipeline
from .prompt import PromptComposer, PromptComposerConfig
from .sessions import SessionHistoryStore

__all__ = [
    "AssistantService",
    "PipelineConfig",
    "PipelineState",
    "PromptComposer",
    "PromptComposerConfig",
    "RAGPipeline",
    "SessionHistoryStore",
    "build_assistant",
]
