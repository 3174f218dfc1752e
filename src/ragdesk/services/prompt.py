"""Grounding prompt construction.

The instruction block tells the model to answer only from the supplied
context and to use a fixed phrase when the context is insufficient. Together
with the low fixed temperature used by the pipeline, this is the only
anti-hallucination control in the system. It is a prompting convention that
steers the model; nothing verifies that a reply is actually grounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ragdesk.config import DEFAULT_INSUFFICIENT_CONTEXT_REPLY
from ragdesk.models import Role, ScoredChunk, Turn

NO_CONTEXT_PLACEHOLDER = "No relevant context found."
NO_HISTORY_PLACEHOLDER = "No previous conversation."
SECTION_BREAK = "---"


@dataclass(frozen=True)
class PromptComposerConfig:
    """Configuration for prompt construction."""

    insufficient_context_reply: str = DEFAULT_INSUFFICIENT_CONTEXT_REPLY
    persona: str = "You are a helpful, accurate support assistant."


class PromptComposer:
    """Renders retrieved chunks, conversation history and the question."""

    def __init__(self, config: PromptComposerConfig | None = None) -> None:
        self._config = config or PromptComposerConfig()

    def compose(self, chunks: Sequence[ScoredChunk], history: Sequence[Turn], question: str) -> str:
        instructions = (
            f"{self._config.persona} Your responses must be based ONLY on the provided context below.\n"
            "If the context does not contain enough information to answer the question, honestly say: "
            f'"{self._config.insufficient_context_reply}"\n'
            "Do NOT make up information or use outside knowledge."
        )
        return (
            f"{instructions}\n\n"
            f"{SECTION_BREAK}\n"
            f"CONTEXT FROM KNOWLEDGE BASE:\n{self.build_context(chunks)}\n\n"
            f"{SECTION_BREAK}\n"
            f"CONVERSATION HISTORY:\n{self.build_history(history)}\n\n"
            f"{SECTION_BREAK}\n"
            f"USER QUESTION:\n{question}\n\n"
            "ANSWER:"
        )

    @staticmethod
    def build_context(chunks: Sequence[ScoredChunk]) -> str:
        if not chunks:
            return NO_CONTEXT_PLACEHOLDER
        return "\n\n".join(
            f'[{index}] (Source: "{chunk.title}", Relevance: {chunk.score * 100:.1f}%)\n{chunk.content}'
            for index, chunk in enumerate(chunks, start=1)
        )

    @staticmethod
    def build_history(history: Sequence[Turn]) -> str:
        if not history:
            return NO_HISTORY_PLACEHOLDER
        return "\n".join(
            f"{'User' if turn.role is Role.USER else 'Assistant'}: {turn.content}" for turn in history
        )
