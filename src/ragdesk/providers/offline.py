"""Deterministic providers for tests, demos and offline environments."""

from __future__ import annotations

import hashlib
import math
import re
from typing import Tuple

from ragdesk.models import Generation

_CONTEXT_ENTRY = re.compile(r'^\[\d+\] \(Source: "(?P<title>[^"]*)", Relevance: [^)]*\)$', re.MULTILINE)


class HashEmbeddingProvider:
    """Embeds text by expanding counter-seeded SHA-256 digests into a unit vector."""

    def __init__(self, dimension: int = 384, *, normalize: bool = True) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension
        self._normalize = normalize

    def embed(self, text: str) -> Tuple[float, ...]:
        encoded = text.encode("utf-8")
        raw = bytearray()
        block = 0
        while len(raw) < self.dimension:
            raw.extend(hashlib.sha256(block.to_bytes(4, "big") + encoded).digest())
            block += 1
        # Zero-centred: unrelated texts have cosine similarity near 0.
        vector = [byte / 127.5 - 1.0 for byte in raw[: self.dimension]]
        if self._normalize:
            norm = math.sqrt(sum(value * value for value in vector)) or 1.0
            vector = [value / norm for value in vector]
        return tuple(vector)


class TemplateGenerationProvider:
    """Answers by pointing at the sources listed in the prompt's context block."""

    def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> Generation:
        titles = [match.group("title") for match in _CONTEXT_ENTRY.finditer(prompt)]
        if not titles:
            text = "I do not have enough relevant context to answer that question."
        else:
            sources = "\n".join(f"[{index}] {title}" for index, title in enumerate(titles, start=1))
            text = f"Based on the knowledge base, see the following sources:\n{sources}"
        prompt_tokens = len(prompt.split())
        completion_tokens = min(len(text.split()), max_tokens)
        return Generation(text=text, prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
