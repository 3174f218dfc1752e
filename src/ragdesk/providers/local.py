"""Providers backed by locally executed Hugging Face models."""

from __future__ import annotations

import logging
from typing import Tuple

from langchain_community.embeddings import HuggingFaceEmbeddings
from langchain_core.embeddings import Embeddings as LangChainEmbeddings

from ragdesk.errors import ConfigurationError, UnknownProviderError
from ragdesk.models import Generation

LOGGER = logging.getLogger(__name__)


class HuggingFaceEmbeddingProvider:
    """Sentence-embedding model loaded through LangChain."""

    def __init__(
        self,
        model: str = "BAAI/bge-small-en-v1.5",
        *,
        dimension: int = 384,
        device: str | None = None,
        normalize: bool = True,
        cache_folder: str | None = None,
        client: LangChainEmbeddings | None = None,
    ) -> None:
        self.dimension = dimension
        self._model = model
        if client is not None:
            self._client = client
            return
        model_kwargs = {"device": device} if device else {}
        try:
            self._client = HuggingFaceEmbeddings(
                model_name=model,
                model_kwargs=model_kwargs,
                encode_kwargs={"normalize_embeddings": normalize},
                cache_folder=cache_folder,
            )
        except Exception as exc:
            raise ConfigurationError(f"Unable to load embedding model {model}: {exc}") from exc
        LOGGER.info("Loaded embedding model %s", model)

    def embed(self, text: str) -> Tuple[float, ...]:
        try:
            vector = tuple(float(value) for value in self._client.embed_query(text))
        except Exception as exc:
            raise UnknownProviderError(f"Embedding model {self._model} failed: {exc}") from exc
        if len(vector) != self.dimension:
            LOGGER.warning(
                "Embedding dim mismatch: configured=%d, actual=%d",
                self.dimension,
                len(vector),
            )
        return vector


class TransformersGenerationProvider:
    """Causal language model executed in-process via Transformers."""

    def __init__(self, model: str = "Qwen/Qwen2.5-1.8B-Instruct", *, device: str | None = None) -> None:
        self._model_name = model
        self._device = device
        try:
            from transformers import AutoModelForCausalLM, AutoTokenizer

            self._tokenizer = AutoTokenizer.from_pretrained(model, trust_remote_code=True)
            self._model = AutoModelForCausalLM.from_pretrained(model, trust_remote_code=True)
        except Exception as exc:
            raise ConfigurationError(f"Unable to load generation model {model}: {exc}") from exc
        if self._tokenizer.pad_token is None and self._tokenizer.eos_token is not None:
            self._tokenizer.pad_token = self._tokenizer.eos_token
        if getattr(self._model.config, "pad_token_id", None) is None and self._tokenizer.pad_token_id is not None:
            self._model.config.pad_token_id = self._tokenizer.pad_token_id
        if device:
            self._model.to(device)
        LOGGER.info("Loaded generation model %s", model)

    def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> Generation:
        try:
            return self._generate(prompt, temperature=temperature, max_tokens=max_tokens)
        except Exception as exc:
            raise UnknownProviderError(f"Generation model {self._model_name} failed: {exc}") from exc

    def _generate(self, prompt: str, *, temperature: float, max_tokens: int) -> Generation:
        import torch

        if hasattr(self._tokenizer, "apply_chat_template"):
            text = self._tokenizer.apply_chat_template(
                [{"role": "user", "content": prompt}],
                tokenize=False,
                add_generation_prompt=True,
            )
        else:
            text = prompt
        tokenized = self._tokenizer(text, return_tensors="pt", padding=True)
        input_ids = tokenized.input_ids
        attention_mask = tokenized.attention_mask
        prompt_length = input_ids.shape[1]
        if self._device:
            input_ids = input_ids.to(self._device)
            attention_mask = attention_mask.to(self._device)
        with torch.no_grad():
            output = self._model.generate(
                input_ids,
                attention_mask=attention_mask,
                max_new_tokens=max_tokens,
                do_sample=temperature > 0,
                temperature=temperature if temperature > 0 else None,
            )
        generated_tokens = output[0][prompt_length:]
        generated = self._tokenizer.decode(generated_tokens, skip_special_tokens=True)
        return Generation(
            text=generated.strip(),
            prompt_tokens=int(prompt_length),
            completion_tokens=int(len(generated_tokens)),
        )
