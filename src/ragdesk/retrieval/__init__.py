"""Retrieval components."""

from .similarity import cosine_similarity, rank_all, retrieve_top_k

__all__ = ["cosine_similarity", "rank_all", "retrieve_top_k"]
