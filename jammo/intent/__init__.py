"""
Intent matching: sentence embeddings and similarity ranking.

Usage:
    from jammo.intent import SentenceEmbedder, IntentRanker

    ranker = IntentRanker(SentenceEmbedder())
    index, score = ranker.rank_space(utterance, action_space)
"""
from .embedder import (
    SentenceEmbedder,
    EmbedderConfig,
    EmbeddingModelError,
    pad_or_truncate,
    mean_pooling,
    l2_normalize,
)
from .ranker import IntentRanker, Encoder, cosine_scores, best_match

__all__ = [
    "SentenceEmbedder",
    "EmbedderConfig",
    "EmbeddingModelError",
    "pad_or_truncate",
    "mean_pooling",
    "l2_normalize",
    "IntentRanker",
    "Encoder",
    "cosine_scores",
    "best_match",
]
