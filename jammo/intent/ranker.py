"""
IntentRanker: picks the candidate sentence closest in meaning to an utterance.
"""
import logging
from typing import Protocol, Sequence, Tuple

import numpy as np

from jammo.actions.action import ActionSpace

logger = logging.getLogger(__name__)


class Encoder(Protocol):
    """Anything that turns sentences into unit-length row vectors."""

    def encode(self, sentences: Sequence[str]) -> np.ndarray: ...


def cosine_scores(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """
    Similarity of one unit vector to each row of ``candidates``.
    All inputs are L2-normalized, so this is a plain dot product.
    """
    return candidates @ query


def best_match(scores: np.ndarray) -> Tuple[int, float]:
    """Arg-max with ties going to the lowest index."""
    best_index = 0
    best_score = float(scores[0])
    for i in range(1, len(scores)):
        if scores[i] > best_score:
            best_score = float(scores[i])
            best_index = i
    return best_index, best_score


class IntentRanker:
    """
    Usage:
        ranker = IntentRanker(SentenceEmbedder())
        index, score = ranker.rank("please press the button", ["press the button", "back"])
        # index == 0
    """

    def __init__(self, encoder: Encoder):
        self.encoder = encoder

    def scores(self, utterance: str, candidates: Sequence[str]) -> np.ndarray:
        """Similarity of ``utterance`` to every candidate, in candidate order."""
        candidates = list(candidates)
        if not candidates:
            raise ValueError("cannot rank an utterance against an empty candidate list")

        query = self.encoder.encode([utterance])[0]
        matrix = self.encoder.encode(candidates)
        if matrix.shape[0] != len(candidates):
            raise ValueError(
                f"encoder returned {matrix.shape[0]} embeddings for {len(candidates)} candidates"
            )
        return cosine_scores(query, matrix)

    def rank(self, utterance: str, candidates: Sequence[str]) -> Tuple[int, float]:
        """Returns ``(best_index, best_score)``; best_index is in [0, len(candidates))."""
        index, score = best_match(self.scores(utterance, candidates))
        logger.debug("ranked %r -> %d (%.3f)", utterance, index, score)
        return index, score

    def rank_space(self, utterance: str, space: ActionSpace) -> Tuple[int, float]:
        """Rank against an action space; the index refers to ``space`` itself."""
        return self.rank(utterance, space.sentences())
