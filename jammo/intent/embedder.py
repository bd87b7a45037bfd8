"""
Sentence embedding for intent matching.

Pipeline (batched):
    1. normalize + WordPiece-tokenize with the model's vocabulary,
       wrapped in [CLS] ... [SEP]
    2. pad/truncate every sequence to one fixed length, build attention mask
    3. transformer encoder -> one hidden vector per token
    4. mean-pool over real tokens only
    5. L2-normalize

Because every vector is unit length, cosine similarity is a dot product.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import os
import warnings

import numpy as np

# Suppress noisy transformer warnings/output during model loading.
os.environ.setdefault("TOKENIZERS_PARALLELISM", "false")
os.environ.setdefault("TRANSFORMERS_VERBOSITY", "error")
os.environ.setdefault("HF_HUB_DISABLE_PROGRESS_BARS", "1")
os.environ.setdefault("HF_HUB_DISABLE_TELEMETRY", "1")

logging.getLogger("sentence_transformers").setLevel(logging.ERROR)
logging.getLogger("transformers").setLevel(logging.ERROR)
logging.getLogger("huggingface_hub").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", message=".*UNEXPECTED.*")
warnings.filterwarnings("ignore", message=".*position_ids.*")

try:
    from sentence_transformers import SentenceTransformer
    import torch
    SENTENCE_TRANSFORMERS_AVAILABLE = True
except ImportError:
    SENTENCE_TRANSFORMERS_AVAILABLE = False

logger = logging.getLogger(__name__)


class EmbeddingModelError(RuntimeError):
    """The embedding model could not be loaded or run."""


@dataclass
class EmbedderConfig:
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    max_length: int = 128  # tokens, including [CLS]/[SEP]
    device: str = "cpu"
    use_cache: bool = False
    pool_epsilon: float = 1e-9
    norm_epsilon: float = 1e-9


# =============================================================================
# Pipeline steps (pure numpy, model independent)
# =============================================================================

def pad_or_truncate(
    token_ids: Sequence[Sequence[int]],
    max_length: int,
    pad_id: int = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Bring every sequence to exactly ``max_length`` ids.

    Overlong sequences are cut (the tail is dropped, no error). Returns
    ``(input_ids, attention_mask)``, both int64 of shape [batch, max_length];
    the mask is 1 for real tokens and 0 for padding.
    """
    batch = len(token_ids)
    input_ids = np.full((batch, max_length), pad_id, dtype=np.int64)
    attention_mask = np.zeros((batch, max_length), dtype=np.int64)

    for row, ids in enumerate(token_ids):
        if len(ids) > max_length:
            logger.debug("truncating sequence of %d tokens to %d", len(ids), max_length)
        kept = list(ids)[:max_length]
        input_ids[row, :len(kept)] = kept
        attention_mask[row, :len(kept)] = 1

    return input_ids, attention_mask


def mean_pooling(hidden: np.ndarray, attention_mask: np.ndarray, eps: float = 1e-9) -> np.ndarray:
    """
    Average token vectors over the positions where the mask is 1.

    Args:
        hidden: [batch, seq, dim] token vectors
        attention_mask: [batch, seq], 1 = real token, 0 = padding
        eps: floor for the token count (an all-padding row pools to zeros)

    Returns:
        [batch, dim] float32
    """
    mask = (attention_mask > 0).astype(np.float32)[:, :, None]
    summed = (hidden.astype(np.float32) * mask).sum(axis=1)
    counts = np.maximum(mask.sum(axis=1), eps)
    return (summed / counts).astype(np.float32)


def l2_normalize(vectors: np.ndarray, eps: float = 1e-9) -> np.ndarray:
    """Scale each row to unit length. ``eps`` keeps all-zero rows finite."""
    norms = np.sqrt((vectors.astype(np.float32) ** 2).sum(axis=1, keepdims=True)) + eps
    return (vectors / norms).astype(np.float32)


# =============================================================================
# Embedder
# =============================================================================

class SentenceEmbedder:
    """
    Embeds sentences with a local transformer model.

    The model is loaded lazily on first use, or eagerly with ``load()`` (the
    runtime does this at startup so a missing model fails immediately).

    Usage:
        embedder = SentenceEmbedder()
        embedder.load()
        vectors = embedder.encode(["press the button", "back"])  # [2, 384]
    """

    EMBEDDING_DIM = 384

    def __init__(self, config: Optional[EmbedderConfig] = None):
        self.config = config or EmbedderConfig()
        self._cache: Dict[str, np.ndarray] = {}
        self._model: Optional["SentenceTransformer"] = None
        self._embedding_dim = self.EMBEDDING_DIM
        self._initialized = False

    def load(self) -> None:
        self._ensure_initialized()

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        if not SENTENCE_TRANSFORMERS_AVAILABLE:
            raise EmbeddingModelError(
                "sentence-transformers is required for text embedding. "
                "Install with: pip install sentence-transformers"
            )

        try:
            from transformers.utils import logging as hf_logging
            hf_logging.set_verbosity_error()
            hf_logging.disable_progress_bar()
        except ImportError:
            pass

        logger.info("loading embedding model %s on %s", self.config.model_name, self.config.device)
        try:
            self._model = SentenceTransformer(self.config.model_name, device=self.config.device)
        except Exception as exc:
            raise EmbeddingModelError(
                f"could not load embedding model {self.config.model_name!r}: {exc}"
            ) from exc

        self._model.eval()
        self._embedding_dim = self._model.get_sentence_embedding_dimension() or self.EMBEDDING_DIM
        self._initialized = True

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode(self, sentences: Sequence[str]) -> np.ndarray:
        """
        Embed a batch of sentences.

        Returns:
            [len(sentences), dim] float32, each row unit length. An empty
            batch returns a [0, dim] array without touching the model.
        """
        sentences = list(sentences)
        if not sentences:
            return np.zeros((0, self.embedding_dim), dtype=np.float32)

        if not self.config.use_cache:
            return self._encode_uncached(sentences)

        # Check cache for each text
        results = []
        uncached_texts = []
        uncached_indices = []

        for i, text in enumerate(sentences):
            if text in self._cache:
                results.append((i, self._cache[text]))
            else:
                uncached_texts.append(text)
                uncached_indices.append(i)

        if uncached_texts:
            new_embeddings = self._encode_uncached(uncached_texts)
            for idx, text, emb in zip(uncached_indices, uncached_texts, new_embeddings):
                self._cache[text] = emb
                results.append((idx, emb))

        # Sort by original index and stack
        results.sort(key=lambda x: x[0])
        return np.stack([emb for _, emb in results])

    def embed(self, text: str) -> np.ndarray:
        """Embed a single sentence. Returns a [dim] vector."""
        return self.encode([text])[0]

    def _encode_uncached(self, sentences: List[str]) -> np.ndarray:
        self._ensure_initialized()
        token_ids, pad_id = self._tokenize(sentences)
        input_ids, attention_mask = pad_or_truncate(token_ids, self.config.max_length, pad_id)
        hidden = self._run_encoder(input_ids, attention_mask)
        pooled = mean_pooling(hidden, attention_mask, eps=self.config.pool_epsilon)
        return l2_normalize(pooled, eps=self.config.norm_epsilon)

    def _tokenize(self, sentences: List[str]) -> Tuple[List[List[int]], int]:
        """Token ids per sentence (special tokens included, unpadded) and the pad id."""
        tokenizer = self._model.tokenizer
        encoded = tokenizer(
            sentences,
            add_special_tokens=True,
            truncation=True,
            max_length=self.config.max_length,
            padding=False,
        )
        pad_id = tokenizer.pad_token_id if tokenizer.pad_token_id is not None else 0
        return encoded["input_ids"], pad_id

    def _run_encoder(self, input_ids: np.ndarray, attention_mask: np.ndarray) -> np.ndarray:
        """Transformer forward pass. Returns last_hidden_state as [batch, seq, dim]."""
        encoder = self._model[0].auto_model
        device = self._model.device
        inputs = {
            "input_ids": torch.as_tensor(input_ids, device=device),
            "attention_mask": torch.as_tensor(attention_mask, device=device),
        }
        # BERT-style encoders take segment ids; single sentences are all segment 0.
        if "token_type_ids" in self._model.tokenizer.model_input_names:
            inputs["token_type_ids"] = torch.zeros_like(inputs["input_ids"])
        with torch.no_grad():
            output = encoder(**inputs)
        return output.last_hidden_state.detach().cpu().numpy()

    # =========================================================================
    # Misc
    # =========================================================================

    def get_zero_embedding(self) -> np.ndarray:
        return np.zeros(self.embedding_dim, dtype=np.float32)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def is_loaded(self) -> bool:
        return self._initialized

    @property
    def embedding_dim(self) -> int:
        return self._embedding_dim

    @property
    def cache_size(self) -> int:
        return len(self._cache)
