"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
provider.py

MAIN OBJECTIVE:
---------------
This script defines the asynchronous embedding provider interface consumed by the semantic
detector, with adapters for plain callables and for a local sentence-transformers model.

Dependencies:
-------------
- asyncio
- inspect
- typing
- logging
- numpy
- sentence-transformers (optional, loaded lazily)

MAIN FEATURES:
--------------
1) EmbeddingProvider protocol (async embed, optional async embed_batch)
2) CallableEmbeddingProvider wrapping sync or async functions
3) SentenceTransformerProvider running the model in a worker thread
4) Normalized float vectors

Author:
-------
Antoine Lemor
"""

import asyncio
import inspect
from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable
import logging

import numpy as np

from cib_detector.core.constants import DEFAULT_EMBEDDING_MODEL
from cib_detector.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that turns a caption into a vector."""

    async def embed(self, text: str) -> Sequence[float]:
        ...


class CallableEmbeddingProvider:
    """
    Adapter for a plain function ``text -> vector``.

    The function may be synchronous or a coroutine function.
    """

    def __init__(self, func: Callable):
        if not callable(func):
            raise EmbeddingError(f"Embedding function must be callable, got {type(func).__name__}")
        self.func = func

    async def embed(self, text: str) -> Sequence[float]:
        result = self.func(text)
        if inspect.isawaitable(result):
            result = await result
        return result


class SentenceTransformerProvider:
    """
    Local sentence-transformers model (default all-MiniLM-L6-v2, 384 dims).

    The model is loaded on first use and encoding runs in a worker
    thread so the event loop stays responsive.
    """

    def __init__(self, model_name: str = DEFAULT_EMBEDDING_MODEL, device: Optional[str] = None,
                 normalize: bool = True):
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._model = None

    def _load_model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as e:
                raise EmbeddingError(
                    "sentence-transformers is required for SentenceTransformerProvider "
                    "(pip install 'cib-detector[embeddings]')"
                ) from e
            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name, device=self.device)
        return self._model

    def _encode(self, texts: List[str]) -> np.ndarray:
        model = self._load_model()
        return model.encode(
            texts,
            batch_size=len(texts),
            show_progress_bar=False,
            convert_to_numpy=True,
            normalize_embeddings=self.normalize
        )

    async def embed(self, text: str) -> Sequence[float]:
        vectors = await asyncio.to_thread(self._encode, [text])
        return vectors[0]

    async def embed_batch(self, texts: List[str]) -> List[Sequence[float]]:
        if not texts:
            return []
        vectors = await asyncio.to_thread(self._encode, list(texts))
        return list(vectors)


def as_provider(provider) -> Optional[EmbeddingProvider]:
    """Accept a provider object, a plain callable or None."""
    if provider is None:
        return None
    if isinstance(provider, EmbeddingProvider):
        return provider
    if callable(provider):
        return CallableEmbeddingProvider(provider)
    raise EmbeddingError(f"Unsupported embedding provider: {type(provider).__name__}")
