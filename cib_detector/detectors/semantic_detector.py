"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
semantic_detector.py

MAIN OBJECTIVE:
---------------
This script detects users whose captions say the same thing in different words, by embedding
one representative caption per user and comparing every pair with cosine similarity, while
yielding to the event loop between batches.

Dependencies:
-------------
- asyncio
- typing
- numpy
- scikit-learn

MAIN FEATURES:
--------------
1) Representative caption selection per user
2) Batched embedding through an async provider with per-item failure isolation
3) Fingerprinted reuse of embeddings across runs
4) Blocked cosine similarity matrix (scikit-learn) with cooperative yields
5) Similarity rounded to 3 decimals and 50-character caption snippets

Author:
-------
Antoine Lemor
"""

import asyncio
import time
from typing import Dict, List, Optional, Tuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import SemanticPair
from cib_detector.core.constants import CAPTION_SNIPPET_LENGTH
from cib_detector.embeddings.cache import EmbeddingCache, dataset_fingerprint
from cib_detector.embeddings.provider import as_provider
from cib_detector.utils.progress_tracker import ProgressReporter


class SemanticSimilarityDetector(BaseDetector):
    """
    Semantic duplicate captions.

    Needs an embedding provider; without one, or with semantic analysis
    disabled, the detector returns no findings.
    """

    name = 'semantic_duplicate'

    def __init__(self, provider=None, cache: Optional[EmbeddingCache] = None,
                 config: Optional[DetectorConfig] = None,
                 progress: Optional[ProgressReporter] = None):
        super().__init__(config)
        self.provider = as_provider(provider)
        self.cache = cache if cache is not None else EmbeddingCache()
        self.progress = progress
        self.failed_users: List[str] = []

    def detect(self, context: DetectionContext) -> List[SemanticPair]:
        """Blocking entry point; must not be called from a running event loop."""
        return asyncio.run(self.detect_async(context))

    async def run(self, context: DetectionContext) -> List[SemanticPair]:
        start = time.time()
        findings = await self.detect_async(context)
        self._record(findings, start)
        return findings

    async def detect_async(self, context: DetectionContext) -> List[SemanticPair]:
        config = self.get_config(context)
        self.failed_users = []

        if not config.semantic_enabled:
            self.logger.info("Semantic analysis disabled")
            return []
        if self.provider is None:
            self.logger.warning("No embedding provider configured, skipping semantic analysis")
            return []

        captions = self._collect_captions(context, config)
        if len(captions) < 2:
            return []
        self.logger.info(f"Processing {len(captions)} captions for semantic similarity")

        vectors = await self._get_user_vectors(context, config, captions)
        return await self._compare(vectors, captions, config)

    def _collect_captions(self, context: DetectionContext, config: DetectorConfig) -> Dict[str, str]:
        captions = {}
        for uid, user in context.users.items():
            caption = user.representative_caption(config.min_caption_length)
            if caption is not None:
                captions[uid] = caption
        return captions

    async def _get_user_vectors(self, context: DetectionContext, config: DetectorConfig,
                                captions: Dict[str, str]) -> Dict[str, np.ndarray]:
        fingerprint = dataset_fingerprint(context.posts, config.detection_params())
        if self.cache.bind(fingerprint):
            cached = self.cache.get_user_map()
            if cached is not None:
                self.logger.info("Using cached embeddings")
                return cached

        vectors: Dict[str, np.ndarray] = {}
        items = list(captions.items())
        batch_size = config.embedding_batch_size

        for batch_start in range(0, len(items), batch_size):
            batch = items[batch_start:batch_start + batch_size]
            await self._embed_batch(batch, vectors)
            if self.progress is not None:
                self.progress.report('Generating embeddings', batch_start + len(batch), len(items))
            await asyncio.sleep(0)

        self.cache.put_user_map(vectors, fingerprint)
        return vectors

    async def _embed_batch(self, batch: List[Tuple[str, str]], vectors: Dict[str, np.ndarray]) -> None:
        # caption -> users waiting for it; identical captions are embedded once
        pending: Dict[str, List[str]] = {}
        for uid, caption in batch:
            cached = self.cache.get_text(caption)
            if cached is not None:
                vectors[uid] = cached
            else:
                pending.setdefault(caption, []).append(uid)
        if not pending:
            return

        texts = list(pending)
        embed_batch = getattr(self.provider, 'embed_batch', None)
        if embed_batch is not None:
            try:
                results = await embed_batch(texts)
                if len(results) != len(texts):
                    raise ValueError(f"Embedding batch size mismatch ({len(results)} != {len(texts)})")
            except Exception as e:
                self.logger.warning(f"Batch embedding failed ({e}), retrying item by item")
            else:
                for caption, vector in zip(texts, results):
                    self._store(pending[caption], caption, vector, vectors)
                return

        for caption in texts:
            try:
                vector = await self.provider.embed(caption)
            except Exception as e:
                self.logger.warning(f"Failed to generate embedding for user(s) {', '.join(pending[caption])}: {e}")
                self.failed_users.extend(pending[caption])
                continue
            self._store(pending[caption], caption, vector, vectors)

    def _store(self, user_ids: List[str], caption: str, vector, vectors: Dict[str, np.ndarray]) -> None:
        arr = np.asarray(vector, dtype=float).ravel() if vector is not None else np.empty(0)
        if arr.size == 0:
            self.logger.warning(f"Empty embedding for user(s) {', '.join(user_ids)}")
            self.failed_users.extend(user_ids)
            return
        self.cache.put_text(caption, arr)
        for uid in user_ids:
            vectors[uid] = arr

    async def _compare(self, vectors: Dict[str, np.ndarray], captions: Dict[str, str],
                       config: DetectorConfig) -> List[SemanticPair]:
        # Keep caption order; drop vectors whose dimension disagrees with the first one
        user_ids = [uid for uid in captions if uid in vectors]
        if user_ids:
            dim = vectors[user_ids[0]].shape[0]
            mismatched = [uid for uid in user_ids if vectors[uid].shape[0] != dim]
            for uid in mismatched:
                self.logger.warning(f"Embedding dimension mismatch for user {uid}, excluded")
            user_ids = [uid for uid in user_ids if uid not in mismatched]
        if len(user_ids) < 2:
            return []

        matrix = np.vstack([vectors[uid] for uid in user_ids])
        n = len(user_ids)
        block = config.comparison_batch_size
        findings = []

        for row_start in range(0, n, block):
            row_end = min(row_start + block, n)
            sims = cosine_similarity(matrix[row_start:row_end], matrix)
            for offset in range(row_end - row_start):
                i = row_start + offset
                row = sims[offset]
                for j in np.nonzero(row[i + 1:] >= config.semantic_threshold)[0] + i + 1:
                    u1, u2 = user_ids[i], user_ids[j]
                    findings.append(SemanticPair(
                        u1, u2,
                        similarity=round(float(row[j]), 3),
                        captions=(captions[u1][:CAPTION_SNIPPET_LENGTH],
                                  captions[u2][:CAPTION_SNIPPET_LENGTH])
                    ))
            if self.progress is not None:
                self.progress.report('Comparing semantic similarity', row_end, n)
            await asyncio.sleep(0)

        return findings
