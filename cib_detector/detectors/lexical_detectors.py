"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
lexical_detectors.py

MAIN OBJECTIVE:
---------------
This script implements the lexical coordination signals: rare hashtag combinations weighted
by TF-IDF, look-alike usernames by Levenshtein distance, and template captions by word
n-gram overlap.

Dependencies:
-------------
- math
- re
- collections
- typing

MAIN FEATURES:
--------------
1) Per-user hashtag TF-IDF with ln(U / (df + 1)) inverse document frequency
2) Grouping of posts by sorted rare-hashtag combination
3) Levenshtein edit distance and normalized username similarity
4) Word n-gram extraction and set overlap between captions

Author:
-------
Antoine Lemor
"""

import math
import re
from collections import Counter
from typing import Dict, List, Set, Tuple

from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.core.models import RareHashtagGroup, UsernameGroup, TemplatePair
from cib_detector.core.constants import DEFAULT_NGRAM_SIZE

_PUNCTUATION = re.compile(r'[^\w\s]')


# ---------------------------------------------------------------------------
# TF-IDF hashtag rarity
# ---------------------------------------------------------------------------

def calculate_tfidf(hashtag: str, user_hashtags: List[str], all_user_sets: List[Set[str]]) -> float:
    """
    TF-IDF of one hashtag for one user.

    tf = occurrences in the user's hashtag list / list length
    idf = ln(number of users / (users using the hashtag + 1))
    """
    tf = user_hashtags.count(hashtag) / len(user_hashtags) if user_hashtags else 0.0
    users_with = sum(1 for tags in all_user_sets if hashtag in tags)
    if not all_user_sets:
        return 0.0
    idf = math.log(len(all_user_sets) / (users_with + 1))
    return tf * idf


class RareHashtagDetector(BaseDetector):
    """
    Groups of users sharing the same rare hashtag combination.
    """

    name = 'rare_hashtags'

    def detect(self, context: DetectionContext) -> List[RareHashtagGroup]:
        config = self.get_config(context)

        tagged = {uid: u for uid, u in context.users.items() if u.hashtags}
        n_users = len(tagged)
        if n_users == 0:
            return []

        # Document frequency over per-user hashtag sets
        doc_freq = Counter()
        for user in tagged.values():
            doc_freq.update(set(user.hashtags))
        term_counts = {uid: Counter(u.hashtags) for uid, u in tagged.items()}

        def tfidf(tag: str, user_id: str) -> float:
            tf = term_counts[user_id][tag] / len(tagged[user_id].hashtags)
            return tf * math.log(n_users / (doc_freq[tag] + 1))

        sequences: Dict[str, Dict] = {}
        for post in context.posts:
            if not post.hashtags or post.author_id not in tagged:
                continue
            score = sum(tfidf(h, post.author_id) for h in post.hashtags) / len(post.hashtags)
            if score > config.tfidf_threshold:
                combo = tuple(sorted(post.hashtags))
                key = ','.join(combo)
                entry = sequences.setdefault(key, {'users': set(), 'tfidf': score, 'hashtags': combo})
                entry['users'].add(post.author_id)

        findings = [
            RareHashtagGroup(frozenset(entry['users']), tfidf=entry['tfidf'], hashtags=entry['hashtags'])
            for entry in sequences.values()
            if len(entry['users']) >= config.min_hashtag_group_size
        ]
        self.logger.debug(f"{len(sequences)} rare combinations, {len(findings)} above group size")
        return findings


# ---------------------------------------------------------------------------
# Username similarity
# ---------------------------------------------------------------------------

def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute; unit costs)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def username_similarity(a: str, b: str) -> float:
    """1 - distance / max(len); two empty names are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


class UsernameSimilarityDetector(BaseDetector):
    """
    Look-alike usernames.
    """

    name = 'similar_usernames'

    def detect(self, context: DetectionContext) -> List[UsernameGroup]:
        config = self.get_config(context)

        names = [(uid, u.username) for uid, u in context.users.items()
                 if len(u.username) >= config.min_username_length]

        groups: Dict[str, Dict] = {}
        for i in range(len(names)):
            id1, name1 = names[i]
            for j in range(i + 1, len(names)):
                id2, name2 = names[j]
                similarity = username_similarity(name1, name2)
                if similarity >= config.username_threshold:
                    pair_names = tuple(sorted((name1, name2)))
                    key = '|'.join(pair_names)
                    entry = groups.setdefault(key, {'users': set(), 'similarity': similarity,
                                                    'names': pair_names})
                    entry['users'].update((id1, id2))

        return [
            UsernameGroup(frozenset(entry['users']), similarity=entry['similarity'], names=entry['names'])
            for entry in groups.values()
            if len(entry['users']) >= config.min_username_group_size
        ]


# ---------------------------------------------------------------------------
# Template captions
# ---------------------------------------------------------------------------

def get_ngrams(text: str, n: int = DEFAULT_NGRAM_SIZE) -> List[str]:
    """Lowercased word n-grams with punctuation stripped."""
    words = _PUNCTUATION.sub('', text.lower()).split()
    return [' '.join(words[i:i + n]) for i in range(len(words) - n + 1)]


def ngram_overlap(text_a: str, text_b: str, n: int = DEFAULT_NGRAM_SIZE) -> float:
    """|A & B| / max(|A|, |B|) over the two n-gram sets; 0 when either is empty."""
    set_a = set(get_ngrams(text_a, n))
    set_b = set(get_ngrams(text_b, n))
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / max(len(set_a), len(set_b))


class TemplateCaptionDetector(BaseDetector):
    """
    Caption pairs that share a large fraction of word n-grams.
    """

    name = 'template_caption'

    def detect(self, context: DetectionContext) -> List[TemplatePair]:
        config = self.get_config(context)

        ngram_sets: List[Tuple[str, Set[str]]] = []
        for uid, user in context.users.items():
            caption = user.representative_caption(config.min_caption_length)
            if caption is not None:
                ngram_sets.append((uid, set(get_ngrams(caption, config.ngram_size))))

        findings = []
        for i in range(len(ngram_sets)):
            u1, set_a = ngram_sets[i]
            if not set_a:
                continue
            for j in range(i + 1, len(ngram_sets)):
                u2, set_b = ngram_sets[j]
                if not set_b:
                    continue
                overlap = len(set_a & set_b) / max(len(set_a), len(set_b))
                if overlap >= config.ngram_threshold:
                    findings.append(TemplatePair(u1, u2, overlap=overlap))
        return findings
