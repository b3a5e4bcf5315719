"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
constants.py

MAIN OBJECTIVE:
---------------
This script defines global constants used throughout the CIB detection framework, including
indicator keys and weights, detection defaults and the discrete sensitivity presets.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Indicator keys and default additive risk weights
2) Combo bonus definitions applied after the cross-indicator multiplier
3) Time and size defaults for temporal and lexical detectors
4) Sensitivity presets (1 = most sensitive, 10 = strictest)
5) Node type names shared with the graph layer

Author:
-------
Antoine Lemor
"""

# Indicator keys (one per detector finding type)
SYNCHRONIZED = 'synchronized'
RARE_HASHTAGS = 'rare_hashtags'
SIMILAR_USERNAMES = 'similar_usernames'
HIGH_VOLUME = 'high_volume'
TEMPORAL_BURST = 'temporal_burst'
REGULAR_RHYTHM = 'regular_rhythm'
NIGHT_ACTIVITY = 'night_activity'
SEMANTIC_DUPLICATE = 'semantic_duplicate'
TEMPLATE_CAPTION = 'template_caption'
CREATION_CLUSTER = 'creation_cluster'

# Order in which reasons are appended to a risk record
INDICATOR_ORDER = [
    SYNCHRONIZED,
    RARE_HASHTAGS,
    SIMILAR_USERNAMES,
    HIGH_VOLUME,
    TEMPORAL_BURST,
    REGULAR_RHYTHM,
    NIGHT_ACTIVITY,
    SEMANTIC_DUPLICATE,
    TEMPLATE_CAPTION,
    CREATION_CLUSTER,
]

# Additive risk weights
INDICATOR_WEIGHTS = {
    SYNCHRONIZED: 25,
    RARE_HASHTAGS: 20,
    SIMILAR_USERNAMES: 10,
    HIGH_VOLUME: 15,
    TEMPORAL_BURST: 15,
    REGULAR_RHYTHM: 20,
    NIGHT_ACTIVITY: 25,
    SEMANTIC_DUPLICATE: 25,
    TEMPLATE_CAPTION: 20,
    CREATION_CLUSTER: 30,
}

# Combo bonuses: (required indicators, bonus), evaluated in this order
COMBO_BONUSES = [
    ((SIMILAR_USERNAMES, CREATION_CLUSTER), 20),
    ((SYNCHRONIZED, REGULAR_RHYTHM), 15),
]

MAX_RISK_SCORE = 100
MAX_REASON_PARTNERS = 5

# Temporal defaults (seconds)
DEFAULT_TIME_WINDOW = 300
DEFAULT_CREATION_WINDOW = 86400
SECONDS_PER_DAY = 86400
DEFAULT_TIMEZONE = 'UTC'

# Behavioral minimums
MIN_RHYTHM_POSTS = 5
MIN_NIGHT_POSTS = 10

# Lexical defaults
DEFAULT_NGRAM_SIZE = 5
MIN_CAPTION_LENGTH = 20
MIN_USERNAME_LENGTH = 4
CAPTION_SNIPPET_LENGTH = 50

# Embedding / comparison batching
DEFAULT_EMBEDDING_BATCH_SIZE = 20
DEFAULT_COMPARISON_BATCH_SIZE = 100
DEFAULT_EMBEDDING_MODEL = 'sentence-transformers/all-MiniLM-L6-v2'
DEFAULT_EMBEDDING_CACHE_ENTRIES = 10000

# Community detection
DEFAULT_MAX_LOUVAIN_LEVELS = 10
NOISE_CLUSTER_ID = 0

# Graph node types
NODE_TYPES = ['user', 'hashtag', 'location']

# Sensitivity presets (1 = maximum sensitivity, 10 = strictest)
DEFAULT_SENSITIVITY = 5

SENSITIVITY_LABELS = {
    1: 'Very Low',
    2: 'Low',
    3: 'Low-Med',
    4: 'Medium-Low',
    5: 'Medium',
    6: 'Medium-High',
    7: 'High-Med',
    8: 'High',
    9: 'Very High',
    10: 'Maximum',
}

SENSITIVITY_PRESETS = {
    1: {
        'semantic_enabled': True, 'semantic_threshold': 0.70, 'ngram_threshold': 0.15,
        'username_threshold': 0.60, 'tfidf_threshold': 0.25, 'zscore_threshold': 1.0,
        'burst_posts': 3, 'rhythm_cv': 0.20, 'night_gap': 14400, 'cluster_size': 3,
        'cross_multiplier': 0.20, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    2: {
        'semantic_enabled': True, 'semantic_threshold': 0.75, 'ngram_threshold': 0.20,
        'username_threshold': 0.70, 'tfidf_threshold': 0.35, 'zscore_threshold': 1.5,
        'burst_posts': 4, 'rhythm_cv': 0.15, 'night_gap': 10800, 'cluster_size': 4,
        'cross_multiplier': 0.25, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    3: {
        'semantic_enabled': True, 'semantic_threshold': 0.78, 'ngram_threshold': 0.22,
        'username_threshold': 0.75, 'tfidf_threshold': 0.40, 'zscore_threshold': 1.7,
        'burst_posts': 4, 'rhythm_cv': 0.12, 'night_gap': 9000, 'cluster_size': 4,
        'cross_multiplier': 0.25, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    4: {
        'semantic_enabled': True, 'semantic_threshold': 0.82, 'ngram_threshold': 0.25,
        'username_threshold': 0.77, 'tfidf_threshold': 0.45, 'zscore_threshold': 1.8,
        'burst_posts': 4, 'rhythm_cv': 0.11, 'night_gap': 7800, 'cluster_size': 4,
        'cross_multiplier': 0.27, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    5: {
        'semantic_enabled': True, 'semantic_threshold': 0.85, 'ngram_threshold': 0.30,
        'username_threshold': 0.80, 'tfidf_threshold': 0.50, 'zscore_threshold': 2.0,
        'burst_posts': 5, 'rhythm_cv': 0.10, 'night_gap': 7200, 'cluster_size': 5,
        'cross_multiplier': 0.30, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    6: {
        'semantic_enabled': True, 'semantic_threshold': 0.87, 'ngram_threshold': 0.35,
        'username_threshold': 0.83, 'tfidf_threshold': 0.55, 'zscore_threshold': 2.2,
        'burst_posts': 5, 'rhythm_cv': 0.09, 'night_gap': 6600, 'cluster_size': 5,
        'cross_multiplier': 0.32, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 5,
    },
    7: {
        'semantic_enabled': True, 'semantic_threshold': 0.89, 'ngram_threshold': 0.40,
        'username_threshold': 0.85, 'tfidf_threshold': 0.60, 'zscore_threshold': 2.5,
        'burst_posts': 6, 'rhythm_cv': 0.08, 'night_gap': 6000, 'cluster_size': 6,
        'cross_multiplier': 0.35, 'min_sync_posts': 2, 'min_hashtag_group_size': 3,
        'min_username_group_size': 3, 'min_high_volume_posts': 6,
    },
    8: {
        'semantic_enabled': True, 'semantic_threshold': 0.91, 'ngram_threshold': 0.45,
        'username_threshold': 0.88, 'tfidf_threshold': 0.70, 'zscore_threshold': 2.8,
        'burst_posts': 7, 'rhythm_cv': 0.07, 'night_gap': 5400, 'cluster_size': 6,
        'cross_multiplier': 0.38, 'min_sync_posts': 3, 'min_hashtag_group_size': 5,
        'min_username_group_size': 4, 'min_high_volume_posts': 8,
    },
    9: {
        'semantic_enabled': True, 'semantic_threshold': 0.93, 'ngram_threshold': 0.50,
        'username_threshold': 0.90, 'tfidf_threshold': 0.80, 'zscore_threshold': 3.2,
        'burst_posts': 8, 'rhythm_cv': 0.06, 'night_gap': 4800, 'cluster_size': 7,
        'cross_multiplier': 0.42, 'min_sync_posts': 5, 'min_hashtag_group_size': 7,
        'min_username_group_size': 6, 'min_high_volume_posts': 12,
    },
    10: {
        'semantic_enabled': True, 'semantic_threshold': 0.95, 'ngram_threshold': 0.60,
        'username_threshold': 0.93, 'tfidf_threshold': 1.00, 'zscore_threshold': 3.5,
        'burst_posts': 9, 'rhythm_cv': 0.05, 'night_gap': 3600, 'cluster_size': 8,
        'cross_multiplier': 0.45, 'min_sync_posts': 10, 'min_hashtag_group_size': 15,
        'min_username_group_size': 12, 'min_high_volume_posts': 25,
    },
}
