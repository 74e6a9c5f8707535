"""Policy constants for family assignment and link scoring."""

# Theme axes, in canonical order, with the label used when an axis cleans to nothing
THEME_AXES: tuple[str, ...] = (
    "emotional_core",
    "narrative_state",
    "relational_focus",
    "temporal_orientation",
    "spatial_intimacy",
)
THEME_AXIS_FALLBACKS: dict[str, str] = {
    "emotional_core": "memory",
    "narrative_state": "unfinished",
    "relational_focus": "self",
    "temporal_orientation": "memory",
    "spatial_intimacy": "private",
}
PROFILE_AXIS_FALLBACK = "memory"
MAX_AXIS_ENTRIES = 4
MAX_TAGS = 12

# Embedding usability
MIN_EMBEDDING_LENGTH = 8

# Family-match weights
EMBEDDING_WEIGHTS = {"embedding": 0.60, "theme": 0.25, "tags": 0.15}
NO_EMBEDDING_WEIGHTS = {"embedding": 0.0, "theme": 0.65, "tags": 0.35}

# Decision thresholds
THRESHOLD_WITH_EMBEDDING = 0.62
THRESHOLD_WITHOUT_EMBEDDING = 0.52
STRONG_THRESHOLD_WITH_EMBEDDING = 0.72
STRONG_THRESHOLD_WITHOUT_EMBEDDING = 0.60
DECISION_MARGIN = 0.08
SUGGESTED_EXISTING_SLACK = 0.05

# Analysis fallbacks
FALLBACK_MOOD = "Fragment"
FAILED_PARSE_MOOD = "Memory"
FALLBACK_TAGS = ("raw", "unsorted")
FALLBACK_COLOR = "#FFFFFF"
FAILED_PARSE_COLOR = "#CCCCCC"
OFFLINE_TAGS = ("offline", "auto-classified")
OFFLINE_MOODS: tuple[tuple[str, str], ...] = (
    ("Memory", "#9CA3AF"),
    ("Reflection", "#60A5FA"),
    ("Longing", "#A78BFA"),
    ("Quiet Joy", "#34D399"),
    ("Tension", "#F87171"),
    ("Relief", "#FBBF24"),
    ("Grief", "#6B7280"),
    ("Wonder", "#EC4899"),
)
OFFLINE_REASONING = "Classified in offline mode due to rate limiting"
DEFAULT_LOCATION = "The Strata"

# Link scoring
CONTRADICTION_PAIRS: tuple[tuple[str, str], ...] = (
    ("joy", "grief"),
    ("love", "anger"),
    ("hope", "despair"),
    ("fear", "relief"),
    ("light", "dark"),
    ("home", "loss"),
)
ABSENCE_TAGS = frozenset({"unsaid", "silence", "absence", "missing", "hollow"})
CONTRADICTION_SCORE = 2
SAME_MOOD_SCORE = 2
SHARED_CORE_SCORE = 2
MAX_SHARED_TAG_SCORE = 2
ABSENCE_SCORE = 1
MIN_LINK_SCORE = 2
WEAK_FAMILY_LINK_SCORE = 1

# Cluster labels
UNLABELED_MOOD = "Fragment"

# Provider output
ANALYSIS_MAX_TAGS = 5
BRIEF_SAMPLE_SIZE = 3
BRIEF_FAMILY_LIMIT = 10
