"""Constants for the ranking module."""

# Score scale produced by the LLM judge and kept after adjustment
MIN_SCORE: float = 0.0
MAX_SCORE: float = 10.0

# Reading time bounds in minutes
MIN_READ_TIME: float = 1.0
MAX_READ_TIME: float = 60.0
DEFAULT_READ_TIME: float = 5.0

MAX_CATEGORIES: int = 5

# Placeholder until a response-quality signal exists
DEFAULT_CONFIDENCE: float = 0.75

DEFAULT_REASONING: str = "No reasoning provided"

# Orchestrator defaults
DEFAULT_TIMEOUT_SECONDS: float = 60.0
DEFAULT_CONFIDENCE_THRESHOLD: float = 0.5
DEFAULT_MAX_BATCH_SIZE: int = 10
WINDOW_DELAY_SECONDS: float = 0.1

# Lower temperature keeps scoring consistent between runs
SCORING_TEMPERATURE: float = 0.3

# Relevance category thresholds
HIGH_INTEREST_THRESHOLD: float = 7.0
MAYBE_INTERESTING_THRESHOLD: float = 4.0

VALID_URL_SCHEMES: tuple[str, ...] = ("http", "https")

# Log component names
COMPONENT_RANKING = "ranking"
