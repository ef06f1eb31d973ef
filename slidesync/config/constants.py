"""
Constants configuration

Processing limits, segmentation tuning and alignment defaults.
"""

# Input limits
MAX_SCRIPT_SIZE = 100_000          # characters
MAX_SLIDES = 100
MIN_SLIDE_COUNT = 1
MAX_SECTIONS = 200
MAX_IMAGE_BYTES = 5_000_000        # decoded size of a slide image data URL
IMAGE_DATA_URL_PREFIX = "data:image/"

# Model calls
MODEL_TIMEOUT_SECONDS = 30.0
MAX_CONCURRENT_REQUESTS = 3
MAX_MODEL_ATTEMPTS = 3

# Summaries
SUMMARY_BATCH_SIZE = 3
SUMMARY_BATCH_DELAY = 0.5          # seconds between batches
MIN_SUMMARY_TAGS = 3
MAX_SUMMARY_TAGS = 5
LOCAL_SUMMARY_KEY_POINTS = 3

# Segmentation
SLIDE_MARKER_PATTERN = r"slide\s+\d+"
DIVIDER_PATTERN = r"^---+$"
MIN_PARAGRAPH_LENGTH = 20          # paragraphs must be longer than this
MIN_HEADER_SECTION_LENGTH = 10     # header sections must be longer than this
MIN_SPLITTABLE_LENGTH = 50
MAX_REBALANCE_ITERATIONS = 10

DEFAULT_SECTION_HEADERS = [
    "Opening",
    "Documentation Foundation",
    "Capability Stack",
    "Activation Layer",
    "FIRST Framework",
    "Close",
]

# Alignment
FALLBACK_CONFIDENCE = 70
FALLBACK_REASONING = "semantic fallback"
LOW_CONFIDENCE_THRESHOLD = 75
SECTION_COUNT_TOLERANCE = 2
MIN_AVERAGE_SECTION_LENGTH = 20

__all__ = [
    "MAX_SCRIPT_SIZE",
    "MAX_SLIDES",
    "MIN_SLIDE_COUNT",
    "MAX_SECTIONS",
    "MAX_IMAGE_BYTES",
    "IMAGE_DATA_URL_PREFIX",
    "MODEL_TIMEOUT_SECONDS",
    "MAX_CONCURRENT_REQUESTS",
    "MAX_MODEL_ATTEMPTS",
    "SUMMARY_BATCH_SIZE",
    "SUMMARY_BATCH_DELAY",
    "MIN_SUMMARY_TAGS",
    "MAX_SUMMARY_TAGS",
    "LOCAL_SUMMARY_KEY_POINTS",
    "SLIDE_MARKER_PATTERN",
    "DIVIDER_PATTERN",
    "MIN_PARAGRAPH_LENGTH",
    "MIN_HEADER_SECTION_LENGTH",
    "MIN_SPLITTABLE_LENGTH",
    "MAX_REBALANCE_ITERATIONS",
    "DEFAULT_SECTION_HEADERS",
    "FALLBACK_CONFIDENCE",
    "FALLBACK_REASONING",
    "LOW_CONFIDENCE_THRESHOLD",
    "SECTION_COUNT_TOLERANCE",
    "MIN_AVERAGE_SECTION_LENGTH",
]
