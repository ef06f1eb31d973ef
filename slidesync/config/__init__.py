"""
Application configuration and settings
"""

import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .models import (
    ModelConfig,
    StageModels,
    LLMProviderType,
    DEFAULT_STAGE_MODELS,
    GEMINI_STAGE_MODELS,
    OLLAMA_STAGE_MODELS,
    get_active_provider,
    get_stage_models,
    get_stage_config,
    list_stages,
)
from .constants import (
    MODEL_TIMEOUT_SECONDS as _DEFAULT_MODEL_TIMEOUT,
    SUMMARY_BATCH_SIZE as _DEFAULT_BATCH_SIZE,
    SUMMARY_BATCH_DELAY as _DEFAULT_BATCH_DELAY,
    LOW_CONFIDENCE_THRESHOLD as _DEFAULT_LOW_CONFIDENCE,
)


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Pipeline tuning
MODEL_TIMEOUT_SECONDS = float(os.getenv("MODEL_TIMEOUT_SECONDS", str(_DEFAULT_MODEL_TIMEOUT)))
SUMMARY_BATCH_SIZE = int(os.getenv("SUMMARY_BATCH_SIZE", str(_DEFAULT_BATCH_SIZE)))
SUMMARY_BATCH_DELAY = float(os.getenv("SUMMARY_BATCH_DELAY", str(_DEFAULT_BATCH_DELAY)))
LOW_CONFIDENCE_THRESHOLD = int(os.getenv("LOW_CONFIDENCE_THRESHOLD", str(_DEFAULT_LOW_CONFIDENCE)))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = parse_bool_env(os.getenv("LOG_JSON"), default=False)
LOG_FILE = os.getenv("LOG_FILE") or None
