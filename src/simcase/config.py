import os

from dotenv import load_dotenv

# Load from .env if it exists (useful for local development)
load_dotenv()

# Anthropic / Claude
ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
DEFAULT_MAX_TOKENS = int(os.getenv("SIMCASE_MAX_TOKENS", "2000"))
DEFAULT_TEMPERATURE = float(os.getenv("SIMCASE_TEMPERATURE", "0.7"))
REQUEST_TIMEOUT_S = float(os.getenv("SIMCASE_REQUEST_TIMEOUT_S", "30"))
MAX_ATTEMPTS = int(os.getenv("SIMCASE_MAX_ATTEMPTS", "3"))

# --- CONFIG --- per-client rate limiting
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("SIMCASE_RATE_LIMIT_MAX_REQUESTS", "10"))
RATE_LIMIT_WINDOW_S = float(os.getenv("SIMCASE_RATE_LIMIT_WINDOW_S", "60"))

LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO").upper()
LOG_PREVIEW_CHARS = 200  # head/tail size when logging raw model output
