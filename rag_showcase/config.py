"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# Backend service – base path only, endpoint paths live in the API client
API_BASE_URL: str = os.getenv(
    "SHOWCASE_API_BASE_URL", "https://general-backend-production-a734.up.railway.app"
).rstrip("/")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP settings
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "120"))

# Local persisted state (bearer token + comparison history)
STATE_PATH: Path = Path(
    os.getenv("SHOWCASE_STATE_PATH", str(Path.home() / ".rag_showcase" / "state.json"))
)
AUTH_TOKEN_KEY: str = "auth_token"
COMPARISON_HISTORY_KEY: str = "comparison_results"

# Upload limits
MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

# Bulk question upload
MAX_BULK_QUESTIONS: int = 50
BULK_QUESTION_DELAY_SECONDS: float = 0.5

# Analytics auto-refresh
ANALYTICS_REFRESH_SECONDS: float = 30.0
DEMO_PROFILE_COUNT: int = 50

# LLM providers the backend accepts for the Q&A comparison
COMPARE_PROVIDERS: dict = {
    "local": "Local & GDPR-compliant",
    "grok": "Grok Cloud API (faster, external processing)",
}
DEFAULT_COMPARE_PROVIDER: str = os.getenv("DEFAULT_COMPARE_PROVIDER", "grok")

# LLM providers the backend accepts for profile import and job analysis
ANALYZE_PROVIDERS: dict = {
    "grok": "Grok (X.AI)",
    "anthropic": "Claude (Anthropic)",
    "openai": "GPT-4 (OpenAI)",
    "ollama": "Ollama (Local)",
}
DEFAULT_ANALYZE_PROVIDER: str = os.getenv("DEFAULT_ANALYZE_PROVIDER", "grok")

# Fallback label while /current-model has not answered
DEFAULT_LOCAL_MODEL: str = "llama3.2:3b"

# Ingestion form capabilities (one parameterized form instead of screen variants)
INGESTION_CAPABILITIES: dict = {
    "supports_url_load": True,
    "supports_cover_letter": True,
    "supports_links": True,
    "supports_skip_processing": True,
}
