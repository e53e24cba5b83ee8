"""
config/settings.py
Central configuration — reads from environment variables and .env file.
"""
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Values shipped in sample .env files that must not be mistaken for real keys
_PLACEHOLDER_KEYS = {
    "your_openai_api_key_here",
    "your_gemini_api_key_here",
    "your_groq_api_key_here",
}


def _api_key(os_module, name: str) -> str:
    value = os_module.environ.get(name, "").strip()
    return "" if value in _PLACEHOLDER_KEYS else value


class Settings:

    def __init__(self):
        self._load()

    def _load(self):
        import os
        env_file = BASE_DIR / ".env"
        if env_file.exists():
            for line in env_file.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, _, val = line.partition("=")
                    os.environ.setdefault(key.strip(), val.strip())

        # LLM provider: openai | gemini | groq
        self.llm_provider    = os.environ.get("LLM_PROVIDER", "openai").lower()
        self.openai_api_key  = _api_key(os, "OPENAI_API_KEY")
        self.openai_model    = os.environ.get("OPENAI_MODEL", "gpt-4o")
        self.gemini_api_key  = _api_key(os, "GEMINI_API_KEY")
        self.gemini_model    = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
        self.groq_api_key    = _api_key(os, "GROQ_API_KEY")
        self.groq_model      = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")

        self.llm_timeout_s   = float(os.environ.get("LLM_TIMEOUT_S", "20"))
        self.llm_max_retries = int(os.environ.get("LLM_MAX_RETRIES", "1"))
        self.llm_max_tokens  = 1000

        self.api_host    = os.environ.get("API_HOST", "0.0.0.0")
        self.api_port    = int(os.environ.get("API_PORT", "8000"))
        self.api_title   = "Maritime Operations Assistant API"
        self.api_version = "1.0.0"

        self.metrics_port = int(os.environ.get("METRICS_PORT", "9090"))
        self.log_level    = os.environ.get("LOG_LEVEL", "INFO")

        # Voyage model (rough estimates, not a physical simulation)
        self.service_speed_knots     = 14.0
        self.fuel_rate_mt_per_nm     = 0.05
        self.earth_radius_nm         = 3440.065
        self.default_distance_nm     = 5000.0
        self.bunker_threshold_nm     = 6000.0

        # Operational limits used by the weather recommendation
        self.container_wind_limit_kt = 25.0
        self.pilot_visibility_min_nm = 2.0

        self.history_turns = 6
        self.knowledge_min_content_chars = 50

        # Knowledge base embeddings (ChromaDB, in memory)
        self.embedding_model          = os.environ.get("EMBEDDING_MODEL", "all-MiniLM-L6-v2")
        self.knowledge_min_similarity = float(os.environ.get("KNOWLEDGE_MIN_SIMILARITY", "0.1"))

        # Largest accepted document upload
        self.max_upload_bytes = int(os.environ.get("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    def api_key_for(self, provider: str) -> str:
        return {
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
            "groq":   self.groq_api_key,
        }.get(provider, "")

    def model_for(self, provider: str) -> str:
        return {
            "openai": self.openai_model,
            "gemini": self.gemini_model,
            "groq":   self.groq_model,
        }.get(provider, self.openai_model)


settings = Settings()
