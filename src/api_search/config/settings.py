"""Configuration settings for the API search engine."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from api_search.core.exceptions import ConfigurationError

# Load .env file
load_dotenv()

CHAT_PROVIDERS = ("openai", "anthropic", "ollama")
EMBEDDING_PROVIDERS = ("openai", "sentence_transformer")
REQUEST_ROUTERS = ("first", "round_robin")
CACHE_BACKENDS = ("disk", "redis")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CACHE_FILE = "~/.cache/api-search/search-engine.json"


def _safe_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def _safe_float(value: Optional[str], default: float) -> float:
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def _safe_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_cors_origins(value: str) -> List[str]:
    """Parse comma-separated CORS origins ("*" allows all).

    Localhost entries also allow their 127.0.0.1 twin.
    """
    if not value or value.strip() == "*":
        return ["*"]

    origins = []
    for origin in value.split(","):
        origin = origin.strip()
        if origin:
            origins.append(origin)
            if "localhost" in origin:
                origins.append(origin.replace("localhost", "127.0.0.1"))

    return origins or ["*"]


@dataclass
class Settings:
    """Configuration settings with environment variable support.

    All settings can be overridden via environment variables or a .env file.

    Example:
        settings = Settings()
        settings = Settings(chat_provider="ollama", embedding_provider="sentence_transformer")
    """

    # Chat provider
    chat_provider: str = field(default_factory=lambda: os.getenv("CHAT_PROVIDER", "openai").lower())
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-2024-08-06"))
    anthropic_api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    anthropic_model: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
    )
    ollama_model: str = field(default_factory=lambda: os.getenv("OLLAMA_MODEL", "llama3.2"))
    ollama_base_url: str = field(
        default_factory=lambda: os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    model_temperature: float = field(
        default_factory=lambda: _safe_float(os.getenv("MODEL_TEMPERATURE", "0.0"), 0.0)
    )
    request_timeout: float = field(
        default_factory=lambda: _safe_float(os.getenv("REQUEST_TIMEOUT", "60"), 60.0)
    )
    request_router: str = field(default_factory=lambda: os.getenv("REQUEST_ROUTER", "first").lower())

    # Embeddings
    embedding_provider: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai").lower()
    )
    openai_embedding_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-large")
    )
    embedding_model: str = field(default_factory=lambda: os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2"))

    # Cache
    cache_backend: str = field(default_factory=lambda: os.getenv("CACHE_BACKEND", "disk").lower())
    cache_file: str = field(default_factory=lambda: os.getenv("CACHE_FILE", DEFAULT_CACHE_FILE))
    redis_url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379"))
    redis_db: int = field(default_factory=lambda: _safe_int(os.getenv("REDIS_DB", "0"), 0))
    redis_ttl_seconds: Optional[int] = field(
        default_factory=lambda: _safe_int(os.getenv("REDIS_TTL_SECONDS", ""), 0) or None
    )

    # Search
    max_concurrency: int = field(default_factory=lambda: _safe_int(os.getenv("MAX_CONCURRENCY", "8"), 8))
    top_n: int = field(default_factory=lambda: _safe_int(os.getenv("TOP_N", "5"), 5))
    use_verification: bool = field(
        default_factory=lambda: _safe_bool(os.getenv("USE_VERIFICATION", "true"), True)
    )
    index_file: Optional[str] = field(default_factory=lambda: os.getenv("INDEX_FILE") or None)

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_json: bool = field(default_factory=lambda: _safe_bool(os.getenv("LOG_JSON", "false"), False))

    # CORS, comma-separated origins or "*"
    cors_origins: List[str] = field(
        default_factory=lambda: _parse_cors_origins(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        )
    )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls()

    def __post_init__(self):
        self.cache_file = str(Path(self.cache_file).expanduser())
        if self.index_file:
            self.index_file = str(Path(self.index_file).expanduser())

    def validate(self) -> None:
        """Check provider choices, required keys and numeric ranges.

        Raises:
            ConfigurationError: On the first invalid setting found.
        """
        if self.chat_provider not in CHAT_PROVIDERS:
            raise ConfigurationError(
                f"CHAT_PROVIDER must be one of {', '.join(CHAT_PROVIDERS)}, got {self.chat_provider!r}"
            )
        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            raise ConfigurationError(
                f"EMBEDDING_PROVIDER must be one of {', '.join(EMBEDDING_PROVIDERS)}, "
                f"got {self.embedding_provider!r}"
            )
        if self.request_router not in REQUEST_ROUTERS:
            raise ConfigurationError(
                f"REQUEST_ROUTER must be one of {', '.join(REQUEST_ROUTERS)}, got {self.request_router!r}"
            )
        if self.cache_backend not in CACHE_BACKENDS:
            raise ConfigurationError(
                f"CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, got {self.cache_backend!r}"
            )

        needs_openai = self.chat_provider == "openai" or self.embedding_provider == "openai"
        if needs_openai and not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required")
        if self.chat_provider == "anthropic" and not self.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is required")

        if self.max_concurrency < 1:
            raise ConfigurationError(f"MAX_CONCURRENCY must be >= 1, got {self.max_concurrency}")
        if self.top_n < 1:
            raise ConfigurationError(f"TOP_N must be >= 1, got {self.top_n}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"REQUEST_TIMEOUT must be positive, got {self.request_timeout}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
