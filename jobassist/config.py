# config.py
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_MODEL = "gpt-4"
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0
DEFAULT_REQUEST_TIMEOUT = 25.0
DEFAULT_CHUNK_SIZE = 4000


def _csv_env(name: str, default: str = "") -> list[str]:
    val = os.getenv(name, default)
    # split only if non-empty; strip whitespace
    return [x.strip() for x in val.split(",") if x.strip()] if val else []


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


class BaseConfig:
    DEBUG = False
    TESTING = False
    JSON_SORT_KEYS = False
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # 2 MB
    PREFERRED_URL_SCHEME = "https"

    # flask-limiter
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    pass


class TestConfig(BaseConfig):
    TESTING = True
    RATELIMIT_ENABLED = False


def select_config():
    return ProdConfig if os.getenv("ENV") == "prod" else DevConfig


@dataclass(frozen=True)
class FunctionSettings:
    """Settings shared by the analysis functions.

    Built once when the process starts and handed to the LLM client and the
    handlers, so no request reads the environment itself.
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base: float = DEFAULT_BACKOFF_BASE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    parse_chunk_size: int = DEFAULT_CHUNK_SIZE
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    rate_limit: str = "200 per hour"

    def __post_init__(self):
        # frozen: go through object.__setattr__ to clamp
        if self.max_retries < 1:
            object.__setattr__(self, "max_retries", 1)
        if self.parse_chunk_size < 1:
            object.__setattr__(self, "parse_chunk_size", DEFAULT_CHUNK_SIZE)

    @property
    def llm_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "FunctionSettings":
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or os.getenv("OPENROUTER_API_KEY") or None,
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            model=os.getenv("LLM_MODEL") or DEFAULT_MODEL,
            max_retries=_int_env("LLM_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            backoff_base=_float_env("LLM_BACKOFF_BASE", DEFAULT_BACKOFF_BASE),
            request_timeout=_float_env("LLM_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            parse_chunk_size=_int_env("PARSE_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            cors_origins=_csv_env("CORS_ORIGINS", "*"),
            rate_limit=os.getenv("RATE_LIMIT") or "200 per hour",
        )
