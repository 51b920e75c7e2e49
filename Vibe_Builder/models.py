import os
import json
from enum import Enum
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional

import tiktoken
from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .exceptions import ConfigurationError

# Load environment variables
_ = load_dotenv(find_dotenv())

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_TIMEOUT_SECONDS = 25.0
DEFAULT_MAX_TOKENS = 3000
DEFAULT_GALLERY_LIMIT = 50


class Theme(str, Enum):
    MINIMAL = "minimal"
    PLAYFUL = "playful"
    PROFESSIONAL = "professional"
    ARTISTIC = "artistic"
    TECHY = "techy"


class Layout(str, Enum):
    SINGLE = "single"
    DUAL = "dual"
    TRIPLE = "triple"
    QUAD = "quad"


class AppCategory(str, Enum):
    TODO = "todo"
    WEATHER = "weather"
    HABIT_TRACKER = "habit-tracker"
    RECIPE = "recipe"
    NOTES = "notes"
    TIMER = "timer"
    CALCULATOR = "calculator"
    CALENDAR = "calendar"
    BUDGET = "budget"
    AUDIO_TRACKER = "audio-tracker"
    PRODUCTIVITY = "productivity"


LAYOUT_COLUMNS = {
    Layout.SINGLE.value: 1,
    Layout.DUAL.value: 2,
    Layout.TRIPLE.value: 3,
    Layout.QUAD.value: 4,
}


def layout_columns(layout: str) -> int:
    """Column count for a layout name, three for anything unknown"""
    return LAYOUT_COLUMNS.get(layout, 3)


# -------------------
# Configuration
# -------------------

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings(BaseModel):
    """Runtime configuration read from the environment"""

    api_key: Optional[SecretStr] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    generation_timeout: float = DEFAULT_TIMEOUT_SECONDS
    gallery_backend: str = "memory"
    gallery_limit: int = DEFAULT_GALLERY_LIMIT
    postgres_host: str = "aiwb-db"
    postgres_port: str = "5432"
    postgres_db: str = "ai_web_builder"
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("password")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        key = os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY")
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            api_key=SecretStr(key) if key else None,
            model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
            max_tokens=_env_int("GENERATION_MAX_TOKENS", DEFAULT_MAX_TOKENS),
            generation_timeout=_env_float("GENERATION_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            gallery_backend=os.getenv("GALLERY_BACKEND", "memory").lower(),
            gallery_limit=_env_int("GALLERY_LIMIT", DEFAULT_GALLERY_LIMIT),
            postgres_host=os.getenv("POSTGRES_HOST", "aiwb-db"),
            postgres_port=os.getenv("POSTGRES_PORT", "5432"),
            postgres_db=os.getenv("POSTGRES_DB", "ai_web_builder"),
            postgres_user=os.getenv("POSTGRES_USER", "postgres"),
            postgres_password=SecretStr(os.getenv("POSTGRES_PASSWORD", "password")),
            cors_origins=origins or ["*"],
        )

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())

    def require_api_key(self) -> str:
        """Return the raw credential or fail with ConfigurationError"""
        if not self.has_api_key:
            raise ConfigurationError("Missing API key: set ANTHROPIC_API_KEY")
        return self.api_key.get_secret_value()


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


# -------------------
# Pipeline data
# -------------------

class GenerationRequest(BaseModel):
    """Inbound idea plus theme/layout selection"""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    idea: str = Field(..., min_length=1)
    theme: str = Field(..., min_length=1)
    layout: str = Field(..., min_length=1)

    @field_validator("theme", "layout")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()


class GeneratedAppDescription(BaseModel):
    """App description produced by the model or by the fallback synthesizer"""

    title: str
    description: str
    app_type: AppCategory
    source_code: Dict[str, str]
    feature_list: List[str]
    theme_name: str
    layout_name: str

    @field_validator("source_code")
    @classmethod
    def _has_app_source(cls, value: Dict[str, str]) -> Dict[str, str]:
        app = value.get("App")
        if not isinstance(app, str) or not app.strip():
            raise ValueError("source_code['App'] must be non-empty text")
        return value


class GenerationResult(BaseModel):
    """Outcome of one pipeline run"""

    description: GeneratedAppDescription
    files: Dict[str, str]
    fallback: bool
    generation_time_ms: int
    failure_reason: Optional[str] = None


# -------------------
# API payloads
# -------------------

class AppConfig(BaseModel):
    theme: str = ""
    layout: str = ""
    features: List[str] = Field(default_factory=list)


class AppData(BaseModel):
    """A previously generated app as returned by /api/generate-app"""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    description: str = ""
    appType: Optional[str] = None
    code: Dict[str, str] = Field(default_factory=dict)
    config: AppConfig = Field(default_factory=AppConfig)
    files: Dict[str, str] = Field(default_factory=dict)


class PublishRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    appData: AppData


class DownloadRequest(BaseModel):
    appData: AppData


class PublicGalleryEntry(BaseModel):
    id: str
    title: str
    theme: str
    layout: str
    description: str
    thumbnail: str
    files: Dict[str, str]
    createdAt: datetime
    featured: bool = False


# -------------------
# Token estimation
# -------------------

class TokenManager:
    """Estimates prompt sizes for logging"""

    def __init__(self, encoding_name: str = "cl100k_base"):
        self.encoding_name = encoding_name
        self.tokenizer = None
        self._loaded = False

    def _load_tokenizer(self):
        # tiktoken fetches encodings lazily, so offline hosts fall back to a char estimate
        self._loaded = True
        for name in (self.encoding_name, "gpt2"):
            try:
                self.tokenizer = tiktoken.get_encoding(name)
                return
            except Exception as e:
                print(f"⚠️ Tokenizer '{name}' unavailable: {type(e).__name__}")
        self.tokenizer = None

    def count_tokens(self, text) -> int:
        """Count tokens in text"""
        if text is None:
            return 0
        if isinstance(text, dict):
            text = json.dumps(text)
        if not self._loaded:
            self._load_tokenizer()
        if self.tokenizer is None:
            return max(1, len(str(text)) // 4)
        return len(self.tokenizer.encode(str(text)))


token_manager = TokenManager()
