"""Pydantic schemas and constants for wordtype."""
from typing import Optional
from pydantic import BaseModel, Field

# --- Constants ---
# Rotating practice scenarios, sent upstream as the `hard` parameter.
SCENARIOS = ["日常沟通", "社交互动", "休闲娱乐"]

DEFAULT_EXAMPLE_COUNT = 5
PRACTICE_EXAMPLE_COUNT = 10

# Local store keys
EXAMPLES_CACHE_KEY = "ai_examples_cache_v1"
TRANSLATIONS_CACHE_KEY = "wordbook_translations_cache"
YOUDAO_DEV_KEY = "YOUDAO_DEV_KEY"
YOUDAO_DEV_SECRET = "YOUDAO_DEV_SECRET"

# Values of the `source` field in proxy responses
SOURCE_COZE = "coze"
SOURCE_YOUDAO = "youdao"
SOURCE_ENV_MISSING = "env_missing"
SOURCE_INTERNAL_ERROR = "internal_error"
SOURCE_COZE_ERROR = "coze_error"


# --- Pydantic Models ---

class SentenceItem(BaseModel):
    sentence: str
    translation: Optional[str] = None

    def as_payload(self) -> dict:
        payload = {"sentence": self.sentence}
        if self.translation:
            payload["translation"] = self.translation
        return payload


class ExamplesRequest(BaseModel):
    word: Optional[str] = ""
    count: Optional[int] = None
    dev_token: Optional[str] = None
    nonce: Optional[int] = None
    hard: Optional[str] = None


class TranslateRequest(BaseModel):
    q: Optional[str] = ""
    source_lang: Optional[str] = Field(default="en", alias="from")
    target_lang: Optional[str] = Field(default="zh-CHS", alias="to")
    devKey: Optional[str] = None
    devSecret: Optional[str] = None
