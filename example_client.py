"""Client for the example-sentence proxy with a persisted per-word cache."""
import os
import time
from typing import List, Optional

import httpx

from log import get_logger
from cache import ExampleCache
from models import (
    PRACTICE_EXAMPLE_COUNT, SentenceItem,
    SOURCE_COZE_ERROR, SOURCE_ENV_MISSING, SOURCE_INTERNAL_ERROR,
)
from sentences import normalize_items, sentences_from_body

logger = get_logger("wordtype.example_client")

# --- Config ---
PROXY_URL = os.environ.get("WORDTYPE_PROXY_URL", "").strip() or "http://localhost:8848"
REQUEST_TIMEOUT = 150


class ExampleFetchError(Exception):
    """Base class for user-facing example fetch failures."""

    default_message = "AI例句获取失败"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class CredentialsMissing(ExampleFetchError):
    default_message = "未配置AI环境变量，请设置 COZE_TOKEN/COZE_APP_ID/COZE_WORKFLOW_ID"


class UpstreamError(ExampleFetchError):
    default_message = "代理内部错误，稍后重试或检查服务器日志"


class TransportError(UpstreamError):
    default_message = "请求失败"


class EmptyExtraction(ExampleFetchError):
    default_message = "未获取到AI例句"


class ExampleFetchClient:
    """Fetch AI example sentences for a word through the proxy.

    A non-forced fetch is served from the cache when possible; cached entries
    carry no translation. Fresh results are cached as bare sentences and
    returned with their translations.
    """

    def __init__(
        self,
        cache: ExampleCache,
        base_url: Optional[str] = None,
        dev_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.cache = cache
        self.base_url = base_url or PROXY_URL
        self.dev_token = dev_token
        self.transport = transport
        self.timeout = timeout

    async def fetch(
        self,
        word: str,
        count: int = PRACTICE_EXAMPLE_COUNT,
        force: bool = False,
        scenario: Optional[str] = None,
    ) -> List[SentenceItem]:
        count = max(count, 1)
        if not force:
            cached = self.cache.get(word)
            if cached:
                logger.debug("Example cache hit", extra={"component": "examples", "word": word})
                return [SentenceItem(sentence=s) for s in cached[:count]]

        data = await self._request(word, count, scenario)
        items = self._items_from(data)
        if not items:
            self._raise_for(data, word)

        self.cache.put(word, [item.sentence for item in items])
        return items[:count]

    async def _request(self, word: str, count: int, scenario: Optional[str]) -> dict:
        body = {
            "word": word,
            "count": count,
            "dev_token": self.dev_token,
            "nonce": int(time.time() * 1000),
            "hard": scenario,
        }
        params = {"hard": scenario} if scenario else None
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post("/api/ai/examples", params=params, json=body)
        except httpx.HTTPError as e:
            logger.warning("Example request failed", extra={"component": "examples", "word": word, "detail": str(e)})
            raise TransportError() from e

        if not resp.is_success:
            logger.warning(
                "Example proxy returned an error",
                extra={"component": "examples", "word": word, "status_code": resp.status_code},
            )
            raise TransportError(resp.text or None)
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError() from e
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _items_from(data: dict) -> List[SentenceItem]:
        sentences = data.get("sentences")
        items = normalize_items(sentences) if isinstance(sentences, list) else []
        raw = data.get("raw")
        if not items and isinstance(raw, str) and raw:
            items = sentences_from_body(raw).sentences
        return items

    @staticmethod
    def _raise_for(data: dict, word: str):
        source = data.get("source")
        logger.warning(
            "No example sentences in proxy response",
            extra={"component": "examples", "word": word, "source": source,
                   "detail": {"raw": data.get("raw"), "debug": data.get("debug")}},
        )
        if source == SOURCE_ENV_MISSING:
            raise CredentialsMissing()
        if source == SOURCE_INTERNAL_ERROR:
            raise UpstreamError()
        if source == SOURCE_COZE_ERROR:
            raise UpstreamError("AI服务返回错误，请检查 token 与 workflow/app 参数")
        raise EmptyExtraction()
