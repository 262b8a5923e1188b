"""Generic translate-to-Chinese client, used when a sentence has no translation."""
from typing import Optional

import httpx

from log import get_logger
from cache import KeyValueStore, TranslationCache
from example_client import PROXY_URL
from models import SOURCE_YOUDAO, YOUDAO_DEV_KEY, YOUDAO_DEV_SECRET

logger = get_logger("wordtype.translate")

TRANSLATE_TIMEOUT = 30


class Translator:
    """Translate English text to Chinese through the proxy.

    Never raises: on any failure the source text is returned unchanged.
    """

    def __init__(
        self,
        store: KeyValueStore,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = TRANSLATE_TIMEOUT,
    ):
        self.store = store
        self.cache = TranslationCache(store)
        self.base_url = base_url or PROXY_URL
        self.transport = transport
        self.timeout = timeout

    async def translate_to_chinese(self, text: str) -> str:
        cached = self.cache.get(text)
        if cached:
            return cached

        body = {
            "q": text,
            "from": "en",
            "to": "zh-CHS",
            "devKey": self.store.get(YOUDAO_DEV_KEY) or "",
            "devSecret": self.store.get(YOUDAO_DEV_SECRET) or "",
        }
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post("/api/youdao/translate", json=body)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Translation failed, showing source text", extra={"component": "translate", "detail": str(e)})
            return text

        if not isinstance(data, dict):
            return text
        translation = data.get("translation")
        if data.get("source") != SOURCE_YOUDAO or not isinstance(translation, str) or not translation:
            logger.info("No translation available", extra={"component": "translate", "source": data.get("source")})
            return text

        self.cache.put(text, translation)
        return translation
