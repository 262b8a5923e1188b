"""Tests for the translate-to-Chinese fallback client."""
import asyncio
import json

import httpx

from models import TRANSLATIONS_CACHE_KEY, YOUDAO_DEV_KEY, YOUDAO_DEV_SECRET
from translate import Translator


def _translator(memory_store, handler):
    return Translator(memory_store, base_url="http://proxy.test", transport=httpx.MockTransport(handler))


def test_translation_is_fetched_and_cached(memory_store):
    memory_store.set(YOUDAO_DEV_KEY, "dev-key")
    memory_store.set(YOUDAO_DEV_SECRET, "dev-secret")
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={"translation": "你好。", "source": "youdao"})

    translator = _translator(memory_store, handler)
    assert asyncio.run(translator.translate_to_chinese(" Hello. ")) == "你好。"
    assert memory_store.get(TRANSLATIONS_CACHE_KEY) == {"hello.": "你好。"}
    assert requests == [{"q": " Hello. ", "from": "en", "to": "zh-CHS", "devKey": "dev-key", "devSecret": "dev-secret"}]

    assert asyncio.run(translator.translate_to_chinese("HELLO.")) == "你好。"
    assert len(requests) == 1


def test_unconfigured_translation_returns_source_text(memory_store):
    handler = lambda request: httpx.Response(200, json={"translation": "", "source": "env_missing"})
    assert asyncio.run(_translator(memory_store, handler).translate_to_chinese("Hi.")) == "Hi."
    assert memory_store.get(TRANSLATIONS_CACHE_KEY) is None


def test_transport_failure_returns_source_text(memory_store):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    assert asyncio.run(_translator(memory_store, handler).translate_to_chinese("Hi.")) == "Hi."


def test_bad_json_returns_source_text(memory_store):
    handler = lambda request: httpx.Response(200, text="oops")
    assert asyncio.run(_translator(memory_store, handler).translate_to_chinese("Hi.")) == "Hi."
