"""Tests for the Youdao translation client."""
import asyncio
import hashlib
from urllib.parse import parse_qs

import httpx

import youdao


def test_sign_input_shortens_long_queries():
    assert youdao.sign_input("short text") == "short text"
    assert youdao.sign_input("a" * 20) == "a" * 20
    q = "The quick brown fox jumps over the lazy dog"
    assert youdao.sign_input(q) == "The quick " + str(len(q)) + "e lazy dog"


def test_make_sign_is_sha256_of_concatenation():
    expected = hashlib.sha256("keyhellosalt123secret".encode("utf-8")).hexdigest()
    assert youdao.make_sign("key", "hello", "salt", "123", "secret") == expected


def test_build_form_fields():
    form = youdao.build_form("hello", "en", "zh-CHS", "key", "secret")
    assert form["q"] == "hello"
    assert form["from"] == "en"
    assert form["to"] == "zh-CHS"
    assert form["signType"] == "v3"
    assert form["strict"] == "true"
    assert form["sign"] == youdao.make_sign("key", "hello", form["salt"], form["curtime"], "secret")


def test_resolve_credentials_prefers_client_values(monkeypatch):
    monkeypatch.setattr(youdao, "YOUDAO_APP_KEY", "server-key")
    monkeypatch.setattr(youdao, "YOUDAO_APP_SECRET", "server-secret")
    assert youdao.resolve_credentials() == ("server-key", "server-secret")
    assert youdao.resolve_credentials("dev-key", " ") == ("dev-key", "server-secret")


def test_first_translation():
    assert youdao.first_translation({"translation": ["你好", "您好"]}) == "你好"
    assert youdao.first_translation({"translation": []}) == ""
    assert youdao.first_translation({"errorCode": "108"}) == ""
    assert youdao.first_translation(None) == ""


def test_translate_text_posts_signed_form():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}
        return httpx.Response(200, json={"errorCode": "0", "translation": ["你好"]})

    translation, raw = asyncio.run(youdao.translate_text(
        "hello", "en", "zh-CHS", "key", "secret", transport=httpx.MockTransport(handler),
    ))
    assert translation == "你好"
    assert raw["errorCode"] == "0"
    assert seen["url"] == youdao.YOUDAO_API_URL
    assert seen["form"]["appKey"] == "key"
    assert seen["form"]["q"] == "hello"


def test_translate_text_error_code_gives_empty_translation():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"errorCode": "202"}))
    translation, raw = asyncio.run(youdao.translate_text("hi", "en", "zh-CHS", "k", "s", transport=transport))
    assert translation == ""
    assert raw == {"errorCode": "202"}
