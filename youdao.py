"""Youdao open-API text translation client (v3 signature)."""
import os
import time
import uuid
import hashlib
from typing import Optional, Tuple

import httpx

from log import get_logger

logger = get_logger("wordtype.youdao")

# --- Config ---
YOUDAO_APP_KEY = os.environ.get("YOUDAO_APP_KEY", "").strip()
YOUDAO_APP_SECRET = os.environ.get("YOUDAO_APP_SECRET", "").strip()
YOUDAO_API_URL = "https://openapi.youdao.com/api"
YOUDAO_TIMEOUT = 30


def resolve_credentials(dev_key: Optional[str] = None, dev_secret: Optional[str] = None) -> Tuple[str, str]:
    key = (dev_key or "").strip() or YOUDAO_APP_KEY
    secret = (dev_secret or "").strip() or YOUDAO_APP_SECRET
    return key, secret


def sign_input(q: str) -> str:
    """Youdao v3 signs a shortened form of long queries: first 10 + length + last 10."""
    if len(q) > 20:
        return f"{q[:10]}{len(q)}{q[-10:]}"
    return q


def make_sign(app_key: str, q: str, salt: str, curtime: str, app_secret: str) -> str:
    raw = f"{app_key}{sign_input(q)}{salt}{curtime}{app_secret}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def build_form(q: str, source_lang: str, target_lang: str, app_key: str, app_secret: str) -> dict:
    salt = str(uuid.uuid4())
    curtime = str(int(time.time()))
    return {
        "q": q,
        "from": source_lang,
        "to": target_lang,
        "appKey": app_key,
        "salt": salt,
        "sign": make_sign(app_key, q, salt, curtime, app_secret),
        "signType": "v3",
        "curtime": curtime,
        "strict": "true",
    }


def first_translation(data) -> str:
    if isinstance(data, dict):
        translations = data.get("translation")
        if isinstance(translations, list) and translations:
            return str(translations[0] or "")
    return ""


async def translate_text(
    q: str,
    source_lang: str,
    target_lang: str,
    app_key: str,
    app_secret: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[str, dict]:
    """Translate *q* and return (first translation, raw response JSON)."""
    form = build_form(q, source_lang, target_lang, app_key, app_secret)
    async with httpx.AsyncClient(timeout=YOUDAO_TIMEOUT, transport=transport) as client:
        resp = await client.post(YOUDAO_API_URL, data=form)
    data = resp.json()
    if isinstance(data, dict) and str(data.get("errorCode", "0")) != "0":
        logger.warning(
            "Youdao returned an error code",
            extra={"component": "youdao", "detail": data.get("errorCode"), "status_code": resp.status_code},
        )
    return first_translation(data), data
