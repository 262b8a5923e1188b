"""Proxy endpoints: AI example sentences and Youdao translation."""
import time
from typing import Optional

from log import get_logger

logger = get_logger("wordtype.proxy_routes")

from fastapi import APIRouter, Depends, HTTPException

import coze
import youdao
from auth import enforce_rate_limit
from coze import run_workflow
from youdao import translate_text
from models import (
    DEFAULT_EXAMPLE_COUNT,
    ExamplesRequest, TranslateRequest,
    SOURCE_COZE, SOURCE_COZE_ERROR, SOURCE_ENV_MISSING, SOURCE_INTERNAL_ERROR, SOURCE_YOUDAO,
)
from sentences import sentences_from_body

router = APIRouter()


@router.post("/api/ai/examples", tags=["Examples"], summary="Generate example sentences for a word")
async def ai_examples(
    req: ExamplesRequest,
    hard: Optional[str] = None,
    _rl=Depends(enforce_rate_limit),
):
    word = (req.word or "").strip()
    count = req.count or DEFAULT_EXAMPLE_COUNT
    nonce = req.nonce if req.nonce is not None else int(time.time() * 1000)
    scenario = (hard or "").strip() or (req.hard or "").strip()

    if not word:
        raise HTTPException(400, "word_required")

    token = coze.resolve_token(req.dev_token)
    if not coze.is_configured(token):
        logger.warning("Workflow credentials missing", extra={"component": "coze", "word": word})
        return {"sentences": [], "source": SOURCE_ENV_MISSING}

    try:
        resp = await run_workflow(word, count, scenario, nonce, token)
        extraction = sentences_from_body(resp.text, count)
        source = SOURCE_COZE if resp.ok else SOURCE_COZE_ERROR
        if not extraction.sentences:
            logger.warning(
                "No sentences recovered from workflow body",
                extra={"component": "coze", "word": word, "scenario": scenario,
                       "status_code": resp.status_code, "source": source},
            )
        else:
            logger.info(
                "Examples generated",
                extra={"component": "coze", "word": word, "scenario": scenario,
                       "count": len(extraction.sentences)},
            )
        return {
            "sentences": [item.as_payload() for item in extraction.sentences],
            "source": source,
            "latestContent": extraction.latest_content,
            "raw": resp.text,
            "debug": {
                "url": coze.workflow_url(),
                "app": coze.COZE_APP_ID,
                "workflow": coze.COZE_WORKFLOW_ID,
                "token_head": coze.mask_token(token),
                "status_code": resp.status_code,
            },
        }
    except Exception:
        logger.exception("Workflow proxy error", extra={"component": "coze", "word": word})
        return {"sentences": [], "source": SOURCE_INTERNAL_ERROR}


@router.post("/api/youdao/translate", tags=["Translation"], summary="Translate text through Youdao")
async def youdao_translate(
    req: TranslateRequest,
    _rl=Depends(enforce_rate_limit),
):
    q = (req.q or "").strip()
    if not q:
        raise HTTPException(400, "q_required")

    app_key, app_secret = youdao.resolve_credentials(req.devKey, req.devSecret)
    if not app_key or not app_secret:
        return {"translation": "", "source": SOURCE_ENV_MISSING}

    try:
        translation, raw = await translate_text(
            q, req.source_lang or "en", req.target_lang or "zh-CHS", app_key, app_secret,
        )
        return {"translation": translation, "raw": raw, "source": SOURCE_YOUDAO}
    except Exception:
        logger.exception("Youdao proxy error", extra={"component": "youdao"})
        return {"translation": "", "source": SOURCE_INTERNAL_ERROR}
