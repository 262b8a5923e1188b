"""wordtype: vocabulary typing-practice proxy service.

Run with: uvicorn backend:app --port 8848
"""
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

import coze
import youdao
from log import get_logger
from proxy_routes import router as proxy_router

logger = get_logger("wordtype.backend")

STATIC_DIR = Path(os.environ.get("WORDTYPE_STATIC_DIR", "").strip() or Path(__file__).parent / "dist")

app = FastAPI(title="wordtype")
app.include_router(proxy_router)


@app.get("/api/health", tags=["System"], summary="Health check with upstream configuration")
async def health_check():
    coze_ok = coze.is_configured(coze.COZE_TOKEN)
    youdao_ok = all(youdao.resolve_credentials())
    return {
        "status": "ok" if coze_ok and youdao_ok else "degraded",
        "coze": {"configured": coze_ok, "url": coze.workflow_url()},
        "youdao": {"configured": youdao_ok},
    }


if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")
else:
    logger.info("No front-end build found, serving API only", extra={"component": "static", "detail": str(STATIC_DIR)})
