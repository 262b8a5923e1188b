"""AI workflow (Coze) upstream client and example-sentence prompt."""
import os
import time
from typing import Optional

import httpx

from log import get_logger

logger = get_logger("wordtype.coze")

# --- Config ---
COZE_TOKEN = os.environ.get("COZE_TOKEN", "").strip()
COZE_BASE_URL = (os.environ.get("COZE_BASE_URL", "") or "https://api.coze.cn").strip()
COZE_WORKFLOW_ID = os.environ.get("COZE_WORKFLOW_ID", "").strip()
COZE_APP_ID = os.environ.get("COZE_APP_ID", "").strip()
COZE_TIMEOUT = 120


def workflow_url() -> str:
    return f"{COZE_BASE_URL.rstrip('/')}/v1/workflow/stream_run"


def resolve_token(dev_token: Optional[str] = None) -> str:
    """A developer token sent by the client wins over the server token."""
    return (dev_token or "").strip() or COZE_TOKEN


def is_configured(token: str) -> bool:
    return bool(token and COZE_WORKFLOW_ID and COZE_APP_ID)


def mask_token(token: str) -> str:
    return f"{token[:6]}...{token[-6:]}" if len(token) > 12 else token


def build_examples_prompt(word: str, scenario: str, count: int) -> str:
    return f"""单词：{word}
场景：{scenario}
数量：{count}
请生成 {count} 个例句。
输出格式要求：请严格返回 JSON 格式，不要包含 Markdown 代码块标记。
JSON 结构如下：
{{
  "sentences": [
    {{ "sentence": "英文例句", "translation": "中文翻译" }},
    ...
  ]
}}"""


class WorkflowResponse:
    """Raw workflow answer: HTTP status and the undecoded streamed body."""

    def __init__(self, status_code: int, text: str):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


async def run_workflow(
    word: str,
    count: int,
    scenario: str,
    nonce: int,
    token: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WorkflowResponse:
    """Call the example-sentence workflow and return its raw streamed body."""
    payload = {
        "workflow_id": COZE_WORKFLOW_ID,
        "app_id": COZE_APP_ID,
        "parameters": {
            "input": build_examples_prompt(word, scenario, count),
            "nonce": nonce,
            "hard": scenario,
        },
    }
    started = time.time()
    async with httpx.AsyncClient(timeout=COZE_TIMEOUT, transport=transport) as client:
        resp = await client.post(
            workflow_url(),
            headers={"Authorization": f"Bearer {token}"},
            json=payload,
        )
    logger.info(
        "Workflow call finished",
        extra={
            "component": "coze",
            "word": word,
            "scenario": scenario,
            "status_code": resp.status_code,
            "duration_ms": round((time.time() - started) * 1000),
        },
    )
    return WorkflowResponse(resp.status_code, resp.text)
