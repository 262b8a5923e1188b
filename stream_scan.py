"""Line scanning and envelope unwrapping for AI workflow stream bodies.

The workflow service answers with a streamed body whose framing varies by
deployment: SSE `data:` lines, bare JSON lines, or loose `content : {...}`
debug lines. Only the last recognised fragment matters; everything else is
noise and is skipped without failing the scan.
"""
import json
from typing import Any, Optional

from log import get_logger

logger = get_logger("wordtype.stream_scan")

_EVENT_PREFIX = "data:"
_LOOSE_CONTENT_MARKER = "content :"


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def _content_of(obj: Any) -> Any:
    if isinstance(obj, dict) and obj.get("content"):
        return obj["content"]
    return None


def _scan_line(line: str) -> Any:
    """Return the content fragment carried by one stripped line, or None."""
    if line.startswith(_EVENT_PREFIX):
        return _content_of(_loads(line[len(_EVENT_PREFIX):].strip()))
    if line.startswith("{"):
        return _content_of(_loads(line))
    if _LOOSE_CONTENT_MARKER in line:
        idx = line.index(_LOOSE_CONTENT_MARKER)
        obj = _loads(line[idx + len(_LOOSE_CONTENT_MARKER):].strip())
        if isinstance(obj, dict) and obj.get("output"):
            return json.dumps(obj, ensure_ascii=False)
    return None


def scan_latest_content(raw: str) -> Any:
    """Return the content fragment of the last recognised line in *raw*.

    Later matches overwrite earlier ones. Returns "" when nothing matched.
    """
    latest: Any = ""
    matched = 0
    for line in (raw or "").split("\n"):
        found = _scan_line(line.strip())
        if found:
            latest = found
            matched += 1
    logger.debug("Scanned stream body", extra={"component": "scanner", "count": matched})
    return latest


def _unwrap_once(value: Any) -> Any:
    if isinstance(value, str):
        parsed = _loads(value)
        return value if parsed is None else parsed
    return value


def _string_output(obj: Any) -> Optional[str]:
    if isinstance(obj, dict):
        output = obj.get("output")
        if isinstance(output, str) and output:
            return output
    return None


def resolve_output(latest_content: Any, raw: str = "") -> Optional[str]:
    """Resolve a content fragment (or, failing that, the raw body) to its output string.

    Never raises; returns None when no `output` string can be found.
    """
    if latest_content:
        return _string_output(_unwrap_once(latest_content))

    whole = _loads(raw or "")
    if not isinstance(whole, dict):
        return None
    direct = _string_output(whole)
    if direct is not None:
        return direct
    if whole.get("content"):
        return _string_output(_unwrap_once(whole["content"]))
    return None
