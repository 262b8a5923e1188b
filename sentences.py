"""Sentence list extraction from resolved AI workflow output.

Models return the sentence JSON in several container conventions and often wrap
it in Markdown fences or prose. Extraction is best-effort: anything that cannot
be recognised yields an empty list and the caller decides how to report it.
"""
import json
import re as _re
from enum import Enum
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from log import get_logger
from models import SentenceItem
from stream_scan import scan_latest_content, resolve_output

logger = get_logger("wordtype.sentences")

ENGLISH_KEYS = ("english", "en", "sentence")
TRANSLATION_KEYS = ("chinese", "zh", "cn", "translation")

_FENCE_OPEN = _re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE = _re.compile(r"\n?```\s*$")


class ContainerShape(Enum):
    ARRAY = "array"
    SENTENCES_FIELD = "sentences"
    DATA_FIELD = "data"
    EXAMPLE_SENTENCES_FIELD = "example_sentences"
    SINGLE_OBJECT = "single_object"
    SINGLE_STRING = "single_string"


class Extraction(NamedTuple):
    sentences: List[SentenceItem]
    latest_content: Any
    output: Optional[str]


def strip_code_fence(text: str) -> str:
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def _slice_between(text: str, opener: str, closer: str) -> Any:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None


def parse_embedded_json(text: str) -> Any:
    """Parse *text* as JSON, falling back to the outermost array, then object."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    value = _slice_between(text, "[", "]")
    if value is None:
        value = _slice_between(text, "{", "}")
    return value


def _first_text(obj: dict, keys: Sequence[str]) -> str:
    for key in keys:
        value = obj.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def normalize_item(value: Any) -> Optional[SentenceItem]:
    """Turn one array element into a SentenceItem, or None if it has no sentence."""
    if isinstance(value, str):
        sentence = value.strip()
        return SentenceItem(sentence=sentence) if sentence else None
    if isinstance(value, dict):
        sentence = _first_text(value, ENGLISH_KEYS)
        if not sentence:
            return None
        return SentenceItem(sentence=sentence, translation=_first_text(value, TRANSLATION_KEYS) or None)
    return None


def normalize_items(values: Sequence[Any], count: Optional[int] = None) -> List[SentenceItem]:
    items = [item for item in (normalize_item(v) for v in values) if item is not None]
    if count is not None:
        items = items[:max(count, 0)]
    return items


def _array(value: Any) -> Optional[list]:
    return value if isinstance(value, list) else None


def _field(name: str) -> Callable[[Any], Optional[list]]:
    def match(value: Any) -> Optional[list]:
        if isinstance(value, dict) and isinstance(value.get(name), list):
            return value[name]
        return None
    return match


def _single_object(value: Any) -> Optional[list]:
    if isinstance(value, dict) and any(key in value for key in ENGLISH_KEYS):
        return [value]
    return None


def _single_string(value: Any) -> Optional[list]:
    return [value] if isinstance(value, str) else None


# Ordered by priority; the first matcher that recognises the value wins.
SHAPE_MATCHERS: Tuple[Tuple[ContainerShape, Callable[[Any], Optional[list]]], ...] = (
    (ContainerShape.ARRAY, _array),
    (ContainerShape.SENTENCES_FIELD, _field("sentences")),
    (ContainerShape.DATA_FIELD, _field("data")),
    (ContainerShape.EXAMPLE_SENTENCES_FIELD, _field("example_sentences")),
    (ContainerShape.SINGLE_OBJECT, _single_object),
    (ContainerShape.SINGLE_STRING, _single_string),
)


def match_shape(value: Any) -> Tuple[Optional[ContainerShape], list]:
    for shape, matcher in SHAPE_MATCHERS:
        elements = matcher(value)
        if elements is not None:
            return shape, elements
    return None, []


def extract_sentences(output: Optional[str], count: Optional[int] = None) -> List[SentenceItem]:
    """Extract an ordered sentence list from a resolved output string.

    Handles fenced code blocks, prose around the JSON, and the container shapes
    in SHAPE_MATCHERS. Never raises; unrecognised input gives [].
    """
    if not output:
        return []
    try:
        value = parse_embedded_json(strip_code_fence(str(output)))
        if value is None:
            return []
        shape, elements = match_shape(value)
        items = normalize_items(elements, count)
        logger.debug(
            "Extracted sentences",
            extra={"component": "extractor", "detail": shape.value if shape else None, "count": len(items)},
        )
        return items
    except Exception:
        logger.exception("Sentence extraction failed", extra={"component": "extractor"})
        return []


def sentences_from_body(raw: str, count: Optional[int] = None) -> Extraction:
    """Run the full scan → unwrap → extract pipeline over a raw workflow body."""
    latest = scan_latest_content(raw)
    output = resolve_output(latest, raw)
    return Extraction(extract_sentences(output, count), latest, output)
