"""Tests for sentence extraction from resolved workflow output."""
import json

import pytest

from models import SentenceItem
from sentences import (
    ContainerShape, extract_sentences, match_shape, normalize_item,
    parse_embedded_json, sentences_from_body, strip_code_fence,
)


def test_streamed_data_line_end_to_end():
    output = json.dumps([{"sentence": "Hello world.", "translation": "你好世界。"}], ensure_ascii=False)
    line = "data: " + json.dumps({"content": json.dumps({"output": output}, ensure_ascii=False)}, ensure_ascii=False)
    extraction = sentences_from_body(line)
    assert extraction.sentences == [SentenceItem(sentence="Hello world.", translation="你好世界。")]
    assert extraction.output == output


def test_fenced_output_without_translation():
    items = extract_sentences('```json\n[{"sentence":"Go now."}]\n```')
    assert items == [SentenceItem(sentence="Go now.")]
    assert items[0].translation is None
    assert items[0].as_payload() == {"sentence": "Go now."}


def test_prose_around_array():
    output = 'Sure! Here are your sentences:\n[{"en": "It rains.", "zh": "下雨了。"}]\nHope this helps.'
    assert extract_sentences(output) == [SentenceItem(sentence="It rains.", translation="下雨了。")]


def test_object_slice_when_no_array_present():
    output = 'Result -> {"sentence": "One only.", "chinese": "只有一个。"} <- end'
    assert extract_sentences(output) == [SentenceItem(sentence="One only.", translation="只有一个。")]


def test_count_truncates_without_padding():
    output = json.dumps(["A.", "B.", "C."])
    assert len(extract_sentences(output, count=10)) == 3
    assert [i.sentence for i in extract_sentences(json.dumps([f"S{n}." for n in range(10)]), count=3)] == ["S0.", "S1.", "S2."]


@pytest.mark.parametrize("value,shape", [
    (["a"], ContainerShape.ARRAY),
    ({"sentences": ["a"]}, ContainerShape.SENTENCES_FIELD),
    ({"data": ["a"]}, ContainerShape.DATA_FIELD),
    ({"example_sentences": ["a"]}, ContainerShape.EXAMPLE_SENTENCES_FIELD),
    ({"english": "a"}, ContainerShape.SINGLE_OBJECT),
    ("a", ContainerShape.SINGLE_STRING),
])
def test_container_shapes(value, shape):
    matched, elements = match_shape(value)
    assert matched is shape
    assert normalize_item(elements[0]).sentence == "a"


def test_sentences_field_has_priority_over_data():
    value = {"data": ["from data"], "sentences": ["from sentences"]}
    assert match_shape(value) == (ContainerShape.SENTENCES_FIELD, ["from sentences"])


def test_unrecognised_shapes():
    assert match_shape({"items": ["a"]}) == (None, [])
    assert match_shape(42) == (None, [])
    assert extract_sentences('{"items": ["a"]}') == []


def test_item_key_preference_and_blanks_dropped():
    output = json.dumps({"sentences": [
        {"english": "First.", "sentence": "ignored", "cn": "第一。"},
        {"sentence": "   "},
        "",
        {"translation": "没有英文"},
        7,
        {"en": " Trim me. ", "translation": " 修剪 "},
    ]}, ensure_ascii=False)
    assert extract_sentences(output) == [
        SentenceItem(sentence="First.", translation="第一。"),
        SentenceItem(sentence="Trim me.", translation="修剪"),
    ]


def test_malformed_output_never_raises():
    assert extract_sentences(None) == []
    assert extract_sentences("") == []
    assert extract_sentences("no json here") == []
    assert extract_sentences("[not, valid, json") == []


def test_extraction_is_idempotent_over_its_own_payload():
    output = '```\n{"data": [{"sentence": "Again.", "translation": "再来。"}]}\n```'
    first = extract_sentences(output)
    again = extract_sentences(json.dumps([item.as_payload() for item in first], ensure_ascii=False))
    assert again == first


def test_strip_code_fence_variants():
    assert strip_code_fence("```\n[1]\n```") == "[1]"
    assert strip_code_fence("```JSON  \n{}\n```  ") == "{}"
    assert strip_code_fence("  [2]  ") == "[2]"


def test_parse_embedded_json_prefers_array_slice():
    assert parse_embedded_json('x {"a": [1, 2]} y') == [1, 2]
    assert parse_embedded_json('x {"a": 1} y') == {"a": 1}
    assert parse_embedded_json("nothing") is None


def test_body_without_any_output():
    extraction = sentences_from_body("event: ping\n\n")
    assert extraction.sentences == []
    assert extraction.latest_content == ""
    assert extraction.output is None


def test_pipeline_is_idempotent_over_a_streamed_body():
    output = '```json\n{"sentences": [{"english": "Twice.", "chinese": "两次。"}, "Once more."]}\n```'
    content = json.dumps({"output": output}, ensure_ascii=False)
    raw = "event: Message\ndata: " + json.dumps({"content": content}, ensure_ascii=False) + "\nevent: Done\n"

    first = sentences_from_body(raw, count=5)
    second = sentences_from_body(raw, count=5)

    assert first == second
    assert first.latest_content == content
    assert first.output == output
    assert [item.sentence for item in first.sentences] == ["Twice.", "Once more."]
