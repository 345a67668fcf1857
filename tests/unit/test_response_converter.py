"""
Non-Stream Response Translator Unit Tests

Completed OpenAI chat completion -> Anthropic message.
"""

import json

import pytest

from anthropic_compat import map_finish_reason_to_stop_reason, translate_to_anthropic
from anthropic_compat.types import ChatResponse
from errors import MalformedUpstreamResponse


def build_response(message, finish_reason="stop", usage=None, response_id="chatcmpl-1") -> ChatResponse:
    body = {
        "id": response_id,
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }
    if usage is not None:
        body["usage"] = usage
    return ChatResponse.model_validate(body)


def tool_call(call_id, name, arguments):
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


class TestTextResponses:

    def test_text_only_message_yields_single_text_block(self):
        result = translate_to_anthropic(
            build_response(
                {"role": "assistant", "content": "Hello there"},
                usage={"prompt_tokens": 12, "completion_tokens": 4, "total_tokens": 16},
            )
        )

        assert len(result.content) == 1
        assert result.content[0].type == "text"
        assert result.content[0].text == "Hello there"
        assert result.stop_reason == "end_turn"
        assert result.usage.input_tokens == 12
        assert result.usage.output_tokens == 4
        assert result.role == "assistant"
        assert result.model == "gpt-4o"
        assert result.id == "chatcmpl-1"

    def test_missing_id_is_generated(self):
        result = translate_to_anthropic(build_response({"content": "x"}, response_id=""))
        assert result.id.startswith("msg_")

    def test_missing_usage_reports_zero(self):
        result = translate_to_anthropic(build_response({"content": "x"}))
        assert result.usage.input_tokens == 0
        assert result.usage.output_tokens == 0

    def test_no_choices_is_malformed(self):
        response = ChatResponse.model_validate({"id": "x", "model": "gpt-4o", "choices": []})
        with pytest.raises(MalformedUpstreamResponse):
            translate_to_anthropic(response)


class TestToolCallResponses:

    def test_lookup_scenario(self):
        result = translate_to_anthropic(
            build_response(
                {"role": "assistant", "content": None, "tool_calls": [tool_call("call_1", "lookup", "{\"q\":\"x\"}")]},
                finish_reason="tool_calls",
            )
        )

        assert result.stop_reason == "tool_use"
        assert len(result.content) == 1
        block = result.content[0]
        assert block.type == "tool_use"
        assert block.id == "call_1"
        assert block.name == "lookup"
        assert block.input == {"q": "x"}

    def test_n_tool_calls_in_source_order(self):
        arguments = ['{"a": 1}', '{"b": [1, 2]}', '{}']
        calls = [tool_call(f"call_{i}", f"tool_{i}", args) for i, args in enumerate(arguments)]
        result = translate_to_anthropic(
            build_response({"content": "", "tool_calls": calls}, finish_reason="tool_calls")
        )

        assert [block.name for block in result.content] == ["tool_0", "tool_1", "tool_2"]
        assert [block.input for block in result.content] == [json.loads(a) for a in arguments]

    def test_text_precedes_tool_use(self):
        result = translate_to_anthropic(
            build_response(
                {"content": "Let me check.", "tool_calls": [tool_call("c", "lookup", "{}")]},
                finish_reason="tool_calls",
            )
        )

        assert [block.type for block in result.content] == ["text", "tool_use"]

    def test_truncated_arguments_are_malformed(self):
        with pytest.raises(MalformedUpstreamResponse):
            translate_to_anthropic(
                build_response({"content": None, "tool_calls": [tool_call("c", "lookup", "{\"q\":")]}, finish_reason="tool_calls")
            )

    def test_non_object_arguments_are_malformed(self):
        with pytest.raises(MalformedUpstreamResponse):
            translate_to_anthropic(
                build_response({"content": None, "tool_calls": [tool_call("c", "lookup", "[1, 2]")]}, finish_reason="tool_calls")
            )


class TestFinishReasonMapping:

    @pytest.mark.parametrize(
        "finish_reason,expected",
        [
            ("stop", "end_turn"),
            ("length", "max_tokens"),
            ("tool_calls", "tool_use"),
            ("function_call", "tool_use"),
            ("content_filter", "end_turn"),
            (None, "end_turn"),
        ],
    )
    def test_table(self, finish_reason, expected):
        assert map_finish_reason_to_stop_reason(finish_reason) == expected
