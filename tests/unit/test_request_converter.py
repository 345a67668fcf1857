"""
Request Translator Unit Tests

Anthropic messages request -> OpenAI chat completion request.
"""

import json

import pytest

from anthropic_compat import translate_to_openai
from anthropic_compat.types import AnthropicMessagesRequest
from errors import ValidationError


def build_request(**overrides) -> AnthropicMessagesRequest:
    body = {
        "model": "gpt-4o",
        "max_tokens": 1024,
        "messages": [{"role": "user", "content": "Hello"}],
    }
    body.update(overrides)
    return AnthropicMessagesRequest.model_validate(body)


class TestBasicTranslation:
    """Roles, order, system prompt and scalar fields."""

    def test_preserves_message_count_order_and_role(self):
        request = build_request(
            messages=[
                {"role": "user", "content": "one"},
                {"role": "assistant", "content": "two"},
                {"role": "user", "content": [{"type": "text", "text": "three"}]},
            ]
        )

        result = translate_to_openai(request)

        assert [m.role for m in result.messages] == ["user", "assistant", "user"]
        assert [m.content for m in result.messages] == ["one", "two", "three"]

    def test_string_system_prompt_becomes_leading_system_message(self):
        result = translate_to_openai(build_request(system="Be brief."))

        assert result.messages[0].role == "system"
        assert result.messages[0].content == "Be brief."
        assert result.messages[1].role == "user"

    def test_block_system_prompt_is_joined(self):
        result = translate_to_openai(
            build_request(system=[{"type": "text", "text": "A"}, {"type": "text", "text": "B"}])
        )

        assert result.messages[0].content == "A\n\nB"

    def test_max_tokens_copies_unchanged(self):
        result = translate_to_openai(build_request(max_tokens=777))
        assert result.max_tokens == 777

    def test_optional_fields(self):
        result = translate_to_openai(
            build_request(
                temperature=0.2,
                top_p=0.9,
                stop_sequences=["END"],
                stream=True,
                metadata={"user_id": "user-42"},
            )
        )

        assert result.temperature == 0.2
        assert result.top_p == 0.9
        assert result.stop == ["END"]
        assert result.stream is True
        assert result.user == "user-42"

    def test_payload_omits_unset_fields(self):
        payload = translate_to_openai(build_request()).to_payload()

        assert "tools" not in payload
        assert "temperature" not in payload
        assert payload["model"] == "gpt-4o"

    def test_result_is_immutable(self):
        result = translate_to_openai(build_request())
        with pytest.raises(Exception):
            result.model = "other"


class TestTools:
    """Tool declarations, tool_choice and tool history."""

    def test_tool_declarations_map_one_to_one(self):
        schema = {"type": "object", "properties": {"q": {"type": "string"}}}
        result = translate_to_openai(
            build_request(
                tools=[
                    {"name": "lookup", "description": "Find things", "input_schema": schema},
                    {"name": "noop", "input_schema": {"type": "object"}},
                ]
            )
        )

        assert len(result.tools) == 2
        assert result.tools[0].type == "function"
        assert result.tools[0].function.name == "lookup"
        assert result.tools[0].function.description == "Find things"
        assert result.tools[0].function.parameters == schema
        assert result.tools[1].function.name == "noop"

    @pytest.mark.parametrize(
        "choice,expected",
        [
            ({"type": "auto"}, "auto"),
            ({"type": "any"}, "required"),
            ({"type": "none"}, "none"),
            ({"type": "tool", "name": "lookup"}, {"type": "function", "function": {"name": "lookup"}}),
        ],
    )
    def test_tool_choice_mapping(self, choice, expected):
        result = translate_to_openai(build_request(tool_choice=choice))
        assert result.tool_choice == expected

    def test_unknown_tool_choice_rejected(self):
        with pytest.raises(ValidationError):
            translate_to_openai(build_request(tool_choice={"type": "sometimes"}))

    def test_assistant_tool_use_becomes_tool_calls(self):
        result = translate_to_openai(
            build_request(
                messages=[
                    {"role": "user", "content": "weather?"},
                    {
                        "role": "assistant",
                        "content": [
                            {"type": "text", "text": "Checking."},
                            {"type": "tool_use", "id": "call_1", "name": "weather", "input": {"city": "Oslo"}},
                        ],
                    },
                ]
            )
        )

        assistant = result.messages[1]
        assert assistant.role == "assistant"
        assert assistant.content == "Checking."
        assert assistant.tool_calls[0].id == "call_1"
        assert assistant.tool_calls[0].function.name == "weather"
        assert json.loads(assistant.tool_calls[0].function.arguments) == {"city": "Oslo"}

    def test_tool_result_becomes_tool_message_before_user_text(self):
        result = translate_to_openai(
            build_request(
                messages=[
                    {"role": "user", "content": "weather?"},
                    {
                        "role": "assistant",
                        "content": [{"type": "tool_use", "id": "call_1", "name": "weather", "input": {}}],
                    },
                    {
                        "role": "user",
                        "content": [
                            {"type": "tool_result", "tool_use_id": "call_1", "content": "sunny"},
                            {"type": "text", "text": "thanks"},
                        ],
                    },
                ]
            )
        )

        roles = [m.role for m in result.messages]
        assert roles == ["user", "assistant", "tool", "user"]
        assert result.messages[1].content is None
        assert result.messages[2].tool_call_id == "call_1"
        assert result.messages[2].content == "sunny"
        assert result.messages[3].content == "thanks"

    def test_tool_result_block_content_is_flattened(self):
        result = translate_to_openai(
            build_request(
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "tool_result",
                                "tool_use_id": "call_9",
                                "content": [{"type": "text", "text": "line 1"}, {"type": "text", "text": "line 2"}],
                            }
                        ],
                    }
                ]
            )
        )

        assert len(result.messages) == 1
        assert result.messages[0].role == "tool"
        assert result.messages[0].content == "line 1\n\nline 2"


class TestContentBlocks:
    """Images, thinking history and validation."""

    def test_base64_image_becomes_data_url(self):
        result = translate_to_openai(
            build_request(
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": "What is this?"},
                            {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "AAAA"}},
                        ],
                    }
                ]
            )
        )

        parts = result.messages[0].content
        assert parts[0] == {"type": "text", "text": "What is this?"}
        assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}

    def test_thinking_history_folded_into_text(self):
        result = translate_to_openai(
            build_request(
                messages=[
                    {"role": "user", "content": "hi"},
                    {
                        "role": "assistant",
                        "content": [
                            {"type": "thinking", "thinking": "pondering", "signature": "sig"},
                            {"type": "text", "text": "hello"},
                        ],
                    },
                ]
            )
        )

        assert result.messages[1].content == "pondering\n\nhello"

    def test_no_messages_rejected(self):
        with pytest.raises(ValidationError, match="at least one message"):
            translate_to_openai(build_request(messages=[]))

    def test_unrecognized_block_type_rejected(self):
        with pytest.raises(ValidationError, match="Unrecognized content block type 'video'"):
            translate_to_openai(
                build_request(messages=[{"role": "user", "content": [{"type": "video", "url": "x"}]}])
            )

    def test_tool_use_in_user_message_rejected(self):
        with pytest.raises(ValidationError):
            translate_to_openai(
                build_request(
                    messages=[{"role": "user", "content": [{"type": "tool_use", "id": "a", "name": "b", "input": {}}]}]
                )
            )
