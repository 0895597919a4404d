"""Tests for the chat session."""

from unittest.mock import MagicMock

import pytest

from weathersensor.chat import NO_RESPONSE, ChatBusyError, ChatSession, ChatState, ChatTurn
from weathersensor.prompts import PromptBuilder


@pytest.fixture()
def mock_query():
    return MagicMock(return_value="Yes, bring an umbrella.")


@pytest.fixture()
def chat(prompt_builder, mock_query):
    return ChatSession(prompt_builder, mock_query)


class TestSend:

    def test_appends_user_then_assistant(self, chat):
        reply = chat.send("Will it rain tomorrow?", "Lawrence, KS\nMonday ...")

        assert chat.turns == [
            ChatTurn(role="user", text="Will it rain tomorrow?"),
            ChatTurn(role="assistant", text="Yes, bring an umbrella."),
        ]
        assert reply is chat.turns[-1]
        assert chat.state is ChatState.IDLE

    def test_prompt_includes_weather_context(self, chat, mock_query):
        chat.send("Will it rain tomorrow?", "Lawrence, KS")

        prompt = mock_query.call_args.args[0]
        assert "Lawrence, KS" in prompt
        assert prompt.endswith("Will it rain tomorrow?")

    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    def test_blank_message_is_ignored(self, chat, mock_query, message):
        assert chat.send(message) is None
        assert chat.turns == []
        assert chat.state is ChatState.IDLE
        mock_query.assert_not_called()

    def test_empty_result_becomes_placeholder(self, prompt_builder):
        chat = ChatSession(prompt_builder, MagicMock(return_value=""))

        chat.send("Hello?")

        assert chat.turns[-1].text == NO_RESPONSE

    def test_gateway_error_text_is_kept(self, prompt_builder):
        chat = ChatSession(
            prompt_builder, MagicMock(return_value="Error querying the AI service: down")
        )

        chat.send("Will it rain tomorrow?", "ctx")

        assert [t.role for t in chat.turns] == ["user", "assistant"]
        assert chat.turns[-1].text.startswith("Error")

    def test_missing_templates_gives_error_turn(self, mock_query):
        chat = ChatSession(PromptBuilder(None), mock_query)

        chat.send("Hello?")

        assert chat.turns[-1].role == "assistant"
        assert chat.turns[-1].text.startswith("Error:")
        mock_query.assert_not_called()

    def test_awaiting_while_query_runs(self, prompt_builder):
        states = []
        chat = None

        def _query(prompt):
            states.append(chat.state)
            return "ok"

        chat = ChatSession(prompt_builder, _query)
        chat.send("Hi")

        assert states == [ChatState.AWAITING]
        assert chat.state is ChatState.IDLE

    def test_concurrent_send_rejected(self, prompt_builder):
        chat = None

        def _query(prompt):
            with pytest.raises(ChatBusyError):
                chat.send("second question")
            return "first answer"

        chat = ChatSession(prompt_builder, _query)
        chat.send("first question")

        assert [t.text for t in chat.turns] == ["first question", "first answer"]

    def test_returns_to_idle_on_unexpected_error(self, prompt_builder):
        chat = ChatSession(prompt_builder, MagicMock(side_effect=RuntimeError("bug")))

        with pytest.raises(RuntimeError):
            chat.send("Hi")

        assert chat.state is ChatState.IDLE


class TestReset:

    def test_clears_transcript(self, chat):
        chat.send("One?")
        chat.send("Two?")

        chat.reset()

        assert chat.turns == []
        assert chat.state is ChatState.IDLE


class TestAsMessages:

    def test_role_content_dicts(self, chat):
        chat.send("Windy?")

        assert chat.as_messages() == [
            {"role": "user", "content": "Windy?"},
            {"role": "assistant", "content": "Yes, bring an umbrella."},
        ]
