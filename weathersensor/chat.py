"""Conversational weather Q&A over the current forecast.

Keeps the transcript for one location and grounds each question on the
latest weather context text. Questions go through the AI proxy, so a
failed call still produces an assistant turn with an error message.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Literal

from weathersensor import ai_gateway
from weathersensor.prompts import PromptBuilder, PromptKind, TemplateUnavailableError

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"


class ChatBusyError(Exception):
    """Raised when a message is sent while another is still in flight."""


class ChatState(enum.Enum):
    IDLE = "idle"
    AWAITING = "awaiting"


@dataclass(frozen=True)
class ChatTurn:
    """A single message in the transcript.

    Attributes:
        role: "user" or "assistant".
        text: Message text; assistant text may be markdown.
    """

    role: Literal["user", "assistant"]
    text: str


class ChatSession:
    """Ordered user/assistant transcript for the current location."""

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        query: Callable[[str], str] = ai_gateway.query,
    ):
        self.prompt_builder = prompt_builder
        self.query = query
        self.state = ChatState.IDLE
        self.turns: list[ChatTurn] = []

    @property
    def busy(self) -> bool:
        return self.state is ChatState.AWAITING

    def reset(self) -> None:
        """Drop the whole transcript; used when the location changes."""
        self.turns = []
        self.state = ChatState.IDLE

    def send(self, message: str, weather_context: str = "") -> ChatTurn | None:
        """Ask a question and record both sides of the exchange.

        Args:
            message: The user's question.
            weather_context: Current forecast context text, if any.

        Returns:
            The assistant turn, or None if the message was blank.

        Raises:
            ChatBusyError: If a previous message is still awaiting a reply.
        """
        if not message or not message.strip():
            return None
        if self.busy:
            raise ChatBusyError("Please wait for the current answer.")

        self.turns.append(ChatTurn(role="user", text=message))
        self.state = ChatState.AWAITING
        try:
            try:
                prompt = self.prompt_builder.build(PromptKind.CHAT, message, weather_context)
            except TemplateUnavailableError as exc:
                logger.warning("Chat prompt unavailable: %s", exc)
                answer = f"Error: {exc}"
            else:
                answer = self.query(prompt)
            reply = ChatTurn(role="assistant", text=answer or NO_RESPONSE)
            self.turns.append(reply)
            return reply
        finally:
            self.state = ChatState.IDLE

    def as_messages(self) -> list[dict]:
        """Transcript as [{"role": ..., "content": ...}] dicts."""
        return [{"role": t.role, "content": t.text} for t in self.turns]
