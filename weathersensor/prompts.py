"""Prompt templates and prompt construction for summaries and chat."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from pathlib import Path

from weathersensor import config


class TemplateUnavailableError(Exception):
    """Raised when prompt templates cannot be loaded or lack a key."""


class PromptKind(str, enum.Enum):
    SUMMARY = "summary"
    CHAT = "chat"


@dataclass(frozen=True)
class PromptTemplates:
    """The two task framings loaded from the prompt configuration file."""

    summary_prompt: str
    chat_prompt: str

    def for_kind(self, kind: PromptKind) -> str:
        if kind is PromptKind.SUMMARY:
            return self.summary_prompt
        return self.chat_prompt


@dataclass(frozen=True)
class PromptRequest:
    """A single prompt about to be sent: template plus payload."""

    kind: PromptKind
    template: str
    payload: str

    @property
    def text(self) -> str:
        return self.template + self.payload


def load_prompt_templates(path: Path | str | None = None) -> PromptTemplates:
    """Load prompt templates from a JSON document.

    Args:
        path: File to read; defaults to config.PROMPTS_PATH.

    Raises:
        TemplateUnavailableError: If the file is unreadable, not JSON, or
            lacks a string "summary_prompt" / "chat_prompt".
    """
    path = Path(path) if path is not None else config.PROMPTS_PATH
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise TemplateUnavailableError(f"Could not load prompt templates from {path}: {exc}")

    if not isinstance(data, dict):
        raise TemplateUnavailableError("Prompt configuration must be a JSON object.")

    values = {}
    for key in ("summary_prompt", "chat_prompt"):
        value = data.get(key)
        if not isinstance(value, str):
            raise TemplateUnavailableError(f"Prompt configuration is missing '{key}'.")
        values[key] = value
    return PromptTemplates(**values)


class PromptBuilder:
    """Merges a template with weather context and user input.

    Constructed with None when loading failed, so the page still renders
    and each build reports the failure instead.
    """

    def __init__(self, templates: PromptTemplates | None):
        self.templates = templates

    def request(
        self, kind: PromptKind | str, text: str, weather_context: str = ""
    ) -> PromptRequest:
        if self.templates is None:
            raise TemplateUnavailableError("Prompt templates are not available.")
        kind = PromptKind(kind)
        template = self.templates.for_kind(kind)

        if kind is PromptKind.SUMMARY:
            payload = text
        else:
            payload = ""
            if weather_context:
                payload += f"Current weather:\n{weather_context}\n\n"
            payload += f"User question: {text}"
        return PromptRequest(kind=kind, template=template, payload=payload)

    def build(self, kind: PromptKind | str, text: str, weather_context: str = "") -> str:
        """Return the final prompt string.

        For summaries ``text`` is the weather context itself; for chat it
        is the user's message and ``weather_context`` is prepended.

        Raises:
            TemplateUnavailableError: If no templates were loaded.
        """
        return self.request(kind, text, weather_context).text
