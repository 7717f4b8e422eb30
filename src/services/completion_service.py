import logging

import openai
from openai import OpenAI

from src.models.turn import SYSTEM, Turn

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TIMEOUT_SECONDS = 20.0


class CompletionError(Exception):
    """The completion API failed, timed out, or returned no usable reply."""


def build_messages(persona: str, window: list[Turn]) -> list[dict]:
    """Persona as the system message, then the window's turns in order."""
    return [{"role": SYSTEM, "content": persona}] + [turn.to_message() for turn in window]


class CompletionGateway:
    def __init__(self, client, model: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model = model

    @classmethod
    def from_config(cls, config) -> "CompletionGateway":
        # The SDK's default retries still apply; no extra retry layer here
        client = OpenAI(api_key=config.openai_api_key, timeout=config.openai_timeout_seconds)
        return cls(client, config.openai_model)

    def complete(self, persona: str, window: list[Turn]) -> str:
        messages = build_messages(persona, window)
        try:
            response = self.client.chat.completions.create(model=self.model, messages=messages)
        except openai.OpenAIError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc

        if not response.choices:
            raise CompletionError("Completion returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise CompletionError("Completion returned an empty message")

        log.info("Completion: %d messages in, %d chars out", len(messages), len(content))
        return content
