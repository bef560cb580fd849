"""Thin client over an OpenAI-compatible chat-completions endpoint."""
from __future__ import annotations

import json
import re
from typing import Any

from openai import OpenAI

from jobhunt.config import get_api_key, get_base_url, get_model
from jobhunt.errors import MalformedResponse
from jobhunt.log import get_logger

log = get_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class LLMClient:
    def __init__(self, api_key: str, base_url: str, model: str, client: Any = None) -> None:
        self.model = model
        self._client = client or OpenAI(api_key=api_key or "dummy-key", base_url=base_url)

    @classmethod
    def from_env(cls, api_key: str | None = None) -> LLMClient:
        return cls(api_key or get_api_key(), get_base_url(), get_model())

    def generate(
        self,
        prompt: str,
        *,
        document: list[dict[str, Any]] | None = None,
        json_mode: bool = False,
        max_tokens: int | None = None,
    ) -> str:
        """Send one user turn and return the reply text ("" when there is none).

        *document* is a list of content parts placed before the prompt.
        With *json_mode* the service is asked for a JSON object.
        """
        content: Any = prompt
        if document:
            content = [*document, {"type": "text", "text": prompt}]

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        resp = self._client.chat.completions.create(**kwargs)
        if not resp.choices:
            return ""
        text = (resp.choices[0].message.content or "").strip()
        log.debug("LLM reply (%s): %d chars", self.model, len(text))
        return text


def parse_json(text: str) -> Any:
    """Parse a JSON reply, tolerating code fences and chatter around it."""
    if not text or not text.strip():
        raise MalformedResponse("No response generated from AI.")

    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for opener, closer in (("{", "}"), ("[", "]")):
        start = cleaned.find(opener)
        end = cleaned.rfind(closer) + 1
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start:end])
            except json.JSONDecodeError:
                continue

    log.warning("Unparsable AI response: %s", text[:200])
    raise MalformedResponse("The AI response was not valid JSON.")
