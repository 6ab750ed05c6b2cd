"""OpenAI-backed oracle for transaction extraction and spending analysis."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from openai import OpenAI, OpenAIError

from .errors import LLMError
from .prompts import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt

logger = logging.getLogger(__name__)


def _as_mapping(response: Any) -> Mapping[str, Any]:
    if isinstance(response, Mapping):
        return response
    if hasattr(response, "model_dump"):
        dumped = response.model_dump()
        if isinstance(dumped, Mapping):
            return dumped
    return {}


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _text_from_output(output: Any) -> str | None:
    if not isinstance(output, list):
        return None
    for item in output:
        if not isinstance(item, Mapping):
            continue
        for part in item.get("content") or []:
            if isinstance(part, Mapping) and part.get("type") in ("output_text", "text"):
                text = _clean(part.get("text"))
                if text:
                    return text
    return None


def _text_from_choices(choices: Any) -> str | None:
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, Mapping):
        return None
    message = first.get("message") or {}
    content = message.get("content") if isinstance(message, Mapping) else None
    if isinstance(content, list):
        return _text_from_output([{"content": content}])
    return _clean(content) or _clean(first.get("text"))


def extract_text(response: Any) -> str:
    """Pull the generated text out of any known OpenAI response envelope.

    Handles the responses API (``output_text`` or ``output[].content[]``) and
    chat/legacy completions (``choices[0].message.content`` / ``choices[0].text``),
    whether given as SDK objects or plain dicts.
    """
    text = _clean(getattr(response, "output_text", None))
    if text:
        return text

    payload = _as_mapping(response)
    text = (
        _clean(payload.get("output_text"))
        or _text_from_output(payload.get("output"))
        or _text_from_choices(payload.get("choices"))
    )
    if text:
        return text

    logger.error("No text in OpenAI response with keys %s", sorted(payload))
    raise LLMError("AI did not return any text", response_keys=sorted(payload))


def _first_line(text: str) -> str:
    """First non-empty line of a reply, skipping markdown code fences."""
    for raw in text.splitlines():
        if raw.strip().startswith("```"):
            continue
        line = raw.strip().strip("`\"'").strip()
        if line:
            return line
    return ""


class LLMOracle:
    def __init__(self, client: OpenAI, extraction_model: str, analysis_model: str) -> None:
        self.client = client
        self.extraction_model = extraction_model
        self.analysis_model = analysis_model

    def extract_transaction(self, message: str) -> str:
        """Ask the model to rewrite a bank SMS as an ``"Amount [CODE] Name"`` line."""
        logger.info("Calling OpenAI (%s) for transaction extraction", self.extraction_model)
        try:
            response = self.client.chat.completions.create(
                model=self.extraction_model,
                messages=[
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": build_extraction_prompt(message)},
                ],
                temperature=0.3,
                max_tokens=100,
            )
        except OpenAIError as exc:
            logger.error("OpenAI extraction failed: %s", exc)
            raise LLMError("Failed to process message with AI", details=str(exc)) from exc

        text = extract_text(response)
        line = _first_line(text)
        logger.info("OpenAI extracted: %s", line)
        return line

    def analyze(self, prompt: str) -> str:
        logger.info("Calling OpenAI (%s) for spending analysis", self.analysis_model)
        try:
            response = self.client.responses.create(model=self.analysis_model, input=prompt)
        except OpenAIError as exc:
            logger.error("OpenAI analysis failed: %s", exc)
            raise LLMError("Failed to generate analysis", details=str(exc)) from exc
        return extract_text(response)
