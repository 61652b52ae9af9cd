"""Language model oracle backed by the OpenAI SDK (any OpenAI-compatible endpoint)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol, Sequence

from openai import AsyncOpenAI, OpenAIError

from ...core.config import AgentSettings, get_settings
from ...core.exceptions import ConfigurationError, ModelError
from ...core.logging_config import get_logger
from ...core.types import ToolInvocationRequest

logger = get_logger(__name__)


@dataclass(slots=True)
class Completion:
    """What the oracle returns: an optional message, requested tool calls and why it stopped."""

    message: str | None
    tool_calls: list[ToolInvocationRequest] = field(default_factory=list)
    finish_reason: str | None = None


class LanguageModelOracle(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        tool_specs: Sequence[dict[str, Any]] | None = None,
        *,
        json_mode: bool = False,
    ) -> Completion: ...


def decode_arguments(raw: Any) -> Any:
    """Decode tool-call arguments; undecodable text is returned as-is for the executor to reject."""

    if raw is None or raw == "":
        return {}
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        try:
            decoded, _ = json.JSONDecoder().raw_decode(raw.strip())
            return decoded
        except json.JSONDecodeError:
            logger.warning("tool_arguments_undecodable", preview=raw[:200])
            return raw


def parse_completion(payload: dict[str, Any]) -> Completion:
    """Convert a chat-completion payload (``response.model_dump()``) into a Completion."""

    choices = payload.get("choices") or []
    if not choices:
        raise ModelError("Language model returned no choices")
    choice = choices[0] or {}
    message = choice.get("message") or {}

    tool_calls: list[ToolInvocationRequest] = []
    for call in message.get("tool_calls") or []:
        function = call.get("function") or {}
        tool_calls.append(
            ToolInvocationRequest(
                tool_name=function.get("name") or "",
                input=decode_arguments(function.get("arguments")),
                call_id=call.get("id"),
            )
        )

    content = message.get("content")
    return Completion(
        message=content if isinstance(content, str) else None,
        tool_calls=tool_calls,
        finish_reason=choice.get("finish_reason"),
    )


class OpenAIOracle:
    """Thin wrapper around the OpenAI-compatible chat completions API."""

    def __init__(self, settings: AgentSettings | None = None, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings or get_settings()
        if client is None:
            if self._settings.llm_api_key is None:
                raise ConfigurationError("LLM_API_KEY is not configured")
            api_key = self._settings.llm_api_key.get_secret_value()
            base_url = str(self._settings.llm_api_base).rstrip("/")
            logger.info(
                "oracle_client_init",
                base_url=base_url,
                model=self._settings.llm_model,
                api_key_masked=f"{api_key[:4]}***{api_key[-4:]}",
            )
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=self._settings.llm_timeout_seconds,
            )
        self._client = client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        tool_specs: Sequence[dict[str, Any]] | None = None,
        *,
        json_mode: bool = False,
    ) -> Completion:
        """Issue one chat completion request; no retries, no caching."""

        options: dict[str, Any] = {}
        if tool_specs:
            options["tools"] = list(tool_specs)
            options["tool_choice"] = "auto"
        if json_mode:
            options["response_format"] = {"type": "json_object"}

        logger.info(
            "oracle_request",
            model=self._settings.llm_model,
            tool_count=len(tool_specs or []),
            json_mode=json_mode,
            prompt_chars=len(user_prompt),
        )

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.llm_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self._settings.llm_temperature,
                **options,
            )
        except OpenAIError as exc:
            logger.error(
                "oracle_sdk_error",
                error_type=type(exc).__name__,
                message=str(exc),
            )
            raise ModelError(f"Language model error: {exc}") from exc

        completion = parse_completion(response.model_dump())
        logger.info(
            "oracle_response",
            finish_reason=completion.finish_reason,
            tool_calls=len(completion.tool_calls),
            has_message=bool(completion.message),
        )
        return completion


@lru_cache
def get_oracle() -> OpenAIOracle:
    """Return the process-wide oracle built from settings."""

    return OpenAIOracle()
