"""Adapter around OpenAI-compatible chat-completions endpoints."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import LLMConfig

_AUTO = object()


@dataclass
class LLMRequest:
    """Represents a single chat-completion request."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: Optional[str]
    api_key: Optional[str]
    api_version: Optional[str]
    request_timeout: Optional[float]


@dataclass(frozen=True)
class Completion:
    """Generated text plus the backend's reason for stopping."""

    text: str
    finish_reason: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return (self.finish_reason or "").lower() == "length"


class LLMRunner:
    """Sends prompts to the configured chat-completions backend."""

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_TIMEOUT = 120.0
    ENV_MODEL_KEYS = ("TOOLDOCGEN_LLM_MODEL", "AZURE_OPENAI_DEPLOYMENT", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("TOOLDOCGEN_LLM_BASE_URL", "AZURE_OPENAI_ENDPOINT", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("TOOLDOCGEN_LLM_API_KEY", "AZURE_OPENAI_API_KEY", "OPENAI_API_KEY")
    ENV_API_VERSION_KEYS = ("TOOLDOCGEN_LLM_API_VERSION", "AZURE_OPENAI_API_VERSION")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None | object = _AUTO,
        temperature: Optional[float] = 0.2,
        api_key: str | None | object = _AUTO,
        api_version: str | None | object = _AUTO,
        request_timeout: Optional[float] = DEFAULT_TIMEOUT,
        runner: Callable[[LLMRequest], Completion] | None = None,
    ) -> None:
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = self._resolve(base_url, self.ENV_BASE_URL_KEYS)
        if self.base_url:
            self.base_url = self.base_url.rstrip("/")
        self.temperature = temperature
        self.api_key = self._resolve(api_key, self.ENV_API_KEY_KEYS)
        self.api_version = self._resolve(api_version, self.ENV_API_VERSION_KEYS)
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    @classmethod
    def from_config(
        cls,
        config: LLMConfig | None,
        *,
        runner: Callable[[LLMRequest], Completion] | None = None,
    ) -> "LLMRunner":
        """Build a runner from the ``llm`` section, leaving unset values to the environment."""
        config = config or LLMConfig()
        return cls(
            model=config.model,
            base_url=config.base_url or _AUTO,
            temperature=config.temperature if config.temperature is not None else 0.2,
            api_key=config.api_key or _AUTO,
            api_version=config.api_version or _AUTO,
            request_timeout=config.request_timeout or cls.DEFAULT_TIMEOUT,
            runner=runner,
        )

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> Completion:
        """Send the prompt and return the completion with its finish reason."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            api_version=self.api_version,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _http_runner(request: LLMRequest) -> Completion:
        if not request.base_url:
            raise RuntimeError(
                "HTTP runner requires a base_url. Set llm.base_url or TOOLDOCGEN_LLM_BASE_URL."
            )
        endpoint = f"{request.base_url}/chat/completions"
        headers = {"Content-Type": "application/json"}
        if request.api_version:
            # Azure OpenAI deployments authenticate with api-key and pin the API version in the query.
            endpoint = f"{endpoint}?api-version={quote(request.api_version)}"
            if request.api_key:
                headers["api-key"] = request.api_key
        elif request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        payload: dict[str, object] = {
            "model": request.model,
            "messages": LLMRunner._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        data = json.dumps(payload).encode("utf-8")
        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or LLMRunner.DEFAULT_TIMEOUT

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise RuntimeError(
                f"LLM HTTP runner failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise RuntimeError(f"LLM HTTP runner failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise RuntimeError("LLM HTTP runner returned invalid JSON") from exc

        content, finish_reason = LLMRunner._extract_completion(response_payload)
        if not content and finish_reason != "length":
            raise RuntimeError("LLM HTTP runner returned an empty response")
        return Completion(text=content.strip(), finish_reason=finish_reason)

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_completion(payload: dict[str, object]) -> tuple[str, Optional[str]]:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return "", None
        first = choices[0]
        if not isinstance(first, dict):
            return "", None
        finish_reason = first.get("finish_reason")
        reason = finish_reason if isinstance(finish_reason, str) else None
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content, reason
        text = first.get("text")
        if isinstance(text, str):
            return text, reason
        return "", reason

    def _resolve(self, value: str | None | object, env_keys: Sequence[str]) -> str | None:
        if value is _AUTO:
            return self._first_env_value(env_keys)
        return value  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["Completion", "LLMRequest", "LLMRunner"]
