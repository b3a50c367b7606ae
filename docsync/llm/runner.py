"""Adapters around the remote text-generation providers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from google import genai
from google.genai import types

from ..config import ConfigError, LLMConfig
from ..errors import GenerationFailure, MissingCredentialsError

_AUTO_BASE_URL = object()
_AUTO_API_KEY = object()

PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"


@dataclass
class LLMRequest:
    """Represents a single generation request."""

    prompt: str
    system: Optional[str]
    model: str
    provider: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured provider and returns the response text."""

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
    ENV_PROVIDER_KEYS = ("DOCSYNC_LLM_PROVIDER",)
    ENV_MODEL_KEYS = ("DOCSYNC_LLM_MODEL",)
    ENV_BASE_URL_KEYS = ("DOCSYNC_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = {
        PROVIDER_GEMINI: ("DOCSYNC_LLM_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY"),
        PROVIDER_OPENAI: ("DOCSYNC_LLM_API_KEY", "OPENAI_API_KEY"),
    }

    def __init__(
        self,
        model: str | None = None,
        *,
        provider: str | None = None,
        base_url: str | None | object = _AUTO_BASE_URL,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.provider = self._resolve_provider(provider)
        self.model = self._resolve_model(model)
        self.base_url = self._resolve_base_url(base_url)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = self._resolve_api_key(api_key)
        self.request_timeout = request_timeout
        if runner is not None:
            self._runner = runner
            return
        if self.provider == PROVIDER_GEMINI and not self.api_key:
            raise MissingCredentialsError(
                "No API key configured for the gemini provider. Set GOOGLE_API_KEY "
                "or llm.api_key in .docsync.yml."
            )
        self._runner = self._gemini_runner if self.provider == PROVIDER_GEMINI else self._openai_runner

    @classmethod
    def from_config(cls, config: LLMConfig) -> "LLMRunner":
        kwargs: dict[str, object] = {}
        if config.provider:
            kwargs["provider"] = config.provider
        if config.model:
            kwargs["model"] = config.model
        if config.base_url is not None:
            kwargs["base_url"] = config.base_url
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.max_tokens is not None:
            kwargs["max_tokens"] = config.max_tokens
        if config.api_key is not None:
            kwargs["api_key"] = config.api_key
        if config.request_timeout is not None:
            kwargs["request_timeout"] = config.request_timeout
        return cls(**kwargs)  # type: ignore[arg-type]

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt to the configured model and return the response text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            provider=self.provider,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _gemini_runner(request: LLMRequest) -> str:
        http_options = None
        if request.request_timeout:
            http_options = types.HttpOptions(timeout=int(request.request_timeout * 1000))
        client = genai.Client(api_key=request.api_key, http_options=http_options)
        config = types.GenerateContentConfig(
            system_instruction=request.system,
            temperature=request.temperature,
            max_output_tokens=request.max_tokens,
        )
        try:
            response = client.models.generate_content(
                model=request.model,
                contents=request.prompt,
                config=config,
            )
        except Exception as exc:  # SDK raises provider-specific error types
            raise GenerationFailure(f"Gemini request failed: {exc}") from exc
        text = response.text
        if not text or not text.strip():
            raise GenerationFailure("Gemini returned an empty response")
        return text

    @staticmethod
    def _openai_runner(request: LLMRequest) -> str:
        if not request.base_url:
            raise GenerationFailure("The openai provider requires llm.base_url or OPENAI_BASE_URL.")
        messages = [{"role": "user", "content": request.prompt}]
        if request.system:
            messages.insert(0, {"role": "system", "content": request.system})
        body: dict[str, object] = {"model": request.model, "messages": messages}
        for key, value in (("temperature", request.temperature), ("max_tokens", request.max_tokens)):
            if value is not None:
                body[key] = value

        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        http_request = Request(
            f"{request.base_url}/chat/completions",
            data=json.dumps(body).encode("utf-8"),
            headers=headers,
            method="POST",
        )

        try:
            with urlopen(http_request, timeout=request.request_timeout or 120.0) as response:  # type: ignore[arg-type]
                decoded = json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore").strip()
            raise GenerationFailure(
                f"Chat completion request failed with status {exc.code}: {detail or exc.reason}"
            ) from exc
        except (URLError, TimeoutError) as exc:  # pragma: no cover - depends on runtime
            raise GenerationFailure(f"Chat completion request failed: {getattr(exc, 'reason', exc)}") from exc
        except json.JSONDecodeError as exc:
            raise GenerationFailure("Chat completion endpoint returned invalid JSON") from exc

        text = _first_choice_text(decoded)
        if not text.strip():
            raise GenerationFailure("Chat completion endpoint returned an empty response")
        return text

    def _resolve_provider(self, provider: str | None) -> str:
        value = provider or self._first_env_value(self.ENV_PROVIDER_KEYS) or PROVIDER_GEMINI
        value = value.strip().lower()
        if value not in self.ENV_API_KEY_KEYS:
            raise ConfigError(f"Unknown LLM provider '{value}'; expected gemini or openai")
        return value

    def _resolve_model(self, model: str | None) -> str:
        if model:
            return model
        env_value = self._first_env_value(self.ENV_MODEL_KEYS)
        if env_value:
            return env_value
        return self.DEFAULT_MODEL

    def _resolve_base_url(self, base_url: str | None | object) -> str | None:
        if self.provider != PROVIDER_OPENAI:
            return None
        if base_url is None:
            return None
        if base_url is not _AUTO_BASE_URL:
            return str(base_url).rstrip("/")
        env_value = self._first_env_value(self.ENV_BASE_URL_KEYS)
        return (env_value or self.DEFAULT_OPENAI_BASE_URL).rstrip("/")

    def _resolve_api_key(self, api_key: str | None | object) -> str | None:
        if api_key is _AUTO_API_KEY:
            return self._first_env_value(self.ENV_API_KEY_KEYS[self.provider])
        return api_key  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


def _first_choice_text(payload: object) -> str:
    """Pull the assistant text out of a chat-completions response body."""
    try:
        choice = payload["choices"][0]  # type: ignore[index]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(choice, dict):
        return ""
    message = choice.get("message")
    text = message.get("content") if isinstance(message, dict) else choice.get("text")
    return text if isinstance(text, str) else ""


__all__ = ["LLMRequest", "LLMRunner", "PROVIDER_GEMINI", "PROVIDER_OPENAI"]
