from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from typing import Any
from urllib import error, request

from a11y_forge.llm.prompts import SYSTEM_PROMPT, build_user_prompt

REQUEST_TIMEOUT_SECONDS = 120


class CodeRepairClient(ABC):
    """Provider-neutral interface for repairing source that fails to parse."""

    provider_name = "unknown"

    @abstractmethod
    def repair_code(self, payload: dict[str, Any]) -> str:
        raise NotImplementedError


class _HttpRepairClient(CodeRepairClient):
    """One JSON POST per repair; subclasses describe the provider's wire format."""

    default_model = ""
    model_env = ""

    def __init__(self, api_key: str, model: str | None = None) -> None:
        self.api_key = api_key
        self.model = model or os.getenv(self.model_env, self.default_model)

    def repair_code(self, payload: dict[str, Any]) -> str:
        reply = _post_json(self.url(), self.body(build_user_prompt(payload)), self.headers())
        text = self.reply_text(reply)
        if not text.strip():
            raise RuntimeError(f"{self.provider_name} returned an empty response")
        return text

    @abstractmethod
    def url(self) -> str: ...

    @abstractmethod
    def headers(self) -> dict[str, str]: ...

    @abstractmethod
    def body(self, prompt: str) -> dict[str, Any]: ...

    @abstractmethod
    def reply_text(self, reply: dict[str, Any]) -> str: ...


class OpenAICodeRepairClient(_HttpRepairClient):
    provider_name = "openai"
    default_model = "gpt-4o-mini"
    model_env = "OPENAI_MODEL"

    def url(self) -> str:
        return "https://api.openai.com/v1/chat/completions"

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    def body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }

    def reply_text(self, reply: dict[str, Any]) -> str:
        choices = reply.get("choices") or []
        if not choices:
            return ""
        return choices[0].get("message", {}).get("content") or ""


class AnthropicCodeRepairClient(_HttpRepairClient):
    provider_name = "anthropic"
    default_model = "claude-3-5-sonnet-latest"
    model_env = "ANTHROPIC_MODEL"
    # Replies carry whole files.
    max_tokens = 8192

    def url(self) -> str:
        return "https://api.anthropic.com/v1/messages"

    def headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }

    def body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
        }

    def reply_text(self, reply: dict[str, Any]) -> str:
        return "".join(block.get("text", "") for block in reply.get("content", []) if isinstance(block, dict))


class GeminiCodeRepairClient(_HttpRepairClient):
    provider_name = "gemini"
    default_model = "gemini-2.5-flash"
    model_env = "GEMINI_MODEL"

    def url(self) -> str:
        return f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"

    def headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

    def body(self, prompt: str) -> dict[str, Any]:
        return {
            "system_instruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0},
        }

    def reply_text(self, reply: dict[str, Any]) -> str:
        candidates = reply.get("candidates") or []
        if not candidates:
            raise RuntimeError("Gemini returned no candidates")
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


PROVIDERS: dict[str, tuple[type[_HttpRepairClient], str]] = {
    "openai": (OpenAICodeRepairClient, "OPENAI_API_KEY"),
    "anthropic": (AnthropicCodeRepairClient, "ANTHROPIC_API_KEY"),
    "gemini": (GeminiCodeRepairClient, "GEMINI_API_KEY"),
}


class LazyCodeRepairClient(CodeRepairClient):
    """Defers provider client construction until a heal is actually needed."""

    def __init__(self) -> None:
        self.provider_name = _configured_provider()
        self._client: CodeRepairClient | None = None

    def repair_code(self, payload: dict[str, Any]) -> str:
        if self._client is None:
            self._client = create_code_repair_client()
            self.provider_name = self._client.provider_name
        return self._client.repair_code(payload)


def create_code_repair_client() -> CodeRepairClient:
    provider = _configured_provider()
    if provider not in PROVIDERS:
        raise RuntimeError(f"Unsupported LLM provider: {provider}")
    client_class, key_env = PROVIDERS[provider]
    api_key = os.getenv(key_env)
    if not api_key:
        raise RuntimeError(f"{key_env} is required when LLM_PROVIDER={provider}")
    return client_class(api_key)


def _configured_provider() -> str:
    return os.getenv("LLM_PROVIDER", "openai").strip().lower()


def _post_json(url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
    req = request.Request(url, data=json.dumps(payload).encode("utf-8"), headers=headers, method="POST")
    try:
        with request.urlopen(req, timeout=REQUEST_TIMEOUT_SECONDS) as response:
            return json.loads(response.read().decode("utf-8"))
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise RuntimeError(f"Repair request to {url} failed with status {exc.code}: {detail}") from exc
    except error.URLError as exc:
        raise RuntimeError(f"Repair request to {url} could not be completed: {exc.reason}") from exc
