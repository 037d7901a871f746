from __future__ import annotations
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from jobassist.config import FunctionSettings
from jobassist.errors import ConfigurationError, UnexpectedResponseShape, UpstreamCallFailure

JSON_OBJECT = "json_object"


class LLMClient:
    """Chat-completion client over the OpenAI SDK (or any OpenAI-compatible endpoint).

    ``complete`` returns the first choice's message content as text. Without
    an API key the SDK client is never built, so only the requests that need
    it fail.
    """

    def __init__(self, settings: FunctionSettings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or self.settings.llm_configured

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("OpenAI API key not configured")

    def get_client(self) -> Any:
        if self._client is None:
            self.ensure_configured()
            kwargs = {
                "api_key": self.settings.api_key,
                "timeout": self.settings.request_timeout,
                # retries are ours, not the SDK's
                "max_retries": 0,
            }
            if self.settings.base_url:
                kwargs["base_url"] = self.settings.base_url
            self._client = OpenAI(**kwargs)
        return self._client

    def complete(
        self,
        system: str,
        user: str,
        response_format: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Run one chat completion; ``timeout`` caps this call below the client default."""
        client = self.get_client()
        if timeout is not None:
            client = client.with_options(timeout=timeout)
        kwargs = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        if response_format == JSON_OBJECT:
            kwargs["response_format"] = {"type": JSON_OBJECT}

        print(f"[llm_client] Calling {self.settings.model}, user prompt length={len(user)}")
        try:
            completion = client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise UpstreamCallFailure(str(e) or e.__class__.__name__, cause=e) from e

        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content:
            raise UnexpectedResponseShape("No content returned from OpenAI")
        print(f"[llm_client] Raw LLM response snippet: {content[:200]}...")
        return content
