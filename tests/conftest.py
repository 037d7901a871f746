"""Shared fixtures: a scripted LLM client, a recording sleep and a test app."""

import pytest

from jobassist.app import create_app
from jobassist.config import FunctionSettings, TestConfig
from jobassist.errors import ConfigurationError


class ScriptedLLM:
    """Stands in for LLMClient; replays scripted replies and records every call."""

    def __init__(self, *replies, configured=True):
        self.replies = list(replies)
        self.calls = []
        self.configured = configured

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("OpenAI API key not configured")

    def complete(self, system, user, response_format=None, timeout=None):
        self.calls.append({"system": system, "user": user, "response_format": response_format, "timeout": timeout})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def settings():
    return FunctionSettings(api_key="sk-test", model="gpt-4", max_retries=3, backoff_base=1.0, request_timeout=30.0)


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def make_client(settings, sleeper):
    """Build a Flask test client around a ScriptedLLM."""

    def _make(llm, app_settings=None):
        app = create_app(settings=app_settings or settings, llm_client=llm, config=TestConfig, sleep=sleeper)
        return app.test_client()

    return _make
