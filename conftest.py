from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from slidesync.services.infrastructure.llm import (
    LLMProvider,
    LLMResponse,
    ModelRequest,
    ProviderType,
    RetryPolicy,
    clear_provider_cache,
)

PROVIDER_ENV_VARS = (
    "LLM_PROVIDER",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "GEMINI_API_KEY",
    "OLLAMA_HOST",
)

Reply = Union[str, BaseException, Callable[[ModelRequest], str]]


class ScriptedProvider(LLMProvider):
    """Provider that replays canned replies and records every request.

    Replies are consumed in order from `replies`, or from `by_model[model]`
    when the request's model has its own script. Exceptions are raised,
    callables receive the request and return the text.
    """

    provider_type = ProviderType.OPENAI

    def __init__(
        self,
        replies: Optional[Sequence[Reply]] = None,
        by_model: Optional[Dict[str, Sequence[Reply]]] = None,
        default: Optional[Reply] = None,
    ):
        self.replies: List[Reply] = list(replies or [])
        self.by_model: Dict[str, List[Reply]] = {k: list(v) for k, v in (by_model or {}).items()}
        self.default = default
        self.requests: List[ModelRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def models_called(self) -> List[str]:
        return [r.model for r in self.requests]

    def is_available(self) -> bool:
        return True

    def _next_reply(self, request: ModelRequest) -> Reply:
        queue = self.by_model.get(request.model)
        if queue:
            return queue.pop(0) if len(queue) > 1 else queue[0]
        if self.replies:
            return self.replies.pop(0)
        if self.default is not None:
            return self.default
        raise AssertionError(f"No scripted reply left for {request.model}")

    async def complete(self, request: ModelRequest) -> LLMResponse:
        self.requests.append(request)
        reply = self._next_reply(request)
        if isinstance(reply, BaseException):
            raise reply
        text = reply(request) if callable(reply) else reply
        return LLMResponse(text=text, model=request.model, provider=self.provider_type)


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    """Keep real credentials and cached providers out of every test"""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_provider_cache()
    yield
    clear_provider_cache()


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances"""
    return ScriptedProvider


@pytest.fixture
def fast_policy():
    """Retry policy with no backoff delay"""
    return RetryPolicy(base_delay=0.0, max_delay=0.0)
