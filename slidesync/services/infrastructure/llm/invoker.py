"""
Model invoker - the single entry point for every model call in the pipeline.

For a stage the invoker renders the stage prompt, then walks the stage's
models in order (primary, then fallback). Each model gets up to
`RetryPolicy.max_attempts` attempts; only errors the classifier marks as
retryable are retried, with exponential backoff in between. Any other
failure moves straight on to the next model.

The invoker never raises for call failures: it returns an InvocationResult
with `ok=False` and the last error, so each stage can choose its own
fallback.
"""

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, List, Mapping, Optional

from slidesync.config import MODEL_TIMEOUT_SECONDS
from slidesync.config.models import ModelConfig, StageModels, get_stage_models
from slidesync.core.exceptions import UnparseableResponseError
from slidesync.core.logging import get_logger
from slidesync.services.infrastructure.parsing import ResponseShape, parse_model_response
from .base import LLMProvider, ModelRequest
from .factory import get_llm_provider
from .prompts import get_stage_prompt
from .retry import ErrorClassifier, ErrorKind, RetryPolicy, classify_error

logger = get_logger(__name__, component="model_invoker")

ResponseParser = Callable[[str], Any]


@dataclass
class InvocationResult:
    """Outcome of one logical model call"""
    ok: bool
    text: str = ""
    model: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    parsed: Any = None
    models_tried: List[str] = field(default_factory=list)

    @property
    def used_fallback_model(self) -> bool:
        return len(self.models_tried) > 1


class ModelInvoker:
    """Runs stage prompts against the configured models with retry and fallback"""

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        stage_models: Optional[StageModels] = None,
        policy: Optional[RetryPolicy] = None,
        classifier: ErrorClassifier = classify_error,
        timeout: float = MODEL_TIMEOUT_SECONDS,
    ):
        """
        Args:
            provider: Transport. Resolved from environment on first use if omitted
            stage_models: Per-stage model configuration. Defaults to the active provider's
            policy: Retry policy applied per model
            classifier: Maps exceptions to ErrorKind
            timeout: Seconds allowed for each individual provider call
        """
        self._provider = provider
        self._provider_error: Optional[str] = None
        self._provider_lock = asyncio.Lock()
        self.stage_models = stage_models or get_stage_models()
        self.policy = policy or RetryPolicy()
        self.classifier = classifier
        self.timeout = timeout

    async def _resolve_provider(self) -> LLMProvider:
        """Resolve the provider once per invoker; a failed resolution is remembered.

        Resolution can reach the backend synchronously, so it runs in a worker thread.
        """
        if self._provider is not None:
            return self._provider
        async with self._provider_lock:
            if self._provider is None and self._provider_error is None:
                try:
                    self._provider = await asyncio.to_thread(get_llm_provider)
                except ValueError as e:
                    self._provider_error = str(e)
            if self._provider is None:
                raise ValueError(self._provider_error)
        return self._provider

    def stage_config(self, stage: str) -> ModelConfig:
        if not hasattr(self.stage_models, stage):
            raise ValueError(f"Unknown pipeline stage: {stage}")
        return getattr(self.stage_models, stage)

    async def invoke(self, stage: str, payload: Mapping[str, Any]) -> InvocationResult:
        """Ask the stage's models for raw text

        Args:
            stage: Pipeline stage name (selects prompt and models)
            payload: Template variables; `images` holds data URLs for vision stages

        Returns:
            InvocationResult with the raw text on success
        """
        return await self._run(stage, payload, parser=None)

    async def invoke_parsed(
        self,
        stage: str,
        payload: Mapping[str, Any],
        expect: ResponseShape = ResponseShape.OBJECT,
        parser: Optional[ResponseParser] = None,
    ) -> InvocationResult:
        """Like invoke, but the response must also survive the response parser.

        A response that cannot be parsed counts as a failed attempt with
        ErrorKind.MALFORMED_OUTPUT, so the fallback model still gets its turn.
        `parser` replaces the shape-based parser for stages with their own
        response layout; it must raise UnparseableResponseError on failure.
        """
        if parser is None:
            parser = partial(parse_model_response, expect=expect)
        return await self._run(stage, payload, parser=parser)

    async def _run(
        self,
        stage: str,
        payload: Mapping[str, Any],
        parser: Optional[ResponseParser],
    ) -> InvocationResult:
        config = self.stage_config(stage)
        messages = get_stage_prompt(stage).build_messages(payload)

        try:
            provider = await self._resolve_provider()
        except ValueError as e:
            logger.error("No LLM provider available", extra={"stage": stage, "error": str(e)})
            return InvocationResult(
                ok=False,
                error=str(e),
                error_kind=ErrorKind.PROVIDER_UNAVAILABLE,
            )

        attempts = 0
        models_tried: List[str] = []
        last_error: Optional[BaseException] = None
        last_kind: Optional[ErrorKind] = None

        for model in config.models:
            models_tried.append(model)
            request = ModelRequest(
                model=model,
                messages=messages,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )

            for attempt in range(1, self.policy.max_attempts + 1):
                attempts += 1
                try:
                    response = await asyncio.wait_for(
                        provider.complete(request),
                        timeout=self.timeout,
                    )
                    parsed = parser(response.text) if parser else None
                except Exception as e:
                    last_error = e
                    last_kind = self.classifier(e)
                    logger.warning(
                        f"Model call failed for {stage} with {model} (attempt {attempt}): {e}",
                        extra={"stage": stage, "model": model, "attempt": attempt,
                               "error_kind": last_kind.value},
                    )
                    if not self.policy.should_retry(last_kind, attempt):
                        break
                    await asyncio.sleep(self.policy.delay_for(attempt))
                    continue

                if len(models_tried) > 1:
                    logger.info(f"Fallback model {model} succeeded for {stage}")
                return InvocationResult(
                    ok=True,
                    text=response.text,
                    model=model,
                    attempts=attempts,
                    parsed=parsed,
                    models_tried=models_tried,
                )

        logger.error(
            f"All models failed for {stage}",
            extra={"stage": stage, "models": models_tried, "attempts": attempts},
        )
        error_text = (str(last_error) or type(last_error).__name__) if last_error else "No models configured"
        if isinstance(last_error, UnparseableResponseError):
            error_text = f"Malformed model output: {last_error}"
        return InvocationResult(
            ok=False,
            attempts=attempts,
            error=error_text,
            error_kind=last_kind,
            models_tried=models_tried,
        )
