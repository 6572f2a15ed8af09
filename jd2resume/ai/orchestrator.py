"""Multi-strategy invocation of the analysis model.

Strategies are tried in the configured order. Each strategy gets up to
``retries`` attempts driven by ``tenacity``; the wait between attempts
depends on how the failure was classified:

* rate limits, overload and network errors back off exponentially
  (``base_delay * 2 ** (attempt - 1)``),
* unknown failures and unparseable responses wait a flat ``base_delay``,
* safety blocks stop the whole resolution, since retrying the same prompt
  elsewhere cannot help,
* configuration errors are not retried on the same strategy.

When the last strategy runs out of attempts a :class:`ResolutionError` with
the user-facing message for the last failure kind is raised.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from jd2resume.ai.errors import NO_STRATEGIES_MESSAGE, InvalidResponseError, ResolutionError, classify_failure
from jd2resume.ai.sanitize import parse_model_json
from jd2resume.ai.types import FailureKind, ModelTransport
from jd2resume.analysis.schemas import AnalysisResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[Any]]

DEFAULT_RETRIES = 3
DEFAULT_BASE_DELAY_S = 2.0

EXPONENTIAL_BACKOFF_KINDS = frozenset(
    {FailureKind.RATE_LIMITED, FailureKind.SERVICE_UNAVAILABLE, FailureKind.NETWORK_ERROR}
)
FLAT_RETRY_KINDS = frozenset({FailureKind.UNKNOWN, FailureKind.INVALID_RESPONSE})
RETRYABLE_KINDS = EXPONENTIAL_BACKOFF_KINDS | FLAT_RETRY_KINDS


def backoff_delay(kind: FailureKind, attempt_number: int, base_delay: float) -> float:
    """Wait after the failed ``attempt_number`` (1-based) before the next attempt."""
    if kind in EXPONENTIAL_BACKOFF_KINDS:
        return base_delay * (2 ** (attempt_number - 1))
    return base_delay


def is_retryable(exc: BaseException) -> bool:
    # Cancellation and interpreter exits are never retried.
    if not isinstance(exc, Exception):
        return False
    return classify_failure(exc) in RETRYABLE_KINDS


def validate_analysis(payload: Any) -> AnalysisResult:
    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as exc:
        logger.warning("model_json_shape_invalid errors=%s payload=%r", exc.error_count(), str(payload)[:2000])
        raise InvalidResponseError(
            f"Model response does not match the analysis shape: {exc.error_count()} errors",
            raw_text=str(payload)[:2000],
        ) from exc


class InvocationOrchestrator:
    def __init__(
        self,
        strategies: Sequence[ModelTransport],
        *,
        retries: int = DEFAULT_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY_S,
        attempt_timeout: float | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._strategies = list(strategies)
        self._retries = retries
        self._base_delay = base_delay
        self._attempt_timeout = attempt_timeout
        self._sleep = sleep

    @property
    def strategy_names(self) -> list[str]:
        return [getattr(strategy, "name", type(strategy).__name__) for strategy in self._strategies]

    async def resolve(
        self,
        prompt: str,
        *,
        retries: int | None = None,
        base_delay: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AnalysisResult:
        return await self._resolve(
            prompt,
            lambda raw: validate_analysis(parse_model_json(raw)),
            retries=retries,
            base_delay=base_delay,
            cancel_event=cancel_event,
        )

    async def resolve_json(
        self,
        prompt: str,
        *,
        retries: int | None = None,
        base_delay: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        return await self._resolve(
            prompt,
            parse_model_json,
            retries=retries,
            base_delay=base_delay,
            cancel_event=cancel_event,
        )

    async def _resolve(
        self,
        prompt: str,
        parse: Callable[[str], T],
        *,
        retries: int | None,
        base_delay: float | None,
        cancel_event: asyncio.Event | None,
    ) -> T:
        attempts = max(1, retries if retries is not None else self._retries)
        delay = self._base_delay if base_delay is None else base_delay

        if not self._strategies:
            raise ResolutionError(FailureKind.UNKNOWN, NO_STRATEGIES_MESSAGE)

        last_index = len(self._strategies) - 1
        for index, strategy in enumerate(self._strategies):
            name = getattr(strategy, "name", type(strategy).__name__)
            try:
                return await self._run_strategy(strategy, prompt, parse, attempts, delay, cancel_event)
            except Exception as exc:
                kind = classify_failure(exc)
                if kind == FailureKind.SAFETY_BLOCKED:
                    logger.warning("ai_resolution_aborted strategy=%s kind=%s", name, kind.value)
                    raise ResolutionError(kind) from exc
                if index == last_index:
                    logger.error(
                        "ai_resolution_failed strategy=%s kind=%s error=%s", name, kind.value, exc
                    )
                    raise ResolutionError(kind) from exc
                logger.warning(
                    "ai_strategy_exhausted strategy=%s kind=%s next=%s",
                    name,
                    kind.value,
                    getattr(self._strategies[index + 1], "name", "unknown"),
                )

        raise ResolutionError(FailureKind.UNKNOWN, NO_STRATEGIES_MESSAGE)

    async def _run_strategy(
        self,
        strategy: ModelTransport,
        prompt: str,
        parse: Callable[[str], T],
        attempts: int,
        delay: float,
        cancel_event: asyncio.Event | None,
    ) -> T:
        name = getattr(strategy, "name", type(strategy).__name__)

        def wait(retry_state: RetryCallState) -> float:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            kind = classify_failure(exc) if exc is not None else FailureKind.UNKNOWN
            return backoff_delay(kind, retry_state.attempt_number, delay)

        def log_failure(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "ai_attempt_failed strategy=%s attempt=%s/%s kind=%s error=%s",
                name,
                retry_state.attempt_number,
                attempts,
                classify_failure(exc).value if exc is not None else "none",
                exc,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait,
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            after=log_failure,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if cancel_event is not None and cancel_event.is_set():
                    raise asyncio.CancelledError("analysis resolution cancelled")
                logger.info(
                    "ai_attempt strategy=%s attempt=%s/%s",
                    name,
                    attempt.retry_state.attempt_number,
                    attempts,
                )
                raw = await self._invoke(strategy, prompt, cancel_event)
                result = parse(raw)
        return result

    async def _invoke(
        self,
        strategy: ModelTransport,
        prompt: str,
        cancel_event: asyncio.Event | None,
    ) -> str:
        call: Awaitable[str] = strategy.invoke(prompt)
        if self._attempt_timeout is not None:
            call = asyncio.wait_for(call, timeout=self._attempt_timeout)
        if cancel_event is None:
            return await call

        invoke_task = asyncio.ensure_future(call)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({invoke_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (invoke_task, cancel_task):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
        if invoke_task in done:
            return invoke_task.result()
        raise asyncio.CancelledError("analysis resolution cancelled")
