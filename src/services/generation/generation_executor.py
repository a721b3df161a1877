"""Bounded-retry generation of structured records from an LLM.

:class:`GenerationExecutor` drives the attempt loop

    Attempting(1) -> Success
                  -> Attempting(2) -> ... -> Attempting(max) -> Exhausted

Each attempt sends one completion request and runs the parse-recovery
cascade from :mod:`src.services.generation.json_recovery` over the reply.
A service error, an empty reply, or a reply no tier can parse counts as a
failed attempt; the executor then waits a constant backoff before retrying.
Once an attempt parses, the caller's validator filters the records.  If the
validator rejects every record the executor stops with a validation failure
instead of spending the remaining budget: the model produced well-formed
output, and asking again rarely changes what it considers an answer.

The executor never fabricates content.  Exhaustion is reported as a
:class:`GenerationFailure` and the caller decides what to surface.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

from src.interfaces.llm_provider import ILLMProvider
from src.models.generation import FailureKind, GenerationFailure, GenerationResult
from src.services.generation.json_recovery import (
    DEFAULT_STRATEGIES,
    RecoveryStrategy,
    recover_json_array,
)

logger = structlog.get_logger(logger_name=__name__)

Validator = Callable[[Any], bool]
Sleep = Callable[[float], Awaitable[Any]]

_DEFAULT_MAX_ATTEMPTS = 5
_DEFAULT_BACKOFF_SECONDS = 2.0


class GenerationExecutor:
    """Calls the LLM until its output parses into a non-empty record array.

    Parameters
    ----------
    llm:
        Completion provider.
    max_attempts:
        Default attempt budget per :meth:`generate` call.
    backoff_seconds:
        Constant wait between failed attempts.
    temperature, max_tokens:
        Default sampling parameters for each request.
    strategies:
        Ordered parse-recovery tiers.
    sleep:
        Awaitable used for the backoff; tests inject a recorder.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = _DEFAULT_BACKOFF_SECONDS,
        temperature: float = 0.1,
        max_tokens: int = 3500,
        strategies: tuple[tuple[str, RecoveryStrategy], ...] = DEFAULT_STRATEGIES,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._llm = llm
        self._max_attempts = max_attempts
        self._backoff = backoff_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._strategies = strategies
        self._sleep = sleep

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        validate: Validator | None = None,
        max_attempts: int | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult | GenerationFailure:
        """Generate and validate a JSON array of records.

        Parameters
        ----------
        prompt:
            User prompt carrying the source text.
        system_instruction:
            Fixed-format instruction describing the expected array.
        validate:
            Per-record predicate; records for which it returns ``False``
            are dropped.
        max_attempts:
            Overrides the executor's default attempt budget.

        Returns
        -------
        GenerationResult | GenerationFailure
            The surviving records, or ``FailureKind.EXHAUSTED`` after the
            budget is spent, or ``FailureKind.VALIDATION`` when a parsed
            reply had no valid record.
        """
        budget = max_attempts if max_attempts is not None else self._max_attempts
        if budget < 1:
            raise ValueError(f"max_attempts must be >= 1, got {budget}")
        provider = self._llm.get_provider_name()
        last_reason = "no attempts made"

        for attempt in range(1, budget + 1):
            try:
                raw = await self._llm.complete(
                    system_prompt=system_instruction,
                    user_prompt=prompt,
                    temperature=self._temperature if temperature is None else temperature,
                    max_tokens=self._max_tokens if max_tokens is None else max_tokens,
                )
            except Exception as exc:
                last_reason = f"service error: {exc}"
                raw = None

            if raw is not None:
                if not raw.strip():
                    last_reason = "empty response"
                else:
                    recovered = recover_json_array(raw, self._strategies)
                    if recovered is not None:
                        return self._finish(recovered, attempt, validate, provider)
                    last_reason = "no parse strategy produced a JSON array"

            logger.warning(
                "generation_attempt_failed",
                provider=provider,
                attempt=attempt,
                max_attempts=budget,
                reason=last_reason,
            )
            if attempt < budget:
                await self._sleep(self._backoff)

        logger.error("generation_exhausted", provider=provider, attempts=budget, reason=last_reason)
        return GenerationFailure(kind=FailureKind.EXHAUSTED, message=last_reason, attempts=budget)

    @staticmethod
    def _finish(
        recovered: tuple[str, list[Any]],
        attempt: int,
        validate: Validator | None,
        provider: str,
    ) -> GenerationResult | GenerationFailure:
        strategy, items = recovered
        kept = [item for item in items if validate(item)] if validate else list(items)
        rejected = len(items) - len(kept)

        if not kept:
            logger.warning(
                "generation_validation_failed",
                provider=provider,
                attempt=attempt,
                parsed=len(items),
            )
            return GenerationFailure(
                kind=FailureKind.VALIDATION,
                message=f"all {len(items)} parsed items failed validation",
                attempts=attempt,
            )

        logger.info(
            "generation_succeeded",
            provider=provider,
            attempt=attempt,
            strategy=strategy,
            items=len(kept),
            rejected=rejected,
        )
        return GenerationResult(items=kept, attempts=attempt, strategy=strategy, rejected=rejected)
