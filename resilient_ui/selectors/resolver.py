# resilient_ui/selectors/resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from playwright.async_api import Locator

from resilient_ui.capture.artifacts import DiagnosticSink, NullSink, ScreenshotSink, artifact_name
from resilient_ui.core.errors import ElementNotFound, TransientQueryError
from resilient_ui.selectors.descriptor import DescriptorLike, ElementDescriptor, as_descriptors
from resilient_ui.utils.config import get_settings
from resilient_ui.utils.logger import get_logger, log_with_context
from resilient_ui.utils.timing import async_sleep_ms, now_ms

log = get_logger(__name__)


@dataclass
class ResolutionAttempt:
    """Per-descriptor bookkeeping for logs and the failure message."""
    descriptor: ElementDescriptor
    tries: int = 0
    elapsed_ms: int = 0
    last_error: Optional[TransientQueryError] = None


class LocatorResolver:
    """
    Strict fallback chain over element descriptors:
      - Descriptors are tried in order; each one is polled until its own
        timeout elapses before the next is considered
      - A poll succeeds when at least one element is attached; the first
        match in document order is returned
      - Polls are spaced linearly (attempt x poll_step_ms)
      - Query errors count as an empty poll
      - One pass only; exhaustion captures a screenshot and raises ElementNotFound
    """

    def __init__(
        self,
        *,
        timeout_ms: Optional[int] = None,
        poll_step_ms: Optional[int] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        settings = get_settings()
        self.timeout_ms = settings.RESOLVE_TIMEOUT_MS if timeout_ms is None else max(0, timeout_ms)
        self.poll_step_ms = settings.POLL_BACKOFF_STEP_MS if poll_step_ms is None else max(0, poll_step_ms)
        if sink is None:
            sink = ScreenshotSink() if settings.CAPTURE_ON_FAILURE else NullSink()
        self.sink = sink

    async def resolve(
        self,
        scope: Any,
        descriptors: DescriptorLike | Iterable[DescriptorLike],
        *,
        timeout_ms: Optional[int] = None,
        diagnostic_context: Optional[str] = None,
    ) -> Locator:
        chain = as_descriptors(descriptors)
        budget = self.timeout_ms if timeout_ms is None else max(0, timeout_ms)
        call_log = log_with_context(log, diagnostic_context=diagnostic_context) if diagnostic_context else log

        started = now_ms()
        attempts: list[ResolutionAttempt] = []

        for descriptor in chain:
            attempt = ResolutionAttempt(descriptor=descriptor)
            attempts.append(attempt)
            call_log.debug(f"[locator] trying {descriptor.describe()}")

            found = await self._poll(scope, descriptor, attempt, budget)
            if found is not None:
                call_log.debug(
                    f"[locator] success: {descriptor.describe()} (attempt {attempt.tries}, {attempt.elapsed_ms} ms)"
                )
                return found

            call_log.warning(f"[locator] failed for {descriptor.describe()} after {budget} ms, trying next")

        elapsed = now_ms() - started
        artifact = await self._capture(scope, diagnostic_context)
        raise ElementNotFound(
            chain,
            attempts=attempts,
            elapsed_ms=elapsed,
            artifact_path=artifact,
            diagnostic_context=diagnostic_context,
        )

    async def _poll(
        self,
        scope: Any,
        descriptor: ElementDescriptor,
        attempt: ResolutionAttempt,
        budget_ms: int,
    ) -> Optional[Locator]:
        start = now_ms()
        deadline = start + budget_ms
        while True:
            attempt.tries += 1
            try:
                query = descriptor.to_query(scope)
                if await query.count() > 0:
                    attempt.elapsed_ms = now_ms() - start
                    return query.first
            except Exception as e:
                attempt.last_error = TransientQueryError(descriptor, e)

            remaining = deadline - now_ms()
            if remaining <= 0:
                attempt.elapsed_ms = now_ms() - start
                return None
            await async_sleep_ms(max(1, min(self.poll_step_ms * attempt.tries, remaining)))

    async def _capture(self, scope: Any, diagnostic_context: Optional[str]):
        try:
            return await self.sink.capture(scope, artifact_name(diagnostic_context))
        except Exception as e:
            log.debug(f"[locator] diagnostic capture failed: {e!r}")
            return None


async def resolve(
    scope: Any,
    descriptors: DescriptorLike | Iterable[DescriptorLike],
    *,
    timeout_ms: Optional[int] = None,
    diagnostic_context: Optional[str] = None,
) -> Locator:
    """Resolve with settings-derived defaults. See LocatorResolver."""
    return await LocatorResolver().resolve(
        scope,
        descriptors,
        timeout_ms=timeout_ms,
        diagnostic_context=diagnostic_context,
    )


__all__ = ["LocatorResolver", "ResolutionAttempt", "resolve"]
